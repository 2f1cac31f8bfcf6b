"""Convertible note interest, conversion and trigger evaluation.

Interest is simple interest on an Actual/365 day count:

    interest = principal * rate * days / 365

The note converts principal plus accrued interest at the same lowest-price
rule as a pre-money SAFE.
"""

from datetime import date
from decimal import Decimal

from ..errors import ConfigurationError, ValidationError
from ..logging_config import get_logger
from ..schemas import (
    ConversionTerms,
    ConvertibleNote,
    NoteConversionResult,
    NoteTrigger,
    NoteTriggerState,
)
from .rounding import ZERO, round_money, round_price, round_shares
from .safe import select_conversion_price, validate_conversion_inputs

logger = get_logger(__name__)

DAYS_PER_YEAR = Decimal("365")


def accrue_interest(note: ConvertibleNote, as_of: date) -> Decimal:
    """Accrued simple interest from issue date to ``as_of`` (money-rounded).

    Raises:
        ValidationError: ``as_of`` precedes the issue date
    """
    if as_of < note.issue_date:
        raise ValidationError(
            "Interest cannot accrue before the note's issue date",
            {"instrumentId": note.id, "issueDate": note.issue_date.isoformat(), "asOf": as_of.isoformat()},
        )

    days = (as_of - note.issue_date).days
    if not note.interest_rate or days == 0:
        return round_money(ZERO)

    return round_money(note.principal * note.interest_rate * days / DAYS_PER_YEAR)


def convert_note(note: ConvertibleNote, terms: ConversionTerms) -> NoteConversionResult:
    """Convert a note's principal plus accrued interest into shares.

    Raises:
        ValidationError: non-positive principal, pre-round FD or round price
        ConfigurationError: missing round price or as-of date
    """
    validate_conversion_inputs(note.principal, terms)

    if terms.price_per_share is None:
        raise ConfigurationError("Note conversion requires a round price", {"instrumentId": note.id})
    if terms.as_of_date is None:
        raise ConfigurationError("Note conversion requires an as-of date", {"instrumentId": note.id})

    interest = accrue_interest(note, terms.as_of_date)
    total = note.principal + interest

    price, used_discount, used_cap = select_conversion_price(
        terms.price_per_share,
        note.discount_rate,
        note.valuation_cap,
        terms.pre_round_fully_diluted_shares,
    )

    result = NoteConversionResult(
        principal_amount=round_money(note.principal),
        interest_amount=interest,
        total_amount=round_money(total),
        shares_issued=round_shares(total / price),
        conversion_price=round_price(price),
        used_discount=used_discount,
        used_cap=used_cap,
    )
    logger.debug(
        "note_converted",
        instrument_id=note.id,
        interest_amount=str(interest),
        shares_issued=str(result.shares_issued),
    )
    return result


def evaluate_trigger(note: ConvertibleNote, as_of: date, financing_occurred: bool = False) -> NoteTrigger:
    """Conversion trigger of a note as of a date.

    Maturity is checked first; a qualifying financing is signalled by the caller.
    """
    if note.maturity_date is not None and as_of >= note.maturity_date:
        return NoteTrigger(state=NoteTriggerState.TRIGGERED, reason="maturity")
    if financing_occurred:
        return NoteTrigger(state=NoteTriggerState.TRIGGERED, reason="financing")
    return NoteTrigger(state=NoteTriggerState.NOT_TRIGGERED)
