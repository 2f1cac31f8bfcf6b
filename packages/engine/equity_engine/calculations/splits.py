"""Stock splits and reverse splits.

The ledger is append-only, so a split is recorded as one ``split_adjustment``
entry per (holder, class) that moves the balance to ``balance * ratio``:

    2:1 split, alice holds 3,000,000 common -> +3,000,000 split_adjustment
    1:2 reverse split, bob holds 1,001      ->   -501 (bankers: 500.5 -> 500)

Award quantities scale by the ratio and strike prices divide by it.
Convertible caps and liquidation preferences are left untouched.
"""

from datetime import date
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_EVEN, ROUND_HALF_UP
from typing import Iterable, List, Literal

from ..errors import ValidationError
from ..schemas import EquityAward, OptionAward, ShareLedgerEntry
from .balances import ledger_balances
from .rounding import Number, round_price, to_decimal

SplitRounding = Literal["bankers", "half_up", "down"]

ROUNDING_MODES = {
    "bankers": ROUND_HALF_EVEN,
    "half_up": ROUND_HALF_UP,
    "down": ROUND_DOWN,
}


def _scale(quantity: int, ratio: Decimal, rounding: SplitRounding) -> int:
    return int((Decimal(quantity) * ratio).quantize(Decimal("1"), rounding=ROUNDING_MODES[rounding]))


def _validated_ratio(ratio: Number) -> Decimal:
    ratio = to_decimal(ratio)
    if ratio <= 0:
        raise ValidationError("Split ratio must be positive", {"ratio": str(ratio)})
    return ratio


def split_ratio(new_shares: Number, old_shares: Number) -> Decimal:
    """Ratio that turns ``old_shares`` into ``new_shares`` (2 = 2:1 split)."""
    old_shares = to_decimal(old_shares)
    if old_shares == 0:
        raise ValidationError("Cannot calculate split ratio with zero old shares")
    return round_price(to_decimal(new_shares) / old_shares)


def split_adjustment_entries(
    entries: Iterable[ShareLedgerEntry],
    ratio: Number,
    effective_date: date,
    rounding: SplitRounding = "bankers",
) -> List[ShareLedgerEntry]:
    """Offsetting entries that apply a split to every balance as of ``effective_date``.

    Entry ids are derived from the date, holder and class, so applying the same
    split to the same ledger yields the same entries.
    """
    ratio = _validated_ratio(ratio)
    transaction_id = f"split-{effective_date.isoformat()}"

    adjustments = []
    for (holder_id, class_id), balance in sorted(ledger_balances(entries, effective_date).items()):
        delta = _scale(balance, ratio, rounding) - balance
        if delta == 0:
            continue
        adjustments.append(
            ShareLedgerEntry(
                id=f"{transaction_id}-{holder_id}-{class_id}",
                holder_id=holder_id,
                class_id=class_id,
                quantity=delta,
                issue_date=effective_date,
                transaction_id=transaction_id,
                entry_type="split_adjustment",
            )
        )
    return adjustments


def split_adjusted_award(
    award: EquityAward,
    ratio: Number,
    rounding: SplitRounding = "bankers",
) -> EquityAward:
    """Copy of the award with quantities scaled and strike price divided by ``ratio``.

    Canceled shares are capped at what is left after the scaled exercise, so
    independent rounding never pushes exercised + canceled past granted.
    """
    ratio = _validated_ratio(ratio)
    granted = _scale(award.quantity_granted, ratio, rounding)
    exercised = _scale(award.quantity_exercised, ratio, rounding)
    canceled = min(_scale(award.quantity_canceled, ratio, rounding), granted - exercised)

    data = award.model_dump()
    data.update(quantity_granted=granted, quantity_exercised=exercised, quantity_canceled=canceled)
    if isinstance(award, OptionAward):
        data["strike_price"] = round_price(award.strike_price / ratio)
    return type(award).model_validate(data)
