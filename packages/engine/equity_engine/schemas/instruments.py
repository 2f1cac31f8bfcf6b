"""Convertible instruments using discriminated unions for type safety.

Convertibles are investments that turn into shares at a later priced round:
- SAFEs: no interest, no maturity; pre-money or post-money valuation cap
- Convertible notes: debt that accrues interest and has a maturity date

Each variant carries only the fields valid for it, so a SAFE with an interest
rate or a note with a post-money flag cannot be constructed.
"""

from typing import Annotated, Union, Literal, Optional
from datetime import date
from pydantic import Field, model_validator

from .base import (
    DomainModel,
    EntityId,
    MoneyAmount,
    Rate,
    StakeholderId,
    CONVERTIBLE_DEFAULTS,
)


class ConvertibleBase(DomainModel):
    """Fields shared by SAFEs and notes."""

    id: EntityId
    holder_id: StakeholderId

    principal: MoneyAmount = Field(
        description="Amount invested (SAFE) or lent (note)"
    )

    issue_date: date = Field(description="Date the instrument was issued")

    discount_rate: Optional[Rate] = Field(
        default=None,
        description="Discount to the round price (e.g., 0.20 = 20% discount)"
    )

    valuation_cap: Optional[MoneyAmount] = Field(
        default=None,
        description="Valuation cap used to compute the cap price"
    )

    conversion_date: Optional[date] = Field(
        default=None,
        description="Date the instrument converted. Once converted, its shares live in the ledger."
    )

    def is_outstanding(self, as_of: date) -> bool:
        """Issued on/before ``as_of`` and not yet converted as of that date."""
        if self.issue_date > as_of:
            return False
        return self.conversion_date is None or self.conversion_date > as_of


# =============================================================================
# SAFE
# =============================================================================

class SafeInstrument(ConvertibleBase):
    """Simple Agreement for Future Equity (SAFE).

    Key mechanics:
        - Pre-money SAFE: converts at the lowest of round price, discount price
          (round price * (1 - discount)) and cap price (cap / pre-round FD shares).
        - Post-money SAFE: the cap fixes the holder's ownership of the
          post-conversion total: ownership = principal / cap.

    Example (pre-money):
        $500K SAFE, $5M cap, 20% discount. Round at $2.00, 8.5M FD shares.
        Discount price: $2.00 * 0.8 = $1.60
        Cap price:      $5M / 8.5M  = $0.588
        Converts at the cap price: $500K / $0.588 = ~850K shares.
    """

    type: Literal["safe"] = "safe"

    post_money: bool = Field(
        default=CONVERTIBLE_DEFAULTS["post_money"],
        description="Post-money SAFE (cap measured after the SAFE money)"
    )


# =============================================================================
# Convertible Note
# =============================================================================

class ConvertibleNote(ConvertibleBase):
    """Convertible note (debt that converts to equity).

    Interest accrues on an Actual/365 simple-interest basis and converts
    together with the principal:

        $500K note at 5%, converting 730 days after issue:
        interest = 500,000 * 0.05 * 730 / 365 = $50,000
        total converting = $550,000

    The note converts at a qualifying financing or on maturity.
    """

    type: Literal["note"] = "note"

    interest_rate: Optional[Rate] = Field(
        default=None,
        description="Annual simple interest rate (e.g., 0.05 = 5%)"
    )

    maturity_date: Optional[date] = Field(
        default=None,
        description="Date the note matures if it has not converted"
    )

    @model_validator(mode='after')
    def validate_dates(self):
        """Maturity date must be after issue date."""
        if self.maturity_date is not None and self.maturity_date <= self.issue_date:
            raise ValueError("maturity_date must be after issue_date")
        return self


ConvertibleInstrument = Annotated[
    Union[SafeInstrument, ConvertibleNote],
    Field(discriminator='type')
]
"""Discriminated union of convertible instruments.

The 'type' field serves as the discriminator:
    {"type": "safe", ...}  -> SafeInstrument
    {"type": "note", ...}  -> ConvertibleNote
"""
