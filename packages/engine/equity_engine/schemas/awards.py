"""Equity awards (stock options and RSUs) using a discriminated union.

An award is a promise of future shares that vests over time:
    - Options (ISO/NSO): right to buy shares at a strike price. Exercised
      options become ledger issuances; the award keeps counting them in
      ``quantity_exercised``.
    - RSUs: shares delivered for free as they vest and settle. ``quantity_exercised``
      counts settled units.

Outstanding = granted - exercised - canceled. Both kinds count toward the
fully diluted share count; RSUs are included per the cap table's RSU policy.

Using a discriminated union makes an RSU with a strike price (or an option
without one) unrepresentable.
"""

from typing import Annotated, Literal, Optional, Union
from decimal import Decimal
from datetime import date
from pydantic import Field, model_validator

from .base import (
    DomainModel,
    EntityId,
    Price,
    Quantity,
    StakeholderId,
    AWARD_DEFAULTS,
)


VestingCadence = Literal["monthly", "quarterly", "annual"]

CADENCE_MONTHS = {
    "monthly": 1,
    "quarterly": 3,
    "annual": 12,
}


class AwardBase(DomainModel):
    """Fields shared by every award kind."""

    id: EntityId
    holder_id: StakeholderId

    quantity_granted: Quantity
    quantity_exercised: Quantity = Field(default=AWARD_DEFAULTS["quantity_exercised"])
    quantity_canceled: Quantity = Field(default=AWARD_DEFAULTS["quantity_canceled"])

    grant_date: date
    vesting_start_date: Optional[date] = Field(
        default=None,
        description="Vesting commencement date. None = vesting starts at grant_date."
    )

    cliff_months: int = Field(default=AWARD_DEFAULTS["cliff_months"], ge=0)
    total_months: int = Field(default=AWARD_DEFAULTS["total_months"], ge=0)
    cadence: VestingCadence = Field(default=AWARD_DEFAULTS["cadence"])

    @model_validator(mode='after')
    def validate_quantities(self):
        """Exercised + canceled can never exceed granted; cliff can never exceed the term."""
        if self.quantity_exercised + self.quantity_canceled > self.quantity_granted:
            raise ValueError(
                f"quantity_exercised ({self.quantity_exercised}) + quantity_canceled "
                f"({self.quantity_canceled}) exceeds quantity_granted ({self.quantity_granted})"
            )
        if self.cliff_months > self.total_months:
            raise ValueError("cliff_months cannot exceed total_months")
        return self

    @property
    def vesting_start(self) -> date:
        return self.vesting_start_date or self.grant_date

    @property
    def outstanding(self) -> int:
        """Granted minus exercised minus canceled."""
        return self.quantity_granted - self.quantity_exercised - self.quantity_canceled


class OptionAward(AwardBase):
    """Stock option grant (ISO or NSO) with a strike price."""

    type: Literal["option"] = "option"
    option_kind: Literal["ISO", "NSO"] = Field(default=AWARD_DEFAULTS["option_kind"])
    strike_price: Price = Field(description="Exercise price per share")


class RsuAward(AwardBase):
    """Restricted stock unit grant. RSUs carry no strike price."""

    type: Literal["rsu"] = "rsu"


EquityAward = Annotated[
    Union[OptionAward, RsuAward],
    Field(discriminator='type')
]
"""Discriminated union of all award kinds.

Usage:
    option = OptionAward(
        id="grant_001", holder_id="emp_1", quantity_granted=48_000,
        grant_date=date(2023, 1, 1), strike_price=Decimal("0.25"),
    )

    # Invalid - RsuAward has no strike_price field
    RsuAward(..., strike_price=Decimal("1.00"))
"""
