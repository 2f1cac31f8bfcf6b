"""Financing rounds, option plans and conversion terms.

A Round records one priced financing event. Its price per share may be stated
explicitly or derived from the round's own numbers:
    - consideration-derived: raise_amount / shares_issued
    - valuation-derived:     pre_money_valuation / pre_round_fully_diluted_shares

The most recently closed round with a derivable positive price is the
reference round for conversions and valuation.
"""

from typing import Literal, Optional
from datetime import date
from decimal import Decimal
from pydantic import Field

from .base import (
    DomainModel,
    EntityId,
    MoneyAmount,
    Price,
    Quantity,
    Rate,
    ShareCount,
)


class Round(DomainModel):
    """A financing round."""

    id: EntityId
    name: str = Field(min_length=1, description="Round name (e.g., 'Seed', 'Series A')")

    close_date: Optional[date] = Field(
        default=None,
        description="Closing date. Rounds without a close date are still open and never referenced."
    )

    price_per_share: Optional[Price] = Field(
        default=None,
        description="Explicit price per share (overrides derived prices)"
    )

    pre_money_valuation: Optional[MoneyAmount] = None
    raise_amount: Optional[MoneyAmount] = None
    shares_issued: Optional[ShareCount] = None
    pre_round_fully_diluted_shares: Optional[ShareCount] = None


class OptionPlan(DomainModel):
    """Equity incentive plan reserving shares for future awards.

    Unallocated pool = reserved shares - (granted - canceled) across awards.
    Exercised options stay allocated: their shares moved to the ledger.
    """

    id: EntityId
    name: str = Field(min_length=1)
    total_shares: Quantity = Field(description="Shares reserved under the plan")
    adoption_date: date


# =============================================================================
# Conversion Inputs
# =============================================================================

class ConversionTerms(DomainModel):
    """Round-side inputs for converting SAFEs and notes.

    ``price_per_share`` may be None for a post-money SAFE, which converts from
    its cap alone. ``as_of_date`` drives note interest accrual.
    """

    price_per_share: Optional[Decimal] = None
    pre_round_fully_diluted_shares: Decimal
    as_of_date: Optional[date] = None


# =============================================================================
# Round Pricing
# =============================================================================

class PoolTopUp(DomainModel):
    """Option pool top-up sized to a target percentage of the FD total.

    Timing:
        - pre:  pool created before the money; only existing holders are diluted
        - post: pool sized on the post-money total; investors share the dilution
    """

    target_percentage: Rate = Field(description="Target pool share of FD (0.10 = 10%)")
    timing: Literal["pre", "post"] = "pre"
