"""Derived outputs of the pricing, conversion and round calculators.

These are never persisted; they are recomputed from the ledger on demand.
"""

from enum import Enum
from typing import Literal, Optional
from decimal import Decimal

from .base import ResultModel


# =============================================================================
# Price Reconciliation
# =============================================================================

PriceSource = Literal["override", "consideration", "valuation"]


class PriceReconciliation(ResultModel):
    """Outcome of reconciling candidate price-per-share sources.

    Attributes:
        price_per_share: Authoritative price, or None when no source is present
        source: Which source won (override > consideration > valuation)
        conflict: True when two present sources diverge beyond the tolerance
        divergence_bps: Largest pairwise divergence in basis points (None with < 2 sources)
    """

    price_per_share: Optional[Decimal] = None
    source: Optional[PriceSource] = None
    conflict: bool = False
    divergence_bps: Optional[Decimal] = None


class RoundPricing(ResultModel):
    """Result of pricing a new round from its pre-money valuation."""

    price_per_share: Decimal
    shares_issued: Decimal
    post_money_valuation: Decimal
    pool_shares_created: Decimal
    total_shares_post_round: Decimal
    dilution_percentage: Decimal


# =============================================================================
# Conversions
# =============================================================================

class SafeConversionResult(ResultModel):
    shares_issued: Decimal
    conversion_price: Decimal
    used_discount: bool
    used_cap: bool


class NoteConversionResult(ResultModel):
    principal_amount: Decimal
    interest_amount: Decimal
    total_amount: Decimal
    shares_issued: Decimal
    conversion_price: Decimal
    used_discount: bool = False
    used_cap: bool = False


class NoteTriggerState(str, Enum):
    NOT_TRIGGERED = "NOT_TRIGGERED"
    TRIGGERED = "TRIGGERED"


class NoteTrigger(ResultModel):
    """Conversion trigger state of a convertible note.

    ``reason`` is set only when ``state`` is TRIGGERED.
    """

    state: NoteTriggerState
    reason: Optional[Literal["maturity", "financing"]] = None

    @property
    def triggered(self) -> bool:
        return self.state == NoteTriggerState.TRIGGERED


# =============================================================================
# Option Plans
# =============================================================================

class PlanAccounting(ResultModel):
    """Share usage of the company's option plans.

    Attributes:
        total_shares: Shares reserved across all plans
        allocated_shares: Awarded and still outstanding (granted - exercised - canceled)
        issued_shares: Exercised or settled into the ledger
        available_shares: total - allocated - issued; negative when over-granted
        outstanding_options / outstanding_rsus: allocated split by award kind
    """

    total_shares: int
    allocated_shares: int
    issued_shares: int
    available_shares: int
    outstanding_options: int
    outstanding_rsus: int

    @property
    def over_allocated(self) -> bool:
        return self.available_shares < 0


# =============================================================================
# Anti-dilution
# =============================================================================

AntiDilutionMethod = Literal["none", "full_ratchet", "broad_based"]


class AntiDilutionAdjustment(ResultModel):
    """Conversion price of a preferred class after a down round.

    ``conversion_ratio`` is how many common shares one preferred share now
    converts into (original price / adjusted price).
    """

    method: AntiDilutionMethod
    original_price: Decimal
    adjusted_price: Decimal
    conversion_ratio: Decimal
    triggered: bool
