"""Price-per-share derivation, reconciliation and round pricing.

A round's price can come from three places:
    override       price stated explicitly on the round
    consideration  raise amount / shares issued
    valuation      pre-money valuation / pre-round fully diluted shares

``reconcile`` picks one (override > consideration > valuation) and flags a
conflict when any two present sources diverge by more than the tolerance:

    divergence_bps = |a - b| / mean(a, b) * 10,000

    $2.00 (consideration) vs $2.02 (valuation): 0.02 / 2.01 = 99.5 bps
    -> conflict at the default 50 bps tolerance, consideration wins
"""

from datetime import date
from decimal import Decimal
from itertools import combinations
from typing import Iterable, List, Optional, Tuple

from ..errors import ValidationError
from ..schemas import PoolTopUp, PriceReconciliation, Round, RoundPricing
from .rounding import (
    Number,
    ZERO,
    round_money,
    round_percentage,
    round_price,
    round_shares,
    to_decimal,
)

BPS = Decimal("10000")
DEFAULT_TOLERANCE_BPS = Decimal("50")


def _positive(value: Optional[Number]) -> Optional[Decimal]:
    if value is None:
        return None
    value = to_decimal(value)
    return value if value > 0 else None


# =============================================================================
# Derivation
# =============================================================================

def derive_from_valuation(
    valuation: Optional[Number],
    pre_round_fully_diluted_shares: Optional[Number],
) -> Optional[Decimal]:
    """Valuation / pre-round FD shares, or None when either input is missing or non-positive."""
    valuation = _positive(valuation)
    shares = _positive(pre_round_fully_diluted_shares)
    if valuation is None or shares is None:
        return None
    return round_price(valuation / shares)


def derive_from_consideration(
    consideration: Optional[Number],
    quantity: Optional[Number],
) -> Optional[Decimal]:
    """Consideration / quantity, or None when either input is missing or non-positive."""
    consideration = _positive(consideration)
    quantity = _positive(quantity)
    if consideration is None or quantity is None:
        return None
    return round_price(consideration / quantity)


def divergence_bps(a: Decimal, b: Decimal) -> Decimal:
    mean = (a + b) / 2
    return abs(a - b) / mean * BPS


def reconcile(
    override: Optional[Number] = None,
    from_consideration: Optional[Number] = None,
    from_valuation: Optional[Number] = None,
    tolerance_bps: Number = DEFAULT_TOLERANCE_BPS,
) -> PriceReconciliation:
    """Pick the authoritative price among the present sources.

    Non-positive candidates count as absent. With no candidate at all the
    result has no price and no source.
    """
    candidates: List[Tuple[str, Decimal]] = [
        (source, price)
        for source, price in (
            ("override", _positive(override)),
            ("consideration", _positive(from_consideration)),
            ("valuation", _positive(from_valuation)),
        )
        if price is not None
    ]

    if not candidates:
        return PriceReconciliation()

    source, price = candidates[0]

    widest: Optional[Decimal] = None
    for (_, a), (_, b) in combinations(candidates, 2):
        spread = divergence_bps(a, b)
        if widest is None or spread > widest:
            widest = spread

    return PriceReconciliation(
        price_per_share=round_price(price),
        source=source,
        conflict=widest is not None and widest > to_decimal(tolerance_bps),
        divergence_bps=round_percentage(widest) if widest is not None else None,
    )


# =============================================================================
# Rounds
# =============================================================================

def reconcile_round(round_: Round, tolerance_bps: Number = DEFAULT_TOLERANCE_BPS) -> PriceReconciliation:
    return reconcile(
        override=round_.price_per_share,
        from_consideration=derive_from_consideration(round_.raise_amount, round_.shares_issued),
        from_valuation=derive_from_valuation(round_.pre_money_valuation, round_.pre_round_fully_diluted_shares),
        tolerance_bps=tolerance_bps,
    )


def reference_round(
    rounds: Iterable[Round],
    as_of: date,
    tolerance_bps: Number = DEFAULT_TOLERANCE_BPS,
) -> Tuple[Optional[Round], PriceReconciliation]:
    """Most recently closed round (on or before ``as_of``) with a derivable price.

    Rounds closing on the same date are ordered by id; the last one wins.
    """
    closed = sorted(
        (r for r in rounds if r.close_date is not None and r.close_date <= as_of),
        key=lambda r: (r.close_date, r.id),
        reverse=True,
    )
    for round_ in closed:
        reconciliation = reconcile_round(round_, tolerance_bps)
        if reconciliation.price_per_share is not None:
            return round_, reconciliation
    return None, PriceReconciliation()


def price_round(
    investment: Number,
    pre_money_valuation: Number,
    issued_shares: Number,
    options_outstanding: Number = 0,
    unallocated_pool: Number = 0,
    pool_top_up: Optional[PoolTopUp] = None,
) -> RoundPricing:
    """Price a new round from its pre-money valuation.

    Pre-round FD = issued + options + unallocated pool. A "pre" pool top-up
    grows the pool before pricing so that only existing holders are diluted;
    a "post" top-up is sized on the post-money total.

    Raises:
        ValidationError: non-positive investment, valuation or pre-round FD
    """
    investment = to_decimal(investment)
    pre_money_valuation = to_decimal(pre_money_valuation)
    unallocated_pool = to_decimal(unallocated_pool)

    if investment <= 0 or pre_money_valuation <= 0:
        raise ValidationError(
            "Investment and pre-money valuation must be positive",
            {"investment": str(investment), "preMoneyValuation": str(pre_money_valuation)},
        )

    pre_round_fd = to_decimal(issued_shares) + to_decimal(options_outstanding) + unallocated_pool
    pool_created = ZERO

    if pool_top_up is not None and pool_top_up.timing == "pre":
        target = pool_top_up.target_percentage
        target_pool = pre_round_fd * target / (1 - target)
        pool_created = max(ZERO, target_pool - unallocated_pool)
        pre_round_fd += pool_created

    if pre_round_fd <= 0:
        raise ValidationError("Pre-round fully diluted shares must be positive")

    price = pre_money_valuation / pre_round_fd
    shares_issued = round_shares(investment / price)
    total_post = pre_round_fd + shares_issued

    if pool_top_up is not None and pool_top_up.timing == "post":
        target = pool_top_up.target_percentage
        target_pool = total_post * target / (1 - target)
        pool_created = max(ZERO, target_pool - unallocated_pool)
        total_post += pool_created

    dilution = (shares_issued + pool_created) / total_post * 100

    return RoundPricing(
        price_per_share=round_price(price),
        shares_issued=shares_issued,
        post_money_valuation=round_money(total_post * price),
        pool_shares_created=round_shares(pool_created),
        total_shares_post_round=round_shares(total_post),
        dilution_percentage=round_percentage(dilution),
    )
