"""Anti-dilution adjustment of a preferred class's conversion price.

When a later round prices below what a preferred class paid, its
anti-dilution provision lowers the class's conversion price:

    Full ratchet:   adjusted = new round price

    Broad-based weighted average:
        adjusted = original * (A + B) / (A + C)
        A = shares outstanding before the round (optionally + options + pool)
        B = shares the new money would buy at the original price
        C = shares actually issued in the new round

Example:
    Series A at $2.00, 1,000,000 shares outstanding, down round issues
    500,000 shares at $1.00:
        full ratchet -> $1.0000
        broad-based  -> 2.00 * (1,000,000 + 250,000) / 1,500,000 = $1.6667

A wider base (options, pool) dilutes the new issuance less, so the
broad-based adjustment is smaller.
"""

from ..errors import ValidationError
from ..schemas import AntiDilutionAdjustment, AntiDilutionMethod
from .rounding import ZERO, Number, round_price, to_decimal

METHODS = ("none", "full_ratchet", "broad_based")


def adjust_conversion_price(
    original_price: Number,
    new_price: Number,
    outstanding_shares: Number,
    new_shares: Number,
    method: AntiDilutionMethod = "broad_based",
    include_options: bool = False,
    include_pool: bool = False,
    options_outstanding: Number = 0,
    pool_size: Number = 0,
) -> AntiDilutionAdjustment:
    """Conversion price of a preferred class after a new round.

    Only a down round (new price below the original price) triggers an
    adjustment; otherwise the original price is returned unchanged.

    Raises:
        ValidationError: non-positive prices, negative share counts or an
            unknown method
    """
    if method not in METHODS:
        raise ValidationError("Unknown anti-dilution method", {"method": method})

    original_price = to_decimal(original_price)
    new_price = to_decimal(new_price)
    outstanding_shares = to_decimal(outstanding_shares)
    new_shares = to_decimal(new_shares)

    if original_price <= 0 or new_price <= 0:
        raise ValidationError(
            "Anti-dilution requires positive prices",
            {"original_price": str(original_price), "new_price": str(new_price)},
        )
    if outstanding_shares < 0 or new_shares < 0:
        raise ValidationError(
            "Anti-dilution requires non-negative share counts",
            {"outstanding_shares": str(outstanding_shares), "new_shares": str(new_shares)},
        )

    triggered = method != "none" and new_price < original_price
    if not triggered:
        adjusted = original_price
    elif method == "full_ratchet":
        adjusted = new_price
    else:
        base = outstanding_shares
        if include_options:
            base += to_decimal(options_outstanding)
        if include_pool:
            base += to_decimal(pool_size)
        if base + new_shares <= ZERO:
            raise ValidationError("Anti-dilution requires shares outstanding or issued")

        purchasable = new_shares * new_price / original_price
        adjusted = original_price * (base + purchasable) / (base + new_shares)

    adjusted = round_price(adjusted)
    return AntiDilutionAdjustment(
        method=method,
        original_price=round_price(original_price),
        adjusted_price=adjusted,
        conversion_ratio=round_price(original_price / adjusted),
        triggered=triggered,
    )
