"""SAFE conversion pricing.

Pre-money SAFEs convert at the lowest applicable of three prices:

    round price      price per share of the priced round
    discount price   round price * (1 - discount rate)
    cap price        valuation cap / pre-round fully diluted shares

Post-money SAFEs fix ownership instead of price. With target = principal / cap,
the holder must own exactly ``target`` of the post-conversion total:

    shares / (pre_fd + shares) = target
    shares = target * pre_fd / (1 - target)

The implied conversion price is principal / shares. The discount plays no part
in the post-money form.
"""

from decimal import Decimal
from typing import Optional, Tuple

from ..errors import ConfigurationError, ValidationError
from ..logging_config import get_logger
from ..schemas import ConversionTerms, SafeConversionResult, SafeInstrument
from .rounding import round_price, round_shares

logger = get_logger(__name__)


def select_conversion_price(
    price_per_share: Decimal,
    discount_rate: Optional[Decimal],
    valuation_cap: Optional[Decimal],
    pre_round_fully_diluted_shares: Decimal,
) -> Tuple[Decimal, bool, bool]:
    """Lowest applicable price among round, discount and cap.

    A candidate only wins when strictly below the round price; the discount
    wins a tie with the cap.

    Returns:
        (conversion_price, used_discount, used_cap)
    """
    discount_price = None
    if discount_rate:
        discount_price = price_per_share * (1 - discount_rate)

    cap_price = None
    if valuation_cap:
        cap_price = valuation_cap / pre_round_fully_diluted_shares

    if discount_price is not None and discount_price < price_per_share and (
        cap_price is None or discount_price <= cap_price
    ):
        return discount_price, True, False

    if cap_price is not None and cap_price < price_per_share and (
        discount_price is None or cap_price < discount_price
    ):
        return cap_price, False, True

    return price_per_share, False, False


def validate_conversion_inputs(principal: Decimal, terms: ConversionTerms) -> None:
    """Reject non-positive amounts and share counts before any conversion math."""
    if principal <= 0:
        raise ValidationError("Principal must be positive", {"principal": str(principal)})
    if terms.pre_round_fully_diluted_shares <= 0:
        raise ValidationError(
            "Pre-round fully diluted shares must be positive",
            {"preRoundFullyDilutedShares": str(terms.pre_round_fully_diluted_shares)},
        )
    if terms.price_per_share is not None and terms.price_per_share <= 0:
        raise ValidationError(
            "Price per share must be positive",
            {"pricePerShare": str(terms.price_per_share)},
        )


def convert_safe(safe: SafeInstrument, terms: ConversionTerms) -> SafeConversionResult:
    """Convert a SAFE into shares of the priced round.

    Raises:
        ValidationError: non-positive principal, pre-round FD or round price
        ConfigurationError: pre-money SAFE without a round price, post-money
            SAFE without a cap or with principal >= cap
    """
    validate_conversion_inputs(safe.principal, terms)

    if safe.post_money:
        return _convert_post_money(safe, terms)

    if terms.price_per_share is None:
        raise ConfigurationError(
            "Pre-money SAFE conversion requires a round price",
            {"instrumentId": safe.id},
        )

    price, used_discount, used_cap = select_conversion_price(
        terms.price_per_share,
        safe.discount_rate,
        safe.valuation_cap,
        terms.pre_round_fully_diluted_shares,
    )

    result = SafeConversionResult(
        shares_issued=round_shares(safe.principal / price),
        conversion_price=round_price(price),
        used_discount=used_discount,
        used_cap=used_cap,
    )
    logger.debug(
        "safe_converted",
        instrument_id=safe.id,
        shares_issued=str(result.shares_issued),
        conversion_price=str(result.conversion_price),
        used_discount=used_discount,
        used_cap=used_cap,
    )
    return result


def _convert_post_money(safe: SafeInstrument, terms: ConversionTerms) -> SafeConversionResult:
    if not safe.valuation_cap:
        raise ConfigurationError(
            "Post-money SAFE conversion requires a valuation cap",
            {"instrumentId": safe.id},
        )

    target = safe.principal / safe.valuation_cap
    if target >= 1:
        raise ConfigurationError(
            "Post-money SAFE principal must be below its valuation cap",
            {"instrumentId": safe.id, "principal": str(safe.principal), "valuationCap": str(safe.valuation_cap)},
        )

    shares = target * terms.pre_round_fully_diluted_shares / (1 - target)

    result = SafeConversionResult(
        shares_issued=round_shares(shares),
        conversion_price=round_price(safe.principal / shares),
        used_discount=False,
        used_cap=True,
    )
    logger.debug(
        "safe_converted",
        instrument_id=safe.id,
        post_money=True,
        shares_issued=str(result.shares_issued),
        conversion_price=str(result.conversion_price),
    )
    return result
