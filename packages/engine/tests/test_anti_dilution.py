"""Tests for anti-dilution conversion price adjustment.

Series A at $2.00 with 1,000,000 shares outstanding; a down round issues
500,000 shares at $1.00.
"""

import pytest
from decimal import Decimal

from equity_engine.calculations.anti_dilution import adjust_conversion_price
from equity_engine.errors import ValidationError


def down_round(**overrides):
    fields = dict(
        original_price=Decimal("2.00"),
        new_price=Decimal("1.00"),
        outstanding_shares=1_000_000,
        new_shares=500_000,
    )
    fields.update(overrides)
    return adjust_conversion_price(**fields)


# =============================================================================
# Methods
# =============================================================================

def test_full_ratchet_drops_to_new_price():
    result = down_round(method="full_ratchet")

    assert result.triggered is True
    assert result.method == "full_ratchet"
    assert result.adjusted_price == Decimal("1.0000")
    assert result.conversion_ratio == Decimal("2.0000")


def test_broad_based_weighted_average():
    result = down_round()

    # 2.00 * (1,000,000 + 250,000) / 1,500,000
    assert result.adjusted_price == Decimal("1.6667")
    assert result.conversion_ratio == Decimal("1.2000")
    assert result.original_price == Decimal("2.0000")


def test_options_widen_the_base():
    result = down_round(include_options=True, options_outstanding=200_000)

    # 2.00 * 1,450,000 / 1,700,000
    assert result.adjusted_price == Decimal("1.7059")


def test_options_and_pool_widen_the_base():
    result = down_round(
        include_options=True, options_outstanding=200_000,
        include_pool=True, pool_size=300_000,
    )

    # 2.00 * 1,750,000 / 2,000,000
    assert result.adjusted_price == Decimal("1.7500")


def test_excluded_options_are_ignored():
    assert down_round(options_outstanding=200_000, pool_size=300_000).adjusted_price == Decimal("1.6667")


# =============================================================================
# No adjustment
# =============================================================================

@pytest.mark.parametrize("new_price", ["2.00", "3.00"])
def test_flat_or_up_round_keeps_price(new_price):
    result = down_round(new_price=Decimal(new_price), method="full_ratchet")

    assert result.triggered is False
    assert result.adjusted_price == Decimal("2.0000")
    assert result.conversion_ratio == Decimal("1.0000")


def test_method_none_never_adjusts():
    result = down_round(method="none")

    assert result.triggered is False
    assert result.adjusted_price == Decimal("2.0000")


# =============================================================================
# Invalid input
# =============================================================================

@pytest.mark.parametrize("overrides", [
    {"original_price": Decimal("0")},
    {"new_price": Decimal("-1")},
    {"new_shares": -1},
    {"outstanding_shares": -1},
    {"method": "partial_ratchet"},
])
def test_invalid_inputs(overrides):
    with pytest.raises(ValidationError):
        down_round(**overrides)


def test_broad_based_needs_some_shares():
    with pytest.raises(ValidationError):
        down_round(outstanding_shares=0, new_shares=0)
