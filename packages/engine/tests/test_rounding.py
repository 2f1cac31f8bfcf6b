"""Tests for the rounding conventions (shares, money, price, percentage)."""

from decimal import Decimal

from equity_engine.calculations.rounding import (
    calculate_percentage,
    from_minor_units,
    round_money,
    round_percentage,
    round_price,
    round_shares,
    to_minor_units,
)


def test_round_shares_six_places_half_up():
    assert round_shares(Decimal("850340.1360544")) == Decimal("850340.136054")
    assert round_shares(Decimal("0.0000005")) == Decimal("0.000001")


def test_round_money_two_places_half_up():
    assert round_money(Decimal("1234.565")) == Decimal("1234.57")
    assert round_money(Decimal("0.005")) == Decimal("0.01")
    assert round_money(10) == Decimal("10.00")


def test_round_price_four_places():
    assert round_price(Decimal("5000000") / Decimal("8500000")) == Decimal("0.5882")
    assert round_price(Decimal("1.23455")) == Decimal("1.2346")


def test_round_percentage_four_places():
    assert round_percentage(Decimal("33.333333")) == Decimal("33.3333")


def test_float_input_rounds_as_written():
    """Floats go through str, so 1.005 is not treated as 1.00499999..."""
    assert round_money(1.005) == Decimal("1.01")


def test_calculate_percentage():
    assert calculate_percentage(3_000_000, 5_000_000) == Decimal("60.0000")
    assert calculate_percentage(1, 3) == Decimal("33.3333")


def test_calculate_percentage_zero_denominator():
    assert calculate_percentage(100, 0) == Decimal("0")


def test_minor_units():
    assert to_minor_units(Decimal("12.345")) == 1235
    assert from_minor_units(1235) == Decimal("12.35")
