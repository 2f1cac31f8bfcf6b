"""Tests for convertible note interest, conversion and triggers."""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from equity_engine.calculations.notes import accrue_interest, convert_note, evaluate_trigger
from equity_engine.errors import ConfigurationError, ValidationError
from equity_engine.schemas import ConversionTerms, ConvertibleNote, NoteTriggerState

ISSUE = date(2023, 1, 1)


def make_note(**overrides):
    fields = dict(
        id="note1",
        holder_id="erin",
        principal=Decimal("500000"),
        issue_date=ISSUE,
        interest_rate=Decimal("0.05"),
        maturity_date=date(2025, 1, 1),
    )
    fields.update(overrides)
    return ConvertibleNote(**fields)


# =============================================================================
# Interest
# =============================================================================

def test_interest_zero_on_issue_date():
    assert accrue_interest(make_note(), ISSUE) == Decimal("0")


def test_interest_actual_365():
    # 730 days at 5% on $500K
    assert accrue_interest(make_note(), ISSUE + timedelta(days=730)) == Decimal("50000.00")


def test_interest_linear_in_days():
    note = make_note()
    one = accrue_interest(note, ISSUE + timedelta(days=73))
    two = accrue_interest(note, ISSUE + timedelta(days=146))
    assert one == Decimal("5000.00")
    assert two == 2 * one


def test_no_rate_no_interest():
    assert accrue_interest(make_note(interest_rate=None), date(2024, 6, 1)) == Decimal("0")


def test_interest_before_issue_rejected():
    with pytest.raises(ValidationError):
        accrue_interest(make_note(), date(2022, 12, 31))


# =============================================================================
# Conversion
# =============================================================================

def test_convert_note_with_interest_and_discount():
    note = make_note(discount_rate=Decimal("0.20"))
    terms = ConversionTerms(
        price_per_share=Decimal("2.00"),
        pre_round_fully_diluted_shares=Decimal("10000000"),
        as_of_date=ISSUE + timedelta(days=730),
    )

    result = convert_note(note, terms)

    assert result.principal_amount == Decimal("500000.00")
    assert result.interest_amount == Decimal("50000.00")
    assert result.total_amount == Decimal("550000.00")
    assert result.conversion_price == Decimal("1.6000")
    assert result.used_discount is True
    assert result.shares_issued == Decimal("343750.000000")


def test_convert_note_cap_price():
    note = make_note(interest_rate=None, valuation_cap=Decimal("5000000"), discount_rate=Decimal("0.10"))
    terms = ConversionTerms(
        price_per_share=Decimal("2.00"),
        pre_round_fully_diluted_shares=Decimal("10000000"),
        as_of_date=date(2024, 1, 1),
    )

    result = convert_note(note, terms)

    assert result.used_cap is True
    assert result.conversion_price == Decimal("0.5000")
    assert result.shares_issued == Decimal("1000000.000000")


def test_convert_note_requires_price_and_date():
    note = make_note()
    with pytest.raises(ConfigurationError):
        convert_note(note, ConversionTerms(pre_round_fully_diluted_shares=Decimal("100"), as_of_date=ISSUE))
    with pytest.raises(ConfigurationError):
        convert_note(note, ConversionTerms(price_per_share=Decimal("1"), pre_round_fully_diluted_shares=Decimal("100")))


def test_maturity_must_follow_issue():
    with pytest.raises(ValueError, match="maturity_date"):
        make_note(maturity_date=ISSUE)


# =============================================================================
# Triggers
# =============================================================================

def test_not_triggered_before_maturity():
    trigger = evaluate_trigger(make_note(), date(2024, 12, 31))
    assert trigger.state == NoteTriggerState.NOT_TRIGGERED
    assert trigger.reason is None
    assert not trigger.triggered


def test_triggered_on_maturity():
    trigger = evaluate_trigger(make_note(), date(2025, 1, 1))
    assert trigger.state == NoteTriggerState.TRIGGERED
    assert trigger.reason == "maturity"


def test_triggered_by_financing():
    trigger = evaluate_trigger(make_note(), date(2024, 3, 1), financing_occurred=True)
    assert trigger.triggered
    assert trigger.reason == "financing"


def test_maturity_reported_when_both_hold():
    trigger = evaluate_trigger(make_note(), date(2025, 6, 1), financing_occurred=True)
    assert trigger.reason == "maturity"


def test_no_maturity_date_never_matures():
    trigger = evaluate_trigger(make_note(maturity_date=None), date(2040, 1, 1))
    assert trigger.state == NoteTriggerState.NOT_TRIGGERED
