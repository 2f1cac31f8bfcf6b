"""Tests for the vesting evaluator.

Standard award used throughout: 48,000 granted, 48 months, 12-month cliff,
vesting from 2023-01-01.
"""

import pytest
from datetime import date
from decimal import Decimal

from dateutil.relativedelta import relativedelta

from equity_engine.calculations.vesting import (
    months_elapsed,
    vested_for_award,
    vested_quantity,
    vesting_schedule,
)
from equity_engine.schemas import OptionAward, RsuAward

START = date(2023, 1, 1)


def make_award(**overrides):
    fields = dict(
        id="opt1",
        holder_id="carol",
        quantity_granted=48_000,
        grant_date=START,
        strike_price=Decimal("0.10"),
    )
    fields.update(overrides)
    return OptionAward(**fields)


def vested_at(months: int, **kwargs) -> int:
    params = dict(
        quantity_granted=48_000,
        quantity_canceled=0,
        vesting_start=START,
        cliff_months=12,
        total_months=48,
    )
    params.update(kwargs)
    return vested_quantity(as_of=START + relativedelta(months=months), **params)


# =============================================================================
# Rules
# =============================================================================

def test_nothing_vests_before_cliff():
    assert vested_at(0) == 0
    assert vested_at(11) == 0
    assert vested_quantity(48_000, 0, START, START + relativedelta(months=12, days=-1), 12, 48) == 0


def test_cliff_releases_accrued_months():
    assert vested_at(12) == 12_000


def test_linear_after_cliff():
    assert vested_at(30) == 30_000


def test_floor_applied():
    # 1,000 * 13 / 48 = 270.83
    assert vested_at(13, quantity_granted=1_000) == 270


def test_full_vest_at_term_is_granted_minus_canceled():
    assert vested_at(48, quantity_canceled=8_000) == 40_000
    assert vested_at(120, quantity_canceled=8_000) == 40_000


def test_clamped_to_granted_minus_canceled():
    # 46,000 * 47 / 48 = 45,041 but only 46,000 - 10,000 may ever vest
    assert vested_at(47, quantity_granted=46_000, quantity_canceled=10_000) == 36_000


def test_before_vesting_start_is_zero():
    assert vested_quantity(48_000, 0, START, date(2022, 6, 1), 0, 48) == 0


def test_zero_duration_vests_fully_at_start():
    assert vested_quantity(1_000, 0, START, START, 0, 0) == 1_000


def test_monotonic_in_as_of():
    """Vested never decreases as the as-of date advances."""
    previous = 0
    for day in range(0, 365 * 5, 7):
        current = vested_quantity(48_000, 3_000, START, START + relativedelta(days=day), 12, 48)
        assert current >= previous
        previous = current


# =============================================================================
# Cadence
# =============================================================================

def test_months_elapsed_truncates_to_cadence():
    assert months_elapsed(START, date(2024, 2, 15)) == 13
    assert months_elapsed(START, date(2024, 2, 15), "quarterly") == 12
    assert months_elapsed(START, date(2025, 11, 30), "annual") == 24


def test_quarterly_cadence():
    assert vested_at(14, cadence="quarterly") == 12_000
    assert vested_at(15, cadence="quarterly") == 15_000


# =============================================================================
# Awards and schedules
# =============================================================================

def test_vested_for_award_uses_explicit_vesting_start():
    award = make_award(grant_date=date(2023, 3, 1), vesting_start_date=START)
    assert vested_for_award(award, date(2024, 1, 1)) == 12_000


def test_vested_for_rsu():
    award = RsuAward(id="rsu1", holder_id="frank", quantity_granted=48_000, grant_date=START)
    assert vested_for_award(award, date(2025, 1, 1)) == 24_000


def test_vesting_schedule_monthly():
    schedule = vesting_schedule(make_award())
    assert schedule[0].vest_date == date(2024, 1, 1)
    assert schedule[0].quantity == 12_000
    assert schedule[1].quantity == 1_000
    assert len(schedule) == 37
    assert schedule[-1].cumulative == 48_000
    assert sum(t.quantity for t in schedule) == 48_000


def test_vesting_schedule_through_date():
    schedule = vesting_schedule(make_award(), through=date(2024, 3, 1))
    assert [t.vest_date for t in schedule] == [date(2024, 1, 1), date(2024, 2, 1), date(2024, 3, 1)]


@pytest.mark.parametrize("cadence,tranches", [("quarterly", 13), ("annual", 4)])
def test_vesting_schedule_cadences(cadence, tranches):
    schedule = vesting_schedule(make_award(cadence=cadence))
    assert len(schedule) == tranches
    assert schedule[-1].cumulative == 48_000
