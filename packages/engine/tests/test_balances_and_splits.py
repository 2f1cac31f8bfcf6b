"""Tests for ledger balances, cost basis and stock splits."""

import pytest
from datetime import date
from decimal import Decimal

from equity_engine.calculations.balances import balance_of, cost_basis, ledger_balances
from equity_engine.calculations.splits import split_adjusted_award, split_adjustment_entries, split_ratio
from equity_engine.errors import ValidationError
from equity_engine.schemas import OptionAward, RsuAward, ShareLedgerEntry


def entry(id, holder, qty, day, entry_type="issuance", class_id="common", consideration=None):
    return ShareLedgerEntry(
        id=id, holder_id=holder, class_id=class_id, quantity=qty,
        issue_date=day, entry_type=entry_type, consideration=consideration,
    )


@pytest.fixture
def ledger():
    return [
        entry("e1", "alice", 3_000_000, date(2023, 1, 1), consideration=Decimal("300")),
        entry("e2", "bob", 1_001, date(2023, 1, 1)),
        entry("e3", "alice", -10_000, date(2024, 6, 1), "transfer_out"),
        entry("e4", "bob", 10_000, date(2024, 6, 1), "transfer_in", consideration=Decimal("15000")),
    ]


# =============================================================================
# Balances
# =============================================================================

def test_ledger_balances_signed_sum(ledger):
    assert ledger_balances(ledger) == {
        ("alice", "common"): 2_990_000,
        ("bob", "common"): 11_001,
    }


def test_ledger_balances_as_of_excludes_later_entries(ledger):
    balances = ledger_balances(ledger, as_of=date(2024, 5, 31))
    assert balances[("alice", "common")] == 3_000_000
    assert balances[("bob", "common")] == 1_001


def test_balance_of_unknown_pair_is_zero(ledger):
    assert balance_of(ledger, "carol", "common") == 0
    assert balance_of(ledger, "alice", "common", as_of=date(2024, 6, 1)) == 2_990_000


def test_cost_basis_counts_inbound_consideration(ledger):
    basis = cost_basis(ledger)
    assert basis[("alice", "common")] == Decimal("300")
    assert basis[("bob", "common")] == Decimal("15000")


def test_ledger_entry_sign_rules():
    with pytest.raises(ValueError):
        entry("x", "alice", 100, date(2023, 1, 1), "transfer_out")
    with pytest.raises(ValueError):
        entry("x", "alice", -100, date(2023, 1, 1), "issuance")
    with pytest.raises(ValueError):
        entry("x", "alice", 0, date(2023, 1, 1))


# =============================================================================
# Splits
# =============================================================================

def test_forward_split_doubles_balances(ledger):
    adjustments = split_adjustment_entries(ledger, 2, date(2025, 1, 1))
    balances = ledger_balances([*ledger, *adjustments])
    assert balances[("alice", "common")] == 5_980_000
    assert balances[("bob", "common")] == 22_002
    assert all(a.entry_type == "split_adjustment" for a in adjustments)
    assert len({a.transaction_id for a in adjustments}) == 1


def test_reverse_split_bankers_rounding(ledger):
    adjustments = split_adjustment_entries(ledger, Decimal("0.5"), date(2025, 1, 1))
    balances = ledger_balances([*ledger, *adjustments])
    # 11,001 / 2 = 5,500.5 -> 5,500 (round half to even)
    assert balances[("bob", "common")] == 5_500


def test_reverse_split_half_up_rounding(ledger):
    adjustments = split_adjustment_entries(ledger, Decimal("0.5"), date(2025, 1, 1), rounding="half_up")
    assert ledger_balances([*ledger, *adjustments])[("bob", "common")] == 5_501


def test_split_is_deterministic(ledger):
    first = split_adjustment_entries(ledger, 3, date(2025, 1, 1))
    second = split_adjustment_entries(ledger, 3, date(2025, 1, 1))
    assert first == second


def test_split_ratio_must_be_positive(ledger):
    with pytest.raises(ValidationError):
        split_adjustment_entries(ledger, 0, date(2025, 1, 1))


def test_split_adjusted_option_divides_strike():
    award = OptionAward(
        id="opt1", holder_id="carol", quantity_granted=10_000, quantity_exercised=1_000,
        grant_date=date(2023, 1, 1), strike_price=Decimal("0.50"),
    )
    adjusted = split_adjusted_award(award, 2)
    assert adjusted.quantity_granted == 20_000
    assert adjusted.quantity_exercised == 2_000
    assert adjusted.strike_price == Decimal("0.2500")
    assert award.quantity_granted == 10_000


def test_split_adjusted_rsu_has_no_strike():
    award = RsuAward(id="rsu1", holder_id="frank", quantity_granted=4_800, grant_date=date(2023, 1, 1))
    adjusted = split_adjusted_award(award, 10)
    assert isinstance(adjusted, RsuAward)
    assert adjusted.quantity_granted == 48_000


def test_split_ratio():
    assert split_ratio(20_000_000, 10_000_000) == Decimal("2.0000")
    with pytest.raises(ValidationError):
        split_ratio(100, 0)


def test_reverse_split_keeps_award_quantities_consistent():
    award = OptionAward(
        id="opt1", holder_id="carol", quantity_granted=5, quantity_exercised=3,
        quantity_canceled=2, grant_date=date(2023, 1, 1), strike_price=Decimal("0.10"),
    )

    # banker's rounding alone gives 2 / 2 / 1
    adjusted = split_adjusted_award(award, Decimal("0.5"))

    assert adjusted.quantity_granted == 2
    assert adjusted.quantity_exercised == 2
    assert adjusted.quantity_canceled == 0
    assert adjusted.strike_price == Decimal("0.2000")
