"""Shared fixtures: a small seed-stage company and the two-founder scenario."""

from datetime import date
from decimal import Decimal

import pytest

from equity_engine.schemas import (
    CompanyDataset,
    ConvertibleNote,
    OptionAward,
    OptionPlan,
    Round,
    RsuAward,
    SafeInstrument,
    SecurityClass,
    ShareLedgerEntry,
    Stakeholder,
)
from equity_engine.services import InMemoryRepository


# =============================================================================
# Builders
# =============================================================================

def founders_dataset(company_id: str = "founders") -> CompanyDataset:
    """Alice 3,000,000 and Bob 2,000,000 common shares, nothing else."""
    return CompanyDataset(
        company_id=company_id,
        stakeholders=[
            Stakeholder(id="alice", name="Alice Founder"),
            Stakeholder(id="bob", name="Bob Founder"),
        ],
        security_classes=[SecurityClass(id="common", name="Common Stock")],
        ledger_entries=[
            ShareLedgerEntry(
                id="e1", holder_id="alice", class_id="common",
                quantity=3_000_000, issue_date=date(2023, 1, 1),
                consideration=Decimal("300.00"),
            ),
            ShareLedgerEntry(
                id="e2", holder_id="bob", class_id="common",
                quantity=2_000_000, issue_date=date(2023, 1, 1),
                consideration=Decimal("200.00"),
            ),
        ],
    )


def seed_company_dataset(company_id: str = "acme") -> CompanyDataset:
    """Founders, an option plan with grants, a SAFE, a note and a closed seed round.

    Ledger as of 2024-06-30:
        alice   common     3,000,000
        bob     common     2,000,000
        grace   series_a     500,000   (seed round, $1.00/share)

    Awards:
        carol   option  100,000 granted, 10,000 canceled
        frank   rsu      48,000 granted, 4-year / 1-year cliff from 2023-01-01

    Plan reserves 1,000,000 -> pool available = 1,000,000 - 90,000 - 48,000
    """
    return CompanyDataset(
        company_id=company_id,
        stakeholders=[
            Stakeholder(id="alice", name="Alice Founder"),
            Stakeholder(id="bob", name="Bob Founder"),
            Stakeholder(id="carol", name="Carol Engineer"),
            Stakeholder(id="frank", name="Frank Designer"),
            Stakeholder(id="dave", name="Dave Angel", stakeholder_type="individual"),
            Stakeholder(id="erin", name="Erin Ventures", stakeholder_type="entity"),
            Stakeholder(id="grace", name="Grace Capital", stakeholder_type="entity"),
        ],
        security_classes=[
            SecurityClass(id="common", name="Common Stock"),
            SecurityClass(
                id="series_a", name="Series A Preferred",
                seniority_tier=1, liquidation_preference_multiple=Decimal("1.0"),
            ),
        ],
        ledger_entries=[
            ShareLedgerEntry(
                id="e1", holder_id="alice", class_id="common",
                quantity=3_000_000, issue_date=date(2023, 1, 1),
                consideration=Decimal("300.00"),
            ),
            ShareLedgerEntry(
                id="e2", holder_id="bob", class_id="common",
                quantity=2_000_000, issue_date=date(2023, 1, 1),
                consideration=Decimal("200.00"),
            ),
            ShareLedgerEntry(
                id="e3", holder_id="grace", class_id="series_a",
                quantity=500_000, issue_date=date(2024, 1, 15),
                consideration=Decimal("500000.00"),
            ),
        ],
        awards=[
            OptionAward(
                id="opt1", holder_id="carol", quantity_granted=100_000,
                quantity_canceled=10_000, grant_date=date(2023, 2, 1),
                strike_price=Decimal("0.10"),
            ),
            RsuAward(
                id="rsu1", holder_id="frank", quantity_granted=48_000,
                grant_date=date(2023, 1, 1),
            ),
        ],
        convertibles=[
            SafeInstrument(
                id="safe1", holder_id="dave", principal=Decimal("100000"),
                issue_date=date(2023, 6, 1), discount_rate=Decimal("0.20"),
                valuation_cap=Decimal("4000000"),
            ),
            ConvertibleNote(
                id="note1", holder_id="erin", principal=Decimal("50000"),
                issue_date=date(2023, 7, 1), interest_rate=Decimal("0.05"),
                maturity_date=date(2025, 7, 1), discount_rate=Decimal("0.15"),
            ),
        ],
        rounds=[
            Round(
                id="seed", name="Seed", close_date=date(2024, 1, 15),
                raise_amount=Decimal("500000"), shares_issued=Decimal("500000"),
            ),
        ],
        option_plans=[
            OptionPlan(id="plan2023", name="2023 Plan", total_shares=1_000_000, adoption_date=date(2023, 1, 1)),
        ],
    )


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def founders():
    return founders_dataset()


@pytest.fixture
def seed_company():
    return seed_company_dataset()


@pytest.fixture
def repo(seed_company, founders):
    return InMemoryRepository([seed_company, founders])
