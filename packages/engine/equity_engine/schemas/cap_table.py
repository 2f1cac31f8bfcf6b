"""Company dataset and cap table result models.

``CompanyDataset`` is the read-only snapshot of one company's raw records that
the aggregator consumes. ``CapTableResult`` is what it produces: derived rows,
totals and metadata, recomputed on every request and never persisted.
"""

from enum import Enum
from typing import List, Optional, Tuple
from datetime import date
from decimal import Decimal
from pydantic import Field, model_validator

from .base import DomainModel, ResultModel
from .share_classes import SecurityClass, Stakeholder
from .ledger import ShareLedgerEntry
from .awards import EquityAward
from .instruments import ConvertibleInstrument
from .rounds import Round, OptionPlan
from .results import PriceSource


# =============================================================================
# Views and Policies
# =============================================================================

class CapTableView(str, Enum):
    """Denominator used for ownership percentages.

    OUTSTANDING:   issued shares only
    FULLY_DILUTED: issued shares + options + RSUs + as-converted convertibles + pool
    """

    OUTSTANDING = "OUTSTANDING"
    FULLY_DILUTED = "FULLY_DILUTED"


class RsuPolicy(str, Enum):
    """How RSUs count toward the fully diluted total.

    none:    RSUs are excluded
    granted: granted - exercised - canceled
    vested:  vested - exercised (never negative)
    """

    NONE = "none"
    GRANTED = "granted"
    VESTED = "vested"


# =============================================================================
# Company Dataset
# =============================================================================

class CompanyDataset(DomainModel):
    """Every raw record of one company, as handed over by a repository.

    Usage:
        dataset = CompanyDataset(
            company_id="acme",
            stakeholders=[...],
            security_classes=[...],
            ledger_entries=[...],
        )
        result = build_cap_table(dataset, as_of=date(2024, 12, 31))
    """

    company_id: str = Field(min_length=1)

    stakeholders: Tuple[Stakeholder, ...] = ()
    security_classes: Tuple[SecurityClass, ...] = ()
    ledger_entries: Tuple[ShareLedgerEntry, ...] = ()
    awards: Tuple[EquityAward, ...] = ()
    convertibles: Tuple[ConvertibleInstrument, ...] = ()
    rounds: Tuple[Round, ...] = ()
    option_plans: Tuple[OptionPlan, ...] = ()

    @model_validator(mode='after')
    def validate_references(self):
        """Every holder and class referenced by a record must exist in the dataset."""
        stakeholder_ids = {s.id for s in self.stakeholders}
        class_ids = {c.id for c in self.security_classes}

        for entry in self.ledger_entries:
            if entry.holder_id not in stakeholder_ids:
                raise ValueError(f"Ledger entry {entry.id} references unknown holder '{entry.holder_id}'")
            if entry.class_id not in class_ids:
                raise ValueError(f"Ledger entry {entry.id} references unknown class '{entry.class_id}'")

        for record in (*self.awards, *self.convertibles):
            if record.holder_id not in stakeholder_ids:
                raise ValueError(f"{record.id} references unknown holder '{record.holder_id}'")

        return self

    def stakeholder(self, stakeholder_id: str) -> Optional[Stakeholder]:
        return next((s for s in self.stakeholders if s.id == stakeholder_id), None)

    def security_class(self, class_id: str) -> Optional[SecurityClass]:
        return next((c for c in self.security_classes if c.id == class_id), None)


# =============================================================================
# Cap Table Result
# =============================================================================

UNALLOCATED_POOL_ID = "unallocated_pool"


class CapTableRow(ResultModel):
    """One ownership line: a holder in a class, or the unallocated pool.

    Derivative holdings (options, RSUs, as-converted convertibles) sit on the
    holder's primary row. Holders with no issued shares get a row with no
    security class.
    """

    stakeholder_id: str
    stakeholder_name: str
    security_class_id: Optional[str] = None
    security_class_name: Optional[str] = None
    row_type: str = Field(default="holder", description="'holder' or 'option_pool'")

    outstanding_shares: Decimal = Decimal("0")
    options: Decimal = Decimal("0")
    rsus: Decimal = Decimal("0")
    convertibles: Decimal = Decimal("0")
    fully_diluted_shares: Decimal = Decimal("0")

    pct_outstanding: Decimal = Decimal("0")
    pct_fully_diluted: Decimal = Decimal("0")

    value: Optional[Decimal] = Field(default=None, description="Reference price * outstanding shares")
    cost_basis: Decimal = Decimal("0")
    badges: Tuple[str, ...] = ()


class CapTableTotals(ResultModel):
    outstanding_shares: Decimal
    options: Decimal
    rsus: Decimal
    convertibles: Decimal
    pool_available: Decimal
    fully_diluted_shares: Decimal
    price_per_share: Optional[Decimal] = None
    current_valuation: Optional[Decimal] = None


class CapTableMeta(ResultModel):
    as_of: date
    view: CapTableView
    rsu_policy: RsuPolicy
    pool_in_denominator: bool
    reference_round_id: Optional[str] = None
    price_source: Optional[PriceSource] = None
    price_conflict: bool = False
    unconverted_instrument_ids: Tuple[str, ...] = ()


class CapTableResult(ResultModel):
    """Complete cap table as of a date."""

    totals: CapTableTotals
    rows: List[CapTableRow]
    meta: CapTableMeta

    def row_for(self, stakeholder_id: str, security_class_id: Optional[str] = None) -> Optional[CapTableRow]:
        """First row for the stakeholder (optionally restricted to one class)."""
        for row in self.rows:
            if row.stakeholder_id != stakeholder_id:
                continue
            if security_class_id is None or row.security_class_id == security_class_id:
                return row
        return None

    @property
    def pct_fully_diluted_sum(self) -> Decimal:
        return sum((row.pct_fully_diluted for row in self.rows), Decimal("0"))
