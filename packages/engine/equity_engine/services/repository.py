"""Storage seams of the engine.

The engine never talks to storage directly. Reads go through a
``CapTableRepository`` and the one mutation (secondary transfer) through a
``LedgerWriter``; both are structural protocols so that any persistence layer
can implement them without inheriting from engine classes.

``InMemoryRepository`` implements both over plain dicts. It is thread-safe
and is what tests and embedding applications use.
"""

import threading
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, runtime_checkable

from ..errors import NotFoundError, ValidationError
from ..logging_config import get_logger
from ..schemas import (
    CompanyDataset,
    ConvertibleInstrument,
    EquityAward,
    OptionPlan,
    Round,
    SecurityClass,
    ShareLedgerEntry,
    Stakeholder,
)

logger = get_logger(__name__)


# =============================================================================
# Protocols
# =============================================================================

@runtime_checkable
class CapTableRepository(Protocol):
    """Read-only access to one company's records."""

    def get_stakeholders(self, company_id: str) -> Sequence[Stakeholder]: ...

    def get_stakeholder(self, company_id: str, stakeholder_id: str) -> Optional[Stakeholder]: ...

    def get_security_classes(self, company_id: str) -> Sequence[SecurityClass]: ...

    def get_security_class(self, company_id: str, class_id: str) -> Optional[SecurityClass]: ...

    def get_ledger_entries(self, company_id: str) -> Sequence[ShareLedgerEntry]: ...

    def get_awards(self, company_id: str) -> Sequence[EquityAward]: ...

    def get_convertibles(self, company_id: str) -> Sequence[ConvertibleInstrument]: ...

    def get_rounds(self, company_id: str) -> Sequence[Round]: ...

    def get_option_plans(self, company_id: str) -> Sequence[OptionPlan]: ...


@runtime_checkable
class LedgerWriter(Protocol):
    """Persists the results of a secondary transfer."""

    def append_ledger_entries(
        self,
        company_id: str,
        entries: Sequence[ShareLedgerEntry],
        new_stakeholders: Sequence[Stakeholder] = (),
    ) -> None:
        """Persist the new stakeholders and every entry, or none of them."""
        ...


def load_dataset(repository: CapTableRepository, company_id: str) -> CompanyDataset:
    """Snapshot every record of a company into an immutable dataset."""
    return CompanyDataset(
        company_id=company_id,
        stakeholders=tuple(repository.get_stakeholders(company_id)),
        security_classes=tuple(repository.get_security_classes(company_id)),
        ledger_entries=tuple(repository.get_ledger_entries(company_id)),
        awards=tuple(repository.get_awards(company_id)),
        convertibles=tuple(repository.get_convertibles(company_id)),
        rounds=tuple(repository.get_rounds(company_id)),
        option_plans=tuple(repository.get_option_plans(company_id)),
    )


# =============================================================================
# In-memory implementation
# =============================================================================

@dataclass
class _CompanyRecords:
    stakeholders: Dict[str, Stakeholder] = field(default_factory=dict)
    security_classes: Dict[str, SecurityClass] = field(default_factory=dict)
    ledger_entries: List[ShareLedgerEntry] = field(default_factory=list)
    awards: List[EquityAward] = field(default_factory=list)
    convertibles: List[ConvertibleInstrument] = field(default_factory=list)
    rounds: List[Round] = field(default_factory=list)
    option_plans: List[OptionPlan] = field(default_factory=list)


class InMemoryRepository:
    """Dict-backed repository and ledger writer.

    Reads return tuples copied under the lock, so a reader never observes a
    half-applied append.

    Usage:
        repo = InMemoryRepository()
        repo.add_dataset(dataset)
        result = compute_cap_table(repo, "acme", as_of=date(2024, 12, 31))
    """

    def __init__(self, datasets: Iterable[CompanyDataset] = ()):
        self._lock = threading.RLock()
        self._companies: Dict[str, _CompanyRecords] = {}
        for dataset in datasets:
            self.add_dataset(dataset)

    def _company(self, company_id: str) -> _CompanyRecords:
        try:
            return self._companies[company_id]
        except KeyError:
            raise NotFoundError("Company not found", "company", company_id) from None

    # ---------------------------------------------------------------- seeding

    def add_dataset(self, dataset: CompanyDataset) -> None:
        with self._lock:
            records = self._companies.setdefault(dataset.company_id, _CompanyRecords())
            records.stakeholders.update({s.id: s for s in dataset.stakeholders})
            records.security_classes.update({c.id: c for c in dataset.security_classes})
            records.ledger_entries.extend(dataset.ledger_entries)
            records.awards.extend(dataset.awards)
            records.convertibles.extend(dataset.convertibles)
            records.rounds.extend(dataset.rounds)
            records.option_plans.extend(dataset.option_plans)

    # ------------------------------------------------------------------ reads

    def get_stakeholders(self, company_id: str) -> Sequence[Stakeholder]:
        with self._lock:
            return tuple(self._company(company_id).stakeholders.values())

    def get_stakeholder(self, company_id: str, stakeholder_id: str) -> Optional[Stakeholder]:
        with self._lock:
            return self._company(company_id).stakeholders.get(stakeholder_id)

    def get_security_classes(self, company_id: str) -> Sequence[SecurityClass]:
        with self._lock:
            return tuple(self._company(company_id).security_classes.values())

    def get_security_class(self, company_id: str, class_id: str) -> Optional[SecurityClass]:
        with self._lock:
            return self._company(company_id).security_classes.get(class_id)

    def get_ledger_entries(self, company_id: str) -> Sequence[ShareLedgerEntry]:
        with self._lock:
            return tuple(self._company(company_id).ledger_entries)

    def get_awards(self, company_id: str) -> Sequence[EquityAward]:
        with self._lock:
            return tuple(self._company(company_id).awards)

    def get_convertibles(self, company_id: str) -> Sequence[ConvertibleInstrument]:
        with self._lock:
            return tuple(self._company(company_id).convertibles)

    def get_rounds(self, company_id: str) -> Sequence[Round]:
        with self._lock:
            return tuple(self._company(company_id).rounds)

    def get_option_plans(self, company_id: str) -> Sequence[OptionPlan]:
        with self._lock:
            return tuple(self._company(company_id).option_plans)

    # ----------------------------------------------------------------- writes

    def append_ledger_entries(
        self,
        company_id: str,
        entries: Sequence[ShareLedgerEntry],
        new_stakeholders: Sequence[Stakeholder] = (),
    ) -> None:
        """Validate the stakeholders and entries against the stored records, then store them all."""
        with self._lock:
            records = self._company(company_id)
            known_holders = set(records.stakeholders)
            for stakeholder in new_stakeholders:
                if stakeholder.id in known_holders:
                    raise ValidationError("Stakeholder already exists", {"stakeholderId": stakeholder.id})
                known_holders.add(stakeholder.id)

            existing_ids = {e.id for e in records.ledger_entries}
            for entry in entries:
                if entry.id in existing_ids:
                    raise ValidationError("Duplicate ledger entry id", {"entryId": entry.id})
                if entry.holder_id not in known_holders:
                    raise NotFoundError("Stakeholder not found", "stakeholder", entry.holder_id)
                if entry.class_id not in records.security_classes:
                    raise NotFoundError("Security class not found", "security_class", entry.class_id)
                existing_ids.add(entry.id)

            for stakeholder in new_stakeholders:
                records.stakeholders[stakeholder.id] = stakeholder
                logger.debug("stakeholder_created", company_id=company_id, stakeholder_id=stakeholder.id)
            records.ledger_entries.extend(entries)
