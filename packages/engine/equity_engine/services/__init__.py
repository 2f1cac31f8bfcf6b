"""Engine services: cap table aggregation, secondary transfers and storage seams."""

from .repository import CapTableRepository, LedgerWriter, InMemoryRepository, load_dataset
from .cap_table import build_cap_table, compute_cap_table
from .transfer import DEFAULT_LOCKS, LockRegistry, TransferService, parse_transfer_request

__all__ = [
    "CapTableRepository",
    "LedgerWriter",
    "InMemoryRepository",
    "load_dataset",
    "build_cap_table",
    "compute_cap_table",
    "DEFAULT_LOCKS",
    "LockRegistry",
    "TransferService",
    "parse_transfer_request",
]
