"""Share ledger entries.

The share ledger is the append-only source of truth for issued shares. The
running balance of a (holder, class) pair is the signed sum of its entries
dated on or before the as-of date:

    founder_alice / common:   +3,000,000  issuance      2023-01-01
    founder_alice / common:      -10,000  transfer_out  2024-06-01
    angel_bob     / common:      +10,000  transfer_in   2024-06-01

    balance(alice, common, 2024-12-31) = 2,990,000

Entries are never edited. A correction is a new offsetting entry, and the two
legs of a transfer share a ``transaction_id``.
"""

from typing import Literal, Optional
from datetime import date
from pydantic import Field, model_validator

from .base import (
    DomainModel,
    EntityId,
    MoneyAmount,
    SecurityClassId,
    SignedQuantity,
    StakeholderId,
    LEDGER_ENTRY_DEFAULTS,
)


LedgerEntryType = Literal[
    "issuance",
    "transfer_in",
    "transfer_out",
    "exercise",
    "conversion",
    "repurchase",
    "cancellation",
    "split_adjustment",
]

OUTBOUND_ENTRY_TYPES = frozenset({"transfer_out", "repurchase", "cancellation"})


class ShareLedgerEntry(DomainModel):
    """One signed movement of shares for a holder in a security class."""

    id: EntityId
    holder_id: StakeholderId
    class_id: SecurityClassId

    quantity: SignedQuantity = Field(
        description="Signed share quantity (positive = issuance/inbound, negative = outbound)"
    )

    issue_date: date = Field(description="Date the movement takes effect")

    consideration: Optional[MoneyAmount] = Field(
        default=None,
        description="Total amount paid for the shares (cost basis), if any"
    )

    transaction_id: Optional[str] = Field(
        default=None,
        description="Links the entries written by one transaction (e.g. both legs of a transfer)"
    )

    entry_type: LedgerEntryType = Field(default=LEDGER_ENTRY_DEFAULTS["entry_type"])

    @model_validator(mode='after')
    def validate_sign(self):
        """Outbound entry types must carry a negative quantity, inbound ones a positive one."""
        if self.quantity == 0:
            raise ValueError("Ledger entry quantity must be non-zero")
        if self.entry_type in OUTBOUND_ENTRY_TYPES and self.quantity > 0:
            raise ValueError(f"{self.entry_type} entries must have a negative quantity")
        if self.entry_type in ("issuance", "transfer_in", "exercise", "conversion") and self.quantity < 0:
            raise ValueError(f"{self.entry_type} entries must have a positive quantity")
        return self
