"""Secondary transfer request and result.

A secondary transfer moves issued shares between two stakeholders without
changing the company's totals. The buyer may be an existing stakeholder or a
new one created by the transfer itself (``buyer_id = NEW_STAKEHOLDER``).
"""

from typing import Optional
from datetime import date
from decimal import Decimal
from pydantic import Field

from .base import DomainModel, ResultModel, MoneyAmount, SecurityClassId, StakeholderId
from .share_classes import NewStakeholder
from .ledger import ShareLedgerEntry


NEW_STAKEHOLDER = "NEW_STAKEHOLDER"


class TransferRequest(DomainModel):
    """Inputs of a secondary transfer.

    ``quantity`` is a plain int here; the service rejects non-positive
    quantities with its own error so callers get a consistent message.
    """

    seller_id: StakeholderId
    buyer_id: StakeholderId = Field(description=f"Existing stakeholder id or '{NEW_STAKEHOLDER}'")
    class_id: SecurityClassId
    quantity: int
    price_per_share: MoneyAmount
    transaction_date: date
    new_buyer: Optional[NewStakeholder] = None

    @property
    def creates_buyer(self) -> bool:
        return self.buyer_id == NEW_STAKEHOLDER


class TransferResult(ResultModel):
    transaction_id: str
    reduction_entry: ShareLedgerEntry
    addition_entry: ShareLedgerEntry
    total_value: Decimal
    buyer_id: str
