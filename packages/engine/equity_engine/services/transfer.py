"""Secondary share transfers.

A transfer moves ``quantity`` shares of one class from a seller to a buyer as
two ledger entries sharing one transaction id:

    seller  transfer_out  -quantity
    buyer   transfer_in   +quantity   (consideration = quantity * price)

The seller's balance check and the write happen under a lock keyed by
(company, seller, class), so two concurrent transfers can never both spend
the same shares. A backdated transfer must also leave every later balance of
the seller non-negative. A new buyer is stored in the same writer call as the
entries, so nothing is written unless every check passes.
"""

import threading
import uuid
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from ..calculations.balances import available_balance
from ..calculations.rounding import round_money
from ..errors import (
    BuyerNotFoundError,
    EquityEngineError,
    InsufficientSharesError,
    MissingBuyerNameError,
    NotFoundError,
    SecurityClassNotFoundError,
    SelfTransferNotAllowedError,
    ValidationError,
)
from ..logging_config import get_logger
from ..schemas import ShareLedgerEntry, Stakeholder, TransferRequest, TransferResult
from .repository import CapTableRepository, LedgerWriter

logger = get_logger(__name__)

LockKey = Tuple[str, str, str]


def _new_id() -> str:
    return str(uuid.uuid4())


class _LockSlot:
    __slots__ = ("lock", "holders")

    def __init__(self):
        self.lock = threading.Lock()
        self.holders = 0


class LockRegistry:
    """One lock per (company, holder, class), kept only while someone holds or awaits it."""

    def __init__(self):
        self._guard = threading.Lock()
        self._slots: Dict[LockKey, _LockSlot] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._slots)

    @contextmanager
    def hold(self, company_id: str, holder_id: str, class_id: str) -> Iterator[None]:
        key = (company_id, holder_id, class_id)
        with self._guard:
            slot = self._slots.get(key)
            if slot is None:
                slot = self._slots[key] = _LockSlot()
            slot.holders += 1
        try:
            with slot.lock:
                yield
        finally:
            with self._guard:
                slot.holders -= 1
                if slot.holders == 0:
                    del self._slots[key]


# Shared by every service that is not given its own registry
DEFAULT_LOCKS = LockRegistry()


def parse_transfer_request(request: Union[TransferRequest, Mapping[str, Any]]) -> TransferRequest:
    """Validate raw input into a TransferRequest.

    Raises:
        ValidationError: missing or malformed fields, or a non-positive quantity
    """
    if not isinstance(request, TransferRequest):
        try:
            request = TransferRequest.model_validate(request)
        except PydanticValidationError as exc:
            missing = [".".join(str(part) for part in err["loc"]) for err in exc.errors() if err["type"] == "missing"]
            if missing:
                raise ValidationError(
                    f"Missing required fields: {', '.join(missing)}",
                    {"fields": missing},
                ) from exc
            raise ValidationError(
                "Invalid transfer request",
                {"errors": [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]},
            ) from exc

    if request.quantity <= 0:
        raise ValidationError(
            "Transfer requires a positive quantity",
            {"quantity": request.quantity},
        )
    return request


class TransferService:
    """Executes balance-checked secondary transfers.

    Usage:
        service = TransferService(repo, repo)
        result = service.transfer_shares("acme", {
            "seller_id": "alice", "buyer_id": "bob", "class_id": "common",
            "quantity": 10_000, "price_per_share": "1.50",
            "transaction_date": "2024-06-01",
        })
    """

    def __init__(
        self,
        repository: CapTableRepository,
        writer: LedgerWriter,
        locks: Optional[LockRegistry] = None,
        id_factory: Callable[[], str] = _new_id,
    ):
        self.repository = repository
        self.writer = writer
        self.locks = locks if locks is not None else DEFAULT_LOCKS
        self.id_factory = id_factory

    def transfer_shares(
        self,
        company_id: str,
        request: Union[TransferRequest, Mapping[str, Any]],
    ) -> TransferResult:
        """Move shares from seller to buyer, or raise without writing anything.

        Raises:
            ValidationError: missing fields, non-positive quantity, self transfer,
                new buyer without a name
            NotFoundError: unknown security class, buyer or seller
            InsufficientSharesError: seller balance below the requested quantity
        """
        try:
            return self._transfer(company_id, request)
        except EquityEngineError as exc:
            logger.warning(
                "transfer_rejected",
                company_id=company_id,
                error_code=exc.code,
                reason=exc.message,
                **exc.details,
            )
            raise

    def _transfer(self, company_id: str, request: Union[TransferRequest, Mapping[str, Any]]) -> TransferResult:
        request = parse_transfer_request(request)

        if request.seller_id == request.buyer_id:
            raise SelfTransferNotAllowedError(request.seller_id)

        if self.repository.get_security_class(company_id, request.class_id) is None:
            raise SecurityClassNotFoundError(request.class_id)

        if request.creates_buyer:
            if request.new_buyer is None or not (request.new_buyer.name or "").strip():
                raise MissingBuyerNameError()
        elif self.repository.get_stakeholder(company_id, request.buyer_id) is None:
            raise BuyerNotFoundError(request.buyer_id)

        if self.repository.get_stakeholder(company_id, request.seller_id) is None:
            raise NotFoundError("Seller stakeholder not found", "stakeholder", request.seller_id)

        with self.locks.hold(company_id, request.seller_id, request.class_id):
            available = available_balance(
                self.repository.get_ledger_entries(company_id),
                request.seller_id,
                request.class_id,
                request.transaction_date,
            )
            if available < request.quantity:
                raise InsufficientSharesError(requested=request.quantity, available=available)

            buyer_id = request.buyer_id
            new_stakeholders = ()
            if request.creates_buyer:
                buyer_id = self.id_factory()
                new_stakeholders = (
                    Stakeholder(
                        id=buyer_id,
                        name=request.new_buyer.name.strip(),
                        email=request.new_buyer.email,
                        stakeholder_type=request.new_buyer.stakeholder_type,
                    ),
                )

            transaction_id = self.id_factory()
            total_value = round_money(request.quantity * request.price_per_share)

            reduction = ShareLedgerEntry(
                id=self.id_factory(),
                holder_id=request.seller_id,
                class_id=request.class_id,
                quantity=-request.quantity,
                issue_date=request.transaction_date,
                transaction_id=transaction_id,
                entry_type="transfer_out",
            )
            addition = ShareLedgerEntry(
                id=self.id_factory(),
                holder_id=buyer_id,
                class_id=request.class_id,
                quantity=request.quantity,
                issue_date=request.transaction_date,
                consideration=total_value,
                transaction_id=transaction_id,
                entry_type="transfer_in",
            )
            self.writer.append_ledger_entries(company_id, (reduction, addition), new_stakeholders)

        logger.info(
            "transfer_completed",
            company_id=company_id,
            transaction_id=transaction_id,
            seller_id=request.seller_id,
            buyer_id=buyer_id,
            class_id=request.class_id,
            quantity=request.quantity,
            total_value=str(total_value),
        )

        return TransferResult(
            transaction_id=transaction_id,
            reduction_entry=reduction,
            addition_entry=addition,
            total_value=total_value,
            buyer_id=buyer_id,
        )
