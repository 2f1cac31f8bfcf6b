"""Share balances derived from the ledger."""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, Optional, Tuple

from ..schemas import ShareLedgerEntry

BalanceKey = Tuple[str, str]


def ledger_balances(
    entries: Iterable[ShareLedgerEntry],
    as_of: Optional[date] = None,
) -> Dict[BalanceKey, int]:
    """Signed sum of quantities per (holder_id, class_id).

    Entries dated after ``as_of`` are ignored. Pairs whose entries net to zero
    are kept with a zero balance.
    """
    balances: Dict[BalanceKey, int] = defaultdict(int)
    for entry in entries:
        if as_of is not None and entry.issue_date > as_of:
            continue
        balances[(entry.holder_id, entry.class_id)] += entry.quantity
    return dict(balances)


def balance_of(
    entries: Iterable[ShareLedgerEntry],
    holder_id: str,
    class_id: str,
    as_of: Optional[date] = None,
) -> int:
    return ledger_balances(
        (e for e in entries if e.holder_id == holder_id and e.class_id == class_id),
        as_of,
    ).get((holder_id, class_id), 0)


def cost_basis(
    entries: Iterable[ShareLedgerEntry],
    as_of: Optional[date] = None,
) -> Dict[BalanceKey, Decimal]:
    """Total consideration paid per (holder_id, class_id), inbound entries only."""
    basis: Dict[BalanceKey, Decimal] = defaultdict(Decimal)
    for entry in entries:
        if as_of is not None and entry.issue_date > as_of:
            continue
        if entry.consideration is not None and entry.quantity > 0:
            basis[(entry.holder_id, entry.class_id)] += entry.consideration
    return dict(basis)


def available_balance(
    entries: Iterable[ShareLedgerEntry],
    holder_id: str,
    class_id: str,
    as_of: date,
) -> int:
    """Shares the holder can move out on ``as_of`` without any balance going negative.

    A backdated outbound entry also lowers every balance after it, so this is
    the lowest balance at ``as_of`` and at each later entry date of the pair:

        +3,000,000 on 2023-01-01, -3,000,000 on 2024-06-01
        available on 2024-03-01 -> min(3,000,000, 0) = 0
    """
    own = [e for e in entries if e.holder_id == holder_id and e.class_id == class_id]
    checkpoints = sorted({as_of} | {e.issue_date for e in own if e.issue_date > as_of})
    return min(balance_of(own, holder_id, class_id, day) for day in checkpoints)
