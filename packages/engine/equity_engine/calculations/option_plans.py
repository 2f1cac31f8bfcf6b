"""Option plan accounting.

Every award is carved out of the plan reserve. A share leaves the pool when it
is granted and only returns when the grant is canceled; exercising moves it
from "allocated" to "issued" without touching the pool:

    reserved 1,000,000
    grant    100,000, exercise 20,000, cancel 10,000
    -> allocated 70,000, issued 20,000, available 910,000
"""

from datetime import date
from typing import Iterable, Optional

from ..errors import InsufficientPoolError, ValidationError
from ..schemas import EquityAward, OptionAward, OptionPlan, PlanAccounting


def plan_accounting(
    plans: Iterable[OptionPlan],
    awards: Iterable[EquityAward],
    as_of: Optional[date] = None,
) -> PlanAccounting:
    """Reserved, allocated, issued and available plan shares as of a date.

    Plans adopted and awards granted after ``as_of`` are left out. The
    available figure is not floored, so an over-granted plan shows up as a
    negative number.
    """
    total = sum(p.total_shares for p in plans if as_of is None or p.adoption_date <= as_of)

    options = rsus = issued = 0
    for award in awards:
        if as_of is not None and award.grant_date > as_of:
            continue
        if isinstance(award, OptionAward):
            options += award.outstanding
        else:
            rsus += award.outstanding
        issued += award.quantity_exercised

    allocated = options + rsus
    return PlanAccounting(
        total_shares=total,
        allocated_shares=allocated,
        issued_shares=issued,
        available_shares=total - allocated - issued,
        outstanding_options=options,
        outstanding_rsus=rsus,
    )


def allocate_grant(accounting: PlanAccounting, quantity: int) -> PlanAccounting:
    """Accounting after granting ``quantity`` more shares from the pool.

    Raises:
        ValidationError: quantity is not positive
        InsufficientPoolError: quantity exceeds the available pool
    """
    if quantity <= 0:
        raise ValidationError("Grant requires a positive quantity", {"quantity": quantity})
    if quantity > accounting.available_shares:
        raise InsufficientPoolError(requested=quantity, available=max(0, accounting.available_shares))

    return accounting.model_copy(update={
        "allocated_shares": accounting.allocated_shares + quantity,
        "available_shares": accounting.available_shares - quantity,
    })


def validate_grant(
    plans: Iterable[OptionPlan],
    awards: Iterable[EquityAward],
    award: EquityAward,
) -> PlanAccounting:
    """Check a new award against the pool as of its grant date.

    Awards already granted after that date must still fit, so the pool is
    checked at the grant date and at every later grant date. Returns the
    accounting including the award as of its grant date.

    Raises:
        InsufficientPoolError: the award needs more shares than are available
    """
    plans = list(plans)
    awards = list(awards)
    checkpoints = sorted({award.grant_date} | {a.grant_date for a in awards if a.grant_date > award.grant_date})
    available = min(plan_accounting(plans, awards, as_of=day).available_shares for day in checkpoints)

    needed = award.quantity_granted - award.quantity_canceled
    if needed > available:
        raise InsufficientPoolError(requested=needed, available=max(0, available))
    return plan_accounting(plans, [*awards, award], as_of=award.grant_date)
