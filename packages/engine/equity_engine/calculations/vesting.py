"""Vesting evaluation for options and RSUs.

Vesting is measured in whole calendar months since the vesting start,
truncated down to the award's cadence:

    48-month grant of 48,000, 12-month cliff, monthly cadence
        month 11 -> 0          (before cliff)
        month 12 -> 12,000     (cliff: 12/48 of the grant)
        month 30 -> 30,000
        month 48 -> 48,000 - canceled

The evaluator is a pure function of its inputs: the as-of date is always a
parameter, never the wall clock. Vested quantity never decreases as the as-of
date moves forward.
"""

from datetime import date
from typing import List, NamedTuple, Optional

from dateutil.relativedelta import relativedelta

from ..schemas import CADENCE_MONTHS
from ..schemas.awards import AwardBase


class VestingTranche(NamedTuple):
    vest_date: date
    quantity: int
    cumulative: int


def months_elapsed(start: date, as_of: date, cadence: str = "monthly") -> int:
    """Whole months from ``start`` to ``as_of``, truncated to the cadence period."""
    if as_of < start:
        return 0
    delta = relativedelta(as_of, start)
    months = delta.years * 12 + delta.months
    period = CADENCE_MONTHS[cadence]
    return months - months % period


def vested_quantity(
    quantity_granted: int,
    quantity_canceled: int,
    vesting_start: date,
    as_of: date,
    cliff_months: int,
    total_months: int,
    cadence: str = "monthly",
) -> int:
    """Vested quantity as of a date, clamped to [0, granted - canceled]."""
    vestable = max(0, quantity_granted - quantity_canceled)
    if as_of < vesting_start:
        return 0

    months = months_elapsed(vesting_start, as_of, cadence)

    if months >= total_months:
        return vestable
    if months < cliff_months:
        return 0

    vested = quantity_granted * months // total_months
    return min(max(vested, 0), vestable)


def vested_for_award(award: AwardBase, as_of: date) -> int:
    return vested_quantity(
        quantity_granted=award.quantity_granted,
        quantity_canceled=award.quantity_canceled,
        vesting_start=award.vesting_start,
        as_of=as_of,
        cliff_months=award.cliff_months,
        total_months=award.total_months,
        cadence=award.cadence,
    )


def unvested_for_award(award: AwardBase, as_of: date) -> int:
    return max(0, award.quantity_granted - award.quantity_canceled - vested_for_award(award, as_of))


def vesting_schedule(award: AwardBase, through: Optional[date] = None) -> List[VestingTranche]:
    """Dated vesting events of an award.

    One tranche per cadence period on which the vested quantity increases;
    the cliff tranche carries everything accrued before it. With ``through``
    the schedule stops at that date.

    Example:
        >>> [t.quantity for t in vesting_schedule(award)][:2]   # 48k, 12m cliff
        [12000, 1000]
    """
    start = award.vesting_start
    period = CADENCE_MONTHS[award.cadence]

    if award.total_months == 0:
        offsets = [0]
    else:
        offsets = list(range(period, award.total_months + period, period))

    tranches: List[VestingTranche] = []
    previous = 0
    for offset in offsets:
        vest_date = start + relativedelta(months=offset)
        if through is not None and vest_date > through:
            break
        cumulative = vested_for_award(award, vest_date)
        if cumulative > previous:
            tranches.append(VestingTranche(vest_date, cumulative - previous, cumulative))
            previous = cumulative
    return tranches
