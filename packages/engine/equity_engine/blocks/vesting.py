"""Vesting status block.

Reports, per award, how much has vested as of a date and when the next
tranche lands.
"""

from typing import List

import pandas as pd

from .base import Block, BlockContext
from ..calculations.vesting import vested_for_award, vesting_schedule
from ..schemas import OptionAward

VESTING_COLUMNS = [
    "award_id",
    "holder_id",
    "award_type",
    "quantity_granted",
    "quantity_exercised",
    "quantity_canceled",
    "vested",
    "unvested",
    "outstanding",
    "vested_pct",
    "next_vest_date",
    "strike_price",
]


class VestingBlock(Block):
    """Vested / unvested breakdown of equity awards.

    Inputs (from context):
        - equity_awards: Sequence of OptionAward / RsuAward
        - as_of_date: Evaluation date

    Outputs (to context):
        - vesting_status: DataFrame with VESTING_COLUMNS, sorted by holder then
          award id. Awards granted after the as-of date are left out.
    """

    def __init__(self, awards_key: str = "equity_awards", as_of_key: str = "as_of_date"):
        self.awards_key = awards_key
        self.as_of_key = as_of_key

    def inputs(self) -> List[str]:
        return [self.awards_key, self.as_of_key]

    def outputs(self) -> List[str]:
        return ["vesting_status"]

    def execute(self, context: BlockContext) -> None:
        awards = context.get(self.awards_key)
        as_of = context.get(self.as_of_key)

        rows = []
        for award in sorted(awards, key=lambda a: (a.holder_id, a.id)):
            if award.grant_date > as_of:
                continue

            vested = vested_for_award(award, as_of)
            vestable = award.quantity_granted - award.quantity_canceled
            upcoming = [t.vest_date for t in vesting_schedule(award) if t.vest_date > as_of]

            rows.append({
                "award_id": award.id,
                "holder_id": award.holder_id,
                "award_type": award.type,
                "quantity_granted": award.quantity_granted,
                "quantity_exercised": award.quantity_exercised,
                "quantity_canceled": award.quantity_canceled,
                "vested": vested,
                "unvested": vestable - vested,
                "outstanding": award.outstanding,
                "vested_pct": (vested / vestable * 100) if vestable > 0 else 0.0,
                "next_vest_date": upcoming[0] if upcoming else None,
                "strike_price": float(award.strike_price) if isinstance(award, OptionAward) else None,
            })

        context.set("vesting_status", pd.DataFrame(rows, columns=VESTING_COLUMNS))
