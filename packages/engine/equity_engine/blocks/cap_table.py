"""Cap table reporting block.

Converts a CapTableResult into DataFrames for Excel rendering or analysis.

Output DataFrames:
- cap_table_ownership: One line per cap table row, in the result's order
- cap_table_by_class: Ownership aggregated by security class
- cap_table_summary: Totals and the policy flags the table was computed with
"""

from typing import List

import pandas as pd

from .base import Block, BlockContext
from ..schemas import CapTableResult

OWNERSHIP_COLUMNS = [
    "stakeholder_id",
    "stakeholder_name",
    "security_class_id",
    "security_class_name",
    "row_type",
    "outstanding_shares",
    "options",
    "rsus",
    "convertibles",
    "fully_diluted_shares",
    "pct_outstanding",
    "pct_fully_diluted",
    "value",
    "cost_basis",
    "badges",
]

BY_CLASS_COLUMNS = [
    "security_class_id",
    "security_class_name",
    "outstanding_shares",
    "fully_diluted_shares",
    "pct_outstanding",
    "pct_fully_diluted",
    "holders_count",
]


class CapTableBlock(Block):
    """Converts a CapTableResult to ownership DataFrames.

    Inputs (from context):
        - cap_table_result: CapTableResult to convert

    Outputs (to context):
        - cap_table_ownership: DataFrame with OWNERSHIP_COLUMNS. Share counts
          and money are floats, percentages on a 0-100 scale, badges joined
          with ", ".
        - cap_table_by_class: DataFrame with BY_CLASS_COLUMNS, holder rows
          with a security class only (pool and derivative-only rows excluded)
        - cap_table_summary: Single-row DataFrame of totals and meta

    Example:
        context = BlockContext()
        context.set("cap_table_result", compute_cap_table(repo, "acme"))
        CapTableBlock().execute(context)
        ownership_df = context.get("cap_table_ownership")
    """

    def __init__(self, result_key: str = "cap_table_result"):
        self.result_key = result_key

    def inputs(self) -> List[str]:
        return [self.result_key]

    def outputs(self) -> List[str]:
        return [
            "cap_table_ownership",
            "cap_table_by_class",
            "cap_table_summary",
        ]

    def execute(self, context: BlockContext) -> None:
        result: CapTableResult = context.get(self.result_key)

        ownership_df = self._compute_ownership(result)
        context.set("cap_table_ownership", ownership_df)
        context.set("cap_table_by_class", self._compute_by_class(ownership_df))
        context.set("cap_table_summary", self._compute_summary(result))

    def _compute_ownership(self, result: CapTableResult) -> pd.DataFrame:
        rows = [
            {
                "stakeholder_id": row.stakeholder_id,
                "stakeholder_name": row.stakeholder_name,
                "security_class_id": row.security_class_id,
                "security_class_name": row.security_class_name,
                "row_type": row.row_type,
                "outstanding_shares": float(row.outstanding_shares),
                "options": float(row.options),
                "rsus": float(row.rsus),
                "convertibles": float(row.convertibles),
                "fully_diluted_shares": float(row.fully_diluted_shares),
                "pct_outstanding": float(row.pct_outstanding),
                "pct_fully_diluted": float(row.pct_fully_diluted),
                "value": float(row.value) if row.value is not None else None,
                "cost_basis": float(row.cost_basis),
                "badges": ", ".join(row.badges),
            }
            for row in result.rows
        ]
        return pd.DataFrame(rows, columns=OWNERSHIP_COLUMNS)

    def _compute_by_class(self, ownership_df: pd.DataFrame) -> pd.DataFrame:
        holders = ownership_df[
            (ownership_df["row_type"] == "holder") & ownership_df["security_class_id"].notna()
        ]
        if holders.empty:
            return pd.DataFrame(columns=BY_CLASS_COLUMNS)

        by_class = holders.groupby(["security_class_id", "security_class_name"]).agg({
            "outstanding_shares": "sum",
            "fully_diluted_shares": "sum",
            "pct_outstanding": "sum",
            "pct_fully_diluted": "sum",
            "stakeholder_id": "nunique",
        }).reset_index()

        by_class = by_class.rename(columns={"stakeholder_id": "holders_count"})
        by_class = by_class.sort_values(
            ["outstanding_shares", "security_class_id"], ascending=[False, True]
        ).reset_index(drop=True)

        return by_class[BY_CLASS_COLUMNS]

    def _compute_summary(self, result: CapTableResult) -> pd.DataFrame:
        totals = result.totals
        meta = result.meta

        def as_float(value):
            return float(value) if value is not None else None

        return pd.DataFrame([{
            "as_of": meta.as_of,
            "view": meta.view,
            "rsu_policy": meta.rsu_policy,
            "outstanding_shares": float(totals.outstanding_shares),
            "options": float(totals.options),
            "rsus": float(totals.rsus),
            "convertibles": float(totals.convertibles),
            "pool_available": float(totals.pool_available),
            "fully_diluted_shares": float(totals.fully_diluted_shares),
            "price_per_share": as_float(totals.price_per_share),
            "current_valuation": as_float(totals.current_valuation),
            "price_source": meta.price_source,
            "price_conflict": meta.price_conflict,
            "unconverted_instruments": len(meta.unconverted_instrument_ids),
            "total_holders": len({r.stakeholder_id for r in result.rows if r.row_type == "holder"}),
        }])
