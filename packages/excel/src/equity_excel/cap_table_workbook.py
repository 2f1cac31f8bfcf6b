"""Cap table workbook renderer.

Writes the DataFrames produced by the engine's reporting blocks to a styled
workbook:

    Cap Table     one line per ownership row, SUM totals row
    By Class      ownership aggregated per security class
    Summary       totals and the policy flags of the computation
    Vesting       (if ``vesting_status`` is in the context)
    Conversions   (if ``conversion_preview`` is in the context)

Percentages arrive on a 0-100 scale and are written as fractions with a
percent number format, so Excel shows 60.0000 as 60.00%.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from equity_engine.blocks import BlockContext

SHARES_FORMAT = '#,##0'
FRACTIONAL_SHARES_FORMAT = '#,##0.######'
MONEY_FORMAT = '$#,##0.00'
PRICE_FORMAT = '$0.0000'
PERCENT_FORMAT = '0.00%'

# (DataFrame column, header, number format, width)
ColumnSpec = Tuple[str, str, Optional[str], int]

CAP_TABLE_COLUMNS: List[ColumnSpec] = [
    ("stakeholder_name", "Stakeholder", None, 28),
    ("security_class_name", "Class", None, 22),
    ("outstanding_shares", "Outstanding", SHARES_FORMAT, 15),
    ("options", "Options", SHARES_FORMAT, 13),
    ("rsus", "RSUs", SHARES_FORMAT, 13),
    ("convertibles", "As-Converted", FRACTIONAL_SHARES_FORMAT, 15),
    ("fully_diluted_shares", "Fully Diluted", FRACTIONAL_SHARES_FORMAT, 16),
    ("pct_outstanding", "% Outstanding", PERCENT_FORMAT, 13),
    ("pct_fully_diluted", "% FD", PERCENT_FORMAT, 11),
    ("value", "Value", MONEY_FORMAT, 16),
    ("cost_basis", "Cost Basis", MONEY_FORMAT, 16),
    ("badges", "Holdings", None, 28),
]

BY_CLASS_COLUMNS: List[ColumnSpec] = [
    ("security_class_name", "Class", None, 24),
    ("outstanding_shares", "Outstanding", SHARES_FORMAT, 15),
    ("fully_diluted_shares", "Fully Diluted", FRACTIONAL_SHARES_FORMAT, 16),
    ("pct_outstanding", "% Outstanding", PERCENT_FORMAT, 13),
    ("pct_fully_diluted", "% FD", PERCENT_FORMAT, 11),
    ("holders_count", "Holders", '0', 10),
]

VESTING_COLUMNS: List[ColumnSpec] = [
    ("award_id", "Award", None, 16),
    ("holder_id", "Holder", None, 20),
    ("award_type", "Type", None, 8),
    ("quantity_granted", "Granted", SHARES_FORMAT, 12),
    ("vested", "Vested", SHARES_FORMAT, 12),
    ("unvested", "Unvested", SHARES_FORMAT, 12),
    ("quantity_exercised", "Exercised", SHARES_FORMAT, 12),
    ("quantity_canceled", "Canceled", SHARES_FORMAT, 12),
    ("outstanding", "Outstanding", SHARES_FORMAT, 12),
    ("next_vest_date", "Next Vest", 'yyyy-mm-dd', 12),
    ("strike_price", "Strike", PRICE_FORMAT, 10),
]

CONVERSION_COLUMNS: List[ColumnSpec] = [
    ("instrument_id", "Instrument", None, 16),
    ("holder_id", "Holder", None, 20),
    ("instrument_type", "Type", None, 8),
    ("principal", "Principal", MONEY_FORMAT, 15),
    ("interest", "Interest", MONEY_FORMAT, 13),
    ("total_amount", "Total", MONEY_FORMAT, 15),
    ("conversion_price", "Conv. Price", PRICE_FORMAT, 12),
    ("shares_issued", "Shares", FRACTIONAL_SHARES_FORMAT, 15),
    ("used_discount", "Discount", None, 10),
    ("used_cap", "Cap", None, 8),
    ("error_code", "Not Converted", None, 22),
]

PERCENT_COLUMNS = {"pct_outstanding", "pct_fully_diluted"}
SUMMED_COLUMNS = {
    "outstanding_shares",
    "options",
    "rsus",
    "convertibles",
    "fully_diluted_shares",
    "pct_outstanding",
    "pct_fully_diluted",
    "value",
    "cost_basis",
}


class CapTableWorkbookRenderer:
    """Render the reporting block outputs of one cap table to a workbook.

    Example:
        context = BlockExecutor([CapTableBlock()]).execute(context)
        CapTableWorkbookRenderer(context, company_name="Acme").render("acme.xlsx")
    """

    TITLE_ROW = 1
    HEADER_ROW = 3
    FIRST_DATA_ROW = 4

    def __init__(self, context: BlockContext, company_name: str = "Company"):
        self.context = context
        self.company_name = company_name

        self.title_font = Font(bold=True, size=14)
        self.bold_font = Font(bold=True)
        self.italic_font = Font(italic=True, color="808080")

        # Header styling
        self.header_font = Font(bold=True, color="FFFFFF")  # White text on dark blue
        self.header_fill = PatternFill(start_color="1F4E78", end_color="1F4E78", fill_type="solid")

        # Pool and totals rows
        self.pool_fill = PatternFill(start_color="E7E6E6", end_color="E7E6E6", fill_type="solid")
        self.total_fill = PatternFill(start_color="F2F2F2", end_color="F2F2F2", fill_type="solid")

        self.thin_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )
        self.top_border = Border(top=Side(style='medium'))

        self.center_align = Alignment(horizontal='center', vertical='center', wrap_text=True)

    def render(self, output_path: str) -> str:
        wb = self.build_workbook()
        wb.save(output_path)
        return output_path

    def build_workbook(self) -> Workbook:
        wb = Workbook()
        wb.remove(wb.active)

        summary = self.context.get("cap_table_summary")
        subtitle = self._subtitle(summary)

        self._render_table_sheet(
            wb, "Cap Table", self.context.get("cap_table_ownership"), CAP_TABLE_COLUMNS, subtitle, totals=True
        )
        self._render_table_sheet(
            wb, "By Class", self.context.get("cap_table_by_class"), BY_CLASS_COLUMNS, subtitle, totals=True
        )
        self._render_summary_sheet(wb, summary)

        if self.context.has("vesting_status"):
            self._render_table_sheet(wb, "Vesting", self.context.get("vesting_status"), VESTING_COLUMNS, subtitle)
        if self.context.has("conversion_preview"):
            self._render_table_sheet(
                wb, "Conversions", self.context.get("conversion_preview"), CONVERSION_COLUMNS, subtitle
            )

        return wb

    # ------------------------------------------------------------------ #
    # Sheets
    # ------------------------------------------------------------------ #

    def _subtitle(self, summary: pd.DataFrame) -> str:
        if summary.empty:
            return ""
        line = summary.iloc[0]
        return f"As of {line['as_of']} | {line['view']} | RSUs: {line['rsu_policy']}"

    def _render_table_sheet(
        self,
        wb: Workbook,
        title: str,
        df: pd.DataFrame,
        columns: List[ColumnSpec],
        subtitle: str,
        totals: bool = False,
    ) -> Worksheet:
        sheet = wb.create_sheet(title)

        title_cell = sheet.cell(row=self.TITLE_ROW, column=1, value=f"{self.company_name} - {title}")
        title_cell.font = self.title_font
        sheet.cell(row=self.TITLE_ROW + 1, column=1, value=subtitle).font = self.italic_font

        for col_idx, (_, header, _, width) in enumerate(columns, start=1):
            cell = sheet.cell(row=self.HEADER_ROW, column=col_idx, value=header)
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.alignment = self.center_align
            cell.border = self.thin_border
            sheet.column_dimensions[get_column_letter(col_idx)].width = width

        row_idx = self.FIRST_DATA_ROW
        for record in df.to_dict("records"):
            is_pool = record.get("row_type") == "option_pool"
            for col_idx, (key, _, number_format, _) in enumerate(columns, start=1):
                value = self._cell_value(key, record.get(key))
                cell = sheet.cell(row=row_idx, column=col_idx, value=value)
                cell.border = self.thin_border
                if number_format:
                    cell.number_format = number_format
                if is_pool:
                    cell.fill = self.pool_fill
            row_idx += 1

        if totals:
            self._render_totals_row(sheet, columns, row_idx)

        sheet.freeze_panes = f"B{self.FIRST_DATA_ROW}"
        return sheet

    def _render_totals_row(self, sheet: Worksheet, columns: List[ColumnSpec], row_idx: int) -> None:
        last_data_row = row_idx - 1
        label = sheet.cell(row=row_idx, column=1, value="Total")
        label.font = self.bold_font
        label.fill = self.total_fill
        label.border = self.top_border

        for col_idx, (key, _, number_format, _) in enumerate(columns, start=1):
            if key not in SUMMED_COLUMNS:
                continue
            letter = get_column_letter(col_idx)
            formula = (
                f"=SUM({letter}{self.FIRST_DATA_ROW}:{letter}{last_data_row})"
                if last_data_row >= self.FIRST_DATA_ROW
                else 0
            )
            cell = sheet.cell(row=row_idx, column=col_idx, value=formula)
            cell.font = self.bold_font
            cell.fill = self.total_fill
            cell.border = self.top_border
            if number_format:
                cell.number_format = number_format

    def _render_summary_sheet(self, wb: Workbook, summary: pd.DataFrame) -> Worksheet:
        sheet = wb.create_sheet("Summary")
        sheet.cell(row=self.TITLE_ROW, column=1, value=f"{self.company_name} - Summary").font = self.title_font

        labels: Dict[str, Tuple[str, Optional[str]]] = {
            "as_of": ("As of", 'yyyy-mm-dd'),
            "view": ("View", None),
            "rsu_policy": ("RSU policy", None),
            "outstanding_shares": ("Outstanding shares", SHARES_FORMAT),
            "options": ("Options outstanding", SHARES_FORMAT),
            "rsus": ("RSUs counted", SHARES_FORMAT),
            "convertibles": ("As-converted shares", FRACTIONAL_SHARES_FORMAT),
            "pool_available": ("Unallocated pool", SHARES_FORMAT),
            "fully_diluted_shares": ("Fully diluted shares", FRACTIONAL_SHARES_FORMAT),
            "price_per_share": ("Price per share", PRICE_FORMAT),
            "current_valuation": ("Current valuation", MONEY_FORMAT),
            "price_source": ("Price source", None),
            "price_conflict": ("Price sources conflict", None),
            "unconverted_instruments": ("Instruments not converted", '0'),
            "total_holders": ("Holders", '0'),
        }

        record = summary.iloc[0].to_dict() if not summary.empty else {}
        row_idx = self.HEADER_ROW
        for key, (label, number_format) in labels.items():
            sheet.cell(row=row_idx, column=1, value=label).font = self.bold_font
            cell = sheet.cell(row=row_idx, column=2, value=self._cell_value(key, record.get(key)))
            if number_format:
                cell.number_format = number_format
            row_idx += 1

        sheet.column_dimensions['A'].width = 28
        sheet.column_dimensions['B'].width = 20
        return sheet

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _cell_value(key: str, value):
        if value is None:
            return None
        if isinstance(value, float) and pd.isna(value):
            return None
        if key in PERCENT_COLUMNS:
            return float(value) / 100
        if hasattr(value, "item"):  # numpy scalars
            return value.item()
        return value
