"""Tests for CapTableWorkbookRenderer.

Renders the reporting blocks of a small company and reads the file back:
1. Sheet layout - expected sheets, title, headers
2. Values - share counts and percentages written as fractions
3. Formula structure - SUM totals rows span exactly the data rows
"""

from datetime import date
from decimal import Decimal

import pytest
from openpyxl import load_workbook

from equity_engine.blocks import BlockContext, BlockExecutor, CapTableBlock, ConversionBlock, VestingBlock
from equity_engine.schemas import (
    CompanyDataset,
    ConversionTerms,
    OptionAward,
    OptionPlan,
    SafeInstrument,
    SecurityClass,
    ShareLedgerEntry,
    Stakeholder,
)
from equity_engine.services import build_cap_table
from equity_excel import CapTableWorkbookRenderer

AS_OF = date(2024, 6, 30)


# =============================================================================
# Test Data Builders
# =============================================================================

def build_dataset() -> CompanyDataset:
    """Two founders, one option grant and a 1M-share plan.

    Fully diluted: alice 3M (50%), bob 2M, carol 100K options, pool 900K.
    """
    return CompanyDataset(
        company_id="testco",
        stakeholders=[
            Stakeholder(id="alice", name="Alice Founder"),
            Stakeholder(id="bob", name="Bob Founder"),
            Stakeholder(id="carol", name="Carol Engineer"),
            Stakeholder(id="dave", name="Dave Angel"),
        ],
        security_classes=[SecurityClass(id="common", name="Common Stock")],
        ledger_entries=[
            ShareLedgerEntry(id="e1", holder_id="alice", class_id="common",
                             quantity=3_000_000, issue_date=date(2023, 1, 1)),
            ShareLedgerEntry(id="e2", holder_id="bob", class_id="common",
                             quantity=2_000_000, issue_date=date(2023, 1, 1)),
        ],
        awards=[
            OptionAward(id="opt1", holder_id="carol", quantity_granted=100_000,
                        grant_date=date(2023, 1, 1), strike_price=Decimal("0.10")),
        ],
        option_plans=[
            OptionPlan(id="plan", name="2023 Plan", total_shares=1_000_000, adoption_date=date(2023, 1, 1)),
        ],
    )


def build_context(with_previews: bool = True) -> BlockContext:
    dataset = build_dataset()
    context = BlockContext()
    context.set("cap_table_result", build_cap_table(dataset, as_of=AS_OF))
    blocks = [CapTableBlock()]

    if with_previews:
        context.set("equity_awards", dataset.awards)
        context.set("as_of_date", AS_OF)
        context.set("convertibles", [
            SafeInstrument(id="safe1", holder_id="dave", principal=Decimal("100000"),
                           issue_date=date(2024, 1, 1), valuation_cap=Decimal("3000000")),
        ])
        context.set("conversion_terms", ConversionTerms(
            price_per_share=Decimal("1.00"), pre_round_fully_diluted_shares=Decimal("6000000"),
        ))
        blocks += [VestingBlock(), ConversionBlock()]

    return BlockExecutor(blocks).execute(context)


@pytest.fixture
def workbook(tmp_path):
    path = tmp_path / "testco.xlsx"
    CapTableWorkbookRenderer(build_context(), company_name="TestCo").render(str(path))
    return load_workbook(path)


# =============================================================================
# Layout
# =============================================================================

def test_sheets(workbook):
    assert workbook.sheetnames == ["Cap Table", "By Class", "Summary", "Vesting", "Conversions"]


def test_optional_sheets_omitted_without_previews(tmp_path):
    path = tmp_path / "bare.xlsx"
    CapTableWorkbookRenderer(build_context(with_previews=False)).render(str(path))
    assert load_workbook(path).sheetnames == ["Cap Table", "By Class", "Summary"]


def test_cap_table_title_and_headers(workbook):
    sheet = workbook["Cap Table"]
    assert sheet["A1"].value == "TestCo - Cap Table"
    assert "FULLY_DILUTED" in sheet["A2"].value
    assert [c.value for c in sheet[3]][:4] == ["Stakeholder", "Class", "Outstanding", "Options"]
    assert sheet.freeze_panes == "B4"


# =============================================================================
# Values
# =============================================================================

def test_cap_table_rows(workbook):
    sheet = workbook["Cap Table"]
    names = [sheet.cell(row=r, column=1).value for r in range(4, 8)]
    assert names == ["Alice Founder", "Bob Founder", "Carol Engineer", "Unallocated Option Pool"]

    assert sheet["C4"].value == 3_000_000
    assert sheet["I4"].value == pytest.approx(0.5)  # 50% FD written as a fraction
    assert sheet["I4"].number_format == "0.00%"
    assert sheet["D6"].value == 100_000
    assert sheet["B6"].value is None  # derivative-only row has no class


def test_pool_row_is_shaded(workbook):
    sheet = workbook["Cap Table"]
    assert sheet["A7"].fill.start_color.rgb.endswith("E7E6E6")
    assert sheet["G7"].value == 900_000


def test_summary_sheet(workbook):
    sheet = workbook["Summary"]
    values = {sheet.cell(row=r, column=1).value: sheet.cell(row=r, column=2).value for r in range(3, 18)}
    assert values["Fully diluted shares"] == 6_000_000
    assert values["Unallocated pool"] == 900_000
    assert values["Holders"] == 3
    assert values["View"] == "FULLY_DILUTED"


def test_conversion_sheet(workbook):
    sheet = workbook["Conversions"]
    assert sheet["A4"].value == "safe1"
    assert sheet["G4"].value == pytest.approx(0.5)  # cap 3M / 6M FD
    assert sheet["H4"].value == pytest.approx(200_000)


# =============================================================================
# Formula structure
# =============================================================================

def test_totals_row_formulas(workbook):
    sheet = workbook["Cap Table"]
    assert sheet["A8"].value == "Total"
    assert sheet["C8"].value == "=SUM(C4:C7)"
    assert sheet["G8"].value == "=SUM(G4:G7)"
    assert sheet["I8"].value == "=SUM(I4:I7)"
    assert sheet["B8"].value is None


def test_by_class_totals(workbook):
    sheet = workbook["By Class"]
    assert sheet["A4"].value == "Common Stock"
    assert sheet["B4"].value == 5_000_000
    assert sheet["A5"].value == "Total"
    assert sheet["B5"].value == "=SUM(B4:B4)"
