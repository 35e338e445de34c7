"""
Tests for the Excel report
"""
from __future__ import annotations

from datetime import date

import pytest
from openpyxl import load_workbook

from excel_export import export_excel
from models import Expense, Group, Member


def _group(expenses):
    members = [Member("a", "Ana"), Member("b", "Ben"), Member("c", "Cal"), Member("d", "Dee")]
    return Group(name="Trip", members=members, expenses=expenses)


def test_report_sheets_and_values(tmp_path):
    path = str(tmp_path / "report.xlsx")
    group = _group([
        Expense("e1", 100, "a", description="Hotel", date="2024-06-01"),
        Expense("e2", 40, "b", description="Food", date="2024-06-02"),
    ])

    export_excel(group, path)
    wb = load_workbook(path)

    assert wb.sheetnames == ["Expenses", "Summary", "Settlements"]

    ws = wb["Expenses"]
    assert [c.value for c in ws[1]] == ["date", "description", "paid by", "split", "amount", "Ana", "Ben", "Cal", "Dee"]
    # newest first
    assert ws.cell(2, 2).value == "Food"
    assert ws.cell(3, 6).value == pytest.approx(25)
    assert ws.cell(4, 1).value == "TOTALS"
    assert ws.cell(4, 5).value == "=SUM(E2:E3)"

    ws = wb["Summary"]
    rows = {r[0]: r[1:] for r in ws.iter_rows(min_row=2, values_only=True)}
    assert rows["Ana"][:3] == (pytest.approx(100), pytest.approx(35), pytest.approx(65))
    assert rows["Cal"][3] == "Owe $35.00"
    assert rows["Group total"][0] == pytest.approx(140)

    ws = wb["Settlements"]
    settlements = list(ws.iter_rows(min_row=2, values_only=True))
    assert len(settlements) == 3
    assert {s[0] for s in settlements} == {"Cal", "Dee"}


def test_report_respects_date_window(tmp_path):
    path = str(tmp_path / "june.xlsx")
    group = _group([
        Expense("e1", 80, "a", description="May rent", date="2024-05-31"),
        Expense("e2", 40, "b", description="June food", date="2024-06-02"),
    ])

    export_excel(group, path, start=date(2024, 6, 1))
    ws = load_workbook(path)["Expenses"]

    descriptions = [r[1] for r in ws.iter_rows(min_row=2, values_only=True)]
    assert descriptions == ["June food", None]


def test_unsettled_sheet_when_payer_unknown(tmp_path):
    path = str(tmp_path / "odd.xlsx")
    export_excel(_group([Expense("e1", 20, "ghost", description="Mystery")]), path)
    wb = load_workbook(path)

    assert "Unsettled" in wb.sheetnames
    rows = list(wb["Unsettled"].iter_rows(min_row=2, values_only=True))
    assert [r[0] for r in rows] == ["Ana", "Ben", "Cal", "Dee"]
    assert all(r[1] == pytest.approx(-5) for r in rows)


def test_empty_group_report(tmp_path):
    path = str(tmp_path / "empty.xlsx")
    export_excel(_group([]), path)
    wb = load_workbook(path)

    assert wb["Expenses"].max_row == 1
    assert wb["Settlements"].max_row == 1
