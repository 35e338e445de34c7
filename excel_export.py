"""
Excel export functionality for GroupSplit
"""
from __future__ import annotations
import logging
from datetime import date
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from models import Group
from computations import (
    expense_shares,
    filter_expenses_by_date,
    group_total,
    member_name,
    settle_group,
    sort_expenses_newest_first,
)
from utils import describe_balance

logger = logging.getLogger(__name__)

MONEY_FORMAT = "0.00"


def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="4F81BD")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    """Auto-size columns based on content"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        longest = max((len(str(c.value)) for c in ws[letter] if c.value is not None), default=0)
        ws.column_dimensions[letter].width = max(min_width, min(max_width, longest + 2))


def _money_columns(ws, first_col, last_col, first_row=2):
    for r in range(first_row, ws.max_row + 1):
        for c in range(first_col, last_col + 1):
            ws.cell(r, c).number_format = MONEY_FORMAT


def export_excel(
    group: Group,
    filepath: str,
    start: Optional[date] = None,
    end: Optional[date] = None
) -> None:
    """
    Export group to Excel file with sheets:
    - Expenses: one row per expense with each member's share
    - Summary: paid / owed / balance per member
    - Settlements: who pays whom
    - Unsettled: only when balances did not sum to zero
    """
    wb = Workbook()
    wb.remove(wb.active)

    members = group.members
    exps = sort_expenses_newest_first(filter_expenses_by_date(group.expenses, start, end))
    summaries, plan = settle_group(members, exps)

    # Expenses sheet
    ws = wb.create_sheet("Expenses")
    headers = ["date", "description", "paid by", "split", "amount"] + [m.name for m in members]
    ws.append(headers)
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for e in exps:
        shares = expense_shares(e, members)
        ws.append(
            [e.date, e.description, member_name(members, e.paid_by), e.split_type, float(e.amount)]
            + [shares[m.user_id] for m in members]
        )

    if exps:
        last_data_row = ws.max_row
        ws.append(["TOTALS"])
        trow = ws.max_row
        ws.cell(trow, 1).font = Font(bold=True)
        ws.cell(trow, 1).fill = PatternFill("solid", fgColor="D9E1F2")
        for col in range(5, len(headers) + 1):
            letter = get_column_letter(col)
            ws.cell(trow, col).value = f"=SUM({letter}2:{letter}{last_data_row})"
    _money_columns(ws, 5, len(headers))
    _autosize_columns(ws)

    # Summary sheet
    ws = wb.create_sheet("Summary")
    ws.append(["Member", "Paid", "Owed", "Balance", "Status"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for s in summaries:
        ws.append([s.name, s.total_paid, s.total_owed, s.balance, describe_balance(s.balance)])
    ws.append(["Group total", group_total(exps)])
    ws.cell(ws.max_row, 1).font = Font(bold=True)
    _money_columns(ws, 2, 4)
    _autosize_columns(ws)

    # Settlements sheet
    ws = wb.create_sheet("Settlements")
    ws.append(["From (Payer)", "To (Receiver)", "Amount"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for t in plan.settlements:
        ws.append([t.payer_name, t.receiver_name, t.amount])
    _money_columns(ws, 3, 3)
    _autosize_columns(ws)

    if plan.residuals:
        ws = wb.create_sheet("Unsettled")
        ws.append(["Member", "Remaining balance"])
        _style_header(ws, 1)
        for uid, bal in plan.residuals.items():
            ws.append([member_name(members, uid), bal])
        _money_columns(ws, 2, 2)
        _autosize_columns(ws)

    wb.save(filepath)
    logger.info("Exported Excel report for '%s' to %s", group.name, filepath)
