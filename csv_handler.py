"""
CSV export and import functionality for GroupSplit
"""
from __future__ import annotations
import csv
import logging
from dataclasses import replace
from typing import List

from models import SPLIT_EQUAL, Expense, Settlement, SplitDetail
from utils import new_id, normalize_date

logger = logging.getLogger(__name__)

EXPENSE_COLUMNS = ['id', 'date', 'description', 'amount', 'paid_by', 'split_type', 'split_details', 'notes']


def _encode_split_details(details: List[SplitDetail]) -> str:
    return ';'.join(f"{d.user_id}:{d.amount}" for d in details)


def _decode_split_details(text: str) -> List[SplitDetail]:
    details = []
    for pair in (text or '').split(';'):
        if ':' in pair:
            k, v = pair.rsplit(':', 1)
            details.append(SplitDetail(k.strip(), float(v.strip())))
    return details


def export_expenses_to_csv(expenses: List[Expense], filepath: str) -> None:
    """
    Export expenses list to CSV file
    CSV columns: id, date, description, amount, paid_by, split_type, split_details, notes
    split_details is written as user:amount;user:amount
    """
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(EXPENSE_COLUMNS)
        for e in expenses:
            writer.writerow([
                e.id,
                e.date,
                e.description,
                e.amount,
                e.paid_by,
                e.split_type,
                _encode_split_details(e.split_details),
                e.notes
            ])
    logger.info("Exported %d expenses to %s", len(expenses), filepath)


def import_expenses_from_csv(filepath: str) -> List[Expense]:
    """
    Import expenses list from CSV file
    Returns list of Expense objects; a row with an unreadable date or amount raises ValueError
    """
    expenses = []

    with open(filepath, 'r', encoding='utf-8') as f:
        reader = csv.DictReader(f)

        for line_no, row in enumerate(reader, start=2):
            try:
                expense_date = normalize_date(row.get('date'))
            except ValueError:
                raise ValueError(f"Row {line_no}: date '{row.get('date')}' must be YYYY-MM-DD.") from None
            expenses.append(Expense(
                id=row['id'],
                date=expense_date,
                description=row.get('description') or '',
                amount=float(row['amount']),
                paid_by=row['paid_by'],
                split_type=row.get('split_type') or SPLIT_EQUAL,
                split_details=_decode_split_details(row.get('split_details')),
                notes=row.get('notes') or ''
            ))

    logger.info("Imported %d expenses from %s", len(expenses), filepath)
    return expenses


def merge_imported_expenses(existing: List[Expense], imported: List[Expense]) -> List[Expense]:
    """
    Append imported expenses to existing ones.
    Imported rows whose id is already taken get a fresh id.
    """
    taken = {e.id for e in existing}
    merged = list(existing)
    for e in imported:
        if e.id in taken:
            e = replace(e, id=new_id())
        taken.add(e.id)
        merged.append(e)
    return merged


def export_settlements_to_csv(settlements: List[Settlement], filepath: str) -> None:
    """Write a settlement plan as from, to, amount rows"""
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(['from', 'to', 'amount'])
        for t in settlements:
            writer.writerow([t.payer_name, t.receiver_name, f"{t.amount:.2f}"])
