"""
Tests for CSV import/export
"""
from __future__ import annotations

import csv

import pytest

from csv_handler import (
    export_expenses_to_csv,
    export_settlements_to_csv,
    import_expenses_from_csv,
    merge_imported_expenses,
)
from models import Expense, Settlement, SplitDetail


def test_expenses_survive_export_and_import(tmp_path):
    path = str(tmp_path / "expenses.csv")
    expenses = [
        Expense("e1", 45.5, "u1", description="Dinner, drinks", date="2024-05-01"),
        Expense("e2", 30.0, "u2", "custom", [SplitDetail("u1", 10.0), SplitDetail("u3", 20.0)],
                "Taxi", "2024-05-02", "airport"),
    ]

    export_expenses_to_csv(expenses, path)

    assert import_expenses_from_csv(path) == expenses


def test_import_fills_optional_columns(tmp_path):
    path = tmp_path / "minimal.csv"
    path.write_text("id,amount,paid_by\nx,12.25,u9\n", encoding="utf-8")

    (e,) = import_expenses_from_csv(str(path))

    assert e.amount == pytest.approx(12.25)
    assert e.split_type == "equal"
    assert e.split_details == []
    assert (e.date, e.description, e.notes) == ("", "", "")


def test_import_rejects_bad_amount(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("id,amount,paid_by\nx,lots,u9\n", encoding="utf-8")
    with pytest.raises(ValueError):
        import_expenses_from_csv(str(path))


def test_settlements_export(tmp_path):
    path = tmp_path / "settle.csv"
    export_settlements_to_csv([Settlement("c", "Cal", "a", "Ana", 35.0), Settlement("d", "Dee", "b", "Bo", 4.999)],
                              str(path))

    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows == [["from", "to", "amount"], ["Cal", "Ana", "35.00"], ["Dee", "Bo", "5.00"]]


def test_import_rejects_non_iso_date(tmp_path):
    path = tmp_path / "us_dates.csv"
    path.write_text("id,date,description,amount,paid_by\ne1,03/01/2024,Pizza,10,a\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Row 2"):
        import_expenses_from_csv(str(path))


def test_reimported_expenses_get_fresh_ids(tmp_path):
    path = str(tmp_path / "expenses.csv")
    original = [Expense("e1", 10.0, "a", date="2024-01-01"), Expense("e2", 20.0, "b")]
    export_expenses_to_csv(original, path)

    merged = merge_imported_expenses(original, import_expenses_from_csv(path))

    assert len(merged) == 4
    assert len({e.id for e in merged}) == 4
    assert merged[:2] == original
    assert [(e.amount, e.paid_by, e.date) for e in merged[2:]] == [(10.0, "a", "2024-01-01"), (20.0, "b", "")]


def test_duplicate_ids_within_one_file_are_split():
    rows = [Expense("x", 1.0, "a"), Expense("x", 2.0, "a")]
    merged = merge_imported_expenses([], rows)
    assert merged[0].id == "x"
    assert merged[1].id != "x"
    assert rows[1].id == "x"
