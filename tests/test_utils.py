"""
Tests for display and helper utilities
"""
from __future__ import annotations

from datetime import date

import pytest

from utils import app_dir, describe_balance, format_currency, new_id, normalize_date, parse_date, safe_float


def test_format_currency():
    assert format_currency(12.5) == "$12.50"
    assert format_currency(0) == "$0.00"
    assert format_currency(1 / 3) == "$0.33"


@pytest.mark.parametrize("balance, text", [
    (65, "Get back $65.00"),
    (-35, "Owe $35.00"),
    (0, "All settled up"),
    (0.004, "All settled up"),
    (-0.009, "All settled up"),
])
def test_describe_balance(balance, text):
    assert describe_balance(balance) == text


def test_safe_float():
    assert safe_float("2.5") == 2.5
    assert safe_float("abc") == 0.0
    assert safe_float(None, None) is None


def test_parse_date():
    assert parse_date(" 2024-02-29 ") == date(2024, 2, 29)
    with pytest.raises(ValueError):
        parse_date("29/02/2024")


def test_new_id_is_unique():
    assert new_id() != new_id()


def test_app_dir_honours_env(tmp_path, monkeypatch):
    target = tmp_path / "data"
    monkeypatch.setenv("GROUPSPLIT_HOME", str(target))
    assert app_dir() == str(target)
    assert target.is_dir()


def test_normalize_date():
    assert normalize_date("2024-03-01") == "2024-03-01"
    assert normalize_date("2024-03-01T18:30:00Z") == "2024-03-01"
    assert normalize_date(None) == ""
    assert normalize_date("  ") == ""
    with pytest.raises(ValueError):
        normalize_date("03/01/2024")
