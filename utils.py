"""
Utility functions for GroupSplit application
"""
from __future__ import annotations
import os
import uuid
from datetime import date, datetime


def today_str() -> str:
    """Get today's date as ISO string"""
    return date.today().isoformat()


def parse_date(s: str) -> date:
    """Parse YYYY-MM-DD date string"""
    return datetime.strptime(s.strip(), "%Y-%m-%d").date()


def safe_float(x: str, default: float = 0.0) -> float:
    """Convert string to float safely, returning default on error"""
    try:
        return float(x)
    except (TypeError, ValueError):
        return default


def new_id() -> str:
    """Generate an identifier for a new member or expense"""
    return uuid.uuid4().hex


def format_currency(amount: float) -> str:
    """Format amount for display, e.g. $12.50"""
    return f"${amount:.2f}"


def describe_balance(balance: float, eps: float = 0.01) -> str:
    """Human readable balance: who gets money back and who owes"""
    if balance >= eps:
        return f"Get back {format_currency(balance)}"
    if balance <= -eps:
        return f"Owe {format_currency(abs(balance))}"
    return "All settled up"


def app_dir() -> str:
    """
    Get application data directory.
    $GROUPSPLIT_HOME wins; otherwise ~/Library/Application Support/GroupSplit.
    Creates directory if it doesn't exist.
    """
    path = os.environ.get("GROUPSPLIT_HOME")
    if not path:
        base = os.path.expanduser("~/Library/Application Support")
        path = os.path.join(base, "GroupSplit")
    os.makedirs(path, exist_ok=True)
    return path


def normalize_date(value) -> str:
    """
    Return the YYYY-MM-DD part of a stored date, or "" when undated.
    ISO timestamps (2024-02-01T10:00:00Z) keep their date part.
    Raises ValueError for anything else.
    """
    text = (value or "").strip()
    if "T" in text:
        text = text.split("T", 1)[0]
    if text:
        parse_date(text)
    return text
