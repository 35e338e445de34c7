"""
Configuration and data loading/saving for GroupSplit
"""
from __future__ import annotations
import json
import logging
import os
from typing import List
from dataclasses import asdict

from models import SPLIT_EQUAL, Expense, Group, Member, SplitDetail
from utils import app_dir, normalize_date


logger = logging.getLogger(__name__)


def _pick(d: dict, key: str, alt: str, default=None):
    """Read key, falling back to the document-store spelling"""
    if key in d:
        return d[key]
    return d.get(alt, default)


def _require_id(d: dict, key: str, alt: str) -> str:
    """Read a required id under either spelling; KeyError when absent or empty"""
    value = _pick(d, key, alt)
    if value is None or str(value) == "":
        raise KeyError(key)
    return str(value)


def dict_to_member(d: dict) -> Member:
    return Member(
        user_id=_require_id(d, "user_id", "userId"),
        name=d.get("name", ""),
        email=d.get("email", "") or "",
    )


def dict_to_expense(d: dict) -> Expense:
    details = _pick(d, "split_details", "splitDetails") or []
    return Expense(
        id=str(d["id"]),
        amount=float(d["amount"]),
        paid_by=_require_id(d, "paid_by", "paidBy"),
        split_type=_pick(d, "split_type", "splitType", SPLIT_EQUAL),
        split_details=[
            SplitDetail(_require_id(s, "user_id", "userId"), float(s["amount"]))
            for s in details
        ],
        description=d.get("description", ""),
        date=normalize_date(d.get("date")),
        notes=d.get("notes", "") or "",
    )


def load_members(path: str) -> List[Member]:
    """Load member list from JSON file"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return []
    return [dict_to_member(m) for m in data.get("members", [])]


def get_default_group() -> Group:
    """Create default group with members loaded from the data directory"""
    members = load_members(os.path.join(app_dir(), "members.json"))

    if not members:
        members = [Member("me", "Me")]  # fallback

    return Group(
        name="My Group",
        members=members,
        expenses=[],
        created_by=members[0].user_id,
    )


def group_to_dict(group: Group) -> dict:
    """Convert Group object to dictionary for JSON serialization"""
    return {
        "version": group.version,
        "name": group.name,
        "description": group.description,
        "created_by": group.created_by,
        "members": [asdict(m) for m in group.members],
        "expenses": [asdict(e) for e in group.expenses],
    }


def dict_to_group(d: dict) -> Group:
    """
    Convert dictionary from JSON to Group object.
    Accepts both our snake_case keys and the camelCase keys used by the
    remote document store (userId, paidBy, splitType, splitDetails, createdBy).
    """
    members = [dict_to_member(m) for m in d.get("members", [])]
    exps = [dict_to_expense(e) for e in d.get("expenses", [])]

    return Group(
        version=d.get("version", 1),
        name=d.get("name", ""),
        description=d.get("description", "") or "",
        created_by=_pick(d, "created_by", "createdBy", "") or "",
        members=members,
        expenses=exps,
    )


def load_group(path: str) -> Group:
    """Read a group snapshot from a JSON file"""
    with open(path, "r", encoding="utf-8") as f:
        group = dict_to_group(json.load(f))
    logger.info("Loaded group '%s' (%d members, %d expenses) from %s",
                group.name, len(group.members), len(group.expenses), path)
    return group


def save_group(group: Group, path: str) -> None:
    """Write a group snapshot to a JSON file"""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(group_to_dict(group), f, ensure_ascii=False, indent=2)
    logger.info("Saved group '%s' to %s", group.name, path)
