"""
Tests for group snapshot loading and saving in config.py
"""
from __future__ import annotations

import json

import pytest

from config import dict_to_group, get_default_group, group_to_dict, load_group, load_members, save_group
from models import Expense, Group, Member, SplitDetail


def _group():
    return Group(
        name="Ski Trip",
        description="Feb 2024",
        created_by="u1",
        members=[Member("u1", "Ana", "ana@example.com"), Member("u2", "Ben")],
        expenses=[
            Expense("e1", 120.0, "u1", description="Cabin", date="2024-02-01"),
            Expense("e2", 30.0, "u2", "custom", [SplitDetail("u1", 30.0)], "Lift pass", "2024-02-02", "cash"),
        ],
    )


def test_save_then_load_keeps_group(tmp_path):
    path = tmp_path / "group.json"
    group = _group()

    save_group(group, str(path))
    loaded = load_group(str(path))

    assert loaded == group
    assert json.loads(path.read_text(encoding="utf-8"))["members"][0]["user_id"] == "u1"


def test_dict_to_group_accepts_document_store_keys():
    doc = {
        "name": "Flat",
        "createdBy": "x1",
        "members": [{"userId": "x1", "name": "Kim", "email": "kim@example.com", "isAdmin": True}],
        "expenses": [{
            "id": "abc",
            "groupId": "g1",
            "description": "Groceries",
            "amount": 42,
            "paidBy": "x1",
            "splitType": "custom",
            "splitDetails": [{"userId": "x1", "amount": 42}],
        }],
    }
    group = dict_to_group(doc)

    assert group.created_by == "x1"
    assert group.members == [Member("x1", "Kim", "kim@example.com")]
    e = group.expenses[0]
    assert (e.id, e.amount, e.paid_by, e.split_type) == ("abc", 42.0, "x1", "custom")
    assert e.split_details == [SplitDetail("x1", 42.0)]


def test_dict_to_group_defaults():
    group = dict_to_group({"members": [{"user_id": "a", "name": "A"}],
                           "expenses": [{"id": "e", "amount": "9.5", "paid_by": "a"}]})
    assert group.version == 1
    assert group.expenses[0].split_type == "equal"
    assert group.expenses[0].split_details == []
    assert group.expenses[0].amount == pytest.approx(9.5)


def test_group_to_dict_is_json_serializable():
    text = json.dumps(group_to_dict(_group()))
    assert '"split_type": "custom"' in text


def test_load_group_rejects_expense_without_amount(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text(json.dumps({"members": [], "expenses": [{"id": "e", "paid_by": "a"}]}), encoding="utf-8")
    with pytest.raises(KeyError):
        load_group(str(path))


@pytest.mark.parametrize("doc", [
    {"members": [{"name": "Ana"}], "expenses": []},
    {"members": [{"user_id": "", "name": "Ana"}], "expenses": []},
    {"members": [], "expenses": [{"id": "e1", "amount": 5}]},
    {"members": [], "expenses": [{"id": "e1", "amount": 5, "paid_by": "a",
                                  "split_type": "custom", "split_details": [{"amount": 5}]}]},
])
def test_missing_ids_are_rejected(doc):
    with pytest.raises(KeyError):
        dict_to_group(doc)


def test_expense_dates_must_be_iso():
    with pytest.raises(ValueError):
        dict_to_group({"members": [], "expenses": [{"id": "e", "amount": 1, "paid_by": "a", "date": "03/01/2024"}]})

    group = dict_to_group({"members": [], "expenses": [
        {"id": "e", "amount": 1, "paidBy": "a", "date": "2024-03-01T18:30:00.000Z"},
    ]})
    assert group.expenses[0].date == "2024-03-01"


def test_load_members_missing_file(tmp_path):
    assert load_members(str(tmp_path / "nope.json")) == []


def test_default_group_reads_members_from_data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("GROUPSPLIT_HOME", str(tmp_path))
    (tmp_path / "members.json").write_text(
        json.dumps({"members": [{"user_id": "p", "name": "Pat"}, {"user_id": "q", "name": "Quinn"}]}),
        encoding="utf-8",
    )
    group = get_default_group()
    assert [m.name for m in group.members] == ["Pat", "Quinn"]
    assert group.created_by == "p"
    assert group.expenses == []


def test_default_group_falls_back_to_placeholder(tmp_path, monkeypatch):
    monkeypatch.setenv("GROUPSPLIT_HOME", str(tmp_path / "fresh"))
    group = get_default_group()
    assert len(group.members) == 1
    assert (tmp_path / "fresh").is_dir()
