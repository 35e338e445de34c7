"""
Data models for GroupSplit application
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List

SPLIT_EQUAL = "equal"
SPLIT_CUSTOM = "custom"
SPLIT_TYPES = (SPLIT_EQUAL, SPLIT_CUSTOM)


class InvalidInputError(ValueError):
    """Raised before a calculation when members or expenses are malformed"""


@dataclass
class Member:
    """Participant in a group"""
    user_id: str
    name: str
    email: str = ""


@dataclass
class SplitDetail:
    """One member's explicit share of a custom-split expense"""
    user_id: str
    amount: float


@dataclass
class Expense:
    """Single shared cost paid by one member"""
    id: str
    amount: float
    paid_by: str  # member user_id
    split_type: str = SPLIT_EQUAL
    split_details: List[SplitDetail] = field(default_factory=list)  # custom only
    description: str = ""
    date: str = ""  # YYYY-MM-DD
    notes: str = ""


@dataclass
class BalanceSummary:
    """Per-member totals; positive balance -> should receive"""
    user_id: str
    name: str
    total_paid: float = 0.0
    total_owed: float = 0.0
    balance: float = 0.0


@dataclass
class Settlement:
    """Transfer instruction: payer sends amount to receiver"""
    payer: str
    payer_name: str
    receiver: str
    receiver_name: str
    amount: float


@dataclass
class SettlementPlan:
    """Settlements plus any balance the planner could not match"""
    settlements: List[Settlement] = field(default_factory=list)
    residuals: Dict[str, float] = field(default_factory=dict)  # user_id -> leftover balance

    @property
    def is_complete(self) -> bool:
        return not self.residuals


@dataclass
class Group:
    """Complete group snapshot: members and their expenses"""
    name: str
    members: List[Member]
    expenses: List[Expense]
    description: str = ""
    created_by: str = ""
    version: int = 1
