"""
Business logic and computations for GroupSplit.

The functions here are pure: they read members and expenses, build their own
working copies and never touch files or the UI. Two stages do the real work:

- compute_balances folds the expense list into one BalanceSummary per member.
- build_settlement_plan / plan_settlements turns those balances into transfers
  by greedily matching the largest debtor with the largest creditor.
"""
from __future__ import annotations
import logging
import math
from datetime import date
from typing import Dict, List, Optional, Tuple

from models import (
    SPLIT_CUSTOM,
    SPLIT_EQUAL,
    SPLIT_TYPES,
    BalanceSummary,
    Expense,
    InvalidInputError,
    Member,
    Settlement,
    SettlementPlan,
)
from utils import parse_date, safe_float

logger = logging.getLogger(__name__)

# Balances closer to zero than this are treated as settled.
SETTLED_EPSILON = 0.01


def _is_finite_number(x) -> bool:
    try:
        return math.isfinite(float(x))
    except (TypeError, ValueError):
        return False


def validate_inputs(members: List[Member], expenses: List[Expense]) -> None:
    """
    Reject inputs the calculator cannot work with.
    Unknown member references are allowed; they are dropped during the fold.
    """
    if not members:
        raise InvalidInputError("At least one member is required.")

    seen = set()
    for m in members:
        if not m.user_id:
            raise InvalidInputError(f"Member '{m.name}' has an empty user id.")
        if m.user_id in seen:
            raise InvalidInputError(f"Duplicate member user id '{m.user_id}'.")
        seen.add(m.user_id)

    for e in expenses:
        if not _is_finite_number(e.amount) or float(e.amount) <= 0:
            raise InvalidInputError(f"Expense '{e.id}' amount must be greater than zero.")
        if e.split_type not in SPLIT_TYPES:
            raise InvalidInputError(f"Expense '{e.id}' has unknown split type '{e.split_type}'.")
        if e.split_type == SPLIT_CUSTOM:
            for d in e.split_details:
                if not d.user_id:
                    raise InvalidInputError(f"Expense '{e.id}' has a split entry without a user id.")
                if not _is_finite_number(d.amount) or float(d.amount) < 0:
                    raise InvalidInputError(
                        f"Expense '{e.id}' split amount for '{d.user_id}' must be a non-negative number."
                    )


def compute_balances(members: List[Member], expenses: List[Expense]) -> List[BalanceSummary]:
    """
    Compute paid/owed/balance for each member, in member order.
    Equal splits charge amount / len(members) to every member, payer included;
    custom splits charge exactly what split_details says.
    """
    validate_inputs(members, expenses)

    summaries = {m.user_id: BalanceSummary(m.user_id, m.name) for m in members}
    n = len(members)

    for e in expenses:
        amount = float(e.amount)
        payer = summaries.get(e.paid_by)
        if payer is not None:
            payer.total_paid += amount
        else:
            logger.debug("expense %s paid by unknown member %s", e.id, e.paid_by)

        if e.split_type == SPLIT_EQUAL:
            share = amount / n
            for s in summaries.values():
                s.total_owed += share
        else:
            for d in e.split_details:
                s = summaries.get(d.user_id)
                if s is not None:
                    s.total_owed += float(d.amount)

    for s in summaries.values():
        s.balance = s.total_paid - s.total_owed

    return list(summaries.values())


def build_settlement_plan(summaries: List[BalanceSummary]) -> SettlementPlan:
    """
    Greedy settlement: the most negative debtor pays the largest creditor.
    Whatever is still unmatched when one side runs out is reported as residuals.
    """
    # [user_id, name, balance] working copies; the summaries are left untouched
    creditors = [[s.user_id, s.name, s.balance] for s in summaries if s.balance > 0]
    debtors = [[s.user_id, s.name, s.balance] for s in summaries if s.balance < 0]
    creditors.sort(key=lambda x: x[2], reverse=True)
    debtors.sort(key=lambda x: x[2])

    settlements = []
    while debtors and creditors:
        debtor = debtors[0]
        creditor = creditors[0]
        amount = min(abs(debtor[2]), creditor[2])
        if amount > 0:
            settlements.append(Settlement(
                payer=debtor[0],
                payer_name=debtor[1],
                receiver=creditor[0],
                receiver_name=creditor[1],
                amount=amount,
            ))
            debtor[2] += amount
            creditor[2] -= amount
        if abs(debtor[2]) < SETTLED_EPSILON:
            debtors.pop(0)
        if abs(creditor[2]) < SETTLED_EPSILON:
            creditors.pop(0)

    residuals = {uid: bal for uid, _, bal in debtors + creditors if abs(bal) >= SETTLED_EPSILON}
    if residuals:
        logger.warning(
            "Balances do not sum to zero; %d member(s) left unsettled: %s",
            len(residuals),
            ", ".join(f"{uid}={bal:.2f}" for uid, bal in residuals.items()),
        )
    return SettlementPlan(settlements=settlements, residuals=residuals)


def plan_settlements(summaries: List[BalanceSummary]) -> List[Settlement]:
    """Ordered payer -> receiver transfers that bring every balance to zero"""
    return build_settlement_plan(summaries).settlements


def settle_group(
    members: List[Member],
    expenses: List[Expense]
) -> Tuple[List[BalanceSummary], SettlementPlan]:
    """Run both stages: balances first, then the settlement plan"""
    summaries = compute_balances(members, expenses)
    return summaries, build_settlement_plan(summaries)


def apply_settlements(
    summaries: List[BalanceSummary],
    settlements: List[Settlement]
) -> Dict[str, float]:
    """Balances left after every settlement has been paid"""
    out = {s.user_id: s.balance for s in summaries}
    for t in settlements:
        if t.payer in out:
            out[t.payer] += t.amount
        if t.receiver in out:
            out[t.receiver] -= t.amount
    return out


def expense_shares(expense: Expense, members: List[Member]) -> Dict[str, float]:
    """Each known member's share of a single expense"""
    shares = {m.user_id: 0.0 for m in members}
    if not members:
        return shares
    if expense.split_type == SPLIT_EQUAL:
        share = float(expense.amount) / len(members)
        return {uid: share for uid in shares}
    for d in expense.split_details:
        if d.user_id in shares:
            shares[d.user_id] += float(d.amount)
    return shares


def expense_net_effects(expense: Expense, members: List[Member]) -> Dict[str, float]:
    """
    How one expense moves each member's balance.
    The payer gains the amount minus their own share; everyone else loses their share.
    """
    effects = {uid: -share for uid, share in expense_shares(expense, members).items()}
    if expense.paid_by in effects:
        effects[expense.paid_by] += float(expense.amount)
    return effects


def group_total(expenses: List[Expense]) -> float:
    """Total amount spent by the group"""
    return sum(float(e.amount) for e in expenses)


def member_name(members: List[Member], user_id: str) -> str:
    """Display name for user_id, or 'Unknown'"""
    for m in members:
        if m.user_id == user_id:
            return m.name
    return "Unknown"


def member_choices(members: List[Member]) -> Dict[str, str]:
    """
    Map a unique display label to each member's user_id, in member order.
    Members sharing a name are told apart by email, or by user_id when there is none.
    """
    counts: Dict[str, int] = {}
    for m in members:
        counts[m.name] = counts.get(m.name, 0) + 1
    choices = {}
    for m in members:
        label = m.name
        if counts[m.name] > 1:
            label = f"{m.name} ({m.email or m.user_id})"
        if label in choices:
            label = f"{m.name} ({m.user_id})"
        choices[label] = m.user_id
    return choices


def sort_expenses_newest_first(expenses: List[Expense]) -> List[Expense]:
    """Sort expenses by date descending; undated expenses go last"""
    return sorted(expenses, key=lambda e: e.date or "", reverse=True)


def filter_expenses_by_date(
    expenses: List[Expense],
    start: Optional[date],
    end: Optional[date]
) -> List[Expense]:
    """Filter expenses by inclusive date range; undated expenses only pass an open range"""
    if start is None and end is None:
        return list(expenses)
    out = []
    for e in expenses:
        if not e.date:
            continue
        ed = parse_date(e.date)
        if start and ed < start:
            continue
        if end and ed > end:
            continue
        out.append(e)
    return out


def validate_expense_form(description: str, amount_text: str, paid_by: str) -> float:
    """
    Check the add-expense form and return the parsed amount.
    Raises InvalidInputError with a message suitable for the user.
    """
    if not description or not description.strip():
        raise InvalidInputError("Description is required.")
    amount = safe_float(amount_text, None)
    if amount is None or not math.isfinite(amount) or amount <= 0:
        raise InvalidInputError("Please enter a valid amount.")
    if not paid_by:
        raise InvalidInputError("Please select who paid.")
    return amount
