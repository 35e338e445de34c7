"""
Dialog windows for GroupSplit GUI
"""
from __future__ import annotations
from typing import Dict, List, Optional

try:
    import tkinter as tk
    from tkinter import ttk, messagebox
except ModuleNotFoundError:
    tk = None
    ttk = None
    messagebox = None

from models import SPLIT_CUSTOM, SPLIT_EQUAL, Expense, Group, InvalidInputError, Member, SplitDetail
from utils import today_str, safe_float, parse_date, new_id, format_currency
from computations import member_choices, validate_expense_form


class SplitDetailsEditor(tk.Toplevel):
    """Dialog for entering each member's amount of a custom split"""

    def __init__(self, master, members: List[Member], details: List[SplitDetail], amount: float):
        super().__init__(master)
        self.title("Custom Split")
        self.resizable(False, False)
        self.members = members
        self.amount = amount
        self.vars: Dict[str, tk.StringVar] = {}
        self.result: Optional[List[SplitDetail]] = None

        current = {d.user_id: d.amount for d in details}

        frm = ttk.Frame(self, padding=10)
        frm.grid(row=0, column=0, sticky="nsew")

        ttk.Label(frm, text="Enter the amount each member owes for this expense.").grid(
            row=0, column=0, columnspan=3, sticky="w", pady=(0, 8)
        )

        for i, m in enumerate(members):
            ttk.Label(frm, text=m.name).grid(row=i + 1, column=0, sticky="w")
            v = tk.StringVar(value=str(current.get(m.user_id, 0.0)))
            self.vars[m.user_id] = v
            ttk.Entry(frm, textvariable=v, width=10).grid(row=i + 1, column=1, sticky="w")

        self.sum_var = tk.StringVar(value="")
        ttk.Label(frm, textvariable=self.sum_var).grid(row=1, column=2, rowspan=len(members), sticky="n", padx=8)

        btns = ttk.Frame(frm)
        btns.grid(row=len(members) + 2, column=0, columnspan=3, sticky="ew", pady=(10, 0))
        ttk.Button(btns, text="Equal", command=self._equal).grid(row=0, column=0, padx=3)
        ttk.Button(btns, text="Clear", command=self._clear).grid(row=0, column=1, padx=3)
        ttk.Button(btns, text="OK", command=self._ok).grid(row=0, column=2, padx=12)
        ttk.Button(btns, text="Cancel", command=self._cancel).grid(row=0, column=3, padx=3)

        for v in self.vars.values():
            v.trace_add("write", lambda *_: self._update_sum())
        self._update_sum()

        self.grab_set()
        self.transient(master)

    def _read(self) -> Dict[str, Optional[float]]:
        return {uid: safe_float(v.get(), None) for uid, v in self.vars.items()}

    def _update_sum(self):
        """Show entered total against the expense amount"""
        s = sum(x for x in self._read().values() if x is not None)
        self.sum_var.set(f"Sum: {format_currency(s)} of {format_currency(self.amount)}")

    def _equal(self):
        """Fill amount / member count for everyone"""
        n = max(1, len(self.members))
        for v in self.vars.values():
            v.set(f"{self.amount / n:.2f}")

    def _clear(self):
        for v in self.vars.values():
            v.set("0")

    def _ok(self):
        values = self._read()
        if any(x is None or x < 0 for x in values.values()):
            messagebox.showerror("Invalid amount", "Each share must be a non-negative number.", parent=self)
            return
        self.result = [SplitDetail(uid, x) for uid, x in values.items() if x > 0]
        self.destroy()

    def _cancel(self):
        self.result = None
        self.destroy()


class ExpenseDialog(tk.Toplevel):
    """Dialog for adding/editing an expense"""

    def __init__(self, master, group: Group, expense: Optional[Expense] = None):
        super().__init__(master)
        self.title("Add Expense" if expense is None else "Edit Expense")
        self.resizable(False, False)
        self.group = group
        self.expense = expense
        self.result: Optional[Expense] = None

        self.bind("<Return>", lambda _e: self._ok() or "break")
        self.bind("<KP_Enter>", lambda _e: self._ok() or "break")

        self.name_to_id = member_choices(group.members)
        names = list(self.name_to_id)
        payer_name = next((label for label, uid in self.name_to_id.items() if expense and uid == expense.paid_by), None)

        frm = ttk.Frame(self, padding=10)
        frm.grid(row=0, column=0, sticky="nsew")

        self.v_date = tk.StringVar(value=expense.date if expense and expense.date else today_str())
        self.v_desc = tk.StringVar(value=expense.description if expense else "")
        self.v_amount = tk.StringVar(value=str(expense.amount) if expense else "")
        self.v_payer = tk.StringVar(value=payer_name or (names[0] if names else ""))
        self.v_split = tk.StringVar(value=expense.split_type if expense else SPLIT_EQUAL)
        self.v_notes = tk.StringVar(value=expense.notes if expense else "")
        self.split_details: List[SplitDetail] = list(expense.split_details) if expense else []

        r = 0
        ttk.Label(frm, text="Date (YYYY-MM-DD)").grid(row=r, column=0, sticky="w")
        ttk.Entry(frm, textvariable=self.v_date, width=18).grid(row=r, column=1, sticky="w")
        r += 1

        ttk.Label(frm, text="Description *").grid(row=r, column=0, sticky="w", pady=2)
        ttk.Entry(frm, textvariable=self.v_desc, width=28).grid(row=r, column=1, sticky="w")
        r += 1

        ttk.Label(frm, text="Amount *").grid(row=r, column=0, sticky="w", pady=2)
        ttk.Entry(frm, textvariable=self.v_amount, width=18).grid(row=r, column=1, sticky="w")
        r += 1

        ttk.Label(frm, text="Paid by").grid(row=r, column=0, sticky="w", pady=2)
        ttk.Combobox(frm, textvariable=self.v_payer, values=names,
                     width=16, state="readonly").grid(row=r, column=1, sticky="w")
        r += 1

        ttk.Label(frm, text="Split type").grid(row=r, column=0, sticky="w", pady=2)
        split_frame = ttk.Frame(frm)
        split_frame.grid(row=r, column=1, sticky="w")
        ttk.Radiobutton(split_frame, text="Split Equally", value=SPLIT_EQUAL,
                        variable=self.v_split).pack(side="left")
        ttk.Radiobutton(split_frame, text="Custom Split", value=SPLIT_CUSTOM,
                        variable=self.v_split).pack(side="left", padx=6)
        r += 1

        custom_frame = ttk.Frame(frm)
        custom_frame.grid(row=r, column=0, columnspan=2, sticky="ew", pady=(4, 0))
        ttk.Button(custom_frame, text="Edit Custom Split…", command=self._edit_split).grid(row=0, column=0, sticky="w")
        self.split_label = ttk.Label(custom_frame, text=self._split_text())
        self.split_label.grid(row=0, column=1, padx=8, sticky="w")
        r += 1

        ttk.Label(frm, text="Notes").grid(row=r, column=0, sticky="w", pady=2)
        ttk.Entry(frm, textvariable=self.v_notes, width=28).grid(row=r, column=1, sticky="w")
        r += 1

        btns = ttk.Frame(frm)
        btns.grid(row=r, column=0, columnspan=2, sticky="e", pady=(10, 0))
        ttk.Button(btns, text="OK", command=self._ok).grid(row=0, column=0, padx=4)
        ttk.Button(btns, text="Cancel", command=self._cancel).grid(row=0, column=1, padx=4)

        self.grab_set()
        self.transient(master)

    def _split_text(self) -> str:
        """Format custom split for display"""
        if not self.split_details:
            return "(no custom shares)"
        by_id = {m.user_id: m.name for m in self.group.members}
        return "  ".join(f"{by_id.get(d.user_id, d.user_id)}:{d.amount:.2f}" for d in self.split_details)

    def _edit_split(self):
        """Open custom split editor"""
        amount = safe_float(self.v_amount.get(), 0.0)
        dlg = SplitDetailsEditor(self, self.group.members, self.split_details, amount)
        self.wait_window(dlg)
        if dlg.result is not None:
            self.split_details = dlg.result
            self.v_split.set(SPLIT_CUSTOM)
            self.split_label.config(text=self._split_text())

    def _ok(self):
        """Validate and save expense"""
        try:
            parse_date(self.v_date.get())
        except ValueError:
            messagebox.showerror("Invalid date", "Date must be YYYY-MM-DD.", parent=self)
            return

        paid_by = self.name_to_id.get(self.v_payer.get(), "")
        try:
            amount = validate_expense_form(self.v_desc.get(), self.v_amount.get(), paid_by)
        except InvalidInputError as ex:
            messagebox.showerror("Error", str(ex), parent=self)
            return

        split_type = self.v_split.get()
        if split_type == SPLIT_CUSTOM and not self.split_details:
            messagebox.showerror("Custom split", "Enter at least one member's share.", parent=self)
            return

        self.result = Expense(
            id=self.expense.id if self.expense else new_id(),
            amount=amount,
            paid_by=paid_by,
            split_type=split_type,
            split_details=list(self.split_details) if split_type == SPLIT_CUSTOM else [],
            description=self.v_desc.get().strip(),
            date=self.v_date.get().strip(),
            notes=self.v_notes.get().strip(),
        )
        self.destroy()

    def _cancel(self):
        """Cancel and close"""
        self.result = None
        self.destroy()
