"""
Main application window for GroupSplit GUI
"""
from __future__ import annotations
import json
import logging
import os
from datetime import date
from typing import Optional, Tuple

try:
    import tkinter as tk
    from tkinter import ttk, messagebox, filedialog
except ModuleNotFoundError:
    tk = None
    ttk = None
    messagebox = None
    filedialog = None

from models import Group, Member
from config import get_default_group, load_group, save_group
from utils import describe_balance, format_currency, new_id, parse_date
from computations import (
    expense_shares,
    filter_expenses_by_date,
    group_total,
    member_name,
    settle_group,
    sort_expenses_newest_first,
)
from excel_export import export_excel
from gui_dialogs import ExpenseDialog
from csv_handler import (
    export_expenses_to_csv,
    export_settlements_to_csv,
    import_expenses_from_csv,
    merge_imported_expenses,
)

logger = logging.getLogger(__name__)


class GroupSplitApp(ttk.Frame):
    """Main application window"""

    def __init__(self, master: tk.Tk):
        super().__init__(master, padding=8)
        self.master = master
        self.master.title("GroupSplit")
        self.master.geometry("1000x620")
        self.grid(row=0, column=0, sticky="nsew")
        self.master.rowconfigure(0, weight=1)
        self.master.columnconfigure(0, weight=1)

        self.group_path: Optional[str] = None
        self.group: Group = get_default_group()
        self.last_plan = None

        self._build_menu()
        self._build_ui()
        self.refresh_all()

    # ---------- Menu ----------
    def _build_menu(self):
        """Build application menu bar"""
        menubar = tk.Menu(self.master)
        filem = tk.Menu(menubar, tearoff=0)
        filem.add_command(label="New", command=self.new_group)
        filem.add_command(label="Open…", command=self.open_group)
        filem.add_command(label="Save", command=self.save_group)
        filem.add_command(label="Save As…", command=self.save_as_group)
        filem.add_separator()
        filem.add_command(label="Export CSV…", command=self.export_csv_dialog)
        filem.add_command(label="Import CSV…", command=self.import_csv_dialog)
        filem.add_command(label="Export Settlements CSV…", command=self.export_settlements_dialog)
        filem.add_separator()
        filem.add_command(label="Export Excel…", command=self.export_excel_dialog)
        filem.add_separator()
        filem.add_command(label="Exit", command=self.master.destroy)
        menubar.add_cascade(label="File", menu=filem)
        self.master.config(menu=menubar)

    # ---------- UI ----------
    def _build_ui(self):
        """Build main UI with tabs"""
        nb = ttk.Notebook(self)
        nb.grid(row=0, column=0, sticky="nsew")
        self.rowconfigure(0, weight=1)
        self.columnconfigure(0, weight=1)

        self.tab_expenses = ttk.Frame(nb, padding=8)
        self.tab_members = ttk.Frame(nb, padding=8)
        self.tab_balances = ttk.Frame(nb, padding=8)

        nb.add(self.tab_expenses, text="Expenses")
        nb.add(self.tab_members, text="Members")
        nb.add(self.tab_balances, text="Balances")

        self._build_expenses_tab()
        self._build_members_tab()
        self._build_balances_tab()

    def _build_expenses_tab(self):
        """Build expenses tab"""
        top = ttk.Frame(self.tab_expenses)
        top.grid(row=0, column=0, sticky="ew")
        self.tab_expenses.columnconfigure(0, weight=1)

        ttk.Button(top, text="Add", command=self.add_expense).pack(side="left", padx=3)
        ttk.Button(top, text="Edit", command=self.edit_selected_expense).pack(side="left", padx=3)
        ttk.Button(top, text="Delete", command=self.delete_selected_expense).pack(side="left", padx=3)

        ttk.Separator(self.tab_expenses, orient="horizontal").grid(row=1, column=0, sticky="ew", pady=6)

        cols = ("date", "description", "paid_by", "amount", "split", "shares", "notes")
        self.exp_tree = ttk.Treeview(self.tab_expenses, columns=cols, show="headings", height=18)
        for c, w in zip(cols, [95, 200, 110, 90, 70, 260, 300]):
            self.exp_tree.heading(c, text=c)
            self.exp_tree.column(c, width=w, anchor="w")
        self.exp_tree.grid(row=2, column=0, sticky="nsew")
        self.tab_expenses.rowconfigure(2, weight=1)

        yscroll = ttk.Scrollbar(self.tab_expenses, orient="vertical", command=self.exp_tree.yview)
        self.exp_tree.configure(yscroll=yscroll.set)
        yscroll.grid(row=2, column=1, sticky="ns")

    def _build_members_tab(self):
        """Build member management tab"""
        self.tab_members.columnconfigure(0, weight=1)
        frm = ttk.Frame(self.tab_members)
        frm.grid(row=0, column=0, sticky="nsew")

        ttk.Label(frm, text="Members:").grid(row=0, column=0, sticky="w")
        self.members_list = tk.Listbox(frm, height=18)
        self.members_list.grid(row=1, column=0, sticky="nsew", pady=6)
        frm.rowconfigure(1, weight=1)
        frm.columnconfigure(0, weight=1)

        controls = ttk.Frame(frm)
        controls.grid(row=2, column=0, sticky="ew")
        self.new_member_var = tk.StringVar()
        ttk.Entry(controls, textvariable=self.new_member_var, width=18).pack(side="left")
        ttk.Button(controls, text="Add", command=self.add_member).pack(side="left", padx=4)
        ttk.Button(controls, text="Remove Selected", command=self.remove_selected_member).pack(side="left", padx=4)

        ttk.Label(frm, text="Note: equal splits are shared by every member, so adding a member changes existing balances.").grid(
            row=3, column=0, sticky="w", pady=(8, 0))

    def _build_balances_tab(self):
        """Build balances and settlements tab"""
        self.tab_balances.columnconfigure(0, weight=1)

        filt = ttk.Frame(self.tab_balances)
        filt.grid(row=0, column=0, sticky="ew")
        ttk.Label(filt, text="Start (YYYY-MM-DD)").pack(side="left")
        self.rep_start = tk.StringVar(value="")
        ttk.Entry(filt, textvariable=self.rep_start, width=12).pack(side="left", padx=4)
        ttk.Label(filt, text="End (YYYY-MM-DD)").pack(side="left")
        self.rep_end = tk.StringVar(value="")
        ttk.Entry(filt, textvariable=self.rep_end, width=12).pack(side="left", padx=4)

        ttk.Button(filt, text="Refresh", command=self.refresh_balances).pack(side="left", padx=8)
        ttk.Button(filt, text="Export Excel…", command=self.export_excel_dialog).pack(side="left", padx=3)

        self.balance_note = tk.StringVar(value="")
        ttk.Label(self.tab_balances, textvariable=self.balance_note).grid(row=1, column=0, sticky="w", pady=(6, 0))

        cols = ("member", "paid", "owed", "balance", "status")
        self.sum_tree = ttk.Treeview(self.tab_balances, columns=cols, show="headings", height=10)
        for c, w in zip(cols, [140, 110, 110, 110, 200]):
            self.sum_tree.heading(c, text=c)
            self.sum_tree.column(c, width=w, anchor="w")
        self.sum_tree.grid(row=2, column=0, sticky="nsew", pady=6)
        self.tab_balances.rowconfigure(2, weight=1)

        ttk.Label(self.tab_balances, text="Settlements:").grid(row=3, column=0, sticky="w", pady=(10, 0))
        tcols = ("from", "to", "amount")
        self.tr_tree = ttk.Treeview(self.tab_balances, columns=tcols, show="headings", height=10)
        for c, w in zip(tcols, [140, 140, 120]):
            self.tr_tree.heading(c, text=c)
            self.tr_tree.column(c, width=w, anchor="w")
        self.tr_tree.grid(row=4, column=0, sticky="nsew")
        self.tab_balances.rowconfigure(4, weight=1)

    # ---------- CRUD: Expenses ----------
    def add_expense(self):
        """Add new expense"""
        if not self.group.members:
            messagebox.showerror("No members", "Please add at least one member first.")
            return
        dlg = ExpenseDialog(self.master, self.group, None)
        self.master.wait_window(dlg)
        if dlg.result:
            self.group.expenses.append(dlg.result)
            self.refresh_all()

    def edit_selected_expense(self):
        """Edit selected expense"""
        sel = self.exp_tree.selection()
        if not sel:
            messagebox.showinfo("Edit", "Select an expense row first.")
            return
        e = next((x for x in self.group.expenses if x.id == sel[0]), None)
        if not e:
            return
        dlg = ExpenseDialog(self.master, self.group, e)
        self.master.wait_window(dlg)
        if dlg.result:
            self.group.expenses = [dlg.result if x.id == dlg.result.id else x for x in self.group.expenses]
            self.refresh_all()

    def delete_selected_expense(self):
        """Delete selected expense"""
        sel = self.exp_tree.selection()
        if not sel:
            messagebox.showinfo("Delete", "Select an expense row first.")
            return
        if messagebox.askyesno("Delete", "Are you sure you want to delete this expense?"):
            self.group.expenses = [e for e in self.group.expenses if e.id != sel[0]]
            self.refresh_all()

    # ---------- CRUD: Members ----------
    def add_member(self):
        """Add new member"""
        name = self.new_member_var.get().strip()
        if not name:
            return
        if any(m.name == name for m in self.group.members):
            messagebox.showinfo("Members", "Name already exists.")
            return
        self.group.members.append(Member(new_id(), name))
        self.new_member_var.set("")
        self.refresh_all()

    def remove_selected_member(self):
        """Remove selected member unless expenses still reference them"""
        sel = self.members_list.curselection()
        if not sel:
            return
        m = self.group.members[sel[0]]
        used = any(
            e.paid_by == m.user_id or any(d.user_id == m.user_id for d in e.split_details)
            for e in self.group.expenses
        )
        if used:
            messagebox.showerror("Remove member", f"'{m.name}' is referenced by expenses. Delete those first.")
            return
        if len(self.group.members) == 1:
            messagebox.showerror("Remove member", "A group needs at least one member.")
            return
        if messagebox.askyesno("Remove member", f"Remove '{m.name}'?"):
            self.group.members = [x for x in self.group.members if x.user_id != m.user_id]
            self.refresh_all()

    # ---------- File ops ----------
    def new_group(self):
        """Create new group"""
        if messagebox.askyesno("New", "Start a new group (unsaved changes will be lost)?"):
            self.group = get_default_group()
            self.group_path = None
            self.refresh_all()

    def open_group(self):
        """Open group from file"""
        fp = filedialog.askopenfilename(
            title="Open group JSON",
            filetypes=[("Group JSON", "*.json"), ("All files", "*.*")]
        )
        if not fp:
            return
        try:
            self.group = load_group(fp)
            self.group_path = fp
            self.master.title(f"GroupSplit - {os.path.basename(fp)}")
            self.refresh_all()
        except (OSError, json.JSONDecodeError, KeyError, ValueError) as ex:
            logger.exception("Failed to open %s", fp)
            messagebox.showerror("Open failed", str(ex))

    def save_group(self):
        """Save group to file"""
        if not self.group_path:
            return self.save_as_group()
        try:
            save_group(self.group, self.group_path)
            self.master.title(f"GroupSplit - {os.path.basename(self.group_path)}")
        except OSError as ex:
            logger.exception("Failed to save %s", self.group_path)
            messagebox.showerror("Save failed", str(ex))

    def save_as_group(self):
        """Save group to new file"""
        fp = filedialog.asksaveasfilename(
            title="Save group JSON",
            defaultextension=".json",
            filetypes=[("Group JSON", "*.json")]
        )
        if not fp:
            return
        self.group_path = fp
        self.save_group()

    def export_excel_dialog(self):
        """Export to Excel file"""
        ok, start, end = self._get_report_dates()
        if not ok:
            return
        fp = filedialog.asksaveasfilename(
            title="Export Excel",
            defaultextension=".xlsx",
            filetypes=[("Excel Workbook", "*.xlsx")]
        )
        if not fp:
            return
        try:
            export_excel(self.group, fp, start, end)
            messagebox.showinfo("Export", f"Exported: {fp}")
        except (OSError, ValueError) as ex:
            logger.exception("Excel export failed")
            messagebox.showerror("Export failed", str(ex))

    # ---------- Refresh ----------
    def refresh_all(self):
        """Refresh all UI elements"""
        self.refresh_expenses()
        self.refresh_members()
        self.refresh_balances()

    def refresh_expenses(self):
        """Refresh expenses tree view, newest first"""
        for iid in self.exp_tree.get_children():
            self.exp_tree.delete(iid)

        members = self.group.members
        for e in sort_expenses_newest_first(self.group.expenses):
            shares = expense_shares(e, members)
            shares_txt = ", ".join(f"{m.name}:{shares[m.user_id]:.2f}" for m in members if shares[m.user_id])
            values = (
                e.date, e.description, member_name(members, e.paid_by),
                format_currency(e.amount), e.split_type, shares_txt, e.notes
            )
            self.exp_tree.insert("", "end", iid=e.id, values=values)

    def refresh_members(self):
        """Refresh member list"""
        self.members_list.delete(0, tk.END)
        for m in self.group.members:
            self.members_list.insert(tk.END, m.name)

    def _get_report_dates(self) -> Tuple[bool, Optional[date], Optional[date]]:
        """Parse report date range from inputs"""
        start = end = None
        s = self.rep_start.get().strip()
        e = self.rep_end.get().strip()
        try:
            if s:
                start = parse_date(s)
            if e:
                end = parse_date(e)
        except ValueError:
            messagebox.showerror("Invalid date", "Dates must be YYYY-MM-DD.")
            return False, None, None
        return True, start, end

    def refresh_balances(self):
        """Recompute balances and settlements from the current group"""
        ok, start, end = self._get_report_dates()
        if not ok:
            return

        for tree in (self.sum_tree, self.tr_tree):
            for iid in tree.get_children():
                tree.delete(iid)

        try:
            exps = filter_expenses_by_date(self.group.expenses, start, end)
            summaries, plan = settle_group(self.group.members, exps)
        except ValueError as ex:
            self.balance_note.set(f"Cannot calculate balances: {ex}")
            self.last_plan = None
            return
        self.last_plan = plan

        note = f"Total spent: {format_currency(group_total(exps))}"
        if not exps:
            note += "   No expenses to calculate balances"
        elif not plan.settlements:
            note += "   Everyone is settled up! No payments needed."
        if plan.residuals:
            note += f"   Warning: {len(plan.residuals)} member(s) could not be fully settled"
        self.balance_note.set(note)

        for s in summaries:
            self.sum_tree.insert("", "end", values=(
                s.name,
                format_currency(s.total_paid),
                format_currency(s.total_owed),
                f"{s.balance:.2f}",
                describe_balance(s.balance),
            ))

        for t in plan.settlements:
            self.tr_tree.insert("", "end", values=(t.payer_name, t.receiver_name, format_currency(t.amount)))

    # ---------- CSV Import/Export ----------
    def export_csv_dialog(self):
        """Export current expenses to CSV file"""
        if not self.group.expenses:
            messagebox.showinfo("Export CSV", "No expenses to export.")
            return

        fp = filedialog.asksaveasfilename(
            title="Export Expenses to CSV",
            defaultextension=".csv",
            filetypes=[("CSV files", "*.csv"), ("All files", "*.*")]
        )
        if not fp:
            return

        try:
            export_expenses_to_csv(self.group.expenses, fp)
            messagebox.showinfo("Export CSV", f"Exported {len(self.group.expenses)} expenses to:\n{fp}")
        except OSError as ex:
            messagebox.showerror("Export failed", str(ex))

    def export_settlements_dialog(self):
        """Export the current settlement plan to CSV"""
        if not self.last_plan or not self.last_plan.settlements:
            messagebox.showinfo("Export Settlements", "Everyone is settled up! No payments needed.")
            return
        fp = filedialog.asksaveasfilename(
            title="Export Settlements to CSV",
            defaultextension=".csv",
            filetypes=[("CSV files", "*.csv")]
        )
        if not fp:
            return
        try:
            export_settlements_to_csv(self.last_plan.settlements, fp)
        except OSError as ex:
            messagebox.showerror("Export failed", str(ex))

    def import_csv_dialog(self):
        """Import expenses from CSV file"""
        fp = filedialog.askopenfilename(
            title="Import Expenses from CSV",
            filetypes=[("CSV files", "*.csv"), ("All files", "*.*")]
        )
        if not fp:
            return

        try:
            imported_expenses = import_expenses_from_csv(fp)
        except (OSError, KeyError, ValueError) as ex:
            logger.exception("Failed to import %s", fp)
            messagebox.showerror("Import failed", str(ex))
            return

        if not imported_expenses:
            messagebox.showinfo("Import CSV", "No expenses found in CSV file.")
            return

        choice = messagebox.askyesnocancel(
            "Import CSV",
            f"Found {len(imported_expenses)} expenses in CSV.\n\n"
            "Yes: Append to current expenses\n"
            "No: Replace current expenses\n"
            "Cancel: Cancel import"
        )

        if choice is None:
            return
        elif choice:
            self.group.expenses = merge_imported_expenses(self.group.expenses, imported_expenses)
        else:
            self.group.expenses = merge_imported_expenses([], imported_expenses)

        known = {m.user_id for m in self.group.members}
        unknown = {e.paid_by for e in imported_expenses if e.paid_by not in known}
        if unknown:
            messagebox.showwarning(
                "Import CSV",
                f"{len(unknown)} payer id(s) are not members of this group; their payments are ignored in balances."
            )
        self.refresh_all()
