"""
GroupSplit GUI
- Record a group's members and shared expenses (split equally or by custom amounts).
- See who owes what and the transfers that settle everyone up.
- Export CSV and an Excel report (expenses, summary, settlements).

Run:
  python group_split_gui.py

Dependencies:
  pip install openpyxl
(Tkinter ships with most Python distributions; on some Linux you may need: sudo apt-get install python3-tk)
"""
from __future__ import annotations
import logging

try:
    import tkinter as tk
except ModuleNotFoundError:
    tk = None


def main():
    """Main entry point for the application"""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    if tk is None:
        raise RuntimeError(
            'tkinter is not available. Install it (e.g., on Ubuntu: sudo apt-get install python3-tk) '
            'and re-run to use the GUI.'
        )

    from main_app import GroupSplitApp

    root = tk.Tk()
    GroupSplitApp(root)
    root.mainloop()


if __name__ == "__main__":
    main()
