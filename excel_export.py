"""
Excel export functionality for SplitSettle
"""
from __future__ import annotations

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from computations import (
    compute_summary,
    compute_transfers,
    participant_shares,
    payer_contributions,
    total_expense,
)
from models import Ledger

AMOUNT_FORMAT = "#,##0"


def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    thin = Side(style="thin", color="A0A0A0")
    for cell in ws[row]:
        cell.font = Font(bold=True, color="FFFFFF")
        cell.fill = PatternFill("solid", fgColor="4F81BD")
        cell.alignment = Alignment(horizontal="center", vertical="center")
        cell.border = Border(left=thin, right=thin, top=thin, bottom=thin)


def _autosize_columns(ws, min_width=10, max_width=45):
    """Auto-size columns based on content"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        longest = max((len(str(c.value)) for c in ws[letter] if c.value is not None), default=0)
        ws.column_dimensions[letter].width = max(min_width, min(max_width, longest + 2))


def _format_amounts(ws, first_col, last_col):
    for r in range(2, ws.max_row + 1):
        for c in range(first_col, last_col + 1):
            ws.cell(r, c).number_format = AMOUNT_FORMAT


def export_excel(ledger: Ledger, filepath: str) -> None:
    """
    Export ledger to Excel file with three sheets:
    - Expenses: one row per expense, with each member's paid and owed part
    - Summary: paid / share / balance per member
    - Transfers: who pays whom
    """
    wb = Workbook()
    wb.remove(wb.active)

    members = ledger.members

    # Expenses sheet
    ws = wb.create_sheet("Expenses")
    headers = ["Date", "Expense", "Amount", "Paid by", "Participants"]
    headers += [f"{m} paid" for m in members] + [f"{m} owes" for m in members]
    ws.append(headers)
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for e in ledger.expenses:
        paid = {m: 0.0 for m in members}
        owed = {m: 0.0 for m in members}
        for p, amt in payer_contributions(e):
            if p in paid:
                paid[p] += amt
        for p, amt in participant_shares(e):
            if p in owed:
                owed[p] += amt
        row = [e.date, e.name, e.amount, ", ".join(e.payers), ", ".join(e.participant_names)]
        row += [paid[m] for m in members] + [owed[m] for m in members]
        ws.append(row)

    if ledger.expenses:
        ws.append(["TOTAL", "", total_expense(ledger.expenses)] + [""] * (len(headers) - 3))
        trow = ws.max_row
        ws.cell(trow, 1).font = Font(bold=True)
        # per-member column totals as formulas
        for col in range(6, len(headers) + 1):
            letter = get_column_letter(col)
            ws.cell(trow, col).value = f"=SUM({letter}2:{letter}{trow - 1})"
    _format_amounts(ws, 3, 3)
    _format_amounts(ws, 6, len(headers))
    _autosize_columns(ws)

    # Summary sheet
    ws = wb.create_sheet("Summary")
    summary = compute_summary(members, ledger.expenses)
    ws.append(["Member", "Paid", "Share", "Balance (Paid-Share)"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for s in summary.values():
        ws.append([s.name, s.total_paid, s.total_share, s.balance])
    _format_amounts(ws, 2, 4)
    _autosize_columns(ws)

    # Transfers sheet
    ws = wb.create_sheet("Transfers")
    ws.append(["From (Debtor)", "To (Creditor)", "Amount"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for t in compute_transfers(summary):
        ws.append([t.from_name, t.to_name, t.amount])
    _format_amounts(ws, 3, 3)
    _autosize_columns(ws)

    wb.save(filepath)
