"""
Plain-text settlement summary, ready to paste into a chat
"""
from __future__ import annotations
from typing import Dict, List

from computations import compute_summary, compute_transfers, total_expense
from models import Ledger, PersonSummary, Transaction
from utils import format_amount


def describe_balance(s: PersonSummary) -> str:
    if s.balance > 0:
        return f"gets back {format_amount(s.balance)}"
    if s.balance < 0:
        return f"owes {format_amount(-s.balance)}"
    return "settled"


def format_transfers(transfers: List[Transaction]) -> List[str]:
    if not transfers:
        return ["Everyone is settled!"]
    return [f"{i}. {t.from_name} -> {t.to_name}: {format_amount(t.amount)}"
            for i, t in enumerate(transfers, 1)]


def build_summary_text(ledger: Ledger) -> str:
    """
    Summary with the group total, one line per member and the transfers to make.
    Only projects settlement results, nothing new is computed here.
    """
    summary: Dict[str, PersonSummary] = compute_summary(ledger.members, ledger.expenses)
    transfers = compute_transfers(summary)

    lines = [f"Total expense: {format_amount(total_expense(ledger.expenses))}", ""]
    lines.append("Members:")
    for s in summary.values():
        lines.append(
            f"- {s.name}: paid {format_amount(s.total_paid)}, "
            f"share {format_amount(s.total_share)}, {describe_balance(s)}"
        )
    lines += ["", "Transfers:"]
    lines += format_transfers(transfers)
    return "\n".join(lines)
