"""
Settlement engine for SplitSettle: balance aggregation and debt simplification
"""
from __future__ import annotations
import math
from typing import Dict, Iterable, List, Sequence, Tuple

from models import Expense, PersonSummary, SplitMode, Transaction
from utils import round_amount

# Residues smaller than one currency unit count as settled.
SETTLED_EPS = 1


class EmptySplitError(AssertionError):
    """An expense without payers or participants reached the aggregator"""


def payer_contributions(e: Expense) -> List[Tuple[str, float]]:
    """
    How much each payer put into the expense, unrounded.
    Custom amounts only apply when there is more than one payer.
    """
    if not e.payers:
        raise EmptySplitError(f"expense {e.id!r} has no payers")
    if e.payer_split_mode is SplitMode.CUSTOM:
        if len(e.payers) > 1 and e.payer_amounts:
            return [(p, float(e.payer_amounts.get(p, 0))) for p in e.payers]
    elif e.payer_split_mode is not SplitMode.EQUAL:
        raise ValueError(f"unknown payer split mode: {e.payer_split_mode!r}")
    per_payer = e.amount / len(e.payers)
    return [(p, per_payer) for p in e.payers]


def participant_shares(e: Expense) -> List[Tuple[str, float]]:
    """How much each participant owes for the expense, unrounded"""
    if not e.participants:
        raise EmptySplitError(f"expense {e.id!r} has no participants")
    if e.is_equal_split:
        per_person = e.amount / len(e.participants)
        return [(p.name, per_person) for p in e.participants]
    return [(p.name, float(p.share)) for p in e.participants]


def apportion(exact: Dict[str, float]) -> Dict[str, int]:
    """
    Round each value to a whole unit so the rounded values add up to the
    rounded total (largest remainder). Ties go to the earlier name.
    """
    target = round_amount(sum(exact.values()))
    out = {p: int(math.floor(v)) for p, v in exact.items()}
    leftover = target - sum(out.values())
    by_remainder = sorted(exact, key=lambda p: exact[p] - out[p], reverse=True)
    # sorted() is stable, reverse=True keeps insertion order among equal keys
    for p in by_remainder[:leftover]:
        out[p] += 1
    return out


def compute_summary(members: Sequence[str], expenses: Iterable[Expense]) -> Dict[str, PersonSummary]:
    """
    Compute paid/share/balance for each member.
    Totals are accumulated unrounded and rounded once at the end; the balance
    is rounded from the unrounded paid - share, so it is always within one
    unit of the exact figure.
    Names that are not members (e.g. removed ones) are ignored.
    """
    paid = {m: 0.0 for m in members}
    share = {m: 0.0 for m in members}

    for e in expenses:
        for p, amt in payer_contributions(e):
            if p in paid:
                paid[p] += amt
        for p, amt in participant_shares(e):
            if p in share:
                share[p] += amt

    total_paid = apportion(paid)
    total_share = apportion(share)
    balance = apportion({m: paid[m] - share[m] for m in paid})
    return {
        m: PersonSummary(
            name=m,
            total_paid=total_paid[m],
            total_share=total_share[m],
            balance=balance[m],
        ) for m in paid
    }


def settle_balances(balances: Dict[str, float]) -> List[Transaction]:
    """
    Greedy settlement over net balances (positive: creditor, negative: debtor).
    Always pairs the first remaining debtor with the first remaining creditor,
    in the mapping's order. Yields at most N-1 transfers but is not guaranteed
    to be the smallest possible set.
    """
    open_balances = {p: float(b) for p, b in balances.items() if abs(b) >= SETTLED_EPS}

    transfers = []
    while open_balances:
        debtor = next((p for p, b in open_balances.items() if b < 0), None)
        creditor = next((p for p, b in open_balances.items() if b > 0), None)
        if debtor is None or creditor is None:
            break

        x = min(-open_balances[debtor], open_balances[creditor])
        transfers.append(Transaction(debtor, creditor, round_amount(x)))
        open_balances[debtor] += x
        open_balances[creditor] -= x

        if abs(open_balances[debtor]) < SETTLED_EPS:
            del open_balances[debtor]
        if abs(open_balances[creditor]) < SETTLED_EPS:
            del open_balances[creditor]

    return transfers


def compute_transfers(summary: Dict[str, PersonSummary]) -> List[Transaction]:
    """Compute transfers that settle every member's balance"""
    return settle_balances({name: s.balance for name, s in summary.items()})


def total_expense(expenses: Iterable[Expense]) -> int:
    """Sum of all expense amounts"""
    return sum(e.amount for e in expenses)
