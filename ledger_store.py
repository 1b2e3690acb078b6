"""
Expense record store: the only place the ledger is mutated
"""
from __future__ import annotations
import copy
import logging
import uuid
from typing import Dict, List, Optional, Sequence

from computations import compute_summary, compute_transfers, total_expense
from config import save_ledger
from models import Expense, Ledger, Participant, PersonSummary, SplitMode, Transaction
from utils import round_amount, safe_int, today_str
from validation import ExpenseValidationError, validate_expense

logger = logging.getLogger(__name__)


class DuplicateMemberError(ValueError):
    """A member with the same name (ignoring case) already exists"""


class LedgerStore:
    """
    Holds members and expenses and exposes a narrow mutation API.
    When `path` is given, every mutation writes the snapshot there.
    """

    def __init__(self, ledger: Optional[Ledger] = None, path: Optional[str] = None):
        self._ledger = copy.deepcopy(ledger) if ledger else Ledger(members=[], expenses=[])
        self.path = path
        for e in self._drop_orphaned():
            logger.warning("dropped expense %s (%s): no payers or participants left", e.id, e.name)

    # ---------- Read ----------
    @property
    def members(self) -> List[str]:
        return list(self._ledger.members)

    @property
    def expenses(self) -> List[Expense]:
        return copy.deepcopy(self._ledger.expenses)

    def snapshot(self) -> Ledger:
        """Independent copy of the current ledger"""
        return copy.deepcopy(self._ledger)

    def get_expense(self, expense_id: str) -> Expense:
        return copy.deepcopy(self._find(expense_id))

    def find_member(self, name: str) -> Optional[str]:
        """Stored spelling of a member name, matched case-insensitively"""
        key = name.strip().casefold()
        return next((m for m in self._ledger.members if m.casefold() == key), None)

    # ---------- Members ----------
    def add_member(self, name: str) -> str:
        name = (name or "").strip()
        if not name:
            raise ValueError("Member name is required.")
        if self.find_member(name) is not None:
            raise DuplicateMemberError(f"Member {name!r} already exists.")
        self._ledger.members.append(name)
        logger.info("added member %s", name)
        self._changed()
        return name

    def remove_member(self, name: str) -> List[Expense]:
        """
        Drop a member and scrub the name from every expense.
        Amounts are left as they are; nothing is redistributed.
        Expenses left without any payer or participant are deleted and returned.
        """
        name = self.find_member(name) or name
        self._ledger.members = [m for m in self._ledger.members if m != name]
        for e in self._ledger.expenses:
            e.payers = [p for p in e.payers if p != name]
            e.payer_amounts.pop(name, None)
            e.participants = [p for p in e.participants if p.name != name]
        dropped = self._drop_orphaned()
        logger.info("removed member %s, dropped %d expenses", name, len(dropped))
        self._changed()
        return copy.deepcopy(dropped)

    # ---------- Expenses ----------
    def add_expense(
        self,
        name: str,
        amount,
        payers: Sequence[str],
        participants: Sequence[Participant],
        is_equal_split: bool = True,
        payer_split_mode: SplitMode = SplitMode.EQUAL,
        payer_amounts: Optional[Dict[str, int]] = None,
    ) -> Expense:
        """Validate and append a new expense; raises ExpenseValidationError"""
        e = self._build(uuid.uuid4().hex, today_str(), name, amount, payers, participants,
                        is_equal_split, payer_split_mode, payer_amounts)
        self._ledger.expenses.append(e)
        logger.info("added expense %s (%s, %d)", e.id, e.name, e.amount)
        self._changed()
        return copy.deepcopy(e)

    def update_expense(
        self,
        expense_id: str,
        name: str,
        amount,
        payers: Sequence[str],
        participants: Sequence[Participant],
        is_equal_split: bool = True,
        payer_split_mode: SplitMode = SplitMode.EQUAL,
        payer_amounts: Optional[Dict[str, int]] = None,
    ) -> Expense:
        """Replace an expense by id, keeping its id and date"""
        old = self._find(expense_id)
        e = self._build(old.id, old.date, name, amount, payers, participants,
                        is_equal_split, payer_split_mode, payer_amounts)
        for i, x in enumerate(self._ledger.expenses):
            if x.id == expense_id:
                self._ledger.expenses[i] = e
                break
        logger.info("updated expense %s", expense_id)
        self._changed()
        return copy.deepcopy(e)

    def remove_expense(self, expense_id: str) -> None:
        self._find(expense_id)
        self._ledger.expenses = [e for e in self._ledger.expenses if e.id != expense_id]
        logger.info("removed expense %s", expense_id)
        self._changed()

    def add_expenses(self, expenses: Sequence[Expense], replace: bool = False) -> None:
        """
        Bulk insert already-built records (e.g. from a CSV import).
        Records whose id is already taken get a fresh one.
        """
        if replace:
            self._ledger.expenses = []
        taken = {e.id for e in self._ledger.expenses}
        for e in copy.deepcopy(list(expenses)):
            if e.id in taken:
                e.id = uuid.uuid4().hex
            taken.add(e.id)
            self._ledger.expenses.append(e)
        logger.info("%s %d expenses", "replaced with" if replace else "appended", len(expenses))
        self._changed()

    # ---------- Settlement ----------
    def summary(self) -> Dict[str, PersonSummary]:
        return compute_summary(self._ledger.members, self._ledger.expenses)

    def transfers(self) -> List[Transaction]:
        return compute_transfers(self.summary())

    def total_expense(self) -> int:
        return total_expense(self._ledger.expenses)

    # ---------- Internal ----------
    def _find(self, expense_id: str) -> Expense:
        e = next((x for x in self._ledger.expenses if x.id == expense_id), None)
        if e is None:
            raise KeyError(expense_id)
        return e

    @staticmethod
    def _build(expense_id, date, name, amount, payers, participants,
               is_equal_split, payer_split_mode, payer_amounts) -> Expense:
        errors = validate_expense(name, amount, payers, participants,
                                  is_equal_split, payer_split_mode, payer_amounts)
        if errors:
            raise ExpenseValidationError(errors)
        custom_payers = payer_split_mode is SplitMode.CUSTOM
        return Expense(
            id=expense_id,
            name=name.strip(),
            amount=round_amount(float(amount)),
            payers=list(payers),
            participants=[
                Participant(p.name, 0 if is_equal_split else safe_int(p.share))
                for p in participants
            ],
            is_equal_split=is_equal_split,
            payer_split_mode=payer_split_mode,
            payer_amounts={p: safe_int(v) for p, v in (payer_amounts or {}).items()}
            if custom_payers else {},
            date=date,
        )

    def _drop_orphaned(self) -> List[Expense]:
        orphaned = [e for e in self._ledger.expenses if not e.payers or not e.participants]
        if orphaned:
            self._ledger.expenses = [e for e in self._ledger.expenses if e.payers and e.participants]
        return orphaned

    def _changed(self) -> None:
        if self.path:
            save_ledger(self.path, self._ledger)
