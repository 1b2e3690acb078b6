"""
Configuration and snapshot loading/saving for SplitSettle
"""
from __future__ import annotations
import json
import logging
import os
import tempfile
from typing import List

from models import Expense, Ledger, Participant, SplitMode
from utils import app_dir, round_amount

logger = logging.getLogger(__name__)

STATE_FILE = "state.json"
MEMBERS_FILE = "members.json"
LOG_LEVEL_ENV = "SPLITSETTLE_LOG_LEVEL"


def default_state_path() -> str:
    """Path of the ledger snapshot inside the data directory"""
    return os.path.join(app_dir(), STATE_FILE)


def log_level() -> str:
    """Configured log level name, WARNING unless overridden"""
    return os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()


def load_members(path: str) -> List[str]:
    """Load default member list from JSON file"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return [str(m) for m in data.get("members", [])]
    except FileNotFoundError:
        return []


def get_default_ledger() -> Ledger:
    """Create a fresh ledger seeded with the configured members"""
    members = load_members(os.path.join(app_dir(), MEMBERS_FILE))
    return Ledger(members=members, expenses=[])


def expense_to_dict(e: Expense) -> dict:
    return {
        "id": e.id,
        "name": e.name,
        "amount": e.amount,
        "payers": list(e.payers),
        "payer_split_mode": e.payer_split_mode.value,
        "payer_amounts": dict(e.payer_amounts),
        "participants": [{"name": p.name, "share": p.share} for p in e.participants],
        "is_equal_split": e.is_equal_split,
        "date": e.date,
    }


def dict_to_expense(d: dict) -> Expense:
    """
    Build an Expense from its JSON form.
    Also reads snapshots written by the browser version of the app
    (paidBy / paidBySplitMode / paidByAmounts / isEqualSplit).
    """
    payers = d.get("payers", d.get("paidBy", []))
    mode = d.get("payer_split_mode", d.get("paidBySplitMode", SplitMode.EQUAL.value))
    payer_amounts = d.get("payer_amounts", d.get("paidByAmounts")) or {}
    is_equal = d.get("is_equal_split", d.get("isEqualSplit", True))
    participants = [
        Participant(name=str(p["name"]), share=round_amount(float(p.get("share") or 0)))
        for p in d.get("participants", [])
    ]
    return Expense(
        id=str(d["id"]),
        name=d.get("name", ""),
        amount=round_amount(float(d.get("amount", 0))),
        payers=[str(p) for p in payers],
        participants=participants,
        is_equal_split=bool(is_equal),
        payer_split_mode=SplitMode(mode),
        payer_amounts={str(k): round_amount(float(v or 0)) for k, v in payer_amounts.items()},
        date=str(d.get("date", "")),
    )


def ledger_to_dict(ledger: Ledger) -> dict:
    """Convert Ledger object to dictionary for JSON serialization"""
    return {
        "version": ledger.version,
        "members": list(ledger.members),
        "expenses": [expense_to_dict(e) for e in ledger.expenses],
    }


def dict_to_ledger(d: dict) -> Ledger:
    """Convert dictionary from JSON to Ledger object"""
    return Ledger(
        version=d.get("version", 1),
        members=[str(m) for m in d.get("members", [])],
        expenses=[dict_to_expense(e) for e in d.get("expenses", [])],
    )


def load_ledger(path: str) -> Ledger:
    """Load a ledger snapshot; a missing file gives the default ledger"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.debug("no snapshot at %s, starting from defaults", path)
        return get_default_ledger()
    ledger = dict_to_ledger(data)
    logger.debug("loaded %d members and %d expenses from %s",
                 len(ledger.members), len(ledger.expenses), path)
    return ledger


def save_ledger(path: str, ledger: Ledger) -> None:
    """Write the snapshot atomically (temp file in the same directory, then replace)"""
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".state-", suffix=".json", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(ledger_to_dict(ledger), f, ensure_ascii=False, indent=2)
        os.replace(tmp, path)
    except BaseException:
        os.unlink(tmp)
        raise
    logger.debug("saved snapshot to %s", path)
