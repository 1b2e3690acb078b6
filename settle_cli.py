"""
SplitSettle command line
- Keep a group's members and shared expenses in a JSON ledger.
- Print who owes what and the transfers that settle everything.
- Export the ledger to CSV or an Excel workbook.

Run:
  splitsettle add-member An
  splitsettle add-expense Dinner 300000 --payer An
  splitsettle summary
"""
from __future__ import annotations
import argparse
import json
import logging
import sys
from typing import Dict, List, Optional

from config import default_state_path, load_ledger, log_level
from csv_handler import export_expenses_to_csv, import_expenses_from_csv
from excel_export import export_excel
from ledger_store import LedgerStore
from models import Participant, SplitMode
from report import build_summary_text
from utils import format_amount, safe_int
from validation import ExpenseValidationError, validate_record

logger = logging.getLogger(__name__)


def _parse_assignments(values: List[str]) -> Dict[str, str]:
    """Turn ["An=1000", "Binh=2000"] into {"An": "1000", "Binh": "2000"}"""
    out = {}
    for v in values:
        name, sep, amount = v.rpartition("=")
        if not sep or not name.strip():
            raise ValueError(f"expected NAME=AMOUNT, got {v!r}")
        out[name.strip()] = amount.strip()
    return out


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="splitsettle", description="Settle shared group expenses.")
    parser.add_argument("--ledger", help="ledger JSON file (default: state.json in the data directory)")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="more logging (-vv for debug)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("members", help="list members")
    p = sub.add_parser("add-member", help="add a member")
    p.add_argument("name")
    p = sub.add_parser("remove-member", help="remove a member from the ledger and its expenses")
    p.add_argument("name")

    p = sub.add_parser("add-expense", help="record an expense")
    p.add_argument("name")
    p.add_argument("amount")
    p.add_argument("--payer", action="append", default=[], help="who paid (repeatable)")
    p.add_argument("--paid", action="append", default=[], metavar="NAME=AMOUNT",
                   help="custom payer contribution (repeatable)")
    p.add_argument("--participant", action="append", default=[],
                   help="who shares the cost (repeatable, default: everyone)")
    p.add_argument("--share", action="append", default=[], metavar="NAME=AMOUNT",
                   help="custom participant share (repeatable)")

    sub.add_parser("expenses", help="list expenses")
    p = sub.add_parser("remove-expense", help="delete an expense by id")
    p.add_argument("expense_id")

    sub.add_parser("summary", help="print balances and transfers")

    p = sub.add_parser("export-excel", help="write an Excel report")
    p.add_argument("path")
    p = sub.add_parser("export-csv", help="write expenses to CSV")
    p.add_argument("path")
    p = sub.add_parser("import-csv", help="read expenses from CSV")
    p.add_argument("path")
    p.add_argument("--replace", action="store_true", help="replace instead of append")
    return parser


def _add_expense(store: LedgerStore, args) -> int:
    paid = _parse_assignments(args.paid)
    shares = _parse_assignments(args.share)

    payers = list(args.payer)
    for name in paid:
        if name not in payers:
            payers.append(name)
    custom_payers = bool(paid) and len(payers) > 1

    if shares:
        participants = [Participant(n, safe_int(v)) for n, v in shares.items()]
    else:
        names = args.participant or store.members
        participants = [Participant(n) for n in names]

    e = store.add_expense(
        args.name,
        args.amount,
        payers,
        participants,
        is_equal_split=not shares,
        payer_split_mode=SplitMode.CUSTOM if custom_payers else SplitMode.EQUAL,
        payer_amounts={n: safe_int(v) for n, v in paid.items()} if custom_payers else None,
    )
    print(f"Added {e.name} ({format_amount(e.amount)}) as {e.id}")
    return 0


def _import_csv(store: LedgerStore, path: str, replace: bool) -> int:
    imported = import_expenses_from_csv(path)
    if not imported:
        print("No expenses found in CSV file.")
        return 0
    rejected = 0
    accepted = []
    for e in imported:
        errors = validate_record(e)
        if errors:
            rejected += 1
            print(f"Skipped {e.id}: {' '.join(errors)}", file=sys.stderr)
        else:
            accepted.append(e)
    store.add_expenses(accepted, replace=replace)
    print(f"{'Replaced with' if replace else 'Appended'} {len(accepted)} expenses.")
    return 2 if rejected else 0


def run(args, store: LedgerStore) -> int:
    cmd = args.command
    if cmd == "members":
        for m in store.members:
            print(m)
    elif cmd == "add-member":
        print(f"Added {store.add_member(args.name)}")
    elif cmd == "remove-member":
        if store.find_member(args.name) is None:
            print(f"No member named {args.name!r}", file=sys.stderr)
            return 1
        for e in store.remove_member(args.name):
            print(f"Deleted {e.name} ({e.id}): nobody left to pay or share it")
    elif cmd == "add-expense":
        return _add_expense(store, args)
    elif cmd == "expenses":
        for e in store.expenses:
            print(f"{e.id}  {e.date}  {e.name}  {format_amount(e.amount)}  "
                  f"paid by {', '.join(e.payers)}  for {', '.join(e.participant_names)}")
    elif cmd == "remove-expense":
        try:
            store.remove_expense(args.expense_id)
        except KeyError:
            print(f"No expense with id {args.expense_id!r}", file=sys.stderr)
            return 1
    elif cmd == "summary":
        print(build_summary_text(store.snapshot()))
    elif cmd == "export-excel":
        export_excel(store.snapshot(), args.path)
        print(f"Exported: {args.path}")
    elif cmd == "export-csv":
        export_expenses_to_csv(store.expenses, args.path)
        print(f"Exported {len(store.expenses)} expenses to {args.path}")
    elif cmd == "import-csv":
        return _import_csv(store, args.path, args.replace)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command line"""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = {0: log_level(), 1: "INFO"}.get(args.verbose, "DEBUG")
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    path = args.ledger or default_state_path()
    try:
        store = LedgerStore(load_ledger(path), path=path)
        return run(args, store)
    except ExpenseValidationError as ex:
        for msg in ex.errors:
            print(msg, file=sys.stderr)
        return 2
    except (OSError, ValueError, json.JSONDecodeError) as ex:
        logger.debug("command %s failed", args.command, exc_info=True)
        print(f"Error: {ex}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
