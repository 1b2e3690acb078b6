"""
CSV export and import functionality for SplitSettle
"""
from __future__ import annotations
import csv
import uuid
from typing import Dict, List

from models import Expense, Participant, SplitMode
from utils import parse_date, safe_int, today_str

COLUMNS = ['id', 'date', 'name', 'amount', 'payers', 'payer_split_mode',
           'payer_amounts', 'participants', 'is_equal_split']


def _pairs_to_str(pairs) -> str:
    return ';'.join(f"{k}:{v}" for k, v in pairs)


def _str_to_pairs(s: str) -> Dict[str, int]:
    out = {}
    for pair in (s or '').split(';'):
        if ':' in pair:
            k, _, v = pair.rpartition(':')
            out[k.strip()] = safe_int(v.strip())
    return out


def export_expenses_to_csv(expenses: List[Expense], filepath: str) -> None:
    """
    Export expenses list to CSV file
    payers: "A;B", payer_amounts: "A:100;B:200", participants: "A:0;B:0" (name:share)
    """
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(COLUMNS)
        for e in expenses:
            writer.writerow([
                e.id,
                e.date,
                e.name,
                e.amount,
                ';'.join(e.payers),
                e.payer_split_mode.value,
                _pairs_to_str(e.payer_amounts.items()),
                _pairs_to_str((p.name, p.share) for p in e.participants),
                'yes' if e.is_equal_split else 'no',
            ])


def import_expenses_from_csv(filepath: str) -> List[Expense]:
    """
    Import expenses list from CSV file
    Missing ids are generated, missing dates default to today.
    Raises ValueError on a malformed date or split mode.
    """
    expenses = []

    with open(filepath, 'r', encoding='utf-8') as f:
        reader = csv.DictReader(f)

        for row in reader:
            date = (row.get('date') or '').strip()
            if date:
                parse_date(date)
            participants = [Participant(n, s) for n, s in _str_to_pairs(row.get('participants')).items()]
            expense = Expense(
                id=(row.get('id') or '').strip() or uuid.uuid4().hex,
                date=date or today_str(),
                name=row.get('name', ''),
                amount=safe_int(row.get('amount')),
                payers=[p.strip() for p in (row.get('payers') or '').split(';') if p.strip()],
                payer_split_mode=SplitMode((row.get('payer_split_mode') or 'equal').strip().lower()),
                payer_amounts=_str_to_pairs(row.get('payer_amounts')),
                participants=participants,
                is_equal_split=(row.get('is_equal_split') or 'yes').strip().lower() in ('yes', 'true', '1'),
            )
            expenses.append(expense)

    return expenses
