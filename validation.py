"""
Input validation for expense records
"""
from __future__ import annotations
import math
from typing import Dict, List, Optional, Sequence

from models import Expense, Participant, SplitMode
from utils import format_amount, round_amount


class ExpenseValidationError(ValueError):
    """Expense input rejected; `errors` holds every problem found"""

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


def _as_number(x) -> Optional[float]:
    if isinstance(x, bool):
        return None
    try:
        value = float(x)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def validate_expense(
    name: Optional[str],
    amount,
    payers: Optional[Sequence[str]],
    participants: Optional[Sequence[Participant]],
    is_equal_split: bool = True,
    payer_split_mode: SplitMode = SplitMode.EQUAL,
    payer_amounts: Optional[Dict[str, int]] = None,
) -> List[str]:
    """
    Check an expense before it is stored.
    Returns a list of error messages; an empty list means the input is valid.
    Every check runs so all problems can be reported at once.
    """
    errors = []
    payers = list(payers or [])
    participants = list(participants or [])
    value = _as_number(amount)

    if not name or not str(name).strip():
        errors.append("Please enter an expense name.")

    # the stored amount is the rounded one, so it must be at least one unit
    if value is None or not round_amount(value) > 0:
        errors.append("Please enter a valid amount.")

    if not payers:
        errors.append("Please choose who paid.")

    if not participants:
        errors.append("Please choose at least one participant.")

    expected = round_amount(value) if value is not None else None

    if len(payers) > 1 and payer_split_mode is SplitMode.CUSTOM:
        amounts = payer_amounts or {}
        paid = round_amount(sum(_as_number(amounts.get(p)) or 0.0 for p in payers))
        if expected is None or paid != expected:
            errors.append(
                f"Payer amounts must add up to {format_amount(expected or 0)}. "
                f"Currently: {format_amount(paid)}."
            )

    if not is_equal_split and participants:
        shared = round_amount(sum(_as_number(getattr(p, "share", 0)) or 0.0 for p in participants))
        if expected is None or shared != expected:
            errors.append(
                f"Shares must add up to {format_amount(expected or 0)}. "
                f"Currently: {format_amount(shared)}."
            )

    return errors


def validate_record(e: Expense) -> List[str]:
    """Validate an already-built expense record"""
    return validate_expense(
        e.name,
        e.amount,
        e.payers,
        e.participants,
        is_equal_split=e.is_equal_split,
        payer_split_mode=e.payer_split_mode,
        payer_amounts=e.payer_amounts,
    )
