"""
Data models for SplitSettle
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List


class SplitMode(Enum):
    """How an amount is divided across a set of names"""
    EQUAL = "equal"
    CUSTOM = "custom"


@dataclass
class Participant:
    """Someone who owes part of an expense"""
    name: str
    share: int = 0  # ignored when the expense is split equally


@dataclass
class Expense:
    """Single shared expense"""
    id: str
    name: str
    amount: int  # smallest currency unit
    payers: List[str]
    participants: List[Participant]
    is_equal_split: bool = True
    payer_split_mode: SplitMode = SplitMode.EQUAL
    payer_amounts: Dict[str, int] = field(default_factory=dict)  # payer -> contributed amount
    date: str = ""  # YYYY-MM-DD

    @property
    def participant_names(self) -> List[str]:
        return [p.name for p in self.participants]


@dataclass
class Ledger:
    """Complete snapshot: members and their expenses"""
    members: List[str]
    expenses: List[Expense]
    version: int = 1


@dataclass
class PersonSummary:
    """Settlement figures for one member"""
    name: str
    total_paid: int = 0
    total_share: int = 0
    balance: int = 0  # positive -> should receive; negative -> should pay


@dataclass(frozen=True)
class Transaction:
    """Transfer that settles part of a debt"""
    from_name: str
    to_name: str
    amount: int
