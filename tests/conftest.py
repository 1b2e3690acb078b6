import pytest

from ledger_store import LedgerStore
from models import Expense, Ledger, Participant, SplitMode


def make_expense(amount, payers, participants, shares=None, payer_amounts=None,
                 expense_id="e1", name="Dinner"):
    """Expense with equal splits unless shares / payer_amounts are given"""
    return Expense(
        id=expense_id,
        name=name,
        amount=amount,
        payers=list(payers),
        participants=[Participant(p, (shares or {}).get(p, 0)) for p in participants],
        is_equal_split=shares is None,
        payer_split_mode=SplitMode.CUSTOM if payer_amounts else SplitMode.EQUAL,
        payer_amounts=dict(payer_amounts or {}),
        date="2024-05-01",
    )


@pytest.fixture(autouse=True)
def data_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    monkeypatch.setenv("SPLITSETTLE_HOME", str(home))
    return home


@pytest.fixture
def store():
    return LedgerStore(Ledger(members=["An", "Binh", "Chi"], expenses=[]))
