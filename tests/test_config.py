import json

import pytest

from config import (
    default_state_path,
    dict_to_ledger,
    get_default_ledger,
    ledger_to_dict,
    load_ledger,
    log_level,
    save_ledger,
)
from conftest import make_expense
from models import Ledger, Participant, SplitMode


def test_default_ledger_uses_members_file(data_home):
    data_home.mkdir()
    (data_home / "members.json").write_text(json.dumps({"members": ["Lac", "Minh"]}), encoding="utf-8")
    ledger = get_default_ledger()
    assert ledger.members == ["Lac", "Minh"]
    assert ledger.expenses == []


def test_default_ledger_is_empty_without_members_file(data_home):
    assert get_default_ledger().members == []
    assert data_home.is_dir()


def test_default_state_path_lives_in_data_home(data_home):
    assert default_state_path() == str(data_home / "state.json")


def test_log_level_from_environment(monkeypatch):
    monkeypatch.delenv("SPLITSETTLE_LOG_LEVEL", raising=False)
    assert log_level() == "WARNING"
    monkeypatch.setenv("SPLITSETTLE_LOG_LEVEL", "debug")
    assert log_level() == "DEBUG"


def test_save_then_load(tmp_path):
    e = make_expense(900, ["A", "B"], ["A", "B"], shares={"A": 400, "B": 500},
                     payer_amounts={"A": 600, "B": 300})
    ledger = Ledger(members=["A", "B"], expenses=[e])
    path = tmp_path / "nested" / "state.json"

    save_ledger(str(path), ledger)
    loaded = load_ledger(str(path))

    assert loaded == ledger
    assert loaded.expenses[0].payer_split_mode is SplitMode.CUSTOM
    assert [p.name for p in tmp_path.joinpath("nested").iterdir()] == ["state.json"]


def test_snapshot_keeps_non_ascii_names(tmp_path):
    path = tmp_path / "state.json"
    save_ledger(str(path), Ledger(members=["Lạc", "Hào"], expenses=[]))
    assert "Lạc" in path.read_text(encoding="utf-8")


def test_missing_snapshot_gives_default_ledger(data_home, tmp_path):
    ledger = load_ledger(str(tmp_path / "missing.json"))
    assert ledger.members == []
    assert ledger.expenses == []


def test_corrupt_snapshot_raises(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(json.JSONDecodeError):
        load_ledger(str(path))


def test_reads_browser_snapshot_keys():
    d = {
        "members": ["Lạc", "Minh", "Duy"],
        "expenses": [{
            "id": 1717000000000,
            "name": "Lẩu",
            "amount": 300000,
            "paidBy": ["Lạc", "Minh"],
            "paidBySplitMode": "custom",
            "paidByAmounts": {"Lạc": 200000, "Minh": 100000},
            "participants": [{"name": "Lạc", "share": 0}, {"name": "Duy", "share": 0}],
            "isEqualSplit": True,
            "date": "1/6/2024",
        }],
    }
    ledger = dict_to_ledger(d)
    e = ledger.expenses[0]
    assert e.id == "1717000000000"
    assert e.payers == ["Lạc", "Minh"]
    assert e.payer_split_mode is SplitMode.CUSTOM
    assert e.payer_amounts == {"Lạc": 200000, "Minh": 100000}
    assert e.participants == [Participant("Lạc", 0), Participant("Duy", 0)]
    assert e.is_equal_split is True


def test_older_browser_snapshot_defaults_to_equal_payer_split():
    d = {"members": ["A"], "expenses": [{
        "id": 1, "name": "x", "amount": 10, "paidBy": ["A"],
        "participants": [{"name": "A", "share": 0}], "isEqualSplit": True,
    }]}
    e = dict_to_ledger(d).expenses[0]
    assert e.payer_split_mode is SplitMode.EQUAL
    assert e.payer_amounts == {}


def test_ledger_to_dict_shape():
    d = ledger_to_dict(Ledger(members=["A"], expenses=[make_expense(10, ["A"], ["A"])]))
    assert d["version"] == 1
    assert d["members"] == ["A"]
    assert d["expenses"][0]["participants"] == [{"name": "A", "share": 0}]
    assert d["expenses"][0]["is_equal_split"] is True
