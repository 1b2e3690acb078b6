import pytest
from openpyxl import load_workbook

from conftest import make_expense
from csv_handler import export_expenses_to_csv, import_expenses_from_csv
from excel_export import export_excel
from models import Ledger, SplitMode
from report import build_summary_text


@pytest.fixture
def ledger():
    return Ledger(
        members=["An", "Binh", "Chi"],
        expenses=[
            make_expense(90000, ["An"], ["An", "Binh", "Chi"], expense_id="e1", name="Dinner"),
            make_expense(30000, ["Binh", "Chi"], ["Binh", "Chi"], shares={"Binh": 10000, "Chi": 20000},
                         payer_amounts={"Binh": 30000, "Chi": 0}, expense_id="e2", name="Taxi"),
        ],
    )


# ---------- text summary ----------

def test_summary_text(ledger):
    text = build_summary_text(ledger)
    assert text.splitlines()[0] == "Total expense: 120,000"
    assert "- An: paid 90,000, share 30,000, gets back 60,000" in text
    assert "- Binh: paid 30,000, share 40,000, owes 10,000" in text
    assert "- Chi: paid 0, share 50,000, owes 50,000" in text
    assert text.endswith("1. Binh -> An: 10,000\n2. Chi -> An: 50,000")


def test_summary_text_when_settled():
    text = build_summary_text(Ledger(members=["An"], expenses=[]))
    assert "Total expense: 0" in text
    assert "- An: paid 0, share 0, settled" in text
    assert text.endswith("Everyone is settled!")


# ---------- CSV ----------

def test_csv_export_then_import(tmp_path, ledger):
    path = tmp_path / "expenses.csv"
    export_expenses_to_csv(ledger.expenses, str(path))
    assert import_expenses_from_csv(str(path)) == ledger.expenses


def test_csv_import_fills_missing_id_and_date(tmp_path):
    path = tmp_path / "in.csv"
    path.write_text(
        "name,amount,payers,participants\n"
        "Snacks,1200,An;Binh,An:0;Binh:0;Chi:0\n",
        encoding="utf-8",
    )
    [e] = import_expenses_from_csv(str(path))
    assert e.id
    assert e.date
    assert e.amount == 1200
    assert e.payers == ["An", "Binh"]
    assert e.payer_split_mode is SplitMode.EQUAL
    assert e.participant_names == ["An", "Binh", "Chi"]
    assert e.is_equal_split


def test_csv_import_rejects_bad_date(tmp_path):
    path = tmp_path / "in.csv"
    path.write_text("id,date,name,amount\nx,01/02/2024,Snacks,10\n", encoding="utf-8")
    with pytest.raises(ValueError):
        import_expenses_from_csv(str(path))


# ---------- Excel ----------

def test_excel_export_sheets(tmp_path, ledger):
    path = tmp_path / "report.xlsx"
    export_excel(ledger, str(path))

    wb = load_workbook(str(path))
    assert wb.sheetnames == ["Expenses", "Summary", "Transfers"]

    rows = list(wb["Expenses"].iter_rows(values_only=True))
    assert rows[0][:5] == ("Date", "Expense", "Amount", "Paid by", "Participants")
    assert rows[1][1:5] == ("Dinner", 90000, "An", "An, Binh, Chi")
    assert rows[1][5:] == (90000, 0, 0, 30000, 30000, 30000)
    assert rows[-1][0] == "TOTAL"
    assert rows[-1][2] == 120000

    summary = list(wb["Summary"].iter_rows(min_row=2, values_only=True))
    assert summary == [("An", 90000, 30000, 60000), ("Binh", 30000, 40000, -10000), ("Chi", 0, 50000, -50000)]

    transfers = list(wb["Transfers"].iter_rows(min_row=2, values_only=True))
    assert transfers == [("Binh", "An", 10000), ("Chi", "An", 50000)]


def test_excel_export_without_expenses(tmp_path):
    path = tmp_path / "empty.xlsx"
    export_excel(Ledger(members=["An"], expenses=[]), str(path))
    wb = load_workbook(str(path))
    assert wb["Expenses"].max_row == 1
    assert wb["Transfers"].max_row == 1
