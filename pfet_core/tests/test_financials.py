from datetime import date

import pandas as pd
import pytest

from pfet.core.errors import InvalidInputError
from pfet.core.schemas import Expense, Income
from pfet.reports.financials import CashflowReport

NOW = date(2025, 6, 18)

def _report():
    incomes = [
        Income(amount=70000, date=date(2025, 6, 1)),
        Income(amount=30000, date=date(2025, 6, 15)),
        Income(amount=80000, date=date(2025, 5, 1)),
    ]
    expenses = [
        Expense(amount=35000, date=date(2025, 6, 2), category_id="rent"),
        Expense(amount=15000, date=date(2025, 6, 10), category_id="food"),
        Expense(amount=10000, date=date(2025, 6, 12)),
    ]
    return CashflowReport(incomes, expenses, NOW)

def test_current_month_snapshot():
    snap = _report().current_month()
    assert snap.income == 100000
    assert snap.expenses == 60000
    assert snap.last_month_income == 80000
    assert snap.income_change == 25.0
    # nothing spent last month
    assert snap.expense_change == 100.0
    assert snap.savings_rate == 40

def test_empty_report():
    snap = CashflowReport([], [], NOW).current_month()
    assert snap.savings_rate == 0
    assert snap.income_change == 0.0
    assert snap.to_dict()["expenses"] == 0.0

def test_monthly_totals():
    table = _report().monthly_totals()
    assert len(table) == 6
    assert table["month"].iloc[-1] == pd.Period("2025-06", freq="M")
    assert table["income"].tolist() == [0.0, 0.0, 0.0, 0.0, 80000.0, 100000.0]
    assert table["expenses"].iloc[-1] == 60000.0
    assert len(_report().monthly_totals(3)) == 3

def test_expenses_by_category():
    cats = _report().expenses_by_category()
    assert cats["category_id"].tolist() == ["rent", "food", "uncategorized"]
    assert abs(cats["share"].sum() - 100.0) < 1e-9
    only_rent = _report().expenses_by_category(end=date(2025, 6, 5))
    assert only_rent["category_id"].tolist() == ["rent"]

def test_monthly_totals_respects_zero_months():
    table = _report().monthly_totals(0)
    assert table.empty
    assert list(table.columns) == ["month", "income", "expenses"]
    with pytest.raises(InvalidInputError):
        _report().monthly_totals(-1)
