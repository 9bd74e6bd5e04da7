from datetime import date, datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from pfet.budgets.engine import compute_budget_spend, period_window, summarize_budgets
from pfet.budgets.manager import BudgetBook
from pfet.core.errors import DuplicateBudgetError, InvalidInputError, RecordNotFoundError
from pfet.core.schemas import Budget, BudgetPeriod, Expense

NOW = date(2025, 6, 18)  # a Wednesday

def _budget(id="b1", category="food", amount=10000, **kw):
    return Budget(id=id, category_id=category, amount=amount, start_date=date(2025, 1, 1), **kw)

def _expenses(*rows):
    return [Expense(amount=a, date=d, category_id=c) for a, d, c in rows]

NOISE = [
    (900, date(2025, 5, 31), "food"),    # last month
    (700, date(2025, 6, 19), "food"),    # after now
    (5000, date(2025, 6, 10), "rent"),   # other category
]

def test_period_windows():
    assert period_window("weekly", NOW) == (date(2025, 6, 15), NOW)
    assert period_window(BudgetPeriod.MONTHLY, NOW) == (date(2025, 6, 1), NOW)
    assert period_window("quarterly", NOW) == (date(2025, 4, 1), NOW)
    assert period_window("yearly", NOW) == (date(2025, 1, 1), NOW)
    sunday = date(2025, 6, 15)
    assert period_window("weekly", sunday)[0] == sunday
    assert period_window("quarterly", date(2025, 12, 31))[0] == date(2025, 10, 1)
    assert period_window("monthly", datetime(2025, 6, 18, 23, 59)) == (date(2025, 6, 1), NOW)

def test_unknown_period_rejected():
    with pytest.raises(InvalidInputError):
        period_window("fortnightly", NOW)

def test_near_limit_budget():
    exps = _expenses((5000, date(2025, 6, 1), "food"), (3500, NOW, "food"), *NOISE)
    r = compute_budget_spend(_budget(), exps, NOW)
    assert r.spent == 8500
    assert r.remaining == 1500
    assert r.percentage == 85
    assert r.is_near_limit
    assert not r.is_over_budget
    assert (r.period_start, r.period_end) == (date(2025, 6, 1), NOW)

def test_over_budget():
    exps = _expenses((12000, date(2025, 6, 5), "food"), *NOISE)
    r = compute_budget_spend(_budget(), exps, NOW)
    assert r.spent == 12000
    assert r.remaining == 0
    assert r.percentage == 100
    assert r.is_over_budget
    assert not r.is_near_limit

def test_exactly_at_budget_is_not_over():
    r = compute_budget_spend(_budget(), _expenses((10000, NOW, "food")), NOW)
    assert not r.is_over_budget
    assert r.is_near_limit
    assert r.remaining == 0

def test_custom_threshold_and_empty_spend():
    b = _budget(alert_threshold=90)
    r = compute_budget_spend(b, _expenses((8500, NOW, "food")), NOW)
    assert not r.is_near_limit
    empty = compute_budget_spend(b, [], NOW)
    assert empty.spent == 0 and empty.percentage == 0 and empty.remaining == 10000

def test_spend_is_idempotent():
    b = _budget(period="weekly")
    exps = _expenses((1000, date(2025, 6, 15), "food"), (2000, date(2025, 6, 14), "food"))
    first = compute_budget_spend(b, exps, NOW)
    assert first.spent == 1000
    assert compute_budget_spend(b, exps, NOW) == first

def test_budget_validation():
    with pytest.raises(ValidationError):
        _budget(amount=0)
    with pytest.raises(ValidationError):
        _budget(alert_threshold=120)
    with pytest.raises(ValidationError):
        _budget(end_date=date(2024, 12, 31))

def test_one_budget_per_category():
    book = BudgetBook([_budget()])
    with pytest.raises(DuplicateBudgetError):
        book.create_budget(_budget(id="b2", amount=500))
    book.create_budget(_budget(id="b2", category="rent", amount=30000))
    with pytest.raises(DuplicateBudgetError):
        book.update_budget("b2", category_id="food")
    updated = book.update_budget("b2", amount=Decimal("35000"))
    assert updated.amount == 35000
    assert book.get("b2") is updated

def test_delete_frees_the_category():
    book = BudgetBook([_budget()])
    book.delete_budget("b1")
    with pytest.raises(RecordNotFoundError):
        book.get("b1")
    book.create_budget(_budget(id="b3"))
    assert [b.id for b in book.list_budgets()] == ["b3"]

def test_summary_counts_monthly_budgets_only():
    budgets = [_budget(), _budget(id="b2", category="fuel", amount=20000, period="weekly")]
    exps = _expenses((9000, NOW, "food"), (25000, NOW, "fuel"), *NOISE)
    s = summarize_budgets(budgets, exps, NOW)
    assert s.total_budgeted == 10000
    assert s.total_spent == 34000
    assert [a.budget_id for a in s.alerts] == ["b1", "b2"]
    assert BudgetBook(budgets).summary(exps, NOW) == s

def test_reused_budget_id_rejected():
    book = BudgetBook([_budget()])
    with pytest.raises(DuplicateBudgetError):
        book.create_budget(_budget(category="rent"))
    assert [b.category_id for b in book.list_budgets()] == ["food"]
    with pytest.raises(InvalidInputError):
        book.update_budget("b1", id="b9")
