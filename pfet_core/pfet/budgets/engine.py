"""
Budget spend aggregation over the current budget period.
"""
from dataclasses import dataclass, asdict, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, List, Tuple, Union

from ..core.errors import InvalidInputError
from ..core.schemas import Budget, BudgetPeriod, Expense
from ..core.utils import as_date, decimal_sum

ZERO = Decimal("0")
HUNDRED = Decimal("100")

@dataclass(frozen=True)
class BudgetSpendResult:
    budget_id: str
    category_id: str
    period_start: date
    period_end: date
    spent: Decimal
    remaining: Decimal
    percentage: Decimal  # capped at 100 for display
    is_over_budget: bool
    is_near_limit: bool

    def to_dict(self):
        return asdict(self)

def period_window(period: Union[BudgetPeriod, str], now: Union[date, datetime, None] = None) -> Tuple[date, date]:
    """First day of the current period and ``now``, both inclusive."""
    today = as_date(now)
    try:
        period = BudgetPeriod(period)
    except ValueError:
        raise InvalidInputError(f"Unknown budget period: {period!r}")
    if period is BudgetPeriod.WEEKLY:
        # weeks start on Sunday; date.weekday() has Monday == 0
        start = today - timedelta(days=(today.weekday() + 1) % 7)
    elif period is BudgetPeriod.MONTHLY:
        start = today.replace(day=1)
    elif period is BudgetPeriod.QUARTERLY:
        start = date(today.year, (today.month - 1) // 3 * 3 + 1, 1)
    else:
        start = date(today.year, 1, 1)
    return start, today

def compute_budget_spend(budget: Budget, expenses: Iterable[Expense], now: Union[date, datetime, None] = None) -> BudgetSpendResult:
    start, end = period_window(budget.period, now)
    spent = decimal_sum(
        e.amount for e in expenses
        if e.category_id == budget.category_id and start <= e.date <= end
    )
    ratio = spent / budget.amount * HUNDRED
    is_over_budget = spent > budget.amount
    return BudgetSpendResult(
        budget_id=budget.id,
        category_id=budget.category_id,
        period_start=start,
        period_end=end,
        spent=spent,
        remaining=max(ZERO, budget.amount - spent),
        percentage=min(ratio, HUNDRED),
        is_over_budget=is_over_budget,
        is_near_limit=ratio >= budget.alert_threshold and not is_over_budget,
    )

@dataclass(frozen=True)
class BudgetSummary:
    budgets: List[BudgetSpendResult] = field(default_factory=list)
    alerts: List[BudgetSpendResult] = field(default_factory=list)
    total_budgeted: Decimal = ZERO
    total_spent: Decimal = ZERO

    def to_dict(self):
        return asdict(self)

def summarize_budgets(budgets: Iterable[Budget], expenses: Iterable[Expense], now: Union[date, datetime, None] = None) -> BudgetSummary:
    """Per-budget spend plus the figures shown on the dashboard.

    ``total_budgeted`` counts monthly budgets only; ``total_spent`` sums every
    budget's spend in its own period.
    """
    budgets = list(budgets)
    expenses = list(expenses)
    results = [compute_budget_spend(b, expenses, now) for b in budgets]
    return BudgetSummary(
        budgets=results,
        alerts=[r for r in results if r.is_over_budget or r.is_near_limit],
        total_budgeted=decimal_sum(b.amount for b in budgets if b.period is BudgetPeriod.MONTHLY),
        total_spent=decimal_sum(r.spent for r in results),
    )
