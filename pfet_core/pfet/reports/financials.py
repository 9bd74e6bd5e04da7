
from dataclasses import dataclass, asdict
from datetime import date, datetime
from typing import Iterable, Optional, Union

import pandas as pd

from pfet.core.config import settings
from pfet.core.errors import InvalidInputError
from pfet.core.schemas import Expense, Income
from pfet.core.utils import as_date, round_shillings, to_decimal

def _percent_change(current: float, previous: float) -> float:
    if previous > 0:
        return (current - previous) / previous * 100
    return 100.0 if current > 0 else 0.0

@dataclass(frozen=True)
class CashflowSnapshot:
    income: float
    expenses: float
    last_month_income: float
    last_month_expenses: float
    income_change: float   # percent vs last month
    expense_change: float
    savings_rate: int      # whole percent of income kept

    def to_dict(self):
        return asdict(self)

class CashflowReport:
    """Income vs expense figures for the dashboard; amounts are floats for display."""

    def __init__(self, incomes: Iterable[Income], expenses: Iterable[Expense], now: Union[date, datetime, None] = None):
        self.today = as_date(now)
        self.income_df = self._frame(incomes)
        self.expense_df = self._frame(expenses)

    @staticmethod
    def _frame(records) -> pd.DataFrame:
        rows = [{"date": r.date, "amount": float(r.amount), "category_id": r.category_id} for r in records]
        if not rows: return pd.DataFrame(columns=["date","amount","category_id","month"])
        df = pd.DataFrame(rows)
        df["date"] = pd.to_datetime(df["date"])
        df["month"] = df["date"].dt.to_period("M")
        return df

    def _month_total(self, df: pd.DataFrame, month: pd.Period) -> float:
        if df.empty: return 0.0
        return float(df.loc[df["month"] == month, "amount"].sum())

    def monthly_totals(self, months: Optional[int] = None) -> pd.DataFrame:
        """Income and expenses for the last ``months`` calendar months, oldest first."""
        if months is None:
            months = settings.REPORT_MONTHS
        if months < 0:
            raise InvalidInputError(f"months must be >= 0, got {months}")
        if months == 0: return pd.DataFrame(columns=["month","income","expenses"])
        index = pd.period_range(end=pd.Timestamp(self.today).to_period("M"), periods=months, freq="M")
        out = pd.DataFrame({"month": index})
        for col, df in (("income", self.income_df), ("expenses", self.expense_df)):
            if df.empty:
                out[col] = 0.0
            else:
                totals = df.groupby("month")["amount"].sum()
                out[col] = totals.reindex(index, fill_value=0.0).to_numpy(dtype=float)
        return out

    def current_month(self) -> CashflowSnapshot:
        this_month = pd.Timestamp(self.today).to_period("M")
        last_month = this_month - 1
        income = self._month_total(self.income_df, this_month)
        expenses = self._month_total(self.expense_df, this_month)
        last_income = self._month_total(self.income_df, last_month)
        last_expenses = self._month_total(self.expense_df, last_month)
        savings_rate = 0
        if income > 0:
            savings_rate = int(round_shillings(to_decimal((income - expenses) / income * 100)))
        return CashflowSnapshot(
            income=income,
            expenses=expenses,
            last_month_income=last_income,
            last_month_expenses=last_expenses,
            income_change=_percent_change(income, last_income),
            expense_change=_percent_change(expenses, last_expenses),
            savings_rate=savings_rate,
        )

    def expenses_by_category(self, start: Optional[date] = None, end: Optional[date] = None) -> pd.DataFrame:
        """Spend per category within ``[start, end]``, largest first, with its share in percent."""
        df = self.expense_df
        if df.empty: return pd.DataFrame(columns=["category_id","amount","share"])
        if start is not None:
            df = df[df["date"] >= pd.Timestamp(start)]
        if end is not None:
            df = df[df["date"] <= pd.Timestamp(end)]
        agg = (df.assign(category_id=df["category_id"].fillna("uncategorized"))
                 .groupby("category_id", as_index=False)["amount"].sum()
                 .sort_values("amount", ascending=False, kind="stable")
                 .reset_index(drop=True))
        total = agg["amount"].sum()
        agg["share"] = agg["amount"] / total * 100 if total > 0 else 0.0
        return agg
