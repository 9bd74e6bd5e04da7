"""
In-memory budget book enforcing one budget per expense category.
"""
import threading
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Union

from ..core.errors import DuplicateBudgetError, InvalidInputError, RecordNotFoundError
from ..core.schemas import Budget, Expense
from ..core.utils import get_logger
from .engine import BudgetSpendResult, BudgetSummary, compute_budget_spend, summarize_budgets

logger = get_logger("budgets.manager")

class BudgetBook:
    """Budgets of one user, keyed by id."""

    def __init__(self, budgets: Iterable[Budget] = ()):
        self._lock = threading.Lock()
        self._budgets: Dict[str, Budget] = {}
        for b in budgets:
            self.create_budget(b)

    def _by_category(self, category_id: str) -> Optional[Budget]:
        for b in self._budgets.values():
            if b.category_id == category_id:
                return b
        return None

    def get(self, budget_id: str) -> Budget:
        try:
            return self._budgets[budget_id]
        except KeyError:
            raise RecordNotFoundError(f"budget {budget_id} not found")

    def list_budgets(self) -> List[Budget]:
        return list(self._budgets.values())

    def create_budget(self, budget: Budget) -> Budget:
        with self._lock:
            if budget.id in self._budgets:
                raise DuplicateBudgetError(f"budget {budget.id} already exists")
            existing = self._by_category(budget.category_id)
            if existing is not None:
                logger.info("rejected budget %s: category %s already has budget %s", budget.id, budget.category_id, existing.id)
                raise DuplicateBudgetError(f"A budget already exists for category {budget.category_id}")
            self._budgets[budget.id] = budget
            return budget

    def update_budget(self, budget_id: str, **changes) -> Budget:
        if changes.get("id", budget_id) != budget_id:
            raise InvalidInputError("budget id cannot be changed")
        with self._lock:
            current = self.get(budget_id)
            updated = current.revise(**changes)
            clash = self._by_category(updated.category_id)
            if clash is not None and clash.id != budget_id:
                raise DuplicateBudgetError(f"A budget already exists for category {updated.category_id}")
            self._budgets[budget_id] = updated
            return updated

    def delete_budget(self, budget_id: str) -> Budget:
        """Drop the budget; expenses in its category are not touched."""
        with self._lock:
            budget = self.get(budget_id)
            del self._budgets[budget_id]
            return budget

    def spend(self, budget_id: str, expenses: Iterable[Expense], now: Union[date, datetime, None] = None) -> BudgetSpendResult:
        return compute_budget_spend(self.get(budget_id), expenses, now)

    def summary(self, expenses: Iterable[Expense], now: Union[date, datetime, None] = None) -> BudgetSummary:
        return summarize_budgets(self.list_budgets(), expenses, now)
