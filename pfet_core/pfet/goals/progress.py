"""
Savings goal progress and the monthly pace needed to hit the target date.
"""
from dataclasses import dataclass, asdict, field
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Union

from ..core.config import settings
from ..core.schemas import Goal, GoalContribution, GoalStatus
from ..core.utils import as_date, decimal_sum

ZERO = Decimal("0")
HUNDRED = Decimal("100")
DAYS_PER_MONTH = Decimal("30")

@dataclass(frozen=True)
class GoalProgressResult:
    goal_id: str
    total_contributed: Decimal
    current_total: Decimal
    progress_percentage: Decimal
    remaining_amount: Decimal
    days_until_target: Optional[int]
    is_overdue: bool
    monthly_target: Optional[Decimal]

    def to_dict(self):
        return asdict(self)

def _own_contributions(goal: Goal, contributions: Iterable[GoalContribution]) -> List[GoalContribution]:
    return [c for c in contributions if c.goal_id is None or c.goal_id == goal.id]

def compute_goal_progress(goal: Goal, contributions: Iterable[GoalContribution], now: Union[date, datetime, None] = None) -> GoalProgressResult:
    total_contributed = decimal_sum(c.amount for c in _own_contributions(goal, contributions))
    current_total = goal.current_amount + total_contributed
    target = goal.target_amount

    progress = min(current_total / target * HUNDRED, HUNDRED) if target > 0 else ZERO
    remaining = max(ZERO, target - current_total)

    days_until_target = None
    is_overdue = False
    monthly_target = None
    if goal.target_date is not None and goal.status is GoalStatus.ACTIVE:
        days_until_target = (goal.target_date - as_date(now)).days
        is_overdue = days_until_target < 0 and remaining > 0
        if days_until_target > 0 and remaining > 0:
            months_remaining = Decimal(days_until_target) / DAYS_PER_MONTH
            monthly_target = remaining / months_remaining if months_remaining > 0 else remaining

    return GoalProgressResult(
        goal_id=goal.id,
        total_contributed=total_contributed,
        current_total=current_total,
        progress_percentage=progress,
        remaining_amount=remaining,
        days_until_target=days_until_target,
        is_overdue=is_overdue,
        monthly_target=monthly_target,
    )

def reconcile_goal_status(goal: Goal, contributions: Iterable[GoalContribution]) -> GoalStatus:
    """Completed once contributions reach the target, active below it.

    Cancelled goals keep their status.
    """
    if goal.status is GoalStatus.CANCELLED:
        return goal.status
    progress = compute_goal_progress(goal, contributions)
    if progress.current_total >= goal.target_amount:
        return GoalStatus.COMPLETED
    return GoalStatus.ACTIVE

@dataclass(frozen=True)
class GoalSummary:
    active: List[Goal] = field(default_factory=list)
    completed: List[Goal] = field(default_factory=list)
    total_target_amount: Decimal = ZERO
    total_current_amount: Decimal = ZERO
    overdue: List[GoalProgressResult] = field(default_factory=list)
    upcoming: List[GoalProgressResult] = field(default_factory=list)

    def to_dict(self):
        return asdict(self)

def summarize_goals(goals: Iterable[Goal], contributions: Iterable[GoalContribution], now: Union[date, datetime, None] = None,
                    window_days: Optional[int] = None) -> GoalSummary:
    """Totals over active goals; contributions are matched by ``goal_id``."""
    window = settings.UPCOMING_WINDOW_DAYS if window_days is None else window_days
    goals = list(goals)
    by_goal = {}
    for c in contributions:
        by_goal.setdefault(c.goal_id, []).append(c)
    active = [g for g in goals if g.status is GoalStatus.ACTIVE]
    results = [compute_goal_progress(g, by_goal.get(g.id, []), now) for g in active]
    upcoming = [r for r in results if r.days_until_target is not None and 0 <= r.days_until_target <= window]
    return GoalSummary(
        active=active,
        completed=[g for g in goals if g.status is GoalStatus.COMPLETED],
        total_target_amount=decimal_sum(g.target_amount for g in active),
        total_current_amount=decimal_sum(r.current_total for r in results),
        overdue=[r for r in results if r.is_overdue],
        upcoming=sorted(upcoming, key=lambda r: r.days_until_target),
    )
