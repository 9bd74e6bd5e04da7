"""
Goal book: savings goals with their contributions.
"""
import threading
import uuid
from datetime import date, datetime
from typing import Dict, List, Union

from ..core.errors import DuplicateRecordError, InvalidInputError, RecordNotFoundError
from ..core.schemas import Goal, GoalContribution
from ..core.utils import get_logger
from .progress import GoalProgressResult, GoalSummary, compute_goal_progress, reconcile_goal_status, summarize_goals

logger = get_logger("goals.manager")

class GoalBook:
    def __init__(self):
        self._lock = threading.Lock()
        self._goals: Dict[str, Goal] = {}
        self._contributions: Dict[str, List[GoalContribution]] = {}

    def get(self, goal_id: str) -> Goal:
        try:
            return self._goals[goal_id]
        except KeyError:
            raise RecordNotFoundError(f"goal {goal_id} not found")

    def list_goals(self) -> List[Goal]:
        return list(self._goals.values())

    def contributions(self, goal_id: str) -> List[GoalContribution]:
        self.get(goal_id)
        return sorted(self._contributions.get(goal_id, []), key=lambda c: c.contribution_date)

    def add_goal(self, goal: Goal) -> Goal:
        with self._lock:
            if goal.id in self._goals:
                raise DuplicateRecordError(f"goal {goal.id} already exists")
            self._goals[goal.id] = goal
            self._contributions.setdefault(goal.id, [])
            return goal

    def update_goal(self, goal_id: str, **changes) -> Goal:
        if changes.get("id", goal_id) != goal_id:
            raise InvalidInputError("goal id cannot be changed")
        with self._lock:
            goal = self.get(goal_id).revise(**changes)
            self._goals[goal_id] = goal
            return goal

    def delete_goal(self, goal_id: str) -> Goal:
        with self._lock:
            goal = self.get(goal_id)
            del self._goals[goal_id]
            self._contributions.pop(goal_id, None)
            return goal

    def _reconcile(self, goal: Goal) -> Goal:
        status = reconcile_goal_status(goal, self._contributions[goal.id])
        if status is not goal.status:
            logger.info("goal %s status %s -> %s", goal.id, goal.status.value, status.value)
            goal = goal.model_copy(update={"status": status})
            self._goals[goal.id] = goal
        return goal

    def add_contribution(self, goal_id: str, contribution: GoalContribution) -> Goal:
        """Record a contribution; the goal completes once the target is reached."""
        with self._lock:
            goal = self.get(goal_id)
            contribution = contribution.model_copy(update={"id": contribution.id or str(uuid.uuid4()), "goal_id": goal_id})
            self._contributions[goal_id].append(contribution)
            return self._reconcile(goal)

    def remove_contribution(self, goal_id: str, contribution_id: str) -> Goal:
        with self._lock:
            goal = self.get(goal_id)
            kept = [c for c in self._contributions[goal_id] if c.id != contribution_id]
            if len(kept) == len(self._contributions[goal_id]):
                raise RecordNotFoundError(f"contribution {contribution_id} not found on goal {goal_id}")
            self._contributions[goal_id] = kept
            return self._reconcile(goal)

    def progress(self, goal_id: str, now: Union[date, datetime, None] = None) -> GoalProgressResult:
        return compute_goal_progress(self.get(goal_id), self._contributions.get(goal_id, []), now)

    def summary(self, now: Union[date, datetime, None] = None) -> GoalSummary:
        all_contributions = [c for cs in self._contributions.values() for c in cs]
        return summarize_goals(self.list_goals(), all_contributions, now)
