from datetime import date, datetime, timedelta

import pytest
from pydantic import ValidationError

from pfet.core.errors import DuplicateRecordError, InvalidInputError, RecordNotFoundError
from pfet.core.schemas import Goal, GoalContribution, GoalStatus
from pfet.goals.manager import GoalBook
from pfet.goals.progress import compute_goal_progress, reconcile_goal_status, summarize_goals

NOW = date(2025, 6, 18)

def _goal(id="g1", **kw):
    fields = dict(id=id, name="Emergency fund", target_amount=100000)
    fields.update(kw)
    return Goal(**fields)

def _give(amount, goal_id=None, on=NOW):
    return GoalContribution(amount=amount, goal_id=goal_id, contribution_date=on)

def test_progress_from_contributions():
    r = compute_goal_progress(_goal(), [_give(5000)], NOW)
    assert r.total_contributed == 5000
    assert r.current_total == 5000
    assert r.progress_percentage == 5
    assert r.remaining_amount == 95000
    assert r.days_until_target is None
    assert r.monthly_target is None
    assert not r.is_overdue

def test_starting_amount_counts():
    r = compute_goal_progress(_goal(current_amount=20000), [_give(5000)], NOW)
    assert r.current_total == 25000
    assert r.progress_percentage == 25

def test_progress_capped_at_100():
    r = compute_goal_progress(_goal(), [_give(80000), _give(50000)], NOW)
    assert r.progress_percentage == 100
    assert r.remaining_amount == 0

def test_monthly_target():
    goal = _goal(target_date=NOW + timedelta(days=90))
    r = compute_goal_progress(goal, [_give(5000)], NOW)
    assert r.days_until_target == 90
    assert float(r.monthly_target) == pytest.approx(95000 / 3)

def test_overdue_only_while_something_remains():
    goal = _goal(target_date=date(2025, 6, 1))
    late = compute_goal_progress(goal, [_give(1000)], NOW)
    assert late.is_overdue
    assert late.monthly_target is None
    done = compute_goal_progress(goal, [_give(100000)], NOW)
    assert not done.is_overdue

def test_other_goals_contributions_ignored():
    r = compute_goal_progress(_goal(), [_give(1000, "g1"), _give(9000, "g2")], NOW)
    assert r.total_contributed == 1000

def test_reconcile_status():
    assert reconcile_goal_status(_goal(), [_give(100000)]) is GoalStatus.COMPLETED
    assert reconcile_goal_status(_goal(status="completed"), [_give(10)]) is GoalStatus.ACTIVE
    assert reconcile_goal_status(_goal(status="cancelled"), [_give(100000)]) is GoalStatus.CANCELLED

def test_goal_validation():
    with pytest.raises(ValidationError):
        _goal(target_amount=0)
    with pytest.raises(ValidationError):
        _goal(name="x" * 101)
    with pytest.raises(ValidationError):
        _give(0)

def test_book_completes_and_reopens_goal():
    book = GoalBook()
    book.add_goal(_goal(current_amount=60000))
    assert book.add_contribution("g1", _give(30000)).status is GoalStatus.ACTIVE
    goal = book.add_contribution("g1", _give(10000))
    assert goal.status is GoalStatus.COMPLETED
    last = book.contributions("g1")[-1]
    assert last.goal_id == "g1"
    assert book.remove_contribution("g1", last.id).status is GoalStatus.ACTIVE
    assert book.progress("g1", NOW).current_total == 90000
    with pytest.raises(RecordNotFoundError):
        book.remove_contribution("g1", "missing")

def test_book_leaves_cancelled_goal():
    book = GoalBook()
    book.add_goal(_goal(status="cancelled"))
    assert book.add_contribution("g1", _give(200000)).status is GoalStatus.CANCELLED

def test_delete_goal():
    book = GoalBook()
    book.add_goal(_goal())
    book.add_contribution("g1", _give(10))
    book.delete_goal("g1")
    with pytest.raises(RecordNotFoundError):
        book.get("g1")
    assert book.list_goals() == []

def test_summary():
    goals = [
        _goal("a", target_date=NOW + timedelta(days=20)),
        _goal("b", target_amount=50000, target_date=NOW + timedelta(days=5)),
        _goal("c", target_amount=10000, target_date=date(2025, 1, 1)),
        _goal("d", status="completed"),
        _goal("e", status="cancelled"),
    ]
    s = summarize_goals(goals, [_give(5000, "a"), _give(2000, "c"), _give(999, "d")], NOW)
    assert [g.id for g in s.active] == ["a", "b", "c"]
    assert [g.id for g in s.completed] == ["d"]
    assert s.total_target_amount == 160000
    assert s.total_current_amount == 7000
    assert [r.goal_id for r in s.overdue] == ["c"]
    assert [r.goal_id for r in s.upcoming] == ["b", "a"]

def test_datetime_now_uses_calendar_date():
    goal = _goal(target_date=NOW + timedelta(days=30))
    r = compute_goal_progress(goal, [_give(10000)], datetime(2025, 6, 18, 22, 15))
    assert r.days_until_target == 30
    assert r == compute_goal_progress(goal, [_give(10000)], NOW)

def test_book_rejects_reused_goal_id():
    book = GoalBook()
    book.add_goal(_goal())
    book.add_contribution("g1", _give(500))
    with pytest.raises(DuplicateRecordError):
        book.add_goal(_goal(name="Car", target_amount=900000))
    assert book.get("g1").name == "Emergency fund"
    assert len(book.contributions("g1")) == 1
    with pytest.raises(InvalidInputError):
        book.update_goal("g1", id="g2")
