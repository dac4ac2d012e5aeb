import math
from datetime import datetime
from typing import Iterable, List, NamedTuple, Optional

from homebudget.domain import GoalExpense, GoalStatus, SavingsGoal
from homebudget.functional import parse_target_date
from homebudget.transforms import contributed_amount

SECONDS_PER_DAY = 24 * 60 * 60


class GoalProgress(NamedTuple):
    goal: SavingsGoal
    progress: float
    total_contributed: float
    days_left: Optional[int]
    weeks_left: Optional[int]
    months_left: Optional[int]
    weekly_savings_needed: Optional[float]
    monthly_savings_needed: Optional[float]
    status: GoalStatus

    @property
    def display_progress(self) -> float:
        return max(0.0, min(self.progress, 100.0))


def days_until(target: datetime, now: datetime) -> int:
    return math.ceil((target - now).total_seconds() / SECONDS_PER_DAY)


def savings_needed(remaining: float, periods_left: Optional[int]) -> Optional[float]:
    """None when the deadline is today or already behind us."""
    if periods_left is None or periods_left <= 0:
        return None
    return remaining / periods_left


def goal_status(
    goal: SavingsGoal,
    weekly_needed: Optional[float],
    monthly_needed: Optional[float],
) -> GoalStatus:
    if goal.saved_amount >= goal.target_amount:
        return GoalStatus.GOAL_REACHED
    if weekly_needed is None or monthly_needed is None:
        return GoalStatus.NEEDS_ATTENTION
    if weekly_needed <= goal.weekly_income and monthly_needed <= goal.monthly_income:
        return GoalStatus.ON_TRACK
    return GoalStatus.NEEDS_ATTENTION


def goal_progress(goal: SavingsGoal, expenses: Iterable[GoalExpense], now: datetime) -> GoalProgress:
    progress = (
        goal.saved_amount / goal.target_amount * 100 if goal.target_amount > 0 else 0.0
    )
    target = parse_target_date(goal.target_date)
    days_left = target.map(lambda t: days_until(t, now)).get_or_else(None)
    weeks_left = math.ceil(days_left / 7) if days_left is not None else None
    months_left = math.ceil(days_left / 30) if days_left is not None else None

    remaining = goal.target_amount - goal.saved_amount
    weekly_needed = savings_needed(remaining, weeks_left)
    monthly_needed = savings_needed(remaining, months_left)

    return GoalProgress(
        goal=goal,
        progress=progress,
        total_contributed=contributed_amount(tuple(expenses), goal.id),
        days_left=days_left,
        weeks_left=weeks_left,
        months_left=months_left,
        weekly_savings_needed=weekly_needed,
        monthly_savings_needed=monthly_needed,
        status=goal_status(goal, weekly_needed, monthly_needed),
    )


def goals_by_urgency(
    goals: Iterable[SavingsGoal], expenses: Iterable[GoalExpense], now: datetime
) -> List[GoalProgress]:
    """Most urgent first; goals with an unreadable date go last."""
    expenses = tuple(expenses)
    rows = [goal_progress(g, expenses, now) for g in goals]
    return sorted(rows, key=lambda p: (p.days_left is None, p.days_left or 0))
