import asyncio
from datetime import datetime
from typing import Dict, List, NamedTuple, Optional, Tuple

from homebudget.categories import category_breakdown, top_categories
from homebudget.config import AppConfig, config as default_config
from homebudget.domain import GoalExpense, SavingsGoal, SpendingLimit, Transaction
from homebudget.goals import GoalProgress, goals_by_urgency
from homebudget.limits import LimitStatus, daily_allowance_status, evaluate_limits
from homebudget.periods import PeriodTotals, period_totals
from homebudget.storage import RecordRepository
from homebudget.trends import TrendSeries, daily_trend, monthly_trend, weekly_trend


class Snapshot(NamedTuple):
    transactions: Tuple[Transaction, ...] = ()
    goals: Tuple[SavingsGoal, ...] = ()
    goal_expenses: Tuple[GoalExpense, ...] = ()
    limits: SpendingLimit = SpendingLimit()


class Report(NamedTuple):
    now: datetime
    totals: PeriodTotals
    limits: Dict[str, LimitStatus]
    daily_allowance: LimitStatus
    top_categories: List[Tuple[str, float]]
    categories: List[Tuple[str, float]]
    daily_trend: TrendSeries
    weekly_trend: TrendSeries
    monthly_trend: TrendSeries
    goals: List[GoalProgress]


async def load_snapshot(repo: RecordRepository) -> Snapshot:
    """Load every collection concurrently. Missing keys come back empty."""
    transactions, goals, expenses, limits = await asyncio.gather(
        repo.load_transactions(),
        repo.load_goals(),
        repo.load_goal_expenses(),
        repo.load_limits(),
    )
    return Snapshot(transactions, goals, expenses, limits)


def build_report(snapshot: Snapshot, now: datetime, cfg: Optional[AppConfig] = None) -> Report:
    cfg = cfg or default_config
    trans = snapshot.transactions
    totals = period_totals(trans, now, cfg.week_start)
    return Report(
        now=now,
        totals=totals,
        limits=evaluate_limits(totals, snapshot.limits),
        daily_allowance=daily_allowance_status(totals.daily, snapshot.limits),
        top_categories=list(top_categories(trans, cfg.top_categories)),
        categories=category_breakdown(trans),
        daily_trend=daily_trend(trans, now, cfg.daily_trend_days),
        weekly_trend=weekly_trend(trans, now, cfg.weekly_trend_weeks),
        monthly_trend=monthly_trend(trans, cfg.monthly_trend_months),
        goals=goals_by_urgency(snapshot.goals, snapshot.goal_expenses, now),
    )


async def load_report(repo: RecordRepository, now: datetime, cfg: Optional[AppConfig] = None) -> Report:
    return build_report(await load_snapshot(repo), now, cfg)
