from typing import Dict, NamedTuple, Optional

from homebudget.domain import SpendingLimit
from homebudget.periods import PeriodTotals


class LimitStatus(NamedTuple):
    period: str
    total: float
    limit: float
    is_set: bool
    over_limit: bool
    percent: Optional[float]     # None -> no progress bar
    remaining: Optional[float]


def is_over_limit(total: float, limit: float) -> bool:
    return limit > 0 and total > limit


def limit_percentage(total: float, limit: float) -> Optional[float]:
    if limit <= 0:
        return None
    return min(total / limit * 100, 100.0)


def limit_status(period: str, total: float, limit: float) -> LimitStatus:
    is_set = limit > 0
    return LimitStatus(
        period=period,
        total=total,
        limit=limit,
        is_set=is_set,
        over_limit=is_over_limit(total, limit),
        percent=limit_percentage(total, limit),
        remaining=limit - total if is_set else None,
    )


def evaluate_limits(totals: PeriodTotals, limits: SpendingLimit) -> Dict[str, LimitStatus]:
    return {
        "weekly": limit_status("weekly", totals.weekly, limits.weekly),
        "monthly": limit_status("monthly", totals.monthly, limits.monthly),
        "yearly": limit_status("yearly", totals.yearly, limits.yearly),
    }


def daily_allowance_status(daily_total: float, limits: SpendingLimit) -> LimitStatus:
    """Today's spending against an even seventh of the weekly limit."""
    return limit_status("daily", daily_total, limits.weekly / 7 if limits.weekly > 0 else 0.0)
