from datetime import datetime
from functools import reduce
from typing import Iterable, NamedTuple, Protocol, TypeVar

from homebudget.domain import ONE_DAY_MS, to_millis
from homebudget.filters import by_day

# python weekday() numbering
MONDAY = 0
SUNDAY = 6


class Dated(Protocol):
    amount: float
    timestamp: int


R = TypeVar("R", bound=Dated)


class PeriodBounds(NamedTuple):
    day: int
    week: int
    month: int
    year: int


class PeriodTotals(NamedTuple):
    daily: float
    weekly: float
    monthly: float
    yearly: float


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def days_since_week_start(now: datetime, week_start: int = SUNDAY) -> int:
    """0 on the first day of the week (Sunday by default)."""
    return (now.weekday() - week_start) % 7


def period_bounds(now: datetime, week_start: int = SUNDAY) -> PeriodBounds:
    today = to_millis(start_of_day(now))
    return PeriodBounds(
        day=today,
        week=today - days_since_week_start(now, week_start) * ONE_DAY_MS,
        month=to_millis(datetime(now.year, now.month, 1)),
        year=to_millis(datetime(now.year, 1, 1)),
    )


def total_since(records: Iterable[R], start: int) -> float:
    # lower bound only: records stamped after "now" still count
    return reduce(lambda acc, r: acc + r.amount if r.timestamp >= start else acc, records, 0.0)


def period_totals(records: Iterable[R], now: datetime, week_start: int = SUNDAY) -> PeriodTotals:
    records = tuple(records)
    bounds = period_bounds(now, week_start)
    return PeriodTotals(
        daily=total_since(records, bounds.day),
        weekly=total_since(records, bounds.week),
        monthly=total_since(records, bounds.month),
        yearly=total_since(records, bounds.year),
    )


def day_total(records: Iterable[R], day_start: int) -> float:
    """Sum for the single day [day_start, day_start + 1 day)."""
    return sum(r.amount for r in filter(by_day(day_start), records))
