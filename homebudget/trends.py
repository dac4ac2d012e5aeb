"""Chart series over recent time.

Day and week series always have a fixed number of zero-filled buckets.
The month series only contains months that actually have records.
"""
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, NamedTuple, Tuple

from homebudget.domain import ONE_WEEK_MS, from_millis, to_millis


class TrendSeries(NamedTuple):
    labels: Tuple[str, ...]
    data: Tuple[float, ...]

    def pairs(self) -> Tuple[Tuple[str, float], ...]:
        return tuple(zip(self.labels, self.data))


def daily_trend(records: Iterable, now: datetime, days: int = 7) -> TrendSeries:
    today = now.date()
    buckets: Dict[date, float] = {
        today - timedelta(days=i): 0.0 for i in range(days - 1, -1, -1)
    }

    for r in records:
        day = from_millis(r.timestamp).date()
        if day in buckets:
            buckets[day] += r.amount

    return TrendSeries(
        labels=tuple(f"{d.day}/{d.month}" for d in buckets),
        data=tuple(buckets.values()),
    )


def weekly_trend(records: Iterable, now: datetime, weeks: int = 5) -> TrendSeries:
    """Trailing 7-day strides measured back from `now`, oldest first.

    The last bucket (W{weeks}) is the current stride. Records older than
    `weeks` strides, or stamped in the future, are left out.
    """
    now_ms = to_millis(now)
    data = [0.0] * weeks

    for r in records:
        weeks_ago = (now_ms - r.timestamp) // ONE_WEEK_MS
        if 0 <= weeks_ago <= weeks - 1:
            data[weeks - 1 - weeks_ago] += r.amount

    return TrendSeries(
        labels=tuple(f"W{i + 1}" for i in range(weeks)),
        data=tuple(data),
    )


def monthly_trend(records: Iterable, months: int = 6) -> TrendSeries:
    monthly: Dict[Tuple[int, int], float] = defaultdict(float)

    for r in records:
        when = from_millis(r.timestamp)
        monthly[(when.year, when.month)] += r.amount

    if not monthly or months <= 0:
        return TrendSeries(labels=(), data=())

    recent = sorted(monthly.keys())[-months:]
    return TrendSeries(
        labels=tuple(f"{y}-{m}" for y, m in recent),
        data=tuple(monthly[k] for k in recent),
    )


def savings_trend(goal_id: str, expenses: Iterable, months: int = 6) -> TrendSeries:
    return monthly_trend((e for e in expenses if e.goal_id == goal_id), months)
