from datetime import datetime, timedelta
from typing import Iterable, NamedTuple, Optional, Tuple

from homebudget.domain import ONE_DAY_MS, UNCATEGORIZED, Transaction, to_millis


class DateTab(NamedTuple):
    day: int
    timestamp: int
    disabled: bool


def category_key(category: Optional[str]) -> str:
    text = (category or "").strip()
    return text or UNCATEGORIZED


def by_category(category: str):
    wanted = category_key(category)

    def _filter(t) -> bool:
        return category_key(getattr(t, "category", None)) == wanted

    return _filter


def by_timestamp_range(start: int, end: int):
    def _filter(r) -> bool:
        return start <= r.timestamp <= end

    return _filter


def by_day(day_start: int):
    def _filter(r) -> bool:
        return day_start <= r.timestamp < day_start + ONE_DAY_MS

    return _filter


def transactions_on_day(trans: Iterable[Transaction], day_start: Optional[int]) -> Tuple[Transaction, ...]:
    """All transactions when no day is selected."""
    if day_start is None:
        return tuple(trans)
    return tuple(filter(by_day(day_start), trans))


def date_tabs(now: datetime, count: int = 5) -> Tuple[DateTab, ...]:
    """The last `count` days ending today, plus a disabled tab for tomorrow."""
    today = datetime(now.year, now.month, now.day)
    tabs = [
        DateTab(day=d.day, timestamp=to_millis(d), disabled=False)
        for d in (today - timedelta(days=i) for i in range(count - 1, -1, -1))
    ]
    tomorrow = today + timedelta(days=1)
    tabs.append(DateTab(day=tomorrow.day, timestamp=to_millis(tomorrow), disabled=True))
    return tuple(tabs)
