import logging
from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

__all__ = [
    'EventBus', 'Event',
    'TRANSACTIONS_CHANGED', 'GOALS_CHANGED', 'LIMITS_CHANGED', 'DATA_CLEARED',
    'THEME_CHANGED', 'LIMIT_ALERT',
    'check_limit_handler', 'register_default_handlers',
]

logger = logging.getLogger(__name__)


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = list(self._subscribers.get(name, ()))
        if not handlers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        logger.debug("Publishing %s to %d handler(s)", name, len(handlers))
        return [handler(event, payload) for handler in handlers]

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, ()):
            self._subscribers[name].remove(handler)


TRANSACTIONS_CHANGED = "TRANSACTIONS_CHANGED"
GOALS_CHANGED = "GOALS_CHANGED"
LIMITS_CHANGED = "LIMITS_CHANGED"
DATA_CLEARED = "DATA_CLEARED"
THEME_CHANGED = "THEME_CHANGED"
LIMIT_ALERT = "LIMIT_ALERT"


def check_limit_handler(event: Event, payload: dict) -> dict:
    """Alert for every period whose total is over a set limit.

    payload: {"totals": {"weekly": 120.0, ...}, "limits": {"weekly": 100.0, ...}}
    """
    totals = payload.get("totals", {})
    limits = payload.get("limits", {})
    alerts = []
    for period in ("weekly", "monthly", "yearly"):
        total = totals.get(period, 0)
        limit = limits.get(period, 0)
        if limit > 0 and total > limit:
            alerts.append({
                "period": period,
                "spent": total,
                "limit": limit,
                "message": f"{period.capitalize()} spending {total:.2f} is over the limit of {limit:.2f}",
            })
    return {"alerts": alerts} if alerts else {}


def register_default_handlers(bus: EventBus) -> EventBus:
    bus.subscribe(LIMIT_ALERT, check_limit_handler)
    return bus
