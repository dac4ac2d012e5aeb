from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict

ONE_DAY_MS = 24 * 60 * 60 * 1000
ONE_WEEK_MS = 7 * ONE_DAY_MS

UNCATEGORIZED = "Uncategorized"


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"


class GoalStatus(str, Enum):
    GOAL_REACHED = "Goal Reached!"
    ON_TRACK = "On Track"
    NEEDS_ATTENTION = "Needs Attention"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


@dataclass(frozen=True)
class Transaction:
    id: str
    name: str
    price: float
    date: str        # display only, never parsed
    timestamp: int   # epoch millis, used for bucketing
    category: str = ""

    @property
    def amount(self) -> float:
        return self.price

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "date": self.date,
            "timestamp": self.timestamp,
            "category": self.category,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Transaction":
        return cls(
            id=str(d["id"]),
            name=d.get("name", ""),
            price=float(d.get("price", 0)),
            date=d.get("date", ""),
            timestamp=checked_millis(d.get("timestamp", 0)),
            category=d.get("category") or "",
        )


# zero means "no limit set", not "zero budget"
@dataclass(frozen=True)
class SpendingLimit:
    weekly: float = 0.0
    monthly: float = 0.0
    yearly: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"weekly": self.weekly, "monthly": self.monthly, "yearly": self.yearly}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SpendingLimit":
        if not isinstance(d, dict):
            raise TypeError(f"expected an object, got {type(d).__name__}")
        return cls(
            weekly=float(d.get("weekly") or 0),
            monthly=float(d.get("monthly") or 0),
            yearly=float(d.get("yearly") or 0),
        )


@dataclass(frozen=True)
class SavingsGoal:
    id: str
    name: str
    target_amount: float
    target_date: str      # ISO calendar date, e.g. "2025-12-31"
    monthly_income: float
    weekly_income: float
    saved_amount: float = 0.0
    timestamp: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "targetAmount": self.target_amount,
            "targetDate": self.target_date,
            "monthlyIncome": self.monthly_income,
            "weeklyIncome": self.weekly_income,
            "savedAmount": self.saved_amount,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SavingsGoal":
        return cls(
            id=str(d["id"]),
            name=d.get("name", ""),
            target_amount=float(d.get("targetAmount", 0)),
            target_date=d.get("targetDate", ""),
            monthly_income=float(d.get("monthlyIncome", 0)),
            weekly_income=float(d.get("weeklyIncome", 0)),
            saved_amount=float(d.get("savedAmount", 0)),
            timestamp=int(d.get("timestamp", 0)),
        )


@dataclass(frozen=True)
class GoalExpense:
    id: str
    goal_id: str
    name: str
    amount: float
    date: str
    timestamp: int
    frequency: Frequency = Frequency.DAILY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "goalId": self.goal_id,
            "name": self.name,
            "amount": self.amount,
            "date": self.date,
            "timestamp": self.timestamp,
            "frequency": self.frequency.value,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "GoalExpense":
        return cls(
            id=str(d["id"]),
            goal_id=str(d["goalId"]),
            name=d.get("name", ""),
            amount=float(d.get("amount", 0)),
            date=d.get("date", ""),
            timestamp=checked_millis(d.get("timestamp", 0)),
            frequency=Frequency(d.get("frequency") or Frequency.DAILY.value),
        )


def to_millis(dt: datetime) -> int:
    """Epoch milliseconds for a naive (local) or aware datetime."""
    return int(dt.timestamp() * 1000)


def from_millis(ms: int) -> datetime:
    """Naive local datetime for epoch milliseconds."""
    return datetime.fromtimestamp(ms / 1000)


def checked_millis(raw: Any) -> int:
    """Stored timestamp as int, rejecting values no local datetime can hold."""
    try:
        ms = int(raw)
        from_millis(ms)
    except (OverflowError, OSError) as e:
        raise ValueError(f"timestamp out of range: {raw!r}") from e
    return ms
