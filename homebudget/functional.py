from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Callable, Generic, Iterable, Optional, TypeVar

from homebudget.domain import SavingsGoal

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f):
        return Some(f(self._value))

    def bind(self, f):
        return f(self._value)

    def get_or_else(self, default):
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f):
        return Nothing()

    def bind(self, f):
        return Nothing()

    def get_or_else(self, default):
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f):
        return Right(f(self._value))

    def bind(self, f):
        return f(self._value)

    def get_or_else(self, default):
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self):
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f):
        return Left(self._error)

    def bind(self, f):
        return Left(self._error)

    def get_or_else(self, default):
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self):
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def invalid(error: str, message: str, **extra) -> Left:
    return Left({"error": error, "message": message, **extra})


def find_goal(goals: Iterable[SavingsGoal], goal_id: Optional[str]) -> Maybe[SavingsGoal]:
    if not goal_id:
        return Nothing()
    for g in goals:
        if g.id == goal_id:
            return Some(g)
    return Nothing()


def parse_target_date(raw: str) -> Maybe[datetime]:
    """Local midnight of an ISO date (or datetime) string."""
    if not raw or not raw.strip():
        return Nothing()
    text = raw.strip()
    try:
        if "T" in text or " " in text:
            dt = datetime.fromisoformat(text)
            if dt.tzinfo is not None:
                dt = dt.astimezone().replace(tzinfo=None)
            return Some(dt)
        d = date.fromisoformat(text)
    except ValueError:
        return Nothing()
    return Some(datetime(d.year, d.month, d.day))


def parse_amount(field: str, raw, allow_zero: bool = True) -> Either[dict, float]:
    text = str(raw).strip() if raw is not None else ""
    if not text:
        return invalid("missing_field", f"{field} is required", field=field)
    try:
        value = float(text)
    except ValueError:
        return invalid("not_a_number", f"{field} must be a number, got {text!r}", field=field)
    if value != value or value in (float("inf"), float("-inf")):
        return invalid("not_a_number", f"{field} must be a finite number", field=field)
    if value < 0 or (value == 0 and not allow_zero):
        return invalid("out_of_range", f"{field} must be {'non-negative' if allow_zero else 'positive'}", field=field)
    return Right(value)


def require_text(field: str, raw: Optional[str]) -> Either[dict, str]:
    text = (raw or "").strip()
    if not text:
        return invalid("missing_field", f"{field} is required", field=field)
    return Right(text)


def parse_limit(raw) -> float:
    """Limits fall back to 0 (unset) for blank or non-numeric input."""
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError):
        return 0.0
    if value != value or value < 0 or value == float("inf"):
        return 0.0
    return value
