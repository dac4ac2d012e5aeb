"""Async key-value record store and the typed repository on top of it.

The persisted layout (keys and JSON shapes) is fixed:

    "transactions"    -> [Transaction, ...]
    "goals"           -> [SavingsGoal, ...]
    "goalExpenses"    -> [GoalExpense, ...]
    "spendingLimits"  -> {"weekly", "monthly", "yearly"}
    "themePreference" -> "dark" | "light"
"""
import asyncio
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, TypeVar

from homebudget.domain import GoalExpense, SavingsGoal, SpendingLimit, Theme, Transaction

logger = logging.getLogger(__name__)

TRANSACTIONS_KEY = "transactions"
GOALS_KEY = "goals"
GOAL_EXPENSES_KEY = "goalExpenses"
SPENDING_LIMITS_KEY = "spendingLimits"
THEME_KEY = "themePreference"

T = TypeVar("T")


class StorageError(Exception):
    """A read or write against the record store failed."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class RecordStore(ABC):

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    async def set_many(self, items: Mapping[str, str]) -> None:
        """Write several keys so that either all or none land."""

    @abstractmethod
    async def clear(self) -> None:
        pass


class InMemoryRecordStore(RecordStore):

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def set_many(self, items: Mapping[str, str]) -> None:
        self._data.update(items)

    async def clear(self) -> None:
        self._data.clear()

    def keys(self) -> Tuple[str, ...]:
        return tuple(self._data)


class JsonFileRecordStore(RecordStore):
    """All keys in a single JSON document, replaced atomically on every write."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"cannot read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"{self.path} does not hold a key-value document")
        return data

    def _write(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".store-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(data, handle, indent=2, sort_keys=True)
                os.replace(tmp, self.path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as e:
            raise StorageError(f"cannot write {self.path}: {e}") from e

    async def get(self, key: str) -> Optional[str]:
        data = await asyncio.to_thread(self._read)
        return data.get(key)

    async def set(self, key: str, value: str) -> None:
        await self.set_many({key: value})

    async def set_many(self, items: Mapping[str, str]) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._read)
            data.update(items)
            await asyncio.to_thread(self._write, data)

    async def clear(self) -> None:
        async with self._lock:
            await asyncio.to_thread(self._write, {})


class RecordRepository:
    """Typed load/save of each persisted collection."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def _get(self, key: str) -> Optional[str]:
        try:
            return await self.store.get(key)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"failed to load {key}: {e}", key=key) from e

    async def _load_json(self, key: str, default: T, convert: Callable[[Any], T]) -> T:
        raw = await self._get(key)
        if raw is None:
            return default
        try:
            return convert(json.loads(raw))
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            raise StorageError(f"corrupt value under {key}: {e}", key=key) from e

    async def _set_many(self, items: Mapping[str, str]) -> None:
        try:
            await self.store.set_many(items)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"failed to save {', '.join(items)}: {e}") from e
        logger.debug("Saved %s", ", ".join(items))

    @staticmethod
    def _list_of(cls):
        def _convert(data):
            if not isinstance(data, list):
                raise TypeError(f"expected a list, got {type(data).__name__}")
            return tuple(cls.from_dict(item) for item in data)

        return _convert

    @staticmethod
    def _dump(records) -> str:
        return json.dumps([r.to_dict() for r in records])

    async def load_transactions(self) -> Tuple[Transaction, ...]:
        return await self._load_json(TRANSACTIONS_KEY, (), self._list_of(Transaction))

    async def load_goals(self) -> Tuple[SavingsGoal, ...]:
        return await self._load_json(GOALS_KEY, (), self._list_of(SavingsGoal))

    async def load_goal_expenses(self) -> Tuple[GoalExpense, ...]:
        return await self._load_json(GOAL_EXPENSES_KEY, (), self._list_of(GoalExpense))

    async def load_limits(self) -> SpendingLimit:
        return await self._load_json(SPENDING_LIMITS_KEY, SpendingLimit(), SpendingLimit.from_dict)

    async def load_theme(self) -> Theme:
        raw = await self._get(THEME_KEY)
        return Theme.DARK if raw == Theme.DARK.value else Theme.LIGHT

    async def save_transactions(self, trans: Tuple[Transaction, ...]) -> None:
        await self._set_many({TRANSACTIONS_KEY: self._dump(trans)})

    async def save_goals(self, goals: Tuple[SavingsGoal, ...]) -> None:
        await self._set_many({GOALS_KEY: self._dump(goals)})

    async def save_limits(self, limits: SpendingLimit) -> None:
        await self._set_many({SPENDING_LIMITS_KEY: json.dumps(limits.to_dict())})

    async def save_theme(self, theme: Theme) -> None:
        await self._set_many({THEME_KEY: Theme(theme).value})

    async def save_goal_transition(
        self, goals: Tuple[SavingsGoal, ...], expenses: Tuple[GoalExpense, ...]
    ) -> None:
        """Goals and goal expenses are always written together."""
        await self._set_many({GOALS_KEY: self._dump(goals), GOAL_EXPENSES_KEY: self._dump(expenses)})

    async def clear(self) -> None:
        try:
            await self.store.clear()
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"failed to clear store: {e}") from e
        logger.info("Cleared all stored data")
