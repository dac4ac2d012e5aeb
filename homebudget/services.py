import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, List, Optional

from homebudget.async_reports import Report, Snapshot, build_report, load_snapshot
from homebudget.config import AppConfig, config as default_config
from homebudget.domain import Frequency
from homebudget.events import (
    DATA_CLEARED,
    GOALS_CHANGED,
    LIMIT_ALERT,
    LIMITS_CHANGED,
    TRANSACTIONS_CHANGED,
    EventBus,
)
from homebudget.functional import Either, Right, invalid
from homebudget.periods import period_totals
from homebudget.storage import RecordRepository, StorageError
from homebudget import transforms

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class BudgetService:
    """Write path for every user-facing mutation.

    Each operation validates first, persists second and only then replaces the
    in-memory snapshot, so a failed save leaves the snapshot as it was.
    Every operation returns Right(result) or Left({"error", "message", ...}).
    """

    def __init__(
        self,
        repo: RecordRepository,
        bus: Optional[EventBus] = None,
        clock: Clock = datetime.now,
        cfg: Optional[AppConfig] = None,
    ):
        self.repo = repo
        self.bus = bus or EventBus()
        self.clock = clock
        self.cfg = cfg or default_config
        self.snapshot = Snapshot()

    async def _commit(
        self,
        save: Callable[[], Awaitable[None]],
        snapshot: Snapshot,
        event: str,
        result: Any,
        payload: Optional[dict] = None,
    ) -> Either[dict, Any]:
        try:
            await save()
        except StorageError as e:
            logger.exception("Save failed, keeping previous state")
            return invalid("storage_failed", str(e), key=e.key)
        self.snapshot = snapshot
        self.bus.publish(event, payload or {})
        return Right(result)

    async def refresh(self) -> Either[dict, Snapshot]:
        try:
            snapshot = await load_snapshot(self.repo)
        except StorageError as e:
            logger.exception("Load failed, keeping previous state")
            return invalid("storage_failed", str(e), key=e.key)
        self.snapshot = snapshot
        return Right(snapshot)

    async def add_transaction(self, name: str, price, category: Optional[str] = None):
        built = transforms.build_transaction(name, price, self.clock(), category)
        if built.is_left():
            return built
        t = built.get_or_else(None)
        trans = transforms.add_transaction(self.snapshot.transactions, t)
        logger.info("Adding transaction %s (%s)", t.id, t.name)
        return await self._commit(
            lambda: self.repo.save_transactions(trans),
            self.snapshot._replace(transactions=trans),
            TRANSACTIONS_CHANGED,
            t,
            {"action": "add", "id": t.id},
        )

    async def edit_transaction(self, tid: str, name: str, price, category: Optional[str] = None):
        edited = transforms.edit_transaction(self.snapshot.transactions, tid, name, price, category)
        if edited.is_left():
            return edited
        trans = edited.get_or_else(())
        logger.info("Editing transaction %s", tid)
        return await self._commit(
            lambda: self.repo.save_transactions(trans),
            self.snapshot._replace(transactions=trans),
            TRANSACTIONS_CHANGED,
            next(t for t in trans if t.id == tid),
            {"action": "edit", "id": tid},
        )

    async def delete_transaction(self, tid: str):
        if not any(t.id == tid for t in self.snapshot.transactions):
            return invalid("transaction_not_found", f"Transaction {tid} does not exist", transaction_id=tid)
        trans = transforms.delete_transaction(self.snapshot.transactions, tid)
        logger.info("Deleting transaction %s", tid)
        return await self._commit(
            lambda: self.repo.save_transactions(trans),
            self.snapshot._replace(transactions=trans),
            TRANSACTIONS_CHANGED,
            tid,
            {"action": "delete", "id": tid},
        )

    async def update_limits(self, weekly, monthly, yearly):
        limits = transforms.build_limits(weekly, monthly, yearly)
        logger.info("Updating spending limits to %s", limits)
        return await self._commit(
            lambda: self.repo.save_limits(limits),
            self.snapshot._replace(limits=limits),
            LIMITS_CHANGED,
            limits,
            limits.to_dict(),
        )

    async def add_goal(self, name: str, target_amount, target_date: str, monthly_income, weekly_income):
        built = transforms.build_goal(
            name, target_amount, target_date, monthly_income, weekly_income, self.clock()
        )
        if built.is_left():
            return built
        goal = built.get_or_else(None)
        goals = transforms.add_goal(self.snapshot.goals, goal)
        logger.info("Adding goal %s (%s)", goal.id, goal.name)
        return await self._commit(
            lambda: self.repo.save_goals(goals),
            self.snapshot._replace(goals=goals),
            GOALS_CHANGED,
            goal,
            {"action": "add_goal", "id": goal.id},
        )

    async def add_goal_expense(
        self, goal_id: Optional[str], name: str, amount, frequency=Frequency.DAILY
    ):
        recorded = transforms.record_goal_expense(
            self.snapshot.goals,
            self.snapshot.goal_expenses,
            goal_id,
            name,
            amount,
            self.clock(),
            frequency,
        )
        if recorded.is_left():
            return recorded
        goals, expenses = recorded.get_or_else(((), ()))
        expense = expenses[-1]
        logger.info("Recording %.2f towards goal %s", expense.amount, goal_id)
        return await self._commit(
            lambda: self.repo.save_goal_transition(goals, expenses),
            self.snapshot._replace(goals=goals, goal_expenses=expenses),
            GOALS_CHANGED,
            expense,
            {"action": "add_expense", "id": expense.id, "goal_id": goal_id},
        )

    async def clear_all(self):
        return await self._commit(self.repo.clear, Snapshot(), DATA_CLEARED, None)

    def check_limits(self) -> List[dict]:
        """Publish current totals against the limits and collect any alerts."""
        totals = period_totals(self.snapshot.transactions, self.clock(), self.cfg.week_start)
        results = self.bus.publish(
            LIMIT_ALERT,
            {"totals": totals._asdict(), "limits": self.snapshot.limits.to_dict()},
        )
        return [alert for r in results for alert in r.get("alerts", [])]


class ReportService:
    """Builds dashboard reports from whatever snapshot it is handed."""

    def __init__(self, cfg: Optional[AppConfig] = None, clock: Clock = datetime.now):
        self.cfg = cfg or default_config
        self.clock = clock

    def dashboard(self, snapshot: Snapshot, now: Optional[datetime] = None) -> Report:
        return build_report(snapshot, now or self.clock(), self.cfg)
