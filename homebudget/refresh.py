import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicRefresher:
    """Re-run `load` every `interval` seconds until stopped.

    The first load runs immediately on start. A failing load is logged and
    the next tick tries again; stop() cancels the pending tick.
    """

    def __init__(self, load: Callable[[], Awaitable[object]], interval: float = 30.0):
        self.load = load
        self.interval = interval
        self.runs = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def trigger(self) -> None:
        await self._run_once()

    async def _run_once(self) -> None:
        try:
            await self.load()
        except Exception:
            logger.exception("Refresh failed")
        finally:
            self.runs += 1

    async def _loop(self) -> None:
        while True:
            await self._run_once()
            await asyncio.sleep(self.interval)
