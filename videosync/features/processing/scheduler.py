import asyncio
import logging
from typing import Awaitable, Callable, Optional

from videosync.features.processing.schemas import SweepSummary

logger = logging.getLogger(__name__)


class SweepScheduler:
    """
    Lance un sweep tout de suite puis toutes les `interval` secondes, dans une tâche asyncio.
    Un sweep en échec est loggé ; la boucle continue.
    """

    def __init__(self, interval: float, run_sweep: Callable[[], Awaitable[SweepSummary]]):
        self.interval = interval
        self.run_sweep = run_sweep
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        logger.info("Starting reconciliation sweep every %ss", self.interval)
        self._task = asyncio.create_task(self._loop(), name="videosync-sweep")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Reconciliation sweep stopped")

    async def _loop(self) -> None:
        while True:
            try:
                await self.run_sweep()
            except Exception:
                logger.exception("Scheduled sweep failed")
            await asyncio.sleep(self.interval)
