"""Background cleanup of expired blacklist entries."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class CleanupScheduler:
    """Runs a cleanup coroutine every ``interval`` milliseconds.

    Each scheduler belongs to a single engine. Runs are isolated from each
    other: a failing run is logged and the next one still happens. ``stop()``
    cancels future runs but lets a run that already started finish.

    The loop lives in an asyncio task, so it needs a running event loop. When
    ``start()`` is called without one, the start is deferred until
    ``ensure_started()`` is called from inside a loop.
    """

    def __init__(self, cleanup: Callable[[], Awaitable[int]], interval: int):
        if interval <= 0:
            raise ValueError(f"Cleanup interval must be positive, got {interval}")
        self._cleanup = cleanup
        self.interval = interval
        self._task: Optional[asyncio.Task] = None
        self._pending = False

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def is_pending(self) -> bool:
        return self._pending

    def start(self) -> None:
        if self.is_running:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._pending = True
            logger.debug("No running event loop, deferring blacklist cleanup scheduler")
            return
        self._pending = False
        self._task = loop.create_task(self._run())
        logger.debug(f"Blacklist cleanup scheduled every {self.interval} ms")

    def ensure_started(self) -> None:
        if self._pending:
            self.start()

    def stop(self) -> None:
        self._pending = False
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def run_once(self) -> Optional[int]:
        """Run a single cleanup pass. Returns the count removed, or None if it failed."""
        try:
            return await self._cleanup()
        except Exception as e:
            logger.exception(f"Blacklist cleanup error: {e}")
            return None

    async def _run(self) -> None:
        while True:
            try:
                await asyncio.sleep(self.interval / 1000)
                await asyncio.shield(self.run_once())
            except asyncio.CancelledError:
                break
