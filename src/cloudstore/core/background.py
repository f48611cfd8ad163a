"""
Fire-and-forget task runner.

Tails of a write (after-save triggers, session cleanup, verification email,
stale installation deletion) are scheduled here instead of being awaited by
the caller. Failures go to the log, never back to the request.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Optional, Set

logger = logging.getLogger(__name__)


class BackgroundTasks:
    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()
        self.failures: int = 0

    def spawn(self, coro: Awaitable, name: Optional[str] = None) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        if name:
            task.set_name(name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.failures += 1
            logger.error("background task %s failed: %s", task.get_name(), exc, exc_info=exc)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every scheduled task (including ones they schedule) is done."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
