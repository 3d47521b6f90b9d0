"""Fire-and-forget execution for auxiliary writes.

Calculation history is best-effort: the caller never waits on it, failures are
logged and dropped, and nothing is retried.
"""

import asyncio
import logging
from typing import Any, Coroutine

logger = logging.getLogger(__name__)


class BestEffortQueue:
    def __init__(self):
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
        """Schedule `coro` on the running loop and return immediately."""
        task = asyncio.create_task(self._run(coro, name), name=name)
        # Strong reference until done, otherwise the loop may drop the task.
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, coro: Coroutine[Any, Any, Any], name: str) -> None:
        try:
            await coro
        except asyncio.CancelledError:
            logger.info("Best-effort task cancelled: %s", name)
            raise
        except Exception as e:
            logger.warning("Best-effort task %s failed: %s", name, e)

    async def drain(self) -> None:
        """Wait for everything submitted so far."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


side_channel = BestEffortQueue()
