"""
viewmodels/task_scope.py – Owner of coroutines launched by view-model commands.

Commands are plain methods called from the UI thread.  They update state
synchronously and hand the slow part (network / disk) to launch(), which
schedules it on the event loop and keeps a reference until it finishes.
"""

import asyncio
import logging
from typing import Coroutine, Optional, Set

logger = logging.getLogger(__name__)


class TaskScope:
    """
    Parameters
    ----------
    loop : Event loop to schedule on.  Defaults to the running loop at the
           time of the first launch; pass it explicitly when commands are
           triggered from callbacks the loop does not drive directly
           (e.g. Qt slots under QtAsyncio).
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def active_count(self) -> int:
        return len(self._tasks)

    def launch(self, coro: Coroutine, *, name: Optional[str] = None) -> asyncio.Task:
        if self._closed:
            coro.close()
            raise RuntimeError("TaskScope is closed")
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        task = self._loop.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    async def join(self) -> None:
        """Wait until every task launched so far (and any they launch) is done."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        """Cancel every in-flight task; further launches are refused."""
        self._closed = True
        for task in list(self._tasks):
            task.cancel()

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            # Catch-all so a launched coroutine never dies silently.
            logger.error(
                "Task %s failed: %s", task.get_name(), exc, exc_info=exc
            )
