"""
Task lifecycle helpers for listening loops.

Listening loops race several pending reads against each other. Every read
is a task; the ones that lose a race must survive to the next iteration
(so no payload is dropped) and must be cancelled once the loop reaches a
terminal outcome.
"""

import asyncio
from collections.abc import Coroutine
from typing import Any

from loguru import logger


class TaskManager:
    """Tracks the background tasks of one listening call."""

    def __init__(self, name: str = "TaskManager") -> None:
        self.name = name
        self.tasks: set[asyncio.Task[Any]] = set()
        self._shutdown_requested = False

    def create_task(
        self, coro: Coroutine[Any, Any, Any], name: str | None = None
    ) -> asyncio.Task[Any]:
        """Create and track a background task."""
        if self._shutdown_requested:
            coro.close()
            raise RuntimeError("Cannot create tasks after shutdown requested")

        task = asyncio.create_task(coro, name=name)
        self.tasks.add(task)
        task.add_done_callback(self._task_completed)
        return task

    def _task_completed(self, task: asyncio.Task[Any]) -> None:
        self.tasks.discard(task)
        if task.cancelled():
            logger.debug(f"[{self.name}] Task {task.get_name()} was cancelled")

    async def shutdown(self) -> None:
        """Cancel every tracked task and wait for the cancellations to land."""
        if self._shutdown_requested:
            return

        self._shutdown_requested = True
        pending = [task for task in self.tasks if not task.done()]
        if not pending:
            return

        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.debug(f"[{self.name}] Cancelled {len(pending)} pending task(s)")

    def __len__(self) -> int:
        """Return number of active tasks."""
        return len(self.tasks)

    def __bool__(self) -> bool:
        """Return True if there are active tasks."""
        return bool(self.tasks)
