"""Background dispatch of fire-and-forget notifications.

The call-started notification must never block or fail the recording flow,
so it runs as an independent ``asyncio.Task``. Failures are handed to an
observer callback (logging by default) instead of being raised.

Usage::

    notifier = BackgroundNotifier()
    notifier.spawn(relay.notify_civilian_call_started(device_id), name="call-started")
    ...
    await notifier.drain()
"""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

logger = logging.getLogger(__name__)

ErrorObserver = Callable[[str, BaseException], None]


def log_notification_error(name: str, exc: BaseException) -> None:
    """Default observer: record the failure and move on."""
    logger.error("Background notification %s failed: %s", name, exc)


class BackgroundNotifier:
    """Owns the tasks spawned for fire-and-forget notifications.

    Strong references are kept until each task finishes so the event loop
    cannot garbage-collect them mid-flight.

    Args:
        on_error: Called with (task name, exception) for every failed task.
        on_result: Optional callback for successful results.
    """

    def __init__(
        self,
        on_error: ErrorObserver | None = None,
        on_result: Callable[[str, Any], None] | None = None,
    ) -> None:
        self._on_error = on_error or log_notification_error
        self._on_result = on_result
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str = "notification") -> asyncio.Task:
        """Schedule ``coro`` without waiting for it."""
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._finished)
        return task

    def _finished(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.debug("Background notification %s cancelled", task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            self._on_error(task.get_name(), exc)
        elif self._on_result is not None:
            self._on_result(task.get_name(), task.result())

    async def drain(self) -> None:
        """Wait for every outstanding notification to settle."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
