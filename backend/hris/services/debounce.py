from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable
from typing import Any


class Debouncer:
    """Coalesces rapid calls into one, fired ``delay_ms`` after the last call.

    Must be called from inside a running event loop. A call that arrives while
    the callback is already executing schedules a new run; it does not
    interrupt the running one.
    """

    def __init__(self, delay_ms: int, callback: Callable[..., Any]) -> None:
        self.delay = delay_ms / 1000
        self._callback = callback
        self._task: asyncio.Task[None] | None = None
        self._running: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def __call__(self, *args: Any, **kwargs: Any) -> asyncio.Task[None]:
        self.cancel()
        task = asyncio.create_task(self._fire(args, kwargs))
        self._task = task
        return task

    async def _fire(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        task = asyncio.current_task()
        await asyncio.sleep(self.delay)
        # past the delay the run is committed; cancel() no longer touches it
        self._running.add(task)
        try:
            result = self._callback(*args, **kwargs)
            if inspect.isawaitable(result):
                await result
        finally:
            self._running.discard(task)
            if self._task is task:
                self._task = None

    def cancel(self) -> None:
        task = self._task
        if task is None:
            return
        if not task.done() and task not in self._running:
            task.cancel()
            self._task = None

    async def flush(self) -> None:
        """Wait for the scheduled call and any run still in progress.

        Exceptions raised by the callback propagate to the caller.
        """
        tasks = [*self._running]
        if self._task is not None and self._task not in self._running:
            tasks.append(self._task)
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
