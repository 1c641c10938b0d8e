"""One-shot delayed jobs scheduled on the running event loop."""

from __future__ import annotations

import asyncio
import inspect
from typing import Awaitable, Callable

from core.logger import RubikaLogger

logger = RubikaLogger.get_logger()


class Job:
    """Run *callback* once, *delay_seconds* from now.

    Must be created from inside a running event loop (e.g. from a handler).
    The callback may be a plain function or a coroutine function; its errors
    are logged, not raised.
    """

    def __init__(self, delay_seconds: float, callback: Callable[[], "Awaitable[None] | None"]) -> None:
        self.delay = delay_seconds
        self._callback = callback
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        await asyncio.sleep(self.delay)
        try:
            result = self._callback()
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            logger.error("Scheduled job failed", exc_info=True, extra={"delay": self.delay, "error": str(exc)})

    @property
    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> bool:
        """Cancel the job if it has not run yet."""
        return self._task.cancel()

    def __await__(self):
        return self._task.__await__()
