"""
Periodic task runner.
"""
import asyncio
import contextlib
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    """
    Run a coroutine function every ``interval`` seconds.

    The first run happens one interval after ``start()``. A failing run
    is logged and the schedule continues.
    """

    def __init__(self, interval: float, callback: Callable[[], Awaitable[object]], name: str):
        """
        Initialize the task.

        Args:
            interval: Seconds between runs
            callback: Coroutine function to run
            name: Name used in logs
        """
        if interval <= 0:
            raise ValueError("Interval must be positive")
        self.interval = interval
        self.callback = callback
        self.name = name
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the schedule on the running loop. Restarting is a no-op."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)

    def cancel(self) -> None:
        """Cancel the schedule without waiting for it to finish."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def stop(self) -> None:
        """Cancel the schedule and wait for the current run to unwind."""
        task = self._task
        self.cancel()
        if task is not None and task is not asyncio.current_task():
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.callback()
            except Exception:  # pylint: disable=broad-exception-caught
                logger.exception("Periodic task %s failed", self.name)
