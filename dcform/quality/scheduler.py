"""Per-field debounce timer.

Each field instance owns one DebounceTimer. Scheduling while a call is
pending cancels it and restarts the full interval (trailing edge only),
so a burst of input produces a single call with the last arguments.
Disposing the timer cancels any pending call; a disposed timer refuses
new work, which keeps callbacks from firing for a removed field.

Timers run on an asyncio event loop and must be used from the loop's
thread.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from dcform.exceptions import SchedulerDisposedError

logger = logging.getLogger(__name__)


class DebounceTimer:
    """Holds at most one pending delayed call."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None, name: str = ""):
        """Initialize timer.

        Args:
            loop: Event loop to schedule on; defaults to the running loop
                at scheduling time.
            name: Label used in log messages, usually the field id.
        """
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._disposed = False
        self.name = name

    @property
    def pending(self) -> bool:
        """Whether a call is waiting for its quiet period to end."""
        return self._handle is not None

    @property
    def disposed(self) -> bool:
        return self._disposed

    def schedule(self, delay_ms: float, callback: Callable[..., Any], *args: Any) -> None:
        """Run ``callback(*args)`` after ``delay_ms`` of quiet.

        Raises:
            SchedulerDisposedError: If the timer has been disposed.
        """
        if self._disposed:
            raise SchedulerDisposedError()

        if self.cancel():
            logger.debug("Rescheduled debounce for %s", self.name or "field")

        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(
            max(delay_ms, 0) / 1000, self._fire, callback, args
        )

    def _fire(self, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        self._handle = None
        callback(*args)

    def cancel(self) -> bool:
        """Cancel the pending call.

        Returns:
            True if a call was pending.
        """
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        return True

    def dispose(self) -> None:
        """Cancel any pending call and refuse further scheduling."""
        if self.cancel():
            logger.debug("Dropped pending validation for %s", self.name or "field")
        self._disposed = True

    def __enter__(self) -> "DebounceTimer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()
