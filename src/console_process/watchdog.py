"""Watchdog timer module.

A WatchdogTimer is a one-shot delayed action owned by a single Process. It
runs on the same event loop as the process's I/O handlers, so it never fires
concurrently with them.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class WatchdogTimer:
    """Cancellable one-shot timer built on ``loop.call_later``."""

    def __init__(self, loop: asyncio.AbstractEventLoop, delay: float, action: Callable[[], None]) -> None:
        self._loop = loop
        self._delay = delay
        self._action = action
        self._handle: asyncio.TimerHandle | None = None
        self.fired = False

    @property
    def active(self) -> bool:
        """True between start() and the earlier of firing or stop()."""
        return self._handle is not None

    def start(self) -> None:
        if self._handle is not None or self.fired:
            return
        logger.debug("Watchdog armed for %.3fs", self._delay)
        self._handle = self._loop.call_later(self._delay, self._fire)

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self.fired = True
        self._action()
