"""Global switch deciding whether slow or failing commands may reveal the console."""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from console_process.console import Console
    from console_process.process_registry import ProcessRegistry

logger = logging.getLogger(__name__)


class ConsoleState(enum.Enum):
    ACTIVE = "active"
    SUPPRESSED = "suppressed"


class SuppressionController:
    """Two-state machine: ACTIVE (auto-reveal allowed) and SUPPRESSED.

    suppress() stops the watchdog of every registered process and hides the
    console; processes spawned while suppressed get no watchdog. resume()
    arms a fresh watchdog for every process still registered.
    """

    def __init__(self, registry: ProcessRegistry, console: Console) -> None:
        self._registry = registry
        self._console = console
        self.state = ConsoleState.ACTIVE

    @property
    def suppressed(self) -> bool:
        return self.state is ConsoleState.SUPPRESSED

    def suppress(self) -> None:
        """Hide the console and keep it hidden until resume()."""
        logger.debug("Console suppressed (%d running)", len(self._registry))
        self.state = ConsoleState.SUPPRESSED
        for process in self._registry.processes():
            process.stop_watchdog()
        self._console.hide()

    def resume(self) -> None:
        """Allow the console to be revealed again, re-arming watchdogs of running processes."""
        logger.debug("Console resumed (%d running)", len(self._registry))
        self.state = ConsoleState.ACTIVE
        for process in self._registry.processes():
            process.start_watchdog()
