"""Shared state of the process console: registry, suppression switch, console and loop."""

from __future__ import annotations

import asyncio
import logging

from console_process.config import ConsoleConfig
from console_process.console import Console
from console_process.process_registry import ProcessRegistry
from console_process.suppression import SuppressionController

logger = logging.getLogger(__name__)


class ProcessContext:
    """State shared by every Process spawned through it.

    Processes bind to :attr:`loop` when spawned: the loop running in the
    calling thread if there is one, otherwise the loop passed in, otherwise a
    private loop created on first use and closed by :meth:`close`.
    """

    def __init__(
        self,
        config: ConsoleConfig | None = None,
        console: Console | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.config = config if config is not None else ConsoleConfig()
        self.console = console if console is not None else Console()
        self.registry = ProcessRegistry()
        self.suppression = SuppressionController(self.registry, self.console)
        self._loop = loop
        self._owns_loop = False

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            pass
        if self._loop is None:
            self._loop = asyncio.new_event_loop()
            self._owns_loop = True
        return self._loop

    def suppress_console(self) -> None:
        self.suppression.suppress()

    def resume_console(self) -> None:
        self.suppression.resume()

    def close(self) -> None:
        """Stop all watchdogs and close the private loop, if one was created."""
        running = self.registry.processes()
        if running:
            logger.warning("Closing process context with %d command(s) still running", len(running))
        for process in running:
            process.stop_watchdog()
        if self._owns_loop and self._loop is not None:
            self._loop.close()
            self._loop = None
            self._owns_loop = False


_default_context: ProcessContext | None = None


def default_context() -> ProcessContext:
    """Context used by processes created without one, built from the environment on first use."""
    global _default_context  # noqa: PLW0603
    if _default_context is None:
        _default_context = ProcessContext(config=ConsoleConfig.from_env())
    return _default_context


def set_default_context(context: ProcessContext | None) -> None:
    """Replace the default context, e.g. to plug in the application's console sink."""
    global _default_context  # noqa: PLW0603
    _default_context = context


def suppress_console() -> None:
    """Hide the console and stop automatic reveal, e.g. while a batch of commands runs."""
    default_context().suppress_console()


def resume_console() -> None:
    """Allow automatic reveal again; commands still running get a fresh watchdog."""
    default_context().resume_console()
