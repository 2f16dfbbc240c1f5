"""Process watcher module.

This module contains the ProcessWatcher class, which owns the input writer and
output readers of one child process and reports its exit on the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from console_process.events import ExitEvent, OutputEvent
from console_process.process_input_writer import StdinWriter
from console_process.process_output_reader import StreamReader
from console_process.pty import ChildProcess

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.01
# How long output may stay open after the process exited (e.g. held by a grandchild)
EXIT_GRACE = 0.5


class ProcessWatcher:
    """Polls a child process until it terminates.

    The ExitEvent is delivered only after both output streams have ended, so
    every OutputEvent of the process precedes it. If a stream is still open
    EXIT_GRACE seconds after the exit, whatever is buffered is drained and the
    stream is closed.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        child: ChildProcess,
        on_event: Callable[[OutputEvent | ExitEvent], None],
        input: str | None = None,  # noqa: A002
    ) -> None:
        self._loop = loop
        self._child = child
        self._on_event = on_event
        self._readers = [
            StreamReader(loop, child.stdout_fd, "stdout", on_event, self._stream_closed),
            StreamReader(loop, child.stderr_fd, "stderr", on_event, self._stream_closed),
        ]
        self._writer = StdinWriter(loop, child.stdin_fd, input)
        self._handle: asyncio.TimerHandle | None = None
        self._code: int | None = None
        self._exit_seen: float | None = None
        self._done = False

    def start(self) -> None:
        # Readers are attached before any input is written
        for reader in self._readers:
            reader.start()
        self._writer.start()
        self._schedule()

    def _schedule(self) -> None:
        self._handle = self._loop.call_later(POLL_INTERVAL, self._check)

    def _all_closed(self) -> bool:
        return all(reader.closed for reader in self._readers)

    def _stream_closed(self) -> None:
        if self._code is not None and self._all_closed():
            self._finish()

    def _check(self) -> None:
        self._handle = None
        if self._done:
            return

        if self._code is None:
            rc = self._child.poll()
            if rc is None:
                self._schedule()
                return
            self._code = rc
            self._exit_seen = self._loop.time()

        if self._all_closed():
            self._finish()
            return

        assert self._exit_seen is not None
        if self._loop.time() - self._exit_seen >= EXIT_GRACE:
            logger.debug("Output of pid %s still open after exit, closing", self._child.pid)
            for reader in self._readers:
                reader.drain()
                reader.close()
            self._finish()
            return

        self._schedule()

    def _finish(self) -> None:
        if self._done:
            return
        self._done = True
        self._writer.close()
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        assert self._code is not None
        self._on_event(ExitEvent(self._code))
