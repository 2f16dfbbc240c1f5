"""Process input writer module.

This module contains the StdinWriter class, which feeds a command's input to
its stdin pipe from the event loop and closes the pipe afterwards.
"""

from __future__ import annotations

import asyncio
import logging
import os

logger = logging.getLogger(__name__)

WRITE_SIZE = 65536


class StdinWriter:
    """Writes ``data`` to a non-blocking descriptor as fast as the pipe accepts it.

    The descriptor is closed after the last byte, right away when there is
    nothing to write, or when the command stops reading (EPIPE).
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, fd: int, data: str | None) -> None:
        self._loop = loop
        self._fd = fd
        self._buffer = memoryview(data.encode("utf-8")) if data else memoryview(b"")
        self._offset = 0
        self._writing = False
        self.closed = False

    @property
    def pending(self) -> int:
        """Bytes not yet accepted by the pipe."""
        return len(self._buffer) - self._offset

    def start(self) -> None:
        if not self.pending:
            self.close()
            return
        self._writing = True
        self._loop.add_writer(self._fd, self._on_writable)

    def _on_writable(self) -> None:
        while self.pending:
            try:
                written = os.write(self._fd, self._buffer[self._offset : self._offset + WRITE_SIZE])
            except BlockingIOError:
                return
            except BrokenPipeError:
                logger.debug("Command closed stdin with %d bytes unwritten", self.pending)
                break
            except OSError as e:
                logger.warning("Writing input failed: %s", e)
                break
            self._offset += written
        self.close()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._writing:
            self._loop.remove_writer(self._fd)
            self._writing = False
        try:
            os.close(self._fd)
        except OSError as e:
            logger.debug("Closing stdin descriptor failed: %s", e)
