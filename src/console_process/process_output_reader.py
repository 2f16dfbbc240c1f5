"""Process output reader module.

This module contains the StreamReader class, which drains one output
descriptor of a process from the event loop and turns every read into an
OutputEvent.
"""

from __future__ import annotations

import asyncio
import codecs
import errno
import logging
import os
from collections.abc import Callable

from console_process.events import OutputEvent, Stream

logger = logging.getLogger(__name__)

READ_SIZE = 4096


class StreamReader:
    """Reads a non-blocking descriptor whenever the loop reports it readable.

    Decoded text is split on newlines and forwarded as a single OutputEvent per
    read. A multi-byte character cut by a read boundary is held back until its
    remaining bytes arrive. ``on_end`` is invoked exactly once, after the last
    event, when the descriptor reaches end-of-stream or is closed.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        fd: int,
        stream: Stream,
        on_event: Callable[[OutputEvent], None],
        on_end: Callable[[], None],
    ) -> None:
        self._loop = loop
        self._fd = fd
        self.stream = stream
        self._on_event = on_event
        self._on_end = on_end
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self.closed = False

    def start(self) -> None:
        self._loop.add_reader(self._fd, self._on_readable)

    def _on_readable(self) -> None:
        self._read_chunk()

    def _read_chunk(self) -> bool:
        """Read once. Returns True if data was read, False if none is available or the stream ended."""
        try:
            chunk = os.read(self._fd, READ_SIZE)
        except BlockingIOError:
            return False
        except OSError as e:
            # A pty master reports EIO once every slave descriptor is closed
            if e.errno != errno.EIO:
                logger.warning("Unexpected error reading %s: %s", self.stream, e)
            chunk = b""

        if not chunk:
            self.close()
            return False

        self._emit(self._decoder.decode(chunk))
        return True

    def drain(self) -> None:
        """Read everything currently buffered without waiting for more."""
        while not self.closed and self._read_chunk():
            pass

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._loop.remove_reader(self._fd)
        try:
            os.close(self._fd)
        except OSError as e:
            logger.debug("Closing %s descriptor failed: %s", self.stream, e)

        self._emit(self._decoder.decode(b"", final=True))
        logger.debug("End of %s", self.stream)
        self._on_end()

    def _emit(self, text: str) -> None:
        if text:
            self._on_event(OutputEvent(self.stream, tuple(text.split("\n"))))
