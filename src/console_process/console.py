"""Console module.

The console is a persistent scrollback that shows live or buffered output of
commands. It stays hidden while commands are fast and successful, and is
revealed for slow or failing ones.

The surface itself (a terminal pane, a log window, a widget) belongs to the
surrounding application and is plugged in through a :class:`ConsoleSink`
factory. :class:`Console` owns the sink's identity: it creates the sink lazily,
forgets it when the application reports that the user closed it, and writes
the ``> command`` header whenever output from a different process starts.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, TextIO

if TYPE_CHECKING:
    from console_process.process import Process

logger = logging.getLogger(__name__)

_NEWLINE = re.compile(r"\r?\n")


class ConsoleSink(Protocol):
    """Protocol for console surfaces used with Console."""

    current_span: int | None

    def append(self, text: str) -> None: ...

    def show(self) -> None: ...

    def hide(self) -> None: ...


class ScrollbackConsole:
    """In-memory scrollback that can be echoed to a text stream.

    Appended text is kept for the lifetime of the sink. While visible, appended
    text is also written to ``stream``; showing a hidden sink first writes the
    scrollback accumulated so far.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self.current_span: int | None = None
        self.visible = False
        self.show_count = 0
        self._chunks: list[str] = []
        self._stream = stream

    @property
    def text(self) -> str:
        return "".join(self._chunks)

    def append(self, text: str) -> None:
        self._chunks.append(text)
        if self.visible:
            self._write(text)

    def show(self) -> None:
        self.show_count += 1
        if not self.visible:
            self.visible = True
            self._write(self.text)

    def hide(self) -> None:
        self.visible = False

    def _write(self, text: str) -> None:
        if self._stream is None or not text:
            return
        self._stream.write(text)
        self._stream.flush()


class Console:
    """Owner of the lazily created console sink."""

    def __init__(self, sink_factory: Callable[[], ConsoleSink] = ScrollbackConsole) -> None:
        self._sink_factory = sink_factory
        self._sink: ConsoleSink | None = None

    @property
    def sink(self) -> ConsoleSink | None:
        """The current sink, or None if it was never created or has been closed."""
        return self._sink

    @property
    def visible(self) -> bool:
        return self._sink is not None and bool(getattr(self._sink, "visible", False))

    def _ensure_sink(self) -> ConsoleSink:
        if self._sink is None:
            logger.debug("Creating console sink")
            self._sink = self._sink_factory()
        return self._sink

    def append_log(self, process: Process, data: str) -> None:
        """Append output of ``process``, preceded by a header if another process wrote last."""
        sink = self._ensure_sink()
        if sink.current_span != process.span_id:
            sink.append(f"\r\n> {process.get_command_str()}\r\n")
            sink.current_span = process.span_id

        # A terminal surface needs the carriage return to reset the column
        sink.append(_NEWLINE.sub("\r\n", data))

    def show(self) -> None:
        self._ensure_sink().show()

    def hide(self) -> None:
        if self._sink is not None:
            self._sink.hide()

    def close(self) -> None:
        """Forget the sink; to be called by the application when the user closes it."""
        logger.debug("Console sink closed")
        self._sink = None
