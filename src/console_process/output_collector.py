"""Output collector module.

This module contains the OutputCollector class, which turns the chunked,
terminal-formatted output of a process into clean, ordered lines.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence

# CSI/OSC-style escapes (cursor movement, colors, mode switches) plus bare CR/LF
_ESCAPE_CODES = re.compile(r"[\x1b\x9b][\[\]()#;?\d]*[A-PRZcf-ntqry=><~]")
_LINE_BREAKS = re.compile(r"[\r\n]")


def strip_escape_codes(text: str) -> str:
    """Remove terminal control sequences and carriage returns/line feeds from ``text``."""
    return _LINE_BREAKS.sub("", _ESCAPE_CODES.sub("", text))


class OutputCollector:
    """Accumulates one stream (stdout or stderr) of a process into lines.

    Each call to :meth:`feed` receives one chunk as a sequence of fragments.
    The first fragment is joined onto the line currently being built, so a line
    that arrives split across two reads is rejoined; every later fragment starts
    a new line. Stored lines never contain escape sequences.

    If ``mirror`` is given, the original chunk text (escape sequences intact) is
    passed to it after being stored.
    """

    def __init__(self, mirror: Callable[[str], None] | None = None) -> None:
        # The trailing "" is the line currently being built
        self.lines: list[str] = [""]
        self._mirror = mirror

    def feed(self, fragments: Sequence[str]) -> None:
        if not fragments:
            return

        self.lines[-1] += strip_escape_codes(fragments[0])
        for fragment in fragments[1:]:
            self.lines.append(strip_escape_codes(fragment))

        if self._mirror is not None:
            self._mirror("\n".join(fragments))

    def finalize(self) -> list[str]:
        """Return the collected lines without empty entries."""
        return [line for line in self.lines if line != ""]
