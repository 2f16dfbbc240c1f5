"""Messages delivered from the OS side of a process to its handlers on the loop."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Stream = Literal["stdout", "stderr"]


@dataclass(frozen=True)
class OutputEvent:
    """One chunk of output: decoded text split on newlines.

    The first fragment continues the line the previous chunk ended on; every
    following fragment begins a new line.
    """

    stream: Stream
    fragments: tuple[str, ...]

    @property
    def text(self) -> str:
        """The chunk as it was read, newlines included."""
        return "\n".join(self.fragments)


@dataclass(frozen=True)
class ExitEvent:
    """The process exited with ``code`` and all of its output has been delivered."""

    code: int
