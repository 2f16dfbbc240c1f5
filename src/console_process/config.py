"""Settings consumed by the process console."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

TIMEOUT_ENV_VAR = "CONSOLE_PROCESS_TIMEOUT_MS"
TERM_ENV_VAR = "CONSOLE_PROCESS_TERM"


@dataclass(frozen=True)
class ConsoleConfig:
    """Settings for spawning commands and revealing the console.

    Attributes:
        console_timeout_ms: Delay before a still-running or failed command reveals the console.
        terminal_width: Columns of the pseudo-terminal commands are attached to.
        terminal_height: Rows of the pseudo-terminal commands are attached to.
        term: Value forced into the TERM environment variable of every command.
    """

    console_timeout_ms: int = 2000
    terminal_width: int = 80
    terminal_height: int = 24
    term: str = "xterm-256color"

    def __post_init__(self) -> None:
        if self.console_timeout_ms < 0:
            msg = f"console_timeout_ms must be >= 0, got {self.console_timeout_ms}"
            raise ValueError(msg)

    @property
    def console_timeout(self) -> float:
        """Reveal delay in seconds."""
        return self.console_timeout_ms / 1000.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ConsoleConfig:
        """Build a config from environment variables, falling back to defaults."""
        environ = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}

        raw_timeout = environ.get(TIMEOUT_ENV_VAR)
        if raw_timeout:
            try:
                kwargs["console_timeout_ms"] = int(raw_timeout)
            except ValueError as e:
                msg = f"{TIMEOUT_ENV_VAR} must be an integer, got {raw_timeout!r}"
                raise ValueError(msg) from e

        term = environ.get(TERM_ENV_VAR)
        if term:
            kwargs["term"] = term

        return cls(**kwargs)  # type: ignore[arg-type]
