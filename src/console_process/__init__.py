"""Run external commands, revealing a console log only for slow or failing ones."""

from __future__ import annotations

__version__ = "1.0.0"

from console_process.config import ConsoleConfig
from console_process.console import Console, ConsoleSink, ScrollbackConsole
from console_process.context import (
    ProcessContext,
    default_context,
    resume_console,
    set_default_context,
    suppress_console,
)
from console_process.errors import (
    ConsoleProcessError,
    ProcessAlreadyStartedError,
    ProcessMisuseError,
    ProcessNotStartedError,
    ProcessStartError,
)
from console_process.process import Process, ProcessDescriptor, ProcessResult, ProcessState
from console_process.process_registry import ProcessRegistry
from console_process.subprocess_runner import run_command
from console_process.suppression import ConsoleState, SuppressionController

__all__ = [
    "Console",
    "ConsoleConfig",
    "ConsoleProcessError",
    "ConsoleSink",
    "ConsoleState",
    "Process",
    "ProcessAlreadyStartedError",
    "ProcessContext",
    "ProcessDescriptor",
    "ProcessMisuseError",
    "ProcessNotStartedError",
    "ProcessRegistry",
    "ProcessResult",
    "ProcessStartError",
    "ProcessState",
    "ScrollbackConsole",
    "SuppressionController",
    "default_context",
    "resume_console",
    "run_command",
    "set_default_context",
    "suppress_console",
]
