"""Exception types raised by console_process."""


class ConsoleProcessError(Exception):
    """Base class for errors raised by this package."""


class ProcessStartError(ConsoleProcessError, OSError):
    """Raised when the operating system refuses to start a command."""


class ProcessMisuseError(ConsoleProcessError, RuntimeError):
    """Raised when a Process is driven out of order (programmer error)."""


class ProcessAlreadyStartedError(ProcessMisuseError):
    """Raised when spawn() is called on a Process that was already spawned."""


class ProcessNotStartedError(ProcessMisuseError):
    """Raised when wait() is called on a Process that was never spawned."""
