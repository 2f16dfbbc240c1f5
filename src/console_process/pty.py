"""PTY (Pseudo-Terminal) spawning.

Commands are started with stdout attached to a small fixed-size
pseudo-terminal, so programs that change behavior when writing to a terminal
(colors, progress output, pagers) behave as they would interactively. stderr
and stdin stay on pipes: stderr is collected separately and stdin is fed from
the event loop and closed.

Every spawned child is returned as a :class:`ChildProcess` exposing plain file
descriptors, ready to be registered with an event loop.
"""

from __future__ import annotations

import os
import struct
import subprocess
import sys
from typing import Any


class PtyNotAvailableError(Exception):
    """Raised when PTY functionality is not available on the current platform."""


class ChildProcess:
    """A started OS process with non-blocking stdin/stdout/stderr descriptors."""

    def __init__(self, proc: subprocess.Popen[Any], stdout_fd: int, stderr_fd: int, use_pty: bool) -> None:
        self._proc = proc
        self.pid = proc.pid
        self.stdin_fd = _detach_fd(proc.stdin)
        self.stdout_fd = stdout_fd
        self.stderr_fd = stderr_fd
        self.use_pty = use_pty
        os.set_blocking(self.stdin_fd, False)
        os.set_blocking(stdout_fd, False)
        os.set_blocking(stderr_fd, False)

    @property
    def returncode(self) -> int | None:
        return self._proc.returncode

    def poll(self) -> int | None:
        """Check if process has terminated."""
        return self._proc.poll()


def _detach_fd(stream: Any) -> int:
    """Take ownership of a Popen pipe as a raw descriptor."""
    fd = os.dup(stream.fileno())
    stream.close()
    return fd


class Pty:
    """Spawns commands with stdout on a pseudo-terminal of a fixed size."""

    def __init__(self, width: int = 80, height: int = 24) -> None:
        self.width = width
        self.height = height

    @classmethod
    def is_available(cls) -> bool:
        """Check if PTY support is available on the current platform."""
        if sys.platform == "win32":
            return False
        try:
            import fcntl  # noqa: F401, PLC0415
            import pty  # noqa: F401, PLC0415
            import termios  # noqa: F401, PLC0415
        except ImportError:
            return False
        else:
            return True

    def spawn_process(self, command: list[str], cwd: str | None, env: dict[str, str]) -> ChildProcess:
        """Spawn ``command`` with stdout on a new pseudo-terminal.

        Raises:
            PtyNotAvailableError: If PTY is not available on this platform
            OSError: If the command cannot be started
        """
        if not self.is_available():
            msg = f"PTY not available on {sys.platform}"
            raise PtyNotAvailableError(msg)

        import fcntl  # noqa: PLC0415
        import pty  # noqa: PLC0415
        import termios  # noqa: PLC0415

        master_fd, slave_fd = pty.openpty()
        try:
            # rows, columns, xpixel, ypixel
            winsize = struct.pack("HHHH", self.height, self.width, 0, 0)
            fcntl.ioctl(slave_fd, termios.TIOCSWINSZ, winsize)

            proc = subprocess.Popen(  # noqa: S603
                command,
                cwd=cwd,
                env=env,
                stdin=subprocess.PIPE,
                stdout=slave_fd,
                stderr=subprocess.PIPE,
                preexec_fn=os.setsid,  # noqa: PLW1509
            )
        except BaseException:
            os.close(master_fd)
            raise
        finally:
            # Close slave fd in parent process; the child holds its own copy
            os.close(slave_fd)

        return ChildProcess(proc, master_fd, _detach_fd(proc.stderr), use_pty=True)


def spawn_with_pipes(command: list[str], cwd: str | None, env: dict[str, str]) -> ChildProcess:
    """Spawn ``command`` with plain pipes, for platforms without a pseudo-terminal."""
    proc = subprocess.Popen(  # noqa: S603
        command,
        cwd=cwd,
        env=env,
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    return ChildProcess(proc, _detach_fd(proc.stdout), _detach_fd(proc.stderr), use_pty=False)
