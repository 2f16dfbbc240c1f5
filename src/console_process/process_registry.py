"""Registry of the processes currently running."""

from __future__ import annotations

import time
import warnings
from typing import TYPE_CHECKING

from console_process.process_utils import get_process_info

if TYPE_CHECKING:
    from console_process.process import Process


class ProcessRegistry:
    """Map of runtime handle (pid) to Process.

    An entry exists exactly while its process is running: spawn() inserts it
    and the exit handler removes it. Mutated only from the event loop thread.
    """

    def __init__(self) -> None:
        self._processes: dict[int, Process] = {}

    def register(self, proc: Process) -> None:
        """Register a running process."""
        assert proc.pid is not None
        self._processes[proc.pid] = proc

    def unregister(self, proc: Process) -> None:
        """Unregister a process."""
        if proc.pid is not None and self._processes.get(proc.pid) is proc:
            del self._processes[proc.pid]

    def get(self, pid: int) -> Process | None:
        return self._processes.get(pid)

    def processes(self) -> list[Process]:
        """Snapshot of the registered processes, safe to iterate while mutating the registry."""
        return list(self._processes.values())

    def __contains__(self, pid: object) -> bool:
        return pid in self._processes

    def __len__(self) -> int:
        return len(self._processes)

    def dump_active(self) -> None:
        """Dump information about running processes."""
        active = self.processes()
        if not active:
            warnings.warn("NO RUNNING COMMANDS", UserWarning, stacklevel=2)
            return

        warnings.warn("RUNNING COMMANDS:", UserWarning, stacklevel=2)

        now = time.monotonic()
        for idx, p in enumerate(active, 1):
            start = p.start_time
            duration_str = f"{(now - start):.1f}s" if start is not None else "?"
            info = get_process_info(p.pid) if p.pid is not None else "no pid"
            warnings.warn(
                f"  {idx}. cmd={p.get_command_str()} pid={p.pid} duration={duration_str} {info}",
                UserWarning,
                stacklevel=2,
            )
