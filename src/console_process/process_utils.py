"""Process utilities for inspecting running commands."""

from __future__ import annotations

import psutil


def get_process_info(pid: int) -> str:
    """Get a one-line summary of a process's status and resource usage."""
    try:
        process = psutil.Process(pid)
        with process.oneshot():
            cpu = process.cpu_times()
            rss = process.memory_info().rss
            return (
                f"name={process.name()} status={process.status()} "
                f"cpu={cpu.user + cpu.system:.2f}s rss={rss // 1024}KiB"
            )
    except psutil.Error:
        return f"Could not get process info for PID {pid}"
