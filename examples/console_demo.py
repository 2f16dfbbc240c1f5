#!/usr/bin/env python3
"""Console Demo - Shows when the console log is revealed."""

import sys
from functools import partial

from console_process import Console, ConsoleConfig, Process, ProcessContext, ScrollbackConsole


def demo_console_reveal():
    """Run a fast, a slow and a failing command; only the last two reveal the log."""
    print("Console Demo")
    print("=" * 50)

    context = ProcessContext(
        config=ConsoleConfig(console_timeout_ms=500),
        console=Console(partial(ScrollbackConsole, sys.stdout)),
    )

    print("Fast command (log stays hidden):")
    result = Process(["echo", "Hello"], context=context).spawn_blocking()
    print(f"Output: {result.stdout} Exit code: {result.code}")
    print()

    print("Slow command (log revealed after 500 ms):")
    slow = [sys.executable, "-c", "import time; print('working...', flush=True); time.sleep(1.5)"]
    result = Process(slow, context=context).spawn_blocking()
    print(f"\nExit code: {result.code} after {result.time:.2f}s")
    context.console.hide()
    print()

    print("Failing command while suppressed (log stays hidden):")
    context.suppress_console()
    result = Process(["false"], context=context).spawn_blocking()
    context.resume_console()
    print(f"Exit code: {result.code}")
    print()

    print("Failing command (log revealed on exit):")
    failing = [sys.executable, "-c", "import sys; sys.stderr.write('\\x1b[31mfatal: bad revision\\x1b[0m\\n'); sys.exit(128)"]
    result = Process(failing, context=context).spawn_blocking()
    print(f"\nstderr (escape codes stripped): {result.stderr} Exit code: {result.code}")

    context.close()


if __name__ == "__main__":
    demo_console_reveal()
