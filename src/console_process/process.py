"""External command execution with a watchdog-driven console.

## Basic Usage

### Blocking
```python
process = Process(["git", "status", "--short"])
result = process.spawn_blocking()
print(result.stdout, result.code)
```

### Suspending (inside a coroutine)
```python
result = await Process(["git", "fetch"]).spawn_async()
```

### Fire and forget
```python
Process(["git", "gc"]).spawn(on_exit=lambda result: print(result.code))
```

### Keeping the console quiet during a batch
```python
suppress_console()
for cmd in batch:
    Process(cmd).spawn_blocking()
resume_console()
```

## Console policy

Every spawned command gets a watchdog armed for ``console_timeout_ms``. When
it fires and the command is still running (or has failed), the stdout
collected so far and an elapsed-time line are appended to the console and the
console is shown. A command exiting nonzero shows the console as well. stderr
is always mirrored to the console; stdout only when ``verbose`` is set.
Nothing is revealed while the console is suppressed.
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
import itertools
import logging
import os
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from console_process.context import ProcessContext, default_context
from console_process.errors import ProcessAlreadyStartedError, ProcessNotStartedError, ProcessStartError
from console_process.events import ExitEvent, OutputEvent
from console_process.output_collector import OutputCollector
from console_process.process_watcher import ProcessWatcher
from console_process.pty import ChildProcess, Pty, PtyNotAvailableError, spawn_with_pipes
from console_process.watchdog import WatchdogTimer

# Create module-level logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessDescriptor:
    """What to run: command tokens, working directory, extra environment, stdin text, verbosity."""

    cmd: tuple[str, ...]
    cwd: str | None = None
    env: Mapping[str, str] = field(default_factory=dict)
    input: str | None = None
    verbose: bool = False

    def __post_init__(self) -> None:
        if not self.cmd:
            msg = "cmd must contain at least one token"
            raise ValueError(msg)
        object.__setattr__(self, "cmd", tuple(self.cmd))
        object.__setattr__(self, "env", MappingProxyType(dict(self.env)))


@dataclass
class ProcessResult:
    """Output and exit status of a command.

    While the command runs, stdout/stderr grow and ``code``/``time`` are None.
    ``time`` is the elapsed wall time in seconds, unlike the console's
    "Command running for" line, which reports milliseconds.
    """

    stdout: list[str] = field(default_factory=list)
    stderr: list[str] = field(default_factory=list)
    code: int | None = None
    time: float | None = None


class ProcessState(enum.Enum):
    UNSPAWNED = "unspawned"
    RUNNING = "running"
    EXITED = "exited"


ExitCallback = Callable[[ProcessResult], None]

# Console span keys; unlike pids these are never reused
_span_ids = itertools.count(1)


class Process:
    """
    One external command, spawned at most once.

    The process is driven by the event loop of its context: output is read,
    exit is detected and the watchdog fires only while that loop runs, which
    wait() and spawn_async() take care of.
    """

    def __init__(
        self,
        cmd: Sequence[str],
        cwd: str | Path | None = None,
        env: Mapping[str, str] | None = None,
        input: str | None = None,  # noqa: A002
        verbose: bool = False,
        context: ProcessContext | None = None,
    ) -> None:
        """
        Args:
            cmd: Command tokens; the first is the executable.
            cwd: Working directory for the command.
            env: Variables added to (or overriding) the inherited environment.
            input: Text written to the command's stdin before it is closed.
            verbose: If True, stdout is mirrored to the console as it arrives.
            context: Shared state to spawn through. Defaults to default_context().
        """
        descriptor = ProcessDescriptor(
            cmd=tuple(cmd),
            cwd=str(cwd) if cwd is not None else None,
            env=env or {},
            input=input,
            verbose=verbose,
        )
        self._init(descriptor, context)

    @classmethod
    def from_descriptor(cls, descriptor: ProcessDescriptor, context: ProcessContext | None = None) -> Process:
        process = cls.__new__(cls)
        process._init(descriptor, context)  # noqa: SLF001
        return process

    def _init(self, descriptor: ProcessDescriptor, context: ProcessContext | None) -> None:
        self.descriptor = descriptor
        self.span_id = next(_span_ids)
        self._context = context
        self.state = ProcessState.UNSPAWNED
        self.result: ProcessResult | None = None
        self._child: ChildProcess | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._watchdog: WatchdogTimer | None = None
        self._exited: asyncio.Future[ProcessResult] | None = None
        self._on_exit: ExitCallback | None = None
        self._start_time: float | None = None
        self._stdout = OutputCollector()
        self._stderr = OutputCollector()

    def __repr__(self) -> str:
        return f"Process(cmd={list(self.cmd)!r}, pid={self.pid}, state={self.state.value})"

    @property
    def cmd(self) -> tuple[str, ...]:
        return self.descriptor.cmd

    @property
    def cwd(self) -> str | None:
        return self.descriptor.cwd

    @property
    def env(self) -> Mapping[str, str]:
        return self.descriptor.env

    @property
    def input(self) -> str | None:
        return self.descriptor.input

    @property
    def verbose(self) -> bool:
        return self.descriptor.verbose

    @property
    def context(self) -> ProcessContext:
        if self._context is None:
            self._context = default_context()
        return self._context

    @property
    def pid(self) -> int | None:
        """Runtime handle assigned by the OS, or None before spawn."""
        return self._child.pid if self._child is not None else None

    @property
    def start_time(self) -> float | None:
        """time.monotonic() at spawn."""
        return self._start_time

    @property
    def watchdog_active(self) -> bool:
        return self._watchdog is not None and self._watchdog.active

    def get_command_str(self) -> str:
        return " ".join(self.cmd)

    def _build_env(self) -> dict[str, str]:
        env = os.environ.copy()
        # Force unbuffered output for Python subprocesses
        env["PYTHONUNBUFFERED"] = "1"
        env.update(self.env)
        env["TERM"] = self.context.config.term
        return env

    def _create_child(self, env: dict[str, str]) -> ChildProcess:
        config = self.context.config
        try:
            return Pty(config.terminal_width, config.terminal_height).spawn_process(list(self.cmd), self.cwd, env)
        except PtyNotAvailableError:
            # Fall back to regular pipe-based process if PTY is not available
            logger.warning("PTY not available, falling back to pipes")
            return spawn_with_pipes(list(self.cmd), self.cwd, env)

    def spawn(self, on_exit: ExitCallback | None = None) -> bool:
        """
        Start the command in the background and return immediately.

        Args:
            on_exit: Called on the event loop with the final result once the
                command exited and all of its output was collected.

        Returns:
            True once the command has started.

        Raises:
            ProcessAlreadyStartedError: If this Process was spawned before.
            ProcessStartError: If the OS could not start the command.
        """
        if self.state is not ProcessState.UNSPAWNED:
            msg = f"Process started twice: {self.get_command_str()}"
            raise ProcessAlreadyStartedError(msg)

        context = self.context
        loop = context.loop
        logger.info("Running command: %s (cwd=%s)", self.get_command_str(), self.cwd)

        try:
            child = self._create_child(self._build_env())
        except (OSError, ValueError) as e:
            msg = f"Failed to start process: {self.get_command_str()}: {e}"
            raise ProcessStartError(msg) from e

        self._child = child
        self._loop = loop
        self._start_time = time.monotonic()
        self._on_exit = on_exit
        self._exited = loop.create_future()
        self._stdout = OutputCollector(mirror=self._append_log if self.verbose else None)
        self._stderr = OutputCollector(mirror=self._append_log)
        # Shares the collectors' lists, so the result is readable while running
        self.result = ProcessResult(stdout=self._stdout.lines, stderr=self._stderr.lines)
        self.state = ProcessState.RUNNING

        context.registry.register(self)
        if not context.suppression.suppressed:
            self.start_watchdog()

        ProcessWatcher(loop, child, self._dispatch, input=self.input).start()
        return True

    def spawn_blocking(self) -> ProcessResult:
        """Spawn and block until the command completes."""
        self.spawn()
        return self.wait()

    async def spawn_async(self) -> ProcessResult:
        """Spawn and suspend the calling coroutine until the command completes."""
        loop = asyncio.get_running_loop()
        done: asyncio.Future[ProcessResult] = loop.create_future()

        def _resume(result: ProcessResult) -> None:
            if not done.done():
                done.set_result(result)

        self.spawn(on_exit=_resume)
        return await done

    async def _wait_exited(self, timeout: float | None) -> None:
        assert self._exited is not None
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(asyncio.shield(self._exited), timeout)

    def wait(self, timeout_ms: float | None = None) -> ProcessResult:
        """
        Block until the command completes, running the event loop meanwhile.

        Other commands' output, exits and watchdogs keep being processed while
        waiting.

        Args:
            timeout_ms: Upper bound in milliseconds. None waits indefinitely.

        Returns:
            The final result, or the in-progress result (``code`` None) if the
            timeout elapsed first.

        Raises:
            ProcessNotStartedError: If the process hasn't been spawned.
            RuntimeError: If called from a coroutine running on the process's own loop.
                From any other thread the call blocks while the loop keeps running there.
        """
        if self.state is ProcessState.UNSPAWNED:
            msg = f"Process not started: {self.get_command_str()}"
            raise ProcessNotStartedError(msg)
        assert self._loop is not None
        assert self._exited is not None

        if not self._exited.done():
            try:
                running = asyncio.get_running_loop()
            except RuntimeError:
                running = None
            if running is self._loop:
                msg = "wait() cannot block the event loop driving the process; use spawn_async()"
                raise RuntimeError(msg)
            timeout = timeout_ms / 1000.0 if timeout_ms is not None else None
            if self._loop.is_running():
                # The loop is driven by another thread
                asyncio.run_coroutine_threadsafe(self._wait_exited(timeout), self._loop).result()
            else:
                self._loop.run_until_complete(self._wait_exited(timeout))

        assert self.result is not None
        return self.result

    def _dispatch(self, event: OutputEvent | ExitEvent) -> None:
        if isinstance(event, OutputEvent):
            collector = self._stdout if event.stream == "stdout" else self._stderr
            collector.feed(event.fragments)
        else:
            self._handle_exit(event.code)

    def _handle_exit(self, code: int) -> None:
        logger.info("Finished command: %s (code %s)", self.get_command_str(), code)
        result = self.result
        assert result is not None
        assert self._start_time is not None

        result.stdout = self._stdout.finalize()
        result.stderr = self._stderr.finalize()
        result.code = code
        result.time = time.monotonic() - self._start_time

        context = self.context
        context.registry.unregister(self)
        self.state = ProcessState.EXITED
        self.stop_watchdog()

        if code != 0 and not context.suppression.suppressed:
            context.console.show()

        assert self._exited is not None
        if not self._exited.done():
            self._exited.set_result(result)
        if self._on_exit is not None:
            self._on_exit(result)

    def _append_log(self, data: str) -> None:
        self.context.console.append_log(self, data)

    def start_watchdog(self) -> None:
        """Arm the console watchdog, unless it is armed already or the process is not running."""
        if self.state is not ProcessState.RUNNING or self._watchdog is not None:
            return
        assert self._loop is not None
        self._watchdog = WatchdogTimer(self._loop, self.context.config.console_timeout, self._on_watchdog)
        self._watchdog.start()

    def stop_watchdog(self) -> None:
        if self._watchdog is not None:
            self._watchdog.stop()
            self._watchdog = None

    def _on_watchdog(self) -> None:
        self._watchdog = None
        result = self.result
        if result is not None and result.code == 0:
            return

        if not self.verbose and result is not None:
            # stdout was not mirrored live, so show what was collected so far
            self._append_log("\n".join(result.stdout))
        assert self._start_time is not None
        elapsed_ms = (time.monotonic() - self._start_time) * 1000
        self._append_log(f"\nCommand running for: {elapsed_ms:.2f} ms\n")
        self.context.console.show()
