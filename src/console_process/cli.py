"""Command line entry point: run one command under the process console."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from collections.abc import Sequence
from functools import partial

from console_process.config import ConsoleConfig
from console_process.console import Console, ScrollbackConsole
from console_process.context import ProcessContext
from console_process.errors import ProcessStartError
from console_process.process import Process


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="console-process",
        description="Run a command; its log is shown on stderr if it is slow or fails.",
    )
    parser.add_argument("--timeout-ms", type=int, default=None, help="delay before a running command shows its log")
    parser.add_argument("--verbose", action="store_true", help="mirror stdout to the log as it arrives")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    parser.add_argument("command", nargs=argparse.REMAINDER, help="command to run")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    command = args.command[1:] if args.command[:1] == ["--"] else args.command
    if not command:
        parser.print_help()
        return 0

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)

    config = ConsoleConfig.from_env()
    if args.timeout_ms is not None:
        config = dataclasses.replace(config, console_timeout_ms=args.timeout_ms)
    context = ProcessContext(config=config, console=Console(partial(ScrollbackConsole, sys.stderr)))

    try:
        result = Process(command, verbose=args.verbose, context=context).spawn_blocking()
    except ProcessStartError as e:
        print(e, file=sys.stderr)  # noqa: T201
        return 127
    finally:
        context.close()

    for line in result.stdout:
        print(line)  # noqa: T201
    assert result.code is not None
    return result.code


if __name__ == "__main__":
    sys.exit(main())
