"""subprocess.run() replacement using Process as the backend."""

import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from console_process.context import ProcessContext


def run_command(
    command: Sequence[str],
    cwd: Path | str | None = None,
    env: Mapping[str, str] | None = None,
    input: str | None = None,  # noqa: A002
    check: bool = False,
    context: "ProcessContext | None" = None,
) -> subprocess.CompletedProcess[str]:
    """
    Run a command to completion, emulating subprocess.run().

    The command goes through the usual console policy: a slow or failing
    command reveals the console unless it is suppressed.

    Args:
        command: Command tokens.
        cwd: Working directory for command execution.
        env: Extra environment variables.
        input: Text written to the command's stdin.
        check: If True, raise CalledProcessError for non-zero exit codes.
        context: Context to spawn through; the default context if None.

    Returns:
        CompletedProcess with stdout and stderr lines joined by newlines.

    Raises:
        ProcessStartError: If the command could not be started.
        CalledProcessError: If check=True and process exits with non-zero code.
    """
    # Import here to avoid circular imports during module load
    from console_process.process import Process  # noqa: PLC0415

    proc = Process(command, cwd=cwd, env=env, input=input, context=context)
    result = proc.spawn_blocking()
    assert result.code is not None

    stdout = "\n".join(result.stdout)
    stderr = "\n".join(result.stderr)
    if check and result.code != 0:
        raise subprocess.CalledProcessError(
            returncode=result.code,
            cmd=list(command),
            output=stdout,
            stderr=stderr,
        )

    return subprocess.CompletedProcess(args=list(command), returncode=result.code, stdout=stdout, stderr=stderr)
