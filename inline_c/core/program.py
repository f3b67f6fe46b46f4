"""
Program runner — execute a compiled snippet and capture its outcome.

The child gets exactly the resolved variables as its environment (nothing
is inherited from the parent), an empty stdin, and both output streams are
buffered to completion.  A non-zero exit code is a normal result; failing to
launch the executable at all is a SpawnFailure.
"""
from __future__ import annotations

import logging
import subprocess
import time
from pathlib import Path
from typing import Mapping, Optional

from inline_c.errors import ProgramTimeout, SpawnFailure
from inline_c.io.schema import ExecutionResult

logger = logging.getLogger(__name__)


def run_program(
    executable: Path,
    variables: Mapping[str, str],
    timeout: Optional[float] = None,
    cwd: Optional[Path] = None,
) -> ExecutionResult:
    """
    Run *executable* with *variables* as its whole environment.

    Raises:
        SpawnFailure: the executable could not be launched.
        ProgramTimeout: the program ran longer than *timeout* seconds and
            was killed.
    """
    cmd = [str(executable)]
    t0 = time.monotonic()
    try:
        result = subprocess.run(
            cmd,
            env=dict(variables),
            cwd=str(cwd) if cwd is not None else None,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        logger.warning(f"{executable.name} killed after {timeout}s")
        raise ProgramTimeout(timeout, e.stdout or b"", e.stderr or b"") from e
    except OSError as e:
        raise SpawnFailure(f"Cannot launch {executable}: {e}") from e
    duration = int((time.monotonic() - t0) * 1000)

    # POSIX reports death by signal N as returncode -N
    if result.returncode < 0:
        exit_code = None
        signal = -result.returncode
        logger.info(f"{executable.name} terminated by signal {signal}")
    else:
        exit_code = result.returncode
        signal = None
        logger.info(f"{executable.name} exited with code {exit_code} ({duration} ms)")

    return ExecutionResult(
        exit_code=exit_code,
        signal=signal,
        stdout=result.stdout,
        stderr=result.stderr,
        duration_ms=duration,
    )
