"""
Compiler driver — source → object → executable.

Each build goes through two phases, each a single blocking process:
  compile:  <cc> <base> $CPPFLAGS $CFLAGS -c main.c -o main.o
  link:     <cc> <base> $CFLAGS main.o -o main $LDFLAGS

(``$CXXFLAGS`` replaces ``$CFLAGS`` for C++.)  The link line mirrors the
usual make rule so that ``-L`` paths given in the compile flags still reach
the linker.  Any non-zero exit, timeout or spawn error is a BuildFailure
carrying the captured output verbatim; nothing is retried.
"""
from __future__ import annotations

import logging
import subprocess
import time
from pathlib import Path
from typing import List, Optional

from inline_c.core.artifact import inspect_artifact
from inline_c.core.resolver import ResolvedConfiguration
from inline_c.core.session import BuildSession
from inline_c.io.schema import (
    BuildFailure,
    BuildOutcome,
    Compiled,
    PhaseName,
    PhaseRecord,
    PhaseStatus,
)

logger = logging.getLogger(__name__)


def compile_command(session: BuildSession, config: ResolvedConfiguration) -> List[str]:
    """Command line of the compile phase."""
    profile = session.profile
    return (
        [profile.compiler]
        + profile.base_flags
        + config.flag_tokens("CPPFLAGS")
        + config.flag_tokens(profile.flags_variable)
        + ["-c", str(session.source_path), "-o", str(session.object_path)]
    )


def link_command(session: BuildSession, config: ResolvedConfiguration) -> List[str]:
    """Command line of the link phase."""
    profile = session.profile
    return (
        [profile.compiler]
        + profile.base_flags
        + config.flag_tokens(profile.flags_variable)
        + [str(session.object_path), "-o", str(session.executable_path)]
        + config.flag_tokens("LDFLAGS")
    )


def run_phase(
    phase: PhaseName,
    cmd: List[str],
    cwd: Optional[Path] = None,
    timeout: Optional[float] = None,
) -> PhaseRecord:
    """Run one compiler process to completion and record how it ended."""
    logger.debug(f"{phase.value}: {' '.join(cmd)}")

    t0 = time.monotonic()
    stdout_content = ""
    stderr_content = ""
    try:
        result = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd is not None else None,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
        )
        exit_code = result.returncode
        stdout_content = result.stdout
        stderr_content = result.stderr
        status = PhaseStatus.SUCCESS if exit_code == 0 else PhaseStatus.FAILED
    except subprocess.TimeoutExpired:
        exit_code = -1
        stderr_content = f"TIMEOUT after {timeout}s"
        status = PhaseStatus.TIMEOUT
    except OSError as e:
        exit_code = -1
        stderr_content = f"Cannot run {cmd[0]!r}: {e}"
        status = PhaseStatus.SPAWN_ERROR
    duration = int((time.monotonic() - t0) * 1000)

    return PhaseRecord(
        phase=phase,
        command=cmd,
        exit_code=exit_code,
        status=status,
        stdout=stdout_content,
        stderr=stderr_content,
        duration_ms=duration,
    )


def _failure(record: PhaseRecord, phases: List[PhaseRecord], output: Optional[str] = None) -> BuildFailure:
    logger.warning(
        f"{record.phase.value} phase failed ({record.status.value}, "
        f"exit code {record.exit_code})"
    )
    return BuildFailure(
        phase=record.phase,
        command=" ".join(record.command),
        exit_code=record.exit_code,
        output=record.output if output is None else output,
        phases=phases,
    )


def compile_program(
    session: BuildSession,
    config: ResolvedConfiguration,
    cwd: Optional[Path] = None,
    timeout: Optional[float] = None,
) -> BuildOutcome:
    """
    Build the session's source into an executable.

    Args:
        session: Open build session holding the source file.
        config: Resolved configuration; only the flag variables are used.
        cwd: Working directory of the compiler (relative -I/-L paths).
        timeout: Per-phase timeout in seconds, None to wait indefinitely.

    Returns:
        Compiled or BuildFailure.
    """
    phases: List[PhaseRecord] = []

    # Phase 1: compile
    compile_phase = run_phase(PhaseName.COMPILE, compile_command(session, config), cwd, timeout)
    phases.append(compile_phase)
    if compile_phase.status != PhaseStatus.SUCCESS:
        return _failure(compile_phase, phases)

    # Phase 2: link
    link_phase = run_phase(PhaseName.LINK, link_command(session, config), cwd, timeout)
    phases.append(link_phase)
    if link_phase.status != PhaseStatus.SUCCESS:
        return _failure(link_phase, phases)

    executable = session.executable_path
    if not executable.exists():
        return _failure(
            link_phase,
            phases,
            output=link_phase.output + f"linker reported success but {executable} does not exist",
        )

    artifact = inspect_artifact(executable)
    logger.info(
        f"Built {executable.name} ({artifact.size_bytes} bytes, "
        f"{sum(p.duration_ms for p in phases)} ms)"
    )
    if artifact.is_elf:
        logger.info(
            f"Artifact {artifact.elf.elf_type} {artifact.elf.arch} "
            f"sha256={artifact.sha256[:16]}"
        )
    return Compiled(
        executable_path=str(executable),
        phases=phases,
        artifact=artifact,
    )
