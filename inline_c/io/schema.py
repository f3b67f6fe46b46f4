"""
Schema — Pydantic models for build and execution outcomes.

BuildOutcome is a tagged union on ``kind``:
  1. ``Compiled``     — an executable exists at ``executable_path``.
  2. ``BuildFailure`` — the compiler failed; its output is kept verbatim.

ExecutionResult is the immutable record of one program run and is the
value the Assert façade wraps.
"""
from __future__ import annotations

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ── Enums ────────────────────────────────────────────────────────────────────

class PhaseName(str, Enum):
    """External process steps of one build."""
    COMPILE = "compile"
    LINK = "link"


class PhaseStatus(str, Enum):
    """Status of a single phase (compile/link)."""
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    TIMEOUT = "TIMEOUT"
    SPAWN_ERROR = "SPAWN_ERROR"


# ── Phase results ────────────────────────────────────────────────────────────

class PhaseRecord(BaseModel):
    """One compiler process invocation and how it ended."""
    phase: PhaseName
    command: List[str]
    exit_code: int = -1
    status: PhaseStatus = PhaseStatus.FAILED
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0

    @property
    def output(self) -> str:
        """Combined diagnostic output, stderr first (where compilers write)."""
        if self.stderr and self.stdout:
            return self.stderr + self.stdout
        return self.stderr or self.stdout


# ── Artifact metadata ────────────────────────────────────────────────────────

class ElfMeta(BaseModel):
    """Minimal ELF header facts, empty for non-ELF platforms."""
    elf_type: str = ""  # ET_EXEC, ET_DYN, etc.
    arch: str = ""  # EM_X86_64, etc.
    build_id: Optional[str] = None


class ArtifactMeta(BaseModel):
    """Metadata for the produced executable."""
    sha256: str
    size_bytes: int
    is_elf: bool = False
    elf: ElfMeta = Field(default_factory=ElfMeta)


# ── Build outcome ────────────────────────────────────────────────────────────

class Compiled(BaseModel):
    """Successful build: the executable is ready to run."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["compiled"] = "compiled"
    executable_path: str
    phases: List[PhaseRecord] = Field(default_factory=list)
    artifact: Optional[ArtifactMeta] = None


class BuildFailure(BaseModel):
    """Failed build: carries the failing phase and its output verbatim."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["build_failed"] = "build_failed"
    phase: PhaseName
    command: str
    exit_code: int
    output: str
    phases: List[PhaseRecord] = Field(default_factory=list)


BuildOutcome = Annotated[Union[Compiled, BuildFailure], Field(discriminator="kind")]


# ── Execution result ─────────────────────────────────────────────────────────

class ExecutionResult(BaseModel):
    """
    Exit status and captured streams of one program run.

    ``exit_code`` is None when the program was terminated by a signal;
    ``signal`` then holds the signal number.
    """
    model_config = ConfigDict(frozen=True)

    exit_code: Optional[int] = None
    signal: Optional[int] = None
    stdout: bytes = b""
    stderr: bytes = b""
    duration_ms: int = 0

    @property
    def interrupted(self) -> bool:
        return self.exit_code is None

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")
