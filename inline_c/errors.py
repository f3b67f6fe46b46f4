"""
Errors raised by the harness.

Every fatal category aborts the pipeline for one invocation.  A non-zero
exit code of a successfully launched program is never an error: it is an
ordinary ``ExecutionResult`` to assert on.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from inline_c.io.schema import BuildFailure


class InlineCError(Exception):
    """Base class for harness-internal failures."""


class MalformedDirective(InlineCError):
    """A line starting with the pragma token does not match the directive grammar."""

    def __init__(self, line_number: int, line: str, reason: str):
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(
            f"Malformed directive on line {line_number}: {reason}\n> {line.strip()}"
        )


class IOFailure(InlineCError):
    """Temporary directory creation, source write or cleanup failed."""


class BuildFailed(InlineCError):
    """The compiler exited non-zero, timed out, or could not be spawned."""

    def __init__(self, outcome: "BuildFailure"):
        self.outcome = outcome
        output = outcome.output.replace("\n", "\n> ")
        super().__init__(
            f"Build failed during {outcome.phase.value} "
            f"(exit code {outcome.exit_code}).\n"
            f"command: {outcome.command}\n"
            f"output=\n> {output}"
        )

    @property
    def output(self) -> str:
        return self.outcome.output


class SpawnFailure(InlineCError):
    """The compiled executable could not be launched."""


class ProgramTimeout(InlineCError):
    """The compiled program did not terminate within the run timeout."""

    def __init__(self, timeout: float, stdout: bytes = b"", stderr: bytes = b""):
        self.timeout = timeout
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"Program did not terminate after {timeout}s and was killed")


class AssertionMismatch(AssertionError):
    """An expectation on an ExecutionResult does not hold."""

    def __init__(self, message: str, expected: object = None, actual: object = None):
        self.expected = expected
        self.actual = actual
        super().__init__(message)
