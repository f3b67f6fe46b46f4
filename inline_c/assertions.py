"""
Assert — chainable expectations over one ExecutionResult.

Every predicate raises AssertionMismatch (an AssertionError) carrying the
expected and actual values, and returns the same Assert otherwise:

    run(Language.C, source).failure().code(3).no_stdout()

``stdout``/``stderr`` accept a ``str`` (compared with the UTF-8 decoded
stream), ``bytes`` (compared raw) or a callable taking the decoded text and
returning a bool.
"""
from __future__ import annotations

from typing import Callable, Union

from inline_c.errors import AssertionMismatch
from inline_c.io.schema import ExecutionResult

StreamExpectation = Union[str, bytes, Callable[[str], bool]]


def _quote(text: str) -> str:
    """Indent captured output as a quoted block."""
    return "> " + text.replace("\n", "\n> ")


def normalize_newlines(expected: str) -> Callable[[str], bool]:
    """Predicate comparing text with ``\\r\\n`` folded to ``\\n`` on both sides."""
    want = expected.replace("\r\n", "\n")

    def predicate(actual: str) -> bool:
        return actual.replace("\r\n", "\n") == want

    predicate.__name__ = f"normalize_newlines({expected!r})"
    return predicate


class Assert:
    """Chainable assertion façade over a program's exit status and streams."""

    def __init__(self, result: ExecutionResult):
        self.result = result

    # -- exit status -----------------------------------------------------------

    def success(self) -> "Assert":
        """Exit code is 0."""
        if self.result.exit_code != 0:
            raise AssertionMismatch(
                f"Unexpected failure.\ncode={self._status()}\n"
                f"stderr=\n{_quote(self.result.stderr_text)}",
                expected=0,
                actual=self.result.exit_code,
            )
        return self

    def failure(self) -> "Assert":
        """Program exited normally with a non-zero code."""
        if self.result.interrupted:
            raise AssertionMismatch(
                f"Unexpected interruption: {self._status()}",
                expected="non-zero exit code",
                actual=self._status(),
            )
        if self.result.exit_code == 0:
            raise AssertionMismatch(
                f"Unexpected success.\nstdout=\n{_quote(self.result.stdout_text)}",
                expected="non-zero exit code",
                actual=0,
            )
        return self

    def interrupted(self) -> "Assert":
        """Program was terminated by a signal instead of exiting."""
        if not self.result.interrupted:
            raise AssertionMismatch(
                f"Unexpected completion with code={self.result.exit_code}",
                expected="terminated by signal",
                actual=self.result.exit_code,
            )
        return self

    def code(self, expected_code: int) -> "Assert":
        """Exit code equals *expected_code*."""
        if self.result.interrupted:
            raise AssertionMismatch(
                f"Program {self._status()}, no exit code available "
                f"(expected code={expected_code})",
                expected=expected_code,
                actual=None,
            )
        if self.result.exit_code != expected_code:
            raise AssertionMismatch(
                f"Codes mismatch: expected={expected_code} received={self.result.exit_code}",
                expected=expected_code,
                actual=self.result.exit_code,
            )
        return self

    # -- streams ---------------------------------------------------------------

    def stdout(self, expected: StreamExpectation) -> "Assert":
        _check_stream("Stdout", self.result.stdout, expected)
        return self

    def stderr(self, expected: StreamExpectation) -> "Assert":
        _check_stream("Stderr", self.result.stderr, expected)
        return self

    def no_stdout(self) -> "Assert":
        if self.result.stdout:
            raise AssertionMismatch(
                f"Stdout is not empty:\n{_quote(self.result.stdout_text)}",
                expected=b"",
                actual=self.result.stdout,
            )
        return self

    def no_stderr(self) -> "Assert":
        if self.result.stderr:
            raise AssertionMismatch(
                f"Stderr is not empty:\n{_quote(self.result.stderr_text)}",
                expected=b"",
                actual=self.result.stderr,
            )
        return self

    # -- helpers ---------------------------------------------------------------

    def _status(self) -> str:
        if self.result.interrupted:
            return f"terminated by signal {self.result.signal}"
        return str(self.result.exit_code)

    def __repr__(self) -> str:
        return (
            f"Assert(code={self._status()}, stdout={self.result.stdout!r}, "
            f"stderr={self.result.stderr!r})"
        )


def _check_stream(label: str, received: bytes, expected: StreamExpectation) -> None:
    if isinstance(expected, bytes):
        if received != expected:
            raise AssertionMismatch(
                f"{label} mismatch:\nexpected={expected!r}\nreceived={received!r}",
                expected=expected,
                actual=received,
            )
        return

    text = received.decode("utf-8", errors="replace")
    if isinstance(expected, str):
        if text != expected:
            raise AssertionMismatch(
                f"{label} mismatch:\nexpected={expected!r}\nreceived={text!r}",
                expected=expected,
                actual=text,
            )
        return

    if not expected(text):
        name = getattr(expected, "__name__", repr(expected))
        raise AssertionMismatch(
            f"{label} does not satisfy {name}:\nreceived={text!r}",
            expected=name,
            actual=text,
        )
