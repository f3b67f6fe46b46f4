"""
test_assertions — the chainable Assert façade.

Built on hand-made ExecutionResults; no compiler needed.
"""
import pytest

from inline_c.assertions import Assert, normalize_newlines
from inline_c.errors import AssertionMismatch
from inline_c.io.schema import ExecutionResult


def _assert(code=0, stdout=b"", stderr=b"", signal=None) -> Assert:
    if signal is not None:
        code = None
    return Assert(ExecutionResult(exit_code=code, signal=signal, stdout=stdout, stderr=stderr))


class TestExitStatus:

    def test_success_chain(self):
        a = _assert(stdout=b"Hello, World!")
        assert a.success().stdout("Hello, World!").no_stderr() is a

    def test_success_mismatch_shows_stderr(self):
        with pytest.raises(AssertionMismatch) as exc_info:
            _assert(code=2, stderr=b"bad\nthing").success()

        msg = str(exc_info.value)
        assert "code=2" in msg
        assert "> bad\n> thing" in msg
        assert exc_info.value.expected == 0
        assert exc_info.value.actual == 2

    def test_failure_and_code(self):
        _assert(code=3).failure().code(3)

    def test_failure_on_success(self):
        with pytest.raises(AssertionMismatch, match="Unexpected success"):
            _assert(code=0).failure()

    def test_failure_on_signal(self):
        with pytest.raises(AssertionMismatch, match="interruption"):
            _assert(signal=9).failure()

    def test_code_mismatch(self):
        with pytest.raises(AssertionMismatch, match="expected=4 received=3"):
            _assert(code=3).code(4)

    def test_code_on_signal(self):
        with pytest.raises(AssertionMismatch, match="no exit code available"):
            _assert(signal=11).code(0)

    def test_interrupted(self):
        _assert(signal=6).interrupted()
        with pytest.raises(AssertionMismatch, match="Unexpected completion"):
            _assert(code=0).interrupted()

    def test_is_assertion_error(self):
        """Test runners report mismatches as failures, not errors."""
        with pytest.raises(AssertionError):
            _assert(code=1).success()


class TestStreams:

    def test_exact_text_no_trimming(self):
        a = _assert(stdout=b"line\n")
        a.stdout("line\n")
        with pytest.raises(AssertionMismatch) as exc_info:
            a.stdout("line")

        assert exc_info.value.expected == "line"
        assert exc_info.value.actual == "line\n"

    def test_bytes_compared_raw(self):
        _assert(stderr=b"\xff\x00").stderr(b"\xff\x00")
        with pytest.raises(AssertionMismatch, match="Stderr mismatch"):
            _assert(stderr=b"\xff").stderr(b"\xfe")

    def test_predicate(self):
        _assert(stdout=b"Hello, World!\r\n").stdout(normalize_newlines("Hello, World!\n"))
        with pytest.raises(AssertionMismatch, match="does not satisfy"):
            _assert(stdout=b"nope").stdout(lambda text: text.startswith("Hello"))

    def test_no_stdout_no_stderr(self):
        _assert().no_stdout().no_stderr()
        with pytest.raises(AssertionMismatch, match="Stdout is not empty"):
            _assert(stdout=b"x").no_stdout()
        with pytest.raises(AssertionMismatch, match="Stderr is not empty"):
            _assert(stderr=b"x").no_stderr()

    def test_no_predicates_is_fine(self):
        assert isinstance(_assert(code=5), Assert)
