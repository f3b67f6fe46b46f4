"""
inline_c — compile, run and assert on inline C / C++ snippets.

A snippet of C (or C++) source is handed over as a plain string, compiled
into a standalone program inside a throwaway directory, executed, and
wrapped in an ``Assert`` façade that checks exit status and captured
streams.

    from inline_c import assert_c

    (assert_c('''
        #include <stdio.h>

        int main() {
            printf("Hello, World!");
            return 0;
        }
    ''')
    .success()
    .stdout("Hello, World!")
    .no_stderr())

Per-snippet variables use the ``#inline_c_rs NAME: "value"`` directive;
``INLINE_C_RS_<NAME>`` environment variables supply shared defaults.
"""

__version__ = "0.1.0"
PRAGMA_TOKEN = "#inline_c_rs"
META_ENV_PREFIX = "INLINE_C_RS_"

from inline_c.assertions import Assert  # noqa: E402
from inline_c.errors import (  # noqa: E402
    AssertionMismatch,
    BuildFailed,
    InlineCError,
    IOFailure,
    MalformedDirective,
    ProgramTimeout,
    SpawnFailure,
)
from inline_c.io.schema import ExecutionResult  # noqa: E402
from inline_c.policy.profile import Language  # noqa: E402
from inline_c.runner import assert_c, assert_cxx, run  # noqa: E402

__all__ = [
    "Assert",
    "AssertionMismatch",
    "BuildFailed",
    "ExecutionResult",
    "InlineCError",
    "IOFailure",
    "Language",
    "MalformedDirective",
    "ProgramTimeout",
    "SpawnFailure",
    "assert_c",
    "assert_cxx",
    "run",
]
