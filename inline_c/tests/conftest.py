"""
Shared pytest fixtures for inline_c tests.

Provides sample snippets and skips compiler-dependent tests when no C
(or C++) compiler is on PATH.  Every fixture that builds something uses a
private workspace under tmp_path, so tests can check that build sessions
leave nothing behind.
"""
import shutil
import textwrap
from pathlib import Path

import pytest

from inline_c.config import HarnessSettings

HELLO_C = textwrap.dedent("""\
    #include <stdio.h>

    int main() {
        printf("Hello, World!");
        return 0;
    }
""")

HELLO_CXX = textwrap.dedent("""\
    #include <iostream>

    int main() {
        std::cout << "Hello, World!";
        return 0;
    }
""")

RETURN_SUM_C = textwrap.dedent("""\
    int main() {
        int x = 1;
        int y = 2;
        return x + y;
    }
""")

# Prints FOO; exits 1 when it is not set
PRINT_FOO_C = textwrap.dedent("""\
    #include <stdio.h>
    #include <stdlib.h>

    int main() {
        const char* foo = getenv("FOO");

        if (NULL == foo) {
            return 1;
        }

        printf("FOO is set to `%s`", foo);
        return 0;
    }
""")

STDERR_C = textwrap.dedent("""\
    #include <stdio.h>

    int main() {
        fprintf(stderr, "oops\\n");
        return 7;
    }
""")

ABORT_C = textwrap.dedent("""\
    #include <stdlib.h>

    int main() {
        abort();
    }
""")

SLEEP_FOREVER_C = textwrap.dedent("""\
    #include <unistd.h>

    int main() {
        while (1) {
            sleep(1);
        }
    }
""")

SYNTAX_ERROR_C = textwrap.dedent("""\
    int main() {
        return undeclared_symbol
    }
""")


@pytest.fixture(scope="session")
def cc_ok():
    """Skip tests if no C compiler is available."""
    if shutil.which(HarnessSettings().CC) is None:
        pytest.skip("C compiler not available - install cc/gcc/clang to run these tests")


@pytest.fixture(scope="session")
def cxx_ok():
    """Skip tests if no C++ compiler is available."""
    if shutil.which(HarnessSettings().CXX) is None:
        pytest.skip("C++ compiler not available - install c++/g++/clang++ to run these tests")


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Empty directory used as parent of build sessions."""
    d = tmp_path / "workspace"
    d.mkdir()
    return d


@pytest.fixture
def settings(workspace: Path, tmp_path: Path) -> HarnessSettings:
    """Harness settings isolated to the test's tmp_path."""
    return HarnessSettings(
        WORKSPACE=workspace,
        PROJECT_DIR=tmp_path,
        RUN_TIMEOUT=30,
        COMPILE_TIMEOUT=120,
    )
