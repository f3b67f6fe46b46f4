"""
test_compiler — command construction and build outcome classification.

Tests verify invariant properties:
  - CPPFLAGS and the language flag variable reach the compile command,
    LDFLAGS reaches the link command only.
  - A valid snippet yields Compiled with an existing executable.
  - A syntax error yields BuildFailure with the compiler output preserved.
  - A missing compiler yields BuildFailure, never an exception.
  - A compiler that outlives the timeout yields a TIMEOUT BuildFailure.
"""
import sys
from pathlib import Path

import pytest

from inline_c.core.compiler import compile_command, compile_program, link_command
from inline_c.core.resolver import ResolvedConfiguration
from inline_c.core.session import BuildSession
from inline_c.io.schema import (
    BuildFailure,
    Compiled,
    PhaseName,
    PhaseStatus,
)
from inline_c.policy.profile import LanguageProfile

from conftest import HELLO_C, HELLO_CXX, SYNTAX_ERROR_C

FLAGS = ResolvedConfiguration(
    cflags="-DC_ONLY",
    cxxflags="-DCXX_ONLY",
    cppflags="-DPRE=1",
    ldflags="-lm",
)


class TestCommands:
    """Command lines are built from the profile and resolved flags."""

    def test_c_compile_command(self, workspace):
        with BuildSession.open(LanguageProfile.c("gcc", "O2"), "", workspace) as session:
            cmd = compile_command(session, FLAGS)

        assert cmd[0] == "gcc"
        assert cmd[1] == "-O2"
        assert "-DPRE=1" in cmd
        assert "-DC_ONLY" in cmd
        assert "-DCXX_ONLY" not in cmd
        assert "-lm" not in cmd
        assert cmd.index("-DPRE=1") < cmd.index("-c")
        assert cmd[-4:] == ["-c", str(session.source_path), "-o", str(session.object_path)]

    def test_cxx_uses_cxxflags(self, workspace):
        with BuildSession.open(LanguageProfile.cxx("g++"), "", workspace) as session:
            cmd = compile_command(session, FLAGS)

        assert cmd[0] == "g++"
        assert "-DCXX_ONLY" in cmd
        assert "-DC_ONLY" not in cmd

    def test_link_command_puts_ldflags_last(self, workspace):
        with BuildSession.open(LanguageProfile.c(), "", workspace) as session:
            cmd = link_command(session, FLAGS)

        assert cmd[-1] == "-lm"
        assert str(session.object_path) in cmd
        assert cmd[cmd.index("-o") + 1] == str(session.executable_path)
        assert "-DPRE=1" not in cmd

    def test_empty_flags_add_nothing(self, workspace):
        with BuildSession.open(LanguageProfile.c("cc", ""), "", workspace) as session:
            cmd = compile_command(session, ResolvedConfiguration())

        assert cmd == ["cc", "-c", str(session.source_path), "-o", str(session.object_path)]


class TestBuildOutcome:
    """Compiled vs. BuildFailure."""

    def test_hello_compiles(self, cc_ok, workspace):
        with BuildSession.open(LanguageProfile.c(), HELLO_C, workspace) as session:
            outcome = compile_program(session, ResolvedConfiguration())

            assert isinstance(outcome, Compiled)
            assert Path(outcome.executable_path).exists()
            assert [p.phase for p in outcome.phases] == [PhaseName.COMPILE, PhaseName.LINK]
            assert all(p.status == PhaseStatus.SUCCESS for p in outcome.phases)
            assert outcome.artifact is not None
            assert outcome.artifact.size_bytes > 0
            assert len(outcome.artifact.sha256) == 64

    def test_hello_cxx_compiles(self, cxx_ok, workspace):
        with BuildSession.open(LanguageProfile.cxx(), HELLO_CXX, workspace) as session:
            outcome = compile_program(session, ResolvedConfiguration())

            assert isinstance(outcome, Compiled)

    def test_syntax_error_is_build_failure(self, cc_ok, workspace):
        with BuildSession.open(LanguageProfile.c(), SYNTAX_ERROR_C, workspace) as session:
            outcome = compile_program(session, ResolvedConfiguration())

            assert isinstance(outcome, BuildFailure)
            assert outcome.phase == PhaseName.COMPILE
            assert outcome.exit_code != 0
            assert "undeclared_symbol" in outcome.output
            assert outcome.output == outcome.phases[0].output
            assert not session.executable_path.exists()

    def test_bad_ldflags_is_link_failure(self, cc_ok, workspace):
        config = ResolvedConfiguration(ldflags="-lthis_library_does_not_exist_42")
        with BuildSession.open(LanguageProfile.c(), HELLO_C, workspace) as session:
            outcome = compile_program(session, config)

        assert isinstance(outcome, BuildFailure)
        assert outcome.phase == PhaseName.LINK
        assert "this_library_does_not_exist_42" in outcome.output

    def test_missing_compiler_is_build_failure(self, workspace):
        profile = LanguageProfile.c("inline-c-no-such-compiler")
        with BuildSession.open(profile, HELLO_C, workspace) as session:
            outcome = compile_program(session, ResolvedConfiguration())

        assert isinstance(outcome, BuildFailure)
        assert outcome.phases[0].status == PhaseStatus.SPAWN_ERROR
        assert "inline-c-no-such-compiler" in outcome.output

    @pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell script")
    def test_slow_compiler_times_out(self, tmp_path, workspace):
        """A compiler that outlives the timeout is a TIMEOUT BuildFailure."""
        compiler = tmp_path / "slow-cc"
        compiler.write_text("#!/bin/sh\nexec sleep 5\n")
        compiler.chmod(0o755)

        with BuildSession.open(LanguageProfile.c(str(compiler)), HELLO_C, workspace) as session:
            outcome = compile_program(session, ResolvedConfiguration(), timeout=0.2)

        assert isinstance(outcome, BuildFailure)
        assert outcome.phase == PhaseName.COMPILE
        assert outcome.exit_code == -1
        assert [p.status for p in outcome.phases] == [PhaseStatus.TIMEOUT]
        assert "TIMEOUT after 0.2s" in outcome.output

    def test_elf_artifact_identified(self, cc_ok, workspace):
        if not sys.platform.startswith("linux"):
            pytest.skip("ELF executables only")
        with BuildSession.open(LanguageProfile.c(), HELLO_C, workspace) as session:
            outcome = compile_program(session, ResolvedConfiguration())

        assert isinstance(outcome, Compiled)
        assert outcome.artifact.is_elf
        assert outcome.artifact.elf.elf_type in ("ET_EXEC", "ET_DYN")
        assert outcome.artifact.elf.arch.startswith("EM_")

    def test_cppflags_reach_preprocessor(self, cc_ok, workspace):
        source = "#ifndef MUST_BE_DEFINED\n#error missing define\n#endif\nint main() { return 0; }\n"
        with BuildSession.open(LanguageProfile.c(), source, workspace) as session:
            failed = compile_program(session, ResolvedConfiguration())
            built = compile_program(session, ResolvedConfiguration(cppflags="-DMUST_BE_DEFINED"))

        assert isinstance(failed, BuildFailure)
        assert "missing define" in failed.output
        assert isinstance(built, Compiled)
