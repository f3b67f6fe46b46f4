"""
Harness runner — top-level orchestration: snippet → Assert.

Ties the pipeline stages together for one invocation:

    extract directives → resolve configuration → open build session
        → compile → run → Assert

Stages run strictly in order in the calling thread.  The build session is
closed on every exit path.  Fatal failures propagate as InlineCError
subclasses; a BuildFailure outcome is raised as BuildFailed here and
nowhere earlier.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Mapping, Optional

from inline_c.assertions import Assert
from inline_c.config import HarnessSettings
from inline_c.core.compiler import compile_program
from inline_c.core.directives import extract_directives
from inline_c.core.program import run_program
from inline_c.core.resolver import resolve_configuration
from inline_c.core.session import BuildSession
from inline_c.errors import BuildFailed, InlineCError
from inline_c.io.schema import BuildFailure, ExecutionResult
from inline_c.policy.profile import Language, LanguageProfile

logger = logging.getLogger(__name__)


def profile_for(language: Language, settings: HarnessSettings) -> LanguageProfile:
    """Language profile with the compiler and optimisation level from *settings*."""
    compiler = settings.CC if language == Language.C else settings.CXX
    return LanguageProfile.for_language(language, compiler, settings.OPT_LEVEL)


def execute(
    language: Language,
    source: str,
    env: Optional[Mapping[str, str]] = None,
    settings: Optional[HarnessSettings] = None,
) -> ExecutionResult:
    """
    Compile and run *source*, returning the raw ExecutionResult.

    Parameters
    ----------
    language : Language
        C or C++.
    source : str
        Annotated source text (directives are stripped before compiling).
    env : Mapping[str, str], optional
        Lookup for ``INLINE_C_RS_*`` meta variables.  Defaults to
        ``os.environ``.
    settings : HarnessSettings, optional
        Toolchain, timeouts and directories.  Defaults to settings read
        from the environment.

    Raises
    ------
    MalformedDirective, IOFailure, BuildFailed, SpawnFailure, ProgramTimeout
    """
    language = Language(language)
    if settings is None:
        settings = HarnessSettings()
    if env is None:
        env = os.environ

    # ── Step 1: directives + configuration ───────────────────────────
    extracted = extract_directives(source)
    config = resolve_configuration(extracted.directives, env)
    profile = profile_for(language, settings)
    project_dir = settings.project_dir

    # ── Step 2: build + run inside one session ───────────────────────
    with BuildSession.open(profile, extracted.source, settings.WORKSPACE) as session:
        logger.info(f"Building {language.value} snippet in {session.directory}")
        outcome = compile_program(
            session,
            config,
            cwd=project_dir,
            timeout=settings.compile_timeout,
        )
        if isinstance(outcome, BuildFailure):
            raise BuildFailed(outcome)

        return run_program(
            Path(outcome.executable_path),
            config.variables,
            timeout=settings.run_timeout,
            cwd=project_dir,
        )


def run(
    language: Language,
    source: str,
    env: Optional[Mapping[str, str]] = None,
    settings: Optional[HarnessSettings] = None,
) -> Assert:
    """Compile and run *source*; return an Assert over the result."""
    return Assert(execute(language, source, env=env, settings=settings))


def assert_c(
    source: str,
    env: Optional[Mapping[str, str]] = None,
    settings: Optional[HarnessSettings] = None,
) -> Assert:
    """Compile and run a C snippet."""
    return run(Language.C, source, env=env, settings=settings)


def assert_cxx(
    source: str,
    env: Optional[Mapping[str, str]] = None,
    settings: Optional[HarnessSettings] = None,
) -> Assert:
    """Compile and run a C++ snippet."""
    return run(Language.CXX, source, env=env, settings=settings)


# ── CLI ──────────────────────────────────────────────────────────────────────

def detect_language(path: Path) -> Language:
    """C++ for the usual C++ extensions, C otherwise."""
    if path.suffix.lower() in (".cc", ".cpp", ".cxx", ".c++"):
        return Language.CXX
    return Language.C


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point: compile and run one source file."""
    parser = argparse.ArgumentParser(
        prog="inline-c",
        description="inline-c — compile and run a C/C++ snippet, honouring #inline_c_rs directives",
    )
    parser.add_argument(
        "source",
        type=Path,
        help="Path to the C or C++ source file",
    )
    parser.add_argument(
        "-l", "--lang",
        choices=[lang.value for lang in Language],
        default=None,
        help="Language variant (default: from the file extension)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.source.exists():
        logger.error("File not found: %s", args.source)
        return 2

    language = Language(args.lang) if args.lang else detect_language(args.source)
    try:
        result = execute(language, args.source.read_text(encoding="utf-8"))
    except InlineCError as e:
        print(str(e), file=sys.stderr)
        return 2

    sys.stdout.buffer.write(result.stdout)
    sys.stdout.flush()
    sys.stderr.buffer.write(result.stderr)
    sys.stderr.flush()
    if result.interrupted:
        print(f"terminated by signal {result.signal}", file=sys.stderr)
        return 128 + (result.signal or 0)
    return result.exit_code
