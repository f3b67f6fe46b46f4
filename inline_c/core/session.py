"""
Build session — one throwaway directory per invocation.

Usage::

    with BuildSession.open(profile, source) as session:
        outcome = compile_program(session, config)
        ...

The directory and everything in it (source, object, executable) is removed
when the ``with`` block exits, whether it ends normally or with an error.
"""
from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from inline_c.errors import IOFailure
from inline_c.policy.profile import LanguageProfile

logger = logging.getLogger(__name__)

SESSION_PREFIX = "inline-c-"
EXECUTABLE_NAME = "main"
OBJECT_NAME = "main.o"


class BuildSession:
    """Owns a uniquely named temporary directory and the source written into it."""

    def __init__(self, profile: LanguageProfile, directory: Path):
        self.profile = profile
        self.directory = directory
        self._closed = False

    @classmethod
    def open(
        cls,
        profile: LanguageProfile,
        source: str,
        workspace: Optional[Path] = None,
    ) -> "BuildSession":
        """
        Allocate a fresh directory under *workspace* (system temp dir by
        default) and write *source* into it.

        Raises IOFailure if either step fails, including source text that
        cannot be encoded as UTF-8; a half-created directory is removed
        before raising.
        """
        try:
            directory = Path(tempfile.mkdtemp(
                prefix=SESSION_PREFIX,
                dir=str(workspace) if workspace is not None else None,
            ))
        except OSError as e:
            raise IOFailure(f"Cannot create build directory: {e}") from e

        session = cls(profile, directory)
        try:
            with open(session.source_path, "w", encoding="utf-8", newline="") as f:
                f.write(source)
        except (OSError, UnicodeError) as e:
            shutil.rmtree(directory, ignore_errors=True)
            raise IOFailure(f"Cannot write {session.source_path}: {e}") from e

        logger.debug(f"Opened build session {directory}")
        return session

    # -- paths -----------------------------------------------------------------

    @property
    def source_path(self) -> Path:
        return self.directory / self.profile.source_name

    @property
    def object_path(self) -> Path:
        return self.directory / OBJECT_NAME

    @property
    def executable_path(self) -> Path:
        return self.directory / EXECUTABLE_NAME

    # -- lifecycle -------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Remove the session directory.  Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            shutil.rmtree(self.directory)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise IOFailure(f"Cannot remove build directory {self.directory}: {e}") from e
        logger.debug(f"Cleaned up build session {self.directory}")

    def __enter__(self) -> "BuildSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            self.close()
        except IOFailure:
            if exc_type is None:
                raise
            # keep the original error; the cleanup failure is only logged
            logger.error(
                "Cleanup of %s failed while handling %s",
                self.directory, exc_type.__name__, exc_info=True,
            )
        return False

    def __repr__(self) -> str:
        return f"BuildSession(language={self.profile.language.value!r}, directory={str(self.directory)!r})"
