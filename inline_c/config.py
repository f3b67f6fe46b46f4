"""
Harness configuration
"""
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class HarnessSettings(BaseSettings):
    """Harness settings, read from ``INLINE_C_*`` environment variables.

    These configure the harness itself.  Variables for the snippets use
    the separate ``INLINE_C_RS_*`` namespace.
    """

    # Toolchain
    CC: str = "cc"
    CXX: str = "c++"
    OPT_LEVEL: str = "O2"

    # Timeouts (seconds, 0 = wait indefinitely)
    COMPILE_TIMEOUT: float = 120
    RUN_TIMEOUT: float = 60

    # Directories
    WORKSPACE: Optional[Path] = None  # parent of the temporary build dirs
    PROJECT_DIR: Optional[Path] = None  # cwd for the compiler and program

    model_config = SettingsConfigDict(
        env_prefix="INLINE_C_",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def compile_timeout(self) -> Optional[float]:
        return self.COMPILE_TIMEOUT if self.COMPILE_TIMEOUT > 0 else None

    @property
    def run_timeout(self) -> Optional[float]:
        return self.RUN_TIMEOUT if self.RUN_TIMEOUT > 0 else None

    @property
    def project_dir(self) -> Path:
        return self.PROJECT_DIR if self.PROJECT_DIR is not None else Path.cwd()
