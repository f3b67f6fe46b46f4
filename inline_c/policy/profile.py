"""
Profile — per-language toolchain descriptor.

The profile encapsulates every language-dependent knob (source extension,
compiler command, which flag variable applies) so that the compiler driver
contains no opinions.  Supporting another dialect is a profile change, not
a code change.
"""
from dataclasses import dataclass, field
from enum import Enum, unique
from typing import List


@unique
class Language(str, Enum):
    """Foreign-toolchain dialect a snippet targets."""
    C = "c"
    CXX = "c++"


@dataclass(frozen=True)
class LanguageProfile:
    """Describes how one language variant is written, compiled and linked."""

    language: Language

    # Source file written into the build session
    source_extension: str

    # Compiler command, looked up on PATH
    compiler: str

    # Name of the language-specific compile flag variable (CFLAGS / CXXFLAGS)
    flags_variable: str

    # Flags always passed before the user flags
    base_flags: List[str] = field(default_factory=list)

    @property
    def source_name(self) -> str:
        return f"main{self.source_extension}"

    @classmethod
    def c(cls, compiler: str = "cc", opt_level: str = "O2") -> "LanguageProfile":
        return cls(
            language=Language.C,
            source_extension=".c",
            compiler=compiler,
            flags_variable="CFLAGS",
            base_flags=[f"-{opt_level}"] if opt_level else [],
        )

    @classmethod
    def cxx(cls, compiler: str = "c++", opt_level: str = "O2") -> "LanguageProfile":
        return cls(
            language=Language.CXX,
            source_extension=".cpp",
            compiler=compiler,
            flags_variable="CXXFLAGS",
            base_flags=[f"-{opt_level}"] if opt_level else [],
        )

    @classmethod
    def for_language(
        cls,
        language: Language,
        compiler: str | None = None,
        opt_level: str = "O2",
    ) -> "LanguageProfile":
        """Profile for *language*, optionally overriding the compiler command."""
        if language == Language.C:
            return cls.c(compiler or "cc", opt_level)
        return cls.cxx(compiler or "c++", opt_level)
