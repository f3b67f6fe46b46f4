"""
Configuration resolver — merge directives with meta environment variables.

Precedence, highest first:
  1. ``#inline_c_rs NAME: "value"`` directive (last occurrence wins).
  2. ``INLINE_C_RS_NAME`` in the environment lookup.
  3. Absent, except the four flag variables, which default to "".

The environment lookup is passed in explicitly, so resolving never reads or
writes process-global state unless the caller hands over ``os.environ``.
"""
from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping

from inline_c import META_ENV_PREFIX
from inline_c.core.directives import Directive

logger = logging.getLogger(__name__)

FLAG_VARIABLES = ("CFLAGS", "CXXFLAGS", "CPPFLAGS", "LDFLAGS")


@dataclass(frozen=True)
class ResolvedConfiguration:
    """Final variable map plus the four compiler flag strings."""

    variables: Dict[str, str] = field(default_factory=dict)
    cflags: str = ""
    cxxflags: str = ""
    cppflags: str = ""
    ldflags: str = ""

    def flag(self, name: str) -> str:
        """Flag string for one of CFLAGS / CXXFLAGS / CPPFLAGS / LDFLAGS."""
        if name not in FLAG_VARIABLES:
            raise KeyError(f"{name!r} is not a compiler flag variable")
        return getattr(self, name.lower())

    def flag_tokens(self, name: str) -> List[str]:
        """Flag string split shell-style, so quoted paths survive."""
        return shlex.split(self.flag(name))


def meta_variables(env: Mapping[str, str]) -> Dict[str, str]:
    """Variables declared through ``INLINE_C_RS_<NAME>`` entries of *env*."""
    found: Dict[str, str] = {}
    for key, value in env.items():
        if key.startswith(META_ENV_PREFIX) and len(key) > len(META_ENV_PREFIX):
            found[key[len(META_ENV_PREFIX):]] = value
    return found


def resolve_configuration(
    directives: Iterable[Directive],
    env: Mapping[str, str],
) -> ResolvedConfiguration:
    """Resolve the variable map for one invocation."""
    variables = meta_variables(env)
    from_env = set(variables)
    seen: Dict[str, int] = {}

    for directive in directives:
        if directive.name in seen:
            logger.debug(
                f"Directive {directive.name} (line {directive.line_number}) "
                f"overrides the one on line {seen[directive.name]}"
            )
        elif directive.name in from_env:
            logger.debug(
                f"Directive {directive.name} (line {directive.line_number}) "
                f"overrides {META_ENV_PREFIX}{directive.name}"
            )
        seen[directive.name] = directive.line_number
        variables[directive.name] = directive.value

    flags = {name: variables.setdefault(name, "") for name in FLAG_VARIABLES}
    logger.debug(f"Resolved variables: {sorted(variables)}")

    return ResolvedConfiguration(
        variables=variables,
        cflags=flags["CFLAGS"],
        cxxflags=flags["CXXFLAGS"],
        cppflags=flags["CPPFLAGS"],
        ldflags=flags["LDFLAGS"],
    )
