"""
Directive extractor — pull ``#inline_c_rs`` lines out of a snippet.

Grammar (one directive per line, anywhere in the file):

    <ws>* #inline_c_rs <ws>+ NAME <ws>* ":" <ws>* "VALUE" <ws>*

NAME is a bare identifier, VALUE a double-quoted string that may contain
spaces and backslash-escaped quotes.  Every other line is copied verbatim
into the stripped source.  A line that starts with the pragma token but does
not match the grammar is a MalformedDirective, never silently kept.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterator, List, Tuple

from inline_c import PRAGMA_TOKEN
from inline_c.errors import MalformedDirective

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass(frozen=True)
class Directive:
    """A ``NAME: "value"`` pair declared in the snippet."""
    name: str
    value: str
    line_number: int  # 1-based, in the annotated source


@dataclass(frozen=True)
class ExtractedSource:
    """Stripped source text plus the directives found, in order of appearance."""
    source: str
    directives: List[Directive] = field(default_factory=list)


def is_directive_line(line: str) -> bool:
    """True if *line* starts with the pragma token after leading whitespace."""
    return line.lstrip().startswith(PRAGMA_TOKEN)


def parse_directive(line: str, line_number: int) -> Directive:
    """
    Parse one directive line.

    Raises MalformedDirective naming the line number and what went wrong.
    """
    body = line.rstrip("\r\n")
    rest = body.lstrip()[len(PRAGMA_TOKEN):]

    def fail(reason: str) -> MalformedDirective:
        return MalformedDirective(line_number, body, reason)

    if not rest.strip():
        raise fail("missing variable name")
    if not rest[0].isspace():
        raise fail(f"expected whitespace after {PRAGMA_TOKEN}")

    rest = rest.lstrip()
    match = _IDENTIFIER.match(rest)
    if match is None:
        raise fail("missing variable name")
    name = match.group(0)

    rest = rest[match.end():].lstrip()
    if not rest.startswith(":"):
        raise fail(f"missing ':' after variable name {name!r}")

    rest = rest[1:].lstrip()
    if not rest.startswith('"'):
        raise fail(f"value of {name!r} must be a double-quoted string")

    value, remainder = _scan_quoted(rest[1:])
    if value is None:
        raise fail(f"unterminated quote in value of {name!r}")
    if remainder.strip():
        if '"' in remainder:
            raise fail(f"unescaped double quote in value of {name!r}")
        raise fail(f"unexpected text after value of {name!r}: {remainder.strip()!r}")

    return Directive(name=name, value=value, line_number=line_number)


def _scan_quoted(text: str) -> Tuple[str | None, str]:
    """
    Read a quoted string body up to the closing quote.

    Returns (value, remainder-after-closing-quote), or (None, "") when the
    closing quote is missing.  ``\\"`` and ``\\\\`` are unescaped; any other
    backslash sequence is kept as written.
    """
    chars: List[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            nxt = text[i + 1]
            if nxt in ('"', "\\"):
                chars.append(nxt)
            else:
                chars.append(ch + nxt)
            i += 2
            continue
        if ch == '"':
            return "".join(chars), text[i + 1:]
        chars.append(ch)
        i += 1
    return None, ""


def iter_lines(source: str) -> Iterator[str]:
    """
    Yield the lines of *source* with their ``\\n`` terminator.

    Only ``\\n`` ends a line, as it does for a C compiler counting lines.
    ``\\r`` and other separator characters such as form feed stay inside it.
    """
    pieces = source.split("\n")
    for i, piece in enumerate(pieces):
        if i < len(pieces) - 1:
            yield piece + "\n"
        elif piece:
            yield piece


def extract_directives(source: str) -> ExtractedSource:
    """
    Split annotated *source* into stripped source and directives.

    Single linear pass.  Line endings of kept lines are preserved.
    """
    kept: List[str] = []
    directives: List[Directive] = []

    for line_number, line in enumerate(iter_lines(source), start=1):
        if is_directive_line(line):
            directive = parse_directive(line, line_number)
            logger.debug(f"Directive on line {line_number}: {directive.name}")
            directives.append(directive)
            continue
        kept.append(line)

    return ExtractedSource(source="".join(kept), directives=directives)
