"""Quadruple text format – parsing and formatting.

One instruction per line::

    (op, arg1, arg2, result)

The fields are the comma-separated text between the first ``(`` and the
first ``)`` on the line, each trimmed of surrounding whitespace.

The parser is deliberately forgiving:
- lines without a parenthesis pair are skipped
- missing trailing fields are padded with empty strings up to 4
- extra fields beyond the fourth are ignored

A token made only of digits with an optional leading minus sign is a
numeric literal; any other non-empty token is a variable name.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel

from dagopt.config import COPY_OP

_LITERAL_RE = re.compile(r"-?[0-9]+")


class NoInstructionsError(Exception):
    """Raised when a block yields no valid instructions."""


class Quadruple(BaseModel):
    """A single three-address instruction."""

    op: str
    arg1: str = ""
    arg2: str = ""
    result: str = ""

    @property
    def is_copy(self) -> bool:
        return self.op == COPY_OP

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()

    def __str__(self) -> str:
        return format_quadruple(self)


def is_numeric_literal(token: str) -> bool:
    """Return True if *token* is an integer literal such as ``6`` or ``-12``."""
    return bool(token) and _LITERAL_RE.fullmatch(token) is not None


def is_variable(token: str) -> bool:
    return bool(token) and not is_numeric_literal(token)


def quad(op: str, arg1: str = "", arg2: str = "", result: str = "") -> Quadruple:
    """Positional shorthand for building a ``Quadruple``."""
    return Quadruple(op=op, arg1=arg1, arg2=arg2, result=result)


# ------------------------------------------------------------------
# Parsing
# ------------------------------------------------------------------

def parse_line(line: str) -> Optional[Quadruple]:
    """Parse one line, or return None if it carries no instruction."""
    start = line.find("(")
    end = line.find(")")
    if start == -1 or end == -1:
        return None

    # ")" before "(" leaves nothing between them
    body = line[start + 1:end] if end > start else ""
    parts = [part.strip() for part in body.split(",")]
    while len(parts) < 4:
        parts.append("")
    return quad(*parts[:4])


def parse_quadruples(lines: Iterable[str]) -> List[Quadruple]:
    """Parse every line, dropping those without an instruction."""
    quads: List[Quadruple] = []
    for line in lines:
        if not line:
            continue
        q = parse_line(line)
        if q is not None:
            quads.append(q)
    return quads


def parse_source(source: str) -> List[Quadruple]:
    """Parse a whole block given as one string."""
    return parse_quadruples(source.splitlines())


def require_instructions(quads: List[Quadruple]) -> List[Quadruple]:
    if not quads:
        raise NoInstructionsError("No valid quadruples found in input")
    return quads


# ------------------------------------------------------------------
# Formatting
# ------------------------------------------------------------------

def format_quadruple(q: Quadruple) -> str:
    return f"({q.op}, {q.arg1}, {q.arg2}, {q.result})"


def format_quadruples(quads: Iterable[Quadruple]) -> List[str]:
    return [format_quadruple(q) for q in quads]
