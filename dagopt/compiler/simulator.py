"""Naive symbolic interpreter for quadruple blocks.

Used to check that an optimized block leaves every name with the same
final value as the original.  Values are:

  int    – a known integer (literals and folded arithmetic)
  str    – the incoming value of a name never assigned before its use
  tuple  – ``(op, left, right)`` for anything that cannot be evaluated

Arithmetic follows the optimizer's folding rules exactly, so a folded
instruction and the operation it replaced simulate to the same value.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple, Union

from dagopt.compiler.dag import fold_constant
from dagopt.compiler.quad import Quadruple, is_numeric_literal, is_variable

Value = Union[int, str, Tuple]


def simulate(quads: Iterable[Quadruple]) -> Dict[str, Value]:
    """Run *quads* and return the final value of every assigned name."""
    env: Dict[str, Value] = {}

    def _read(token: str) -> Value:
        if not token:
            return ""
        if is_numeric_literal(token):
            return int(token)
        return env.get(token, token)

    for q in quads:
        if not q.op or not is_variable(q.result):
            continue
        if q.is_copy:
            if q.arg1:
                env[q.result] = _read(q.arg1)
            continue

        left = _read(q.arg1)
        right = _read(q.arg2) if q.arg2 else 0
        if isinstance(left, int) and isinstance(right, int) and q.arg1:
            folded = fold_constant(q.op, left, right)
            if folded is not None:
                env[q.result] = folded
                continue
        env[q.result] = (q.op, left, _read(q.arg2))

    return env


def verify(before: List[Quadruple], after: List[Quadruple]) -> List[str]:
    """Return the names bound by *before* whose final value differs in *after*."""
    expected = simulate(before)
    actual = simulate(after)
    return sorted(name for name, value in expected.items() if actual.get(name) != value)
