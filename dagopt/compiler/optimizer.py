"""Basic-block optimizer pipeline.

Implements:
- **Constant folding** and **Common Subexpression Elimination (CSE)**
  while building the block DAG (``dagopt.compiler.dag``).
- **Dead value elimination** and alias re-materialization while emitting
  the reduced block (``dagopt.compiler.emitter``).

Every call works on a fresh builder, so no state is shared between
blocks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from dagopt.compiler.dag import DagState, build_dag
from dagopt.compiler.emitter import emit
from dagopt.compiler.quad import (
    Quadruple,
    format_quadruples,
    parse_quadruples,
    require_instructions,
)


@dataclass
class OptimizationResult:
    input: List[Quadruple]
    state: DagState
    output: List[Quadruple]

    def to_dict(self, include_dag: bool = False) -> Dict[str, Any]:
        return {
            "input": format_quadruples(self.input),
            "optimized": format_quadruples(self.output),
            "instructions": [q.to_dict() for q in self.output],
            "dag": self.state.to_dict() if include_dag else None,
        }


def optimize(quads: Iterable[Quadruple]) -> List[Quadruple]:
    """Optimize one block and return the reduced instruction list."""
    return emit(build_dag(quads))


def optimize_lines(lines: Iterable[str]) -> OptimizationResult:
    """Parse, optimize and keep the intermediate DAG for inspection.

    Raises ``NoInstructionsError`` if no line holds an instruction.
    """
    quads = require_instructions(parse_quadruples(lines))
    state = build_dag(quads)
    return OptimizationResult(input=quads, state=state, output=emit(state))
