"""Instruction emission from a block DAG.

Walks the DAG post-order from every node that still has a live binding
and regenerates the block:

- **Operation nodes** are computed once into their primary alias, then
  copied into each further alias.
- **Literal leaves** are re-materialized with one copy per alias.
- **Variable leaves** only need copies when more names than their own
  refer to the same incoming value.
- Nodes with no live binding that nothing live depends on are never
  visited (dead code elimination).

Only *live* aliases (names whose final binding is still the node) are
materialized.  A name rebound later in the block keeps its old node in
the alias list, but writing it here could clobber the final value.  An
operation node reached only as an operand, with no live alias left, is
computed into a fresh temporary that no instruction of the block names.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Set, Tuple

from dagopt.compiler.dag import DagNode, DagState
from dagopt.compiler.quad import Quadruple, quad
from dagopt.config import COPY_OP, TEMP_PREFIX


def emit(state: DagState) -> List[Quadruple]:
    """Return the optimized instruction sequence for *state*."""
    out: List[Quadruple] = []
    processed: Set[int] = set()
    temps = _Temporaries(state)

    for root in state.required():
        # (node id, operands already scheduled)
        stack: List[Tuple[int, bool]] = [(root, False)]
        while stack:
            node_id, expanded = stack.pop()
            if node_id in processed:
                continue
            node = state.node(node_id)
            if not expanded:
                stack.append((node_id, True))
                # right pushed first so the left operand is finished first
                for operand in (node.right, node.left):
                    if operand is not None and operand not in processed:
                        stack.append((operand, False))
                continue
            processed.add(node_id)
            out.extend(_emit_node(state, node, temps))

    return out


class _Temporaries:
    """Hands out ``TEMP_PREFIX<n>`` names unused anywhere in the DAG."""

    def __init__(self, state: DagState) -> None:
        self._used: Set[str] = set(state.bindings)
        for node in state.nodes:
            self._used.update(node.aliases)
            if node.is_leaf and node.token:
                self._used.add(node.token)
        self._names: Dict[int, str] = {}
        self._counter = 0

    def name_for(self, node_id: int) -> str:
        if node_id not in self._names:
            name = f"{TEMP_PREFIX}{self._counter}"
            while name in self._used:
                self._counter += 1
                name = f"{TEMP_PREFIX}{self._counter}"
            self._counter += 1
            self._used.add(name)
            self._names[node_id] = name
        return self._names[node_id]


def _emit_node(state: DagState, node: DagNode, temps: _Temporaries) -> List[Quadruple]:
    live = state.live_aliases(node)

    if not node.is_leaf:
        if not node.aliases:
            return []
        primary = live[0] if live else temps.name_for(node.id)
        computed = quad(
            node.op or "",
            _operand(state, node.left, temps),
            _operand(state, node.right, temps),
            primary,
        )
        return [computed] + _copies(primary, live[1:])

    if node.is_literal:
        return _copies(node.label, live)

    # Variable leaf: the value already lives under its own name.
    return _copies(node.label, [a for a in live if a != node.label])


def _operand(state: DagState, node_id: Optional[int], temps: _Temporaries) -> str:
    if node_id is None:
        return ""
    node = state.node(node_id)
    live = state.live_aliases(node)
    if live:
        return live[0]
    if node.is_leaf:
        return node.label
    return temps.name_for(node.id)


def _copies(source: str, targets: List[str]) -> List[Quadruple]:
    return [quad(COPY_OP, source, "", target) for target in targets]
