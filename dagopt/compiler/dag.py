"""DAG construction for a single basic block.

The builder walks the quadruples of one straight-line block in order and
grows an arena of ``DagNode`` objects addressed by integer id:

  leaf – a variable or literal that is not computed inside the block
  op   – ``op`` applied to one or two earlier nodes

Two maps drive the construction:

- ``bindings``: variable name → node id.  The most recent assignment wins;
  rebinding a name never touches the node it used to point at.
- expression index: ``(op, left_id, right_id)`` → node id.  A second
  instruction with the same operator on the same operand *nodes* reuses
  the existing node (common-subexpression elimination).

Instructions whose operands are integer literals (or names currently
bound to literal leaves) are folded for ``+ - * /``.  Division by a
literal zero is never folded and stays a live operation.

Literal leaves are anonymous: they are never entered into ``bindings``,
so the same literal used as an operand in two instructions yields two
distinct leaves.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel

from dagopt.compiler.quad import Quadruple, is_numeric_literal, is_variable
from dagopt.config import FOLDABLE_OPS

LOG = logging.getLogger("dagopt.dag")


class DagInvariantError(Exception):
    """Raised when a node id falls outside the node arena."""


class DagNode(BaseModel):
    """A single value in the block DAG."""

    id: int
    kind: str  # "leaf" | "op"
    token: Optional[str] = None  # leaf only: variable name or literal text
    op: Optional[str] = None  # op only
    left: Optional[int] = None
    right: Optional[int] = None
    aliases: List[str] = []  # names bound to this value, in binding order

    @property
    def is_leaf(self) -> bool:
        return self.kind == "leaf"

    @property
    def is_literal(self) -> bool:
        return self.is_leaf and is_numeric_literal(self.token or "")

    @property
    def label(self) -> str:
        """Leaf token or operator, as shown in dumps and bare operands."""
        return (self.token if self.is_leaf else self.op) or ""

    @property
    def primary(self) -> Optional[str]:
        return self.aliases[0] if self.aliases else None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class DagState(BaseModel):
    """Nodes plus the final name bindings of one block."""

    nodes: List[DagNode] = []
    bindings: Dict[str, int] = {}

    def node(self, node_id: int) -> DagNode:
        if node_id < 0 or node_id >= len(self.nodes):
            raise DagInvariantError(f"Node index out of range: {node_id}")
        return self.nodes[node_id]

    def required(self) -> List[int]:
        """Distinct node ids bound to at least one name, ascending."""
        return sorted(set(self.bindings.values()))

    def live_aliases(self, node: DagNode) -> List[str]:
        """Aliases of *node* whose final binding is still *node*, in order."""
        return list(dict.fromkeys(a for a in node.aliases if self.bindings.get(a) == node.id))

    def dump(self) -> List[str]:
        lines = ["DAG Structure:"]
        for n in self.nodes:
            text = f"Node {n.id}: op={n.label}"
            if n.left is not None:
                text += f", left={n.left}"
            if n.right is not None:
                text += f", right={n.right}"
            text += f", aliases=[{', '.join(n.aliases)}]"
            lines.append(text)
        lines.append("Variable to Node mappings:")
        for name in sorted(self.bindings):
            lines.append(f"{name} -> Node {self.bindings[name]}")
        return lines

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "bindings": dict(self.bindings),
        }


def build_dag(quads: Iterable[Quadruple]) -> DagState:
    """Build the DAG for one block on a fresh builder."""
    return DagBuilder().build(quads)


class DagBuilder:
    """Single-use builder; ``build`` may be called once per instance."""

    def __init__(self) -> None:
        self.state = DagState()
        # (op, left_id, right_id) -> node id
        self._exprs: Dict[Tuple[str, Optional[int], Optional[int]], int] = {}

    def build(self, quads: Iterable[Quadruple]) -> DagState:
        for q in quads:
            if not q.op or not is_variable(q.result):
                LOG.debug("skipping incomplete instruction %s", q)
                continue
            if q.is_copy:
                self._copy(q)
                continue

            folded = fold_constant(q.op, self._literal(q.arg1), self._literal(q.arg2, absent=0))
            if folded is not None:
                LOG.debug("folded %s to %s", q, folded)
                self._bind(q.result, self.resolve_or_create(str(folded)))
            else:
                self._operation(q)
        return self.state

    # ---- instruction kinds ----

    def _copy(self, q: Quadruple) -> None:
        if not q.arg1:
            LOG.debug("skipping copy without source %s", q)
            return
        self._bind(q.result, self.resolve_or_create(q.arg1))

    def _operation(self, q: Quadruple) -> None:
        left = self.resolve_or_create(q.arg1)
        right = self.resolve_or_create(q.arg2)
        key = (q.op, left, right)

        existing = self._exprs.get(key)
        if existing is not None:
            LOG.debug("common subexpression %s reuses node %d", q, existing)
            self._bind(q.result, existing)
            return

        node_id = self._new_node(kind="op", op=q.op, left=left, right=right)
        self._exprs[key] = node_id
        self._bind(q.result, node_id)

    # ---- helpers ----

    def resolve_or_create(self, token: str) -> Optional[int]:
        """Return the node currently holding *token*, creating a leaf if needed."""
        if not token:
            return None
        bound = self.state.bindings.get(token)
        if bound is not None:
            return bound

        node_id = self._new_node(kind="leaf", token=token)
        if not is_numeric_literal(token):
            self.state.bindings[token] = node_id
            self.state.nodes[node_id].aliases.append(token)
        return node_id

    def _literal(self, token: str, absent: Optional[int] = None) -> Optional[int]:
        """Integer value of an operand, or None if it is not a known literal."""
        if not token:
            return absent
        if is_numeric_literal(token):
            return int(token)
        bound = self.state.bindings.get(token)
        if bound is not None:
            node = self.state.node(bound)
            if node.is_literal:
                return int(node.token)
        return None

    def _new_node(self, **fields: Any) -> int:
        for operand in (fields.get("left"), fields.get("right")):
            if operand is not None:
                self.state.node(operand)
        node_id = len(self.state.nodes)
        self.state.nodes.append(DagNode(id=node_id, **fields))
        return node_id

    def _bind(self, name: str, node_id: Optional[int]) -> None:
        if node_id is None:
            raise DagInvariantError(f"No value to bind to '{name}'")
        node = self.state.node(node_id)
        self.state.bindings[name] = node.id
        node.aliases.append(name)


# ------------------------------------------------------------------
# Constant folding
# ------------------------------------------------------------------

def fold_constant(op: str, left: Optional[int], right: Optional[int]) -> Optional[int]:
    """Evaluate ``left op right`` on integers, or return None if not foldable.

    Division truncates toward zero.  Division by zero is not folded.
    """
    if left is None or right is None or op not in FOLDABLE_OPS:
        return None
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if right == 0:
        return None
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient
