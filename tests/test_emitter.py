"""Tests for instruction emission."""

import sys

import pytest

from dagopt.compiler.dag import DagInvariantError, DagNode, DagState, build_dag
from dagopt.compiler.emitter import emit
from dagopt.compiler.quad import format_quadruples, parse_source


def _emit(src):
    return format_quadruples(emit(build_dag(parse_source(src))))


def test_empty_state_emits_nothing():
    assert emit(DagState()) == []


def test_single_operation():
    assert _emit("(+, A, B, T)") == ["(+, A, B, T)"]


def test_operation_aliases_become_copies():
    out = _emit("(+, A, B, T)\n(=, T, , X)\n(=, T, , Y)")
    assert out == ["(+, A, B, T)", "(=, T, , X)", "(=, T, , Y)"]


def test_literal_leaf_copied_per_alias():
    out = _emit("(=, 4, , P)\n(=, P, , Q)")
    assert out == ["(=, 4, , P)", "(=, 4, , Q)"]


def test_variable_leaf_with_single_alias_silent():
    # A plain operand needs no instruction of its own
    assert _emit("(*, A, A, T)") == ["(*, A, A, T)"]
    # nor does a self-copy
    assert _emit("(=, A, , A)") == []


def test_stale_alias_not_used_as_operand():
    out = _emit("(+, A, B, T)\n(=, T, , U)\n(=, 9, , T)\n(*, U, T, W)")
    assert out == ["(+, A, B, U)", "(=, 9, , T)", "(*, U, T, W)"]


def test_rebound_leaf_alias_not_copied():
    out = _emit("(=, 5, , C)\n(=, C, , D)\n(=, 2, , C)")
    assert out == ["(=, 5, , D)", "(=, 2, , C)"]


def test_literal_operand_without_live_alias():
    out = _emit("(=, 5, , C)\n(+, C, A, T)\n(=, 2, , C)")
    assert out == ["(+, 5, A, T)", "(=, 2, , C)"]


def test_rebound_operation_uses_temporary():
    # T is rebound to A, so the + result must not be written to T
    out = _emit("(+, A, B, T)\n(*, T, C, U)\n(=, A, , T)")
    assert out == ["(=, A, , T)", "(+, A, B, _t0)", "(*, _t0, C, U)"]


def test_temporary_skips_names_in_block():
    out = _emit("(+, A, B, T)\n(*, T, C, _t0)\n(=, A, , T)")
    assert out == ["(=, A, , T)", "(+, A, B, _t1)", "(*, _t1, C, _t0)"]


def test_variable_leaf_copy_chain():
    out = _emit("(=, A, , B)\n(=, B, , C)")
    assert out == ["(=, A, , B)", "(=, A, , C)"]


def test_unaliased_literal_operand_printed_raw():
    assert _emit("(+, A, 1, T)") == ["(+, A, 1, T)"]


def test_absent_operand_printed_empty():
    assert _emit("(-, A, , T)") == ["(-, A, , T)"]


def test_dependencies_emitted_first():
    # the + node lost its binding but T2 still depends on it
    out = _emit("(+, A, B, T1)\n(*, T1, T1, T2)\n(=, 0, , T1)")
    assert out == ["(+, A, B, _t0)", "(*, _t0, _t0, T2)", "(=, 0, , T1)"]


def test_shared_operand_emitted_once():
    out = _emit("(+, A, B, T)\n(*, T, C, U)\n(-, T, C, V)")
    assert out.count("(+, A, B, T)") == 1
    assert out == ["(+, A, B, T)", "(*, T, C, U)", "(-, T, C, V)"]


def test_dead_operation_dropped():
    out = _emit("(+, A, B, T)\n(=, 1, , T)")
    assert out == ["(=, 1, , T)"]


def test_stale_literal_dropped():
    out = _emit("(=, 5, , C)\n(=, 2, , C)")
    assert out == ["(=, 2, , C)"]


def test_required_order_is_ascending_id():
    # Bindings are inserted Z first, but node ids decide the order.
    state = DagState(
        nodes=[
            DagNode(id=0, kind="leaf", token="1", aliases=["Z"]),
            DagNode(id=1, kind="leaf", token="2", aliases=["Y"]),
        ],
        bindings={"Y": 1, "Z": 0},
    )
    assert format_quadruples(emit(state)) == ["(=, 1, , Z)", "(=, 2, , Y)"]


def test_dangling_binding_raises():
    state = DagState(nodes=[], bindings={"X": 4})
    with pytest.raises(DagInvariantError):
        emit(state)


def test_dangling_operand_raises():
    state = DagState(
        nodes=[DagNode(id=0, kind="op", op="+", left=7, right=None, aliases=["T"])],
        bindings={"T": 0},
    )
    with pytest.raises(DagInvariantError, match="7"):
        emit(state)


def test_deep_chain_does_not_recurse():
    depth = sys.getrecursionlimit() + 500
    lines = ["(+, A, 1, T)"] + ["(+, T, B, T)"] * depth
    out = emit(build_dag(parse_source("\n".join(lines))))
    # only the last T is bound, so the whole chain hangs off one root
    assert len(out) == depth + 1
    assert format_quadruples(out[:2]) == ["(+, A, 1, _t0)", "(+, _t0, B, _t1)"]
    assert str(out[-1]) == f"(+, _t{depth - 1}, B, T)"
