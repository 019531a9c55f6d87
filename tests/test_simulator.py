"""Tests for the symbolic block simulator."""

from dagopt.compiler.quad import parse_source
from dagopt.compiler.simulator import simulate, verify


def test_literals_and_copies():
    env = simulate(parse_source("(=, 5, , C)\n(=, C, , D)"))
    assert env == {"C": 5, "D": 5}


def test_unassigned_names_are_symbolic():
    env = simulate(parse_source("(*, A, B, T)"))
    assert env == {"T": ("*", "A", "B")}


def test_arithmetic_folds():
    env = simulate(parse_source("(+, 18, 2, T)\n(/, -7, 2, U)\n(-, 4, , V)"))
    assert env == {"T": 20, "U": -3, "V": 4}


def test_division_by_zero_symbolic():
    env = simulate(parse_source("(/, 6, 0, X)"))
    assert env == {"X": ("/", 6, 0)}


def test_reads_latest_binding():
    env = simulate(parse_source("(=, 5, , C)\n(=, 2, , C)\n(+, 18, C, T)"))
    assert env["T"] == 20


def test_incomplete_instructions_ignored():
    env = simulate(parse_source("(=, , , X)\n(, A, B, Y)\n(+, A, B, )"))
    assert env == {}


def test_verify_clean():
    before = parse_source("(*, 2, 3, X)")
    after = parse_source("(=, 6, , X)")
    assert verify(before, after) == []


def test_verify_reports_changed_names():
    before = parse_source("(+, A, B, T)\n(=, T, , U)")
    after = parse_source("(+, A, B, T)\n(=, A, , U)")
    assert verify(before, after) == ["U"]


def test_verify_reports_dropped_names():
    before = parse_source("(=, 1, , X)\n(=, 2, , Y)")
    after = parse_source("(=, 1, , X)")
    assert verify(before, after) == ["Y"]
