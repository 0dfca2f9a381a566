"""Tests for :mod:`chunkscout.analysis.walk`."""

from __future__ import annotations

from chunkscout.analysis import parse_script, walk


def test_walk_yields_root_first_in_pre_order() -> None:
    tree = parse_script("x = 1;")

    kinds = [node.type for node in walk(tree.root_node)]

    assert kinds == [
        "program",
        "expression_statement",
        "assignment_expression",
        "identifier",
        "number",
    ]


def test_walk_filter_preserves_traversal_order() -> None:
    tree = parse_script("a = 1; b = 'two'; c = 3;")

    filtered = [node.text.decode() for node in walk(tree.root_node, {"number", "string"})]
    single = [node.text.decode() for node in walk(tree.root_node, "identifier")]

    assert filtered == ["1", "'two'", "3"]
    assert single == ["a", "b", "c"]


def test_walk_is_restartable_and_visits_each_node_once() -> None:
    tree = parse_script("o.p = {a: [1, 2], b: function (e) { return e; }};")

    first = [(n.type, n.start_byte, n.end_byte) for n in walk(tree.root_node)]
    second = [(n.type, n.start_byte, n.end_byte) for n in walk(tree.root_node)]

    assert first == second
    assert len(first) == len(set(first))


def test_walk_handles_nesting_deeper_than_recursion_limit() -> None:
    depth = 1200
    tree = parse_script("x = " + "(" * depth + "1" + ")" * depth + ";")

    parens = sum(1 for _ in walk(tree.root_node, "parenthesized_expression"))

    assert parens == depth
