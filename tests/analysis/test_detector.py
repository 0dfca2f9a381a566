"""Tests for :mod:`chunkscout.analysis.detector`."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from chunkscout.analysis import (
    LoaderCandidate,
    build_assignment_map,
    is_loader_shaped,
    parse_script,
    walk,
)
from chunkscout.analysis.syntax import FUNCTION_TYPES, node_text

Candidates = Callable[[str], tuple[LoaderCandidate, ...]]


def test_detects_webpack_style_arrow_loader(candidates_of: Candidates) -> None:
    source = (
        '(() => { var r = {}; r.p = "/static/js/";'
        ' r.u = e => "" + e + "." + {179: "main", 523: "vendors"}[e] + ".chunk.js";'
        ' r.miniCssF = e => "static/css/" + e + ".css"; })();'
    )

    found = candidates_of(source)

    assert len(found) == 1
    assert node_text(found[0].node).startswith("e =>")


def test_detects_function_expression_loader(candidates_of: Candidates) -> None:
    found = candidates_of('x = function (e) { return {1: "a.js"}[e]; };')

    assert len(found) == 1
    assert found[0].node.type in FUNCTION_TYPES


@pytest.mark.parametrize(
    "body",
    [
        'for (var i = 0; i < 1; i++) {} return e + ".js";',
        'for (var k of e) {} return e + ".js";',
        'while (false) {} return e + ".js";',
        'do {} while (false); return e + ".js";',
        'return String(e) + ".js";',
        'return ({1: "a"})[e] + (function () { return ".js"; })();',
    ],
    ids=["for", "for-of", "while", "do-while", "call", "nested-call"],
)
def test_rejects_loops_and_calls(candidates_of: Candidates, body: str) -> None:
    assert candidates_of(f"x = function (e) {{ {body} }};") == ()


def test_for_in_loops_are_not_rejected(candidates_of: Candidates) -> None:
    found = candidates_of('x = function (e) { for (var k in e) {} return e + ".js"; };')

    assert len(found) == 1


@pytest.mark.parametrize(
    "source",
    [
        'x = e => ({1: "a"})[e] + ".css";',
        'x = e => "static/" + e + "/chunk.js";',
        "x = e => `${e}.js`;",
        'x = e => e + ".jsx";',
    ],
    ids=["css", "slash", "template", "jsx"],
)
def test_requires_slashless_js_string_literal(
    candidates_of: Candidates,
    source: str,
) -> None:
    assert candidates_of(source) == ()


@pytest.mark.parametrize(
    "source",
    [
        'x = (a, b) => a + b + ".js";',
        'x = () => "a.js";',
        'function u(e) { return e + ".js"; }',
    ],
    ids=["two-params", "no-params", "declaration"],
)
def test_requires_single_parameter_function_expression(
    candidates_of: Candidates,
    source: str,
) -> None:
    assert candidates_of(source) == ()


def test_custom_suffixes() -> None:
    tree = parse_script('x = e => e + ".mjs";')
    node = next(walk(tree.root_node, FUNCTION_TYPES))

    assert not is_loader_shaped(node)
    assert is_loader_shaped(node, suffixes=(".js", ".mjs"))


def test_assignment_map_keeps_last_non_function_member_write() -> None:
    tree = parse_script(
        """
        m.p = "/a/";
        m . p = "/b/";
        m["q"] = 1;
        m.f = function () {};
        m.g = () => 1;
        plain = 2;
        """
    )

    assignments = build_assignment_map(tree.root_node)

    assert sorted(assignments) == ['m.p', 'm["q"]']
    assert node_text(assignments["m.p"]) == 'm . p = "/b/"'


def test_candidates_share_one_read_only_assignment_map(
    candidates_of: Candidates,
) -> None:
    found = candidates_of(
        'm.p = "/s/"; a = e => m.p + {1: "x"}[e] + ".js"; b = e => {2: "y"}[e] + ".js";'
    )

    assert len(found) == 2
    assert found[0].assignments is found[1].assignments
    assert "m.p" in found[0].assignments
    with pytest.raises(TypeError):
        found[0].assignments["m.z"] = found[0].node  # type: ignore[index]


def test_assignments_after_the_loader_are_recorded(candidates_of: Candidates) -> None:
    found = candidates_of('a = e => m.p + {1: "x"}[e] + ".js"; m.p = "/late/";')

    assert node_text(found[0].assignments["m.p"]) == 'm.p = "/late/"'


@pytest.mark.parametrize(
    "source",
    [
        'r = {u(e){return {1:"a.js",2:"b.js"}[e]}};',
        'class X { u(e) { return {1: "a.js"}[e]; } }',
        'class X { static u(e) { return {1: "a.js"}[e]; } }',
        'r = {async u(e){return {1:"a.js"}[e]}};',
    ],
    ids=["object-method", "class-method", "static-method", "async-method"],
)
def test_plain_methods_are_candidates(candidates_of: Candidates, source: str) -> None:
    found = candidates_of(source)

    assert len(found) == 1
    assert found[0].node.type == "method_definition"
    assert found[0].source.startswith(("function(e)", "async function(e)"))


@pytest.mark.parametrize(
    "source",
    [
        'r = {set u(e){ this.v = e + ".js"; }};',
        'r = {get u(){ return "a.js"; }};',
        'r = {*u(e){ yield {1: "a.js"}[e]; }};',
        'r = {u(e, f){ return {1: "a.js"}[e]; }};',
    ],
    ids=["setter", "getter", "generator", "two-params"],
)
def test_accessor_and_generator_methods_are_rejected(
    candidates_of: Candidates,
    source: str,
) -> None:
    assert candidates_of(source) == ()
