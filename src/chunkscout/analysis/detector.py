"""Heuristic detection of chunk-loader-shaped functions."""

from __future__ import annotations

from collections.abc import Sequence
from types import MappingProxyType
from typing import Mapping

from tree_sitter import Node

from .models import LoaderCandidate
from .syntax import (
    FUNCTION_TYPES,
    METHOD_TYPE,
    is_plain_method,
    MEMBER_TYPES,
    parameter_count,
    path_text,
    string_value,
)
from .walk import walk

__all__ = [
    "DEFAULT_LOADER_SUFFIXES",
    "build_assignment_map",
    "detect_candidates",
    "is_loader_shaped",
]

DEFAULT_LOADER_SUFFIXES: tuple[str, ...] = (".js",)

_LOOP_TYPES = frozenset({"for_statement", "while_statement", "do_statement"})


def _is_for_of(node: Node) -> bool:
    operator = node.child_by_field_name("operator")
    if operator is not None:
        return operator.type == "of"
    return any(child.type == "of" for child in node.children)


def _is_filename_literal(node: Node, suffixes: Sequence[str]) -> bool:
    value = string_value(node)
    return value.endswith(tuple(suffixes)) and "/" not in value


def is_loader_shaped(
    node: Node,
    *,
    suffixes: Sequence[str] = DEFAULT_LOADER_SUFFIXES,
) -> bool:
    """Return ``True`` when ``node`` looks like a chunk loader.

    The node must be a single-parameter function expression, arrow function
    or plain object/class method without loops or calls, holding at least one string literal
    that names a chunk file (ends with a loader suffix, contains no ``/``).
    """

    if node.type not in FUNCTION_TYPES and not is_plain_method(node):
        return False
    if parameter_count(node) != 1:
        return False

    has_filename = False
    for child in walk(node):
        kind = child.type
        if kind == "call_expression" or kind in _LOOP_TYPES:
            return False
        if kind == "for_in_statement" and _is_for_of(child):
            return False
        if kind == "string" and not has_filename:
            has_filename = _is_filename_literal(child, suffixes)
    return has_filename


def _recordable_assignment(node: Node) -> str | None:
    left = node.child_by_field_name("left")
    right = node.child_by_field_name("right")
    if left is None or right is None:
        return None
    if left.type not in MEMBER_TYPES or right.type in FUNCTION_TYPES:
        return None
    return path_text(left)


def build_assignment_map(root: Node) -> Mapping[str, Node]:
    """Map member paths to the last non-function assignment targeting them.

    Example:
        >>> from chunkscout.analysis.syntax import parse_script
        >>> tree = parse_script('m.p = "/a/"; m.p = "/b/"; m.f = function(){}')
        >>> sorted(build_assignment_map(tree.root_node))
        ['m.p']
    """

    assignments: dict[str, Node] = {}
    for node in walk(root, "assignment_expression"):
        key = _recordable_assignment(node)
        if key is not None:
            assignments[key] = node
    return MappingProxyType(assignments)


def detect_candidates(
    root: Node,
    *,
    suffixes: Sequence[str] = DEFAULT_LOADER_SUFFIXES,
) -> tuple[LoaderCandidate, ...]:
    """Return every loader-shaped function under ``root``.

    Candidates and the assignment map are collected in the same pre-order
    pass; every candidate shares the finished, read-only map.
    """

    loaders: list[Node] = []
    assignments: dict[str, Node] = {}
    for node in walk(root):
        if node.type in FUNCTION_TYPES or node.type == METHOD_TYPE:
            if is_loader_shaped(node, suffixes=suffixes):
                loaders.append(node)
        elif node.type == "assignment_expression":
            key = _recordable_assignment(node)
            if key is not None:
                assignments[key] = node

    shared = MappingProxyType(assignments)
    return tuple(LoaderCandidate(node=node, assignments=shared) for node in loaders)
