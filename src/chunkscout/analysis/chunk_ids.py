"""Extract the chunk identifiers a loader dispatches on."""

from __future__ import annotations

from typing import Iterator

from tree_sitter import Node

from .models import ChunkId
from .syntax import literal_value, node_text
from .walk import walk

__all__ = [
    "extract_chunk_ids",
    "ids_from_comparison",
    "ids_from_object",
    "ids_from_switch",
]

_EQUALITY_OPERATORS = frozenset({"==", "==="})
_IDENTIFIER_KEYS = frozenset(
    {"property_identifier", "shorthand_property_identifier"}
)


def _literal_id(node: Node | None) -> ChunkId | None:
    if node is None:
        return None
    literal = literal_value(node)
    if literal is None:
        return None
    value, quoted = literal
    return ChunkId(value, quoted=quoted)


def ids_from_object(node: Node) -> Iterator[ChunkId]:
    """Yield an identifier per property key of an ``object`` literal.

    Identifier-style keys are property names, which JavaScript treats as
    strings, so they come back quoted.
    """

    for child in node.named_children:
        if child.type == "shorthand_property_identifier":
            yield ChunkId(node_text(child), quoted=True)
            continue
        if child.type != "pair":
            continue
        key = child.child_by_field_name("key")
        if key is None:
            continue
        if key.type in _IDENTIFIER_KEYS:
            yield ChunkId(node_text(key), quoted=True)
            continue
        chunk_id = _literal_id(key)
        if chunk_id is not None:
            yield chunk_id


def ids_from_switch(node: Node) -> Iterator[ChunkId]:
    """Yield an identifier per literal ``case`` label of a switch statement."""

    body = node.child_by_field_name("body")
    if body is None:
        return
    for case in body.named_children:
        if case.type != "switch_case":
            continue
        chunk_id = _literal_id(case.child_by_field_name("value"))
        if chunk_id is not None:
            yield chunk_id


def ids_from_comparison(node: Node) -> ChunkId | None:
    """Return the literal side of ``literal == identifier`` comparisons."""

    operator = node.child_by_field_name("operator")
    if operator is None or node_text(operator) not in _EQUALITY_OPERATORS:
        return None
    left = node.child_by_field_name("left")
    right = node.child_by_field_name("right")
    if left is None or right is None:
        return None
    if right.type == "identifier":
        return _literal_id(left)
    if left.type == "identifier":
        return _literal_id(right)
    return None


def extract_chunk_ids(node: Node) -> frozenset[ChunkId]:
    """Return every chunk identifier found anywhere under ``node``.

    Object keys, literal ``case`` labels and literals compared for equality
    with a bare identifier all count; literals anywhere else do not.

    Example:
        >>> from chunkscout.analysis.syntax import parse_script
        >>> tree = parse_script('f = function(e){return {1:"a.js"}[e]}')
        >>> sorted(str(i) for i in extract_chunk_ids(tree.root_node))
        ['1']
    """

    found: set[ChunkId] = set()
    for child in walk(node, ("object", "switch_statement", "binary_expression")):
        if child.type == "object":
            found.update(ids_from_object(child))
        elif child.type == "switch_statement":
            found.update(ids_from_switch(child))
        else:
            chunk_id = ids_from_comparison(child)
            if chunk_id is not None:
                found.add(chunk_id)
    return frozenset(found)
