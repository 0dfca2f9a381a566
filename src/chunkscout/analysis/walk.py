"""Depth-first traversal over tree-sitter syntax nodes."""

from __future__ import annotations

from collections.abc import Collection
from typing import Iterator

from tree_sitter import Node

__all__ = ["walk"]


def walk(
    node: Node,
    kinds: str | Collection[str] | None = None,
) -> Iterator[Node]:
    """Yield ``node`` and its named descendants in pre-order.

    ``kinds`` restricts the output to nodes whose ``type`` matches, without
    changing the visiting order. Each call returns an independent generator.

    Example:
        >>> from chunkscout.analysis.syntax import parse_script
        >>> tree = parse_script("a = {1: 'x'}")
        >>> [n.type for n in walk(tree.root_node, "number")]
        ['number']
    """

    if isinstance(kinds, str):
        kinds = frozenset((kinds,))
    elif kinds is not None:
        kinds = frozenset(kinds)

    # Explicit stack: minified bundles nest deeper than the recursion limit.
    stack = [node]
    while stack:
        current = stack.pop()
        if kinds is None or current.type in kinds:
            yield current
        stack.extend(reversed(current.named_children))
