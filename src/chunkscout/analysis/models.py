"""Value objects produced by loader analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from types import MappingProxyType
from typing import Mapping

import jsbeautifier
from tree_sitter import Node

from .syntax import function_source

__all__ = [
    "ChunkId",
    "ChunkEntry",
    "LoaderCandidate",
    "ChunkLoader",
    "ScriptAnalysis",
]


@dataclass(frozen=True, slots=True)
class ChunkId:
    """A chunk identifier literal and whether it was written as a string.

    Example:
        >>> ChunkId("main", quoted=True).render()
        '"main"'
        >>> ChunkId("42", quoted=False).render()
        '42'
    """

    value: str
    quoted: bool = False

    def render(self) -> str:
        """Return the identifier as a JavaScript argument expression."""

        if self.quoted:
            return json.dumps(self.value, ensure_ascii=False)
        return self.value

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True, slots=True)
class ChunkEntry:
    """A chunk identifier resolved to the filename its loader produces."""

    chunk_id: ChunkId
    filename: str

    def __str__(self) -> str:
        return f"{self.chunk_id}: {self.filename}"


@dataclass(frozen=True, slots=True, eq=False)
class LoaderCandidate:
    """A loader-shaped function node and its document's assignment map.

    The map is shared by every candidate of one document and is read-only.
    """

    node: Node
    assignments: Mapping[str, Node] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def source(self) -> str:
        return function_source(self.node)


@dataclass(frozen=True, slots=True, eq=False)
class ChunkLoader:
    """A candidate confirmed by at least one resolved chunk entry."""

    candidate: LoaderCandidate
    entries: frozenset[ChunkEntry]

    @property
    def source(self) -> str:
        return self.candidate.source

    def render(self, *, indent_size: int = 2) -> str:
        """Return the loader function pretty-printed."""

        options = jsbeautifier.default_options()
        options.indent_size = indent_size
        options.max_preserve_newlines = 2
        return jsbeautifier.beautify(self.source, options)

    def sorted_entries(self) -> list[ChunkEntry]:
        """Return entries in a stable order for reporting."""

        return sorted(
            self.entries,
            key=lambda entry: (
                entry.chunk_id.quoted,
                _numeric_key(entry.chunk_id.value),
                entry.chunk_id.value,
            ),
        )


def _numeric_key(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return float("inf")


@dataclass(frozen=True, slots=True)
class ScriptAnalysis:
    """Loaders found in one source text."""

    label: str
    loaders: tuple[ChunkLoader, ...] = ()

    @property
    def entry_count(self) -> int:
        return sum(len(loader.entries) for loader in self.loaders)
