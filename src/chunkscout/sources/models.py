"""Source request contracts consumed by the scan service."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

__all__ = ["SourceRequest", "TextSource"]


@runtime_checkable
class SourceRequest(Protocol):
    """A labelled script whose text is acquired on demand.

    ``fetch`` raises :class:`~chunkscout.sources.errors.SourceError` when the
    text cannot be acquired.
    """

    @property
    def label(self) -> str: ...

    def fetch(self) -> str: ...


class TextSource:
    """A source whose text is already in memory."""

    __slots__ = ("_label", "_text")

    def __init__(self, label: str, text: str) -> None:
        self._label = label
        self._text = text

    @property
    def label(self) -> str:
        return self._label

    def fetch(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"TextSource(label={self._label!r})"
