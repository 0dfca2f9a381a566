"""Domain-specific exceptions for source acquisition."""

from __future__ import annotations


class SourceError(RuntimeError):
    """Base error for source acquisition failures."""


class SourceNotFoundError(SourceError):
    """Raised when a requested file or directory does not exist."""


class SourceReadError(SourceError):
    """Raised when a local source cannot be read or decoded."""


class SourceFetchError(SourceError):
    """Raised when a remote script cannot be downloaded."""


class SiteCrawlError(SourceError):
    """Raised when a page cannot be rendered to discover its scripts."""


class MissingDependencyError(SourceError):
    """Raised when an optional dependency group is not installed."""


__all__ = [
    "SourceError",
    "SourceNotFoundError",
    "SourceReadError",
    "SourceFetchError",
    "SiteCrawlError",
    "MissingDependencyError",
]
