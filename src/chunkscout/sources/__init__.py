"""Source acquisition for files, directory trees and live pages."""

from __future__ import annotations

from .errors import (
    MissingDependencyError,
    SiteCrawlError,
    SourceError,
    SourceFetchError,
    SourceNotFoundError,
    SourceReadError,
)
from .files import FileSource, iter_directory_sources
from .models import SourceRequest, TextSource
from .site import (
    ScriptRequestCollector,
    UrlSource,
    discover_script_urls,
    normalize_site_url,
)

__all__ = [
    "FileSource",
    "MissingDependencyError",
    "ScriptRequestCollector",
    "SiteCrawlError",
    "SourceError",
    "SourceFetchError",
    "SourceNotFoundError",
    "SourceReadError",
    "SourceRequest",
    "TextSource",
    "UrlSource",
    "discover_script_urls",
    "iter_directory_sources",
    "normalize_site_url",
]
