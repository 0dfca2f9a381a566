"""Remote script sources discovered by rendering a live page."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

import httpx

from chunkscout.core.config import SiteSettings
from chunkscout.core.logging import Logger, get_logger

from .errors import MissingDependencyError, SiteCrawlError, SourceFetchError

__all__ = [
    "ScriptRequestCollector",
    "UrlSource",
    "discover_script_urls",
    "normalize_site_url",
]


def normalize_site_url(url: str, *, scheme: str = "https") -> str:
    """Return ``url`` with a scheme, prefixing ``scheme`` when absent.

    Example:
        >>> normalize_site_url("example.com")
        'https://example.com'
        >>> normalize_site_url("http://example.com", scheme="https")
        'http://example.com'
    """

    stripped = url.strip()
    if "://" in stripped:
        return stripped
    return f"{scheme}://{stripped.lstrip('/')}"


@dataclass(frozen=True, slots=True)
class UrlSource:
    """A script downloaded over HTTP when fetched."""

    url: str
    client: httpx.Client

    @property
    def label(self) -> str:
        return self.url

    def fetch(self) -> str:
        """Return the response body as text.

        Raises:
            SourceFetchError: On transport failures or non-success statuses.
        """

        try:
            response = self.client.get(self.url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SourceFetchError(
                f"{self.url}: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceFetchError(f"{self.url}: {exc}") from exc
        return response.text


class ScriptRequestCollector:
    """Record script URLs from outgoing GET requests, first seen first."""

    def __init__(
        self,
        *,
        suffixes: Sequence[str] = (".js",),
        logger: Logger | None = None,
    ) -> None:
        self._suffixes = tuple(suffixes)
        self._seen: dict[str, None] = {}
        self._logger = logger or get_logger(__name__, component="site")

    @property
    def urls(self) -> tuple[str, ...]:
        return tuple(self._seen)

    def accepts(self, method: str, url: str) -> bool:
        if method.upper() != "GET":
            return False
        return urlparse(url).path.endswith(self._suffixes)

    def on_request(self, request: Any) -> None:
        """Playwright ``request`` event handler."""

        url = request.url
        if not self.accepts(request.method, url) or url in self._seen:
            return
        self._logger.debug("script-request", url=url)
        self._seen[url] = None


def discover_script_urls(
    url: str,
    *,
    settings: SiteSettings | None = None,
    logger: Logger | None = None,
) -> tuple[str, ...]:
    """Render ``url`` in headless Chromium and return requested script URLs.

    Raises:
        MissingDependencyError: If Playwright is not installed.
        SiteCrawlError: If the browser cannot load the page.
    """

    settings = settings or SiteSettings()
    logger = logger or get_logger(__name__, component="site")

    try:
        from playwright.sync_api import Error as PlaywrightError
        from playwright.sync_api import sync_playwright
    except ImportError as exc:
        raise MissingDependencyError(
            "Site crawling requires the 'site' extras (playwright)."
        ) from exc

    target = normalize_site_url(url, scheme=settings.default_scheme)
    collector = ScriptRequestCollector(
        suffixes=settings.script_suffixes,
        logger=logger,
    )
    timeout_ms = settings.navigation_timeout_seconds * 1000

    try:
        with sync_playwright() as playwright:
            browser = playwright.chromium.launch(headless=settings.headless)
            try:
                page = browser.new_page()
                page.on("request", collector.on_request)
                page.goto(target, timeout=timeout_ms)
                page.wait_for_load_state(timeout=timeout_ms)
            finally:
                browser.close()
    except PlaywrightError as exc:
        raise SiteCrawlError(f"{target}: {exc}") from exc

    logger.info("site-crawled", url=target, scripts=len(collector.urls))
    return collector.urls
