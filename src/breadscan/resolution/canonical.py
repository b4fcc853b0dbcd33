"""Turning candidate URLs into canonical project URLs."""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from breadscan.cache.decorators import cached, is_string_list
from breadscan.cache.keys import CacheKeys
from breadscan.core.exceptions import BreadScanError
from breadscan.core.normalization import (
    clean_repository_url,
    forge_project_url,
    is_forge_host,
    parse_url,
    strip_url,
)
from breadscan.core.types import MatchKind

if TYPE_CHECKING:
    from breadscan.cache.client import AsyncDiskCache
    from breadscan.resolution.base import RateLimitedFetcher

logger = logging.getLogger(__name__)

# Page bodies kept for the rest of the run, most recent last
PAGE_MEMO_SIZE = 256


@dataclass(frozen=True)
class CanonicalMatch:
    """A canonicalized URL and how much it can be trusted as a project identity."""

    url: str
    kind: MatchKind

    @property
    def recognized(self) -> bool:
        """Whether the URL denotes a forge repository, directly or via a canonical link."""
        return self.kind in (MatchKind.FORGE, MatchKind.DISCOVERED)


def canonical_links(html: str, base_url: str) -> list[str]:
    """Return absolute hrefs of ``<link rel="canonical">`` elements, in document order."""
    soup = BeautifulSoup(html, "lxml")
    hrefs = []
    for link in soup.find_all("link"):
        rel = " ".join(link.get("rel") or []).lower()
        href = (link.get("href") or "").strip()
        if "canonical" in rel.split() and href:
            hrefs.append(urljoin(base_url, href))
    return hrefs


def https_anchors(html: str) -> list[str]:
    """Return every ``<a href="https://...">`` target, in document order."""
    soup = BeautifulSoup(html, "lxml")
    return [
        href
        for anchor in soup.find_all("a")
        if (href := (anchor.get("href") or "").strip()).startswith("https://")
    ]


class Canonicalizer:
    """
    Normalizes candidate URLs into canonical project URLs.

    Algorithm for :meth:`maybe_canonicalize`:
    1. Unparseable URLs are rejected (None).
    2. GitHub Pages hosts are rewritten to their github.com repository.
    3. Forge URLs are truncated to ``https://host/org/repo``.
    4. Other http(s) pages are fetched once for a ``rel="canonical"`` link,
       which goes through steps 1-3 and 5 but never through 4 again.
    5. Everything else is stripped of query and fragment. This never fails,
       but is low confidence and not ``recognized``.
    """

    def __init__(
        self,
        fetcher: RateLimitedFetcher,
        cache: AsyncDiskCache | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._cache = cache
        self._pages: OrderedDict[str, str] = OrderedDict()

    async def maybe_canonicalize(self, url: str, *, discover: bool = True) -> CanonicalMatch | None:
        parsed = parse_url(clean_repository_url(url))
        if parsed is None:
            logger.debug(f"Rejecting unparseable URL: {url!r}")
            return None

        if forge_url := forge_project_url(parsed):
            return CanonicalMatch(forge_url, MatchKind.FORGE)

        host = parsed.hostname or ""
        if discover and parsed.scheme in ("http", "https") and not is_forge_host(host):
            match = await self._discover(parsed.geturl())
            if match is not None:
                return match

        return CanonicalMatch(strip_url(parsed), MatchKind.SYNTACTIC)

    async def fetch_page(self, url: str) -> str:
        """
        Fetch a page as HTML, reusing the body if this run already fetched it.

        Failed fetches are not remembered.
        """
        html = self._pages.get(url)
        if html is not None:
            self._pages.move_to_end(url)
            return html

        html = await self._fetcher.get_text(url)
        self._pages[url] = html
        if len(self._pages) > PAGE_MEMO_SIZE:
            self._pages.popitem(last=False)
        return html

    async def _discover(self, url: str) -> CanonicalMatch | None:
        try:
            hrefs = await self.discover_canonical_links(url)
        except BreadScanError as e:
            logger.debug(f"Error extracting canonical url from page {url}: {e}")
            return None
        for href in hrefs:
            target = await self.maybe_canonicalize(href, discover=False)
            if target is None:
                continue
            if target.kind is MatchKind.FORGE:
                return CanonicalMatch(target.url, MatchKind.DISCOVERED)
            return target
        return None

    @cached(CacheKeys.canonical, validate=is_string_list)
    async def discover_canonical_links(self, url: str) -> list[str]:
        """Fetch ``url`` as HTML and return its canonical link (zero or one element)."""
        html = await self.fetch_page(url)
        return canonical_links(html, url)[:1]
