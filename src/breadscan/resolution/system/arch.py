"""Arch Linux adapter: explicitly installed pacman packages."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from breadscan.cache.decorators import is_string_list
from breadscan.cache.keys import CacheKeys
from breadscan.core.exceptions import BreadScanError
from breadscan.core.models import DependencyReference
from breadscan.core.types import Ecosystem, SelectionPolicy
from breadscan.resolution.base import ScanResult
from breadscan.resolution.canonical import https_anchors
from breadscan.resolution.system.base import SystemEcosystem

if TYPE_CHECKING:
    from breadscan.resolution.context import ResolutionContext

logger = logging.getLogger(__name__)

# "URL             : https://..." ; continuation lines start with whitespace
_FIELD = re.compile(r"^(?P<key>[^:\s][^:]*?)\s+: (?P<value>.*)$")


def parse_pacman_info(output: str) -> list[dict[str, str]]:
    """Split ``pacman --info`` output into one field mapping per package."""
    packages: list[dict[str, str]] = []
    current: dict[str, str] = {}
    for line in output.splitlines():
        if not line.strip():
            if current:
                packages.append(current)
                current = {}
            continue
        if line.startswith((" ", "\t")):
            continue
        match = _FIELD.match(line)
        if match is None:
            logger.warning(f"Error parsing pacman output line {line!r}")
            continue
        current[match["key"]] = match["value"].strip()
    if current:
        packages.append(current)
    return packages


class ArchEcosystem(SystemEcosystem):
    """
    Packages installed explicitly with pacman.

    The package ``URL`` is the only primary candidate and needs no lookup.
    When it is not a forge, the https links on that homepage are searched
    for one, and that link list is cached per homepage. The page body
    fetched for canonical-link discovery is reused for the search.
    """

    ECOSYSTEM = Ecosystem.ARCH
    POLICY = SelectionPolicy.FIRST_FORGE

    async def list_packages(self) -> ScanResult:
        output = await self.list_output("pacman", "--query", "--explicit", "--info")
        result = ScanResult()
        for fields in parse_pacman_info(output):
            name = fields.get("Name")
            if not name:
                continue
            homepage = fields.get("URL")
            result.references.append(
                self.reference(
                    name,
                    version=fields.get("Version"),
                    homepage=homepage if homepage and homepage != "None" else None,
                )
            )
        logger.info(f"Found {len(result.references)} explicitly installed Arch packages")
        return result

    def cache_key(self, reference: DependencyReference) -> str | None:
        # The homepage is local metadata
        return None

    async def fetch_metadata(
        self,
        reference: DependencyReference,
        context: ResolutionContext,
    ) -> str | None:
        return reference.homepage

    def parse_candidates(self, reference: DependencyReference, payload: str | None) -> list[str]:
        return [payload] if payload else []

    async def fallback_candidates(
        self,
        reference: DependencyReference,
        context: ResolutionContext,
    ) -> list[str]:
        url = reference.homepage
        if not url:
            return []

        key = CacheKeys.arch_html(url)
        if context.cache is not None:
            cached = await context.cache.get(key)
            if is_string_list(cached):
                return cached

        try:
            html = await context.canonicalizer.fetch_page(url)
        except BreadScanError as e:
            logger.debug(f"Error fetching project page of {reference.label} in search for git URL: {e}")
            return []

        hrefs = https_anchors(html)
        if context.cache is not None:
            await context.cache.set(key, hrefs)
        return hrefs
