"""Python adapter: pyproject.toml (Poetry and PEP 621) and the PyPI JSON API."""

from __future__ import annotations

import logging
import re
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

from breadscan.core.models import DependencyReference
from breadscan.core.types import Ecosystem, SelectionPolicy
from breadscan.resolution.base import ScanResult
from breadscan.resolution.projects.base import ProjectEcosystem

if TYPE_CHECKING:
    from breadscan.resolution.context import ResolutionContext

logger = logging.getLogger(__name__)

# "requests[socks] >= 2.0 ; python_version < '4'" -> "requests"
_REQUIREMENT_NAME = re.compile(r"^\s*(?P<name>[A-Za-z0-9](?:[A-Za-z0-9._-]*[A-Za-z0-9])?)")
# "pkg @ git+https://..." direct references
_DIRECT_REFERENCE = re.compile(r"@\s*(?P<url>\S+)")


def requirement_name(requirement: str) -> str | None:
    """Distribution name of a PEP 508 requirement string."""
    match = _REQUIREMENT_NAME.match(requirement)
    return match["name"] if match else None


class PythonEcosystem(ProjectEcosystem):
    """
    Poetry and PEP 621 dependencies.

    PyPI offers several URLs per project; they are tried as candidates in
    order ``project_url``, ``project_urls`` values, ``home_page``.
    """

    ECOSYSTEM = Ecosystem.PYTHON
    POLICY = SelectionPolicy.FIRST_FORGE
    MANIFEST = "pyproject.toml"
    BASE_URL = "https://pypi.org/pypi"

    def load_manifest(self, raw: bytes) -> dict[str, Any]:
        return tomllib.loads(raw.decode("utf-8"))

    async def parse_manifest(self, root: Path, document: dict[str, Any]) -> ScanResult:
        result = ScanResult()
        seen: set[str] = set()

        def add(reference: DependencyReference | None) -> None:
            if reference is None or reference.identifier.lower() in seen:
                return
            seen.add(reference.identifier.lower())
            result.references.append(reference)

        poetry = (document.get("tool") or {}).get("poetry") or {}
        tables = [poetry.get("dependencies"), poetry.get("dev-dependencies")]
        tables.extend((group or {}).get("dependencies") for group in (poetry.get("group") or {}).values())
        for table in tables:
            for name, spec in (table or {}).items():
                add(self._poetry_reference(root, name, spec))

        project = document.get("project") or {}
        requirements = list(project.get("dependencies") or [])
        for extra in (project.get("optional-dependencies") or {}).values():
            requirements.extend(extra)
        for requirement in requirements:
            add(self._requirement_reference(requirement))
        return result

    def _poetry_reference(self, root: Path, name: str, spec: Any) -> DependencyReference | None:
        if name.lower() == "python":
            return None
        if isinstance(spec, dict):
            if git := spec.get("git"):
                return self.reference(name, url=git)
            if path := spec.get("path"):
                return self.reference(name, path=root / path)
            if url := spec.get("url"):
                logger.debug(f"Skipping archive dependency {name}: {url}")
                return None
        return self.reference(name)

    def _requirement_reference(self, requirement: str) -> DependencyReference | None:
        name = requirement_name(requirement)
        if name is None:
            logger.warning(f"Unparseable requirement {requirement!r}")
            return None
        if direct := _DIRECT_REFERENCE.search(requirement):
            if direct["url"].startswith("file:"):
                logger.debug(f"Skipping local file requirement {requirement!r}")
                return None
            return self.reference(name, url=direct["url"])
        return self.reference(name)

    async def fetch_metadata(
        self,
        reference: DependencyReference,
        context: ResolutionContext,
    ) -> dict[str, Any] | None:
        return await context.fetcher.get_json(f"{self.BASE_URL}/{reference.identifier}/json")

    def parse_candidates(
        self,
        reference: DependencyReference,
        payload: dict[str, Any] | None,
    ) -> list[str]:
        info = (payload or {}).get("info") or {}
        candidates = []
        if project_url := info.get("project_url"):
            candidates.append(project_url)
        candidates.extend(url for url in (info.get("project_urls") or {}).values() if url)
        if home_page := info.get("home_page"):
            candidates.append(home_page)
        return candidates
