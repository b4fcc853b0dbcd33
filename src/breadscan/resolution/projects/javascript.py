"""JavaScript adapter: package.json and the installed node_modules tree."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from breadscan.core.exceptions import ManifestError
from breadscan.core.models import DependencyReference
from breadscan.core.types import Ecosystem
from breadscan.resolution.base import ScanResult
from breadscan.resolution.projects.base import ProjectEcosystem, maybe_read

logger = logging.getLogger(__name__)

# npm shorthand hosts for "repository": "<host>:<org>/<repo>"
_SHORTHAND_HOSTS = {
    "github": "github.com",
    "gitlab": "gitlab.com",
    "bitbucket": "bitbucket.org",
}


def repository_url(repository: Any) -> str | None:
    """
    URL named by a package.json ``repository`` field.

    Accepts the object form ``{"type": "git", "url": ...}`` as well as the
    string forms ``"https://..."``, ``"github:org/repo"`` and ``"org/repo"``.
    """
    if isinstance(repository, dict):
        repository = repository.get("url")
    if not isinstance(repository, str) or not repository.strip():
        return None
    repository = repository.strip()

    prefix, sep, rest = repository.partition(":")
    if sep and prefix in _SHORTHAND_HOSTS:
        return f"https://{_SHORTHAND_HOSTS[prefix]}/{rest}"
    if "://" not in repository and "@" not in repository and repository.count("/") == 1:
        return f"https://github.com/{repository}"
    return repository


class JavaScriptEcosystem(ProjectEcosystem):
    """
    npm projects.

    Nothing is fetched from the registry: the repository of every direct
    dependency, and of every runtime dependency reachable from them, is
    read from its installed ``node_modules/<name>/package.json``.
    """

    ECOSYSTEM = Ecosystem.JAVASCRIPT
    MANIFEST = "package.json"

    def load_manifest(self, raw: bytes) -> dict[str, Any]:
        document = json.loads(raw)
        if not isinstance(document, dict):
            raise ManifestError("package.json is not an object")
        return document

    async def parse_manifest(self, root: Path, document: dict[str, Any]) -> ScanResult:
        return await asyncio.to_thread(self._walk, root, document)

    def _walk(self, root: Path, document: dict[str, Any]) -> ScanResult:
        result = ScanResult()
        queue: list[tuple[str, str, Path]] = []
        for table in ("dependencies", "devDependencies"):
            for name, spec in (document.get(table) or {}).items():
                queue.append((name, str(spec), root))

        seen: set[str] = set()
        while queue:
            name, spec, parent = queue.pop(0)
            if name in seen:
                continue
            seen.add(name)

            if spec.startswith("file:"):
                result.references.append(self.reference(name, path=parent / spec[len("file:") :]))
                continue

            package = self._installed_package(root, parent, name)
            if package is None:
                logger.warning(f"npm package {name} missing in node_modules of {root}")
                continue
            package_dir, manifest = package

            if url := repository_url(manifest.get("repository")):
                result.references.append(
                    self.reference(name, url=url, version=manifest.get("version"))
                )
            else:
                logger.debug(f"npm package {name} declares no repository")

            dependencies = manifest.get("dependencies") or {}
            if not isinstance(dependencies, dict):
                logger.warning(f"Ignoring malformed dependencies of {package_dir / 'package.json'}")
                continue
            for dep_name, dep_spec in dependencies.items():
                queue.append((dep_name, str(dep_spec), package_dir))
        return result

    def _installed_package(
        self,
        root: Path,
        parent: Path,
        name: str,
    ) -> tuple[Path, dict[str, Any]] | None:
        """Locate ``name`` the way node does: nested node_modules first, then the root."""
        for base in dict.fromkeys((parent, root)):
            package_dir = base / "node_modules" / name
            raw = maybe_read(package_dir / "package.json")
            if raw is None:
                continue
            try:
                manifest = json.loads(raw)
            except ValueError as e:
                logger.warning(f"Error reading {package_dir / 'package.json'}: {e}")
                return None
            if isinstance(manifest, dict):
                return package_dir, manifest
        return None
