"""Rust adapter: Cargo.toml manifests and the crates.io registry."""

from __future__ import annotations

import logging
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

DEPENDENCY_TABLES = ("dependencies", "build-dependencies", "dev-dependencies")


class RustEcosystem(ProjectEcosystem):
    """
    Cargo manifests.

    Dependencies come from the regular, build and dev tables, both at the top
    level and under every ``[target.<cfg>]``. Workspace members are sub-roots.
    """

    ECOSYSTEM = Ecosystem.RUST
    POLICY = SelectionPolicy.CANONICAL_FALLBACK
    MANIFEST = "Cargo.toml"
    BASE_URL = "https://crates.io/api/v1/crates"

    def load_manifest(self, raw: bytes) -> dict[str, Any]:
        return tomllib.loads(raw.decode("utf-8"))

    async def parse_manifest(self, root: Path, document: dict[str, Any]) -> ScanResult:
        result = ScanResult()

        tables = [document]
        tables.extend(t for t in (document.get("target") or {}).values() if isinstance(t, dict))
        for table in tables:
            for name in DEPENDENCY_TABLES:
                for dep_id, spec in (table.get(name) or {}).items():
                    result.references.append(self._reference(root, dep_id, spec))

        workspace = document.get("workspace") or {}
        for pattern in workspace.get("members") or []:
            members = sorted(p for p in root.glob(pattern) if p.is_dir())
            if not members:
                logger.warning(f"Workspace member {pattern!r} in {root} matched nothing")
            result.sub_roots.extend(members)
        return result

    def _reference(self, root: Path, dep_id: str, spec: Any) -> DependencyReference:
        if not isinstance(spec, dict):
            # "serde = '1.0'"
            return self.reference(dep_id, version=str(spec))
        if git := spec.get("git"):
            return self.reference(dep_id, url=git)
        if path := spec.get("path"):
            return self.reference(dep_id, path=root / path)
        # Renamed dependency: the key is local, "package" is the crate
        return self.reference(spec.get("package") or dep_id, version=spec.get("version"))

    async def fetch_metadata(
        self,
        reference: DependencyReference,
        context: ResolutionContext,
    ) -> dict[str, Any] | None:
        return await context.fetcher.get_json(f"{self.BASE_URL}/{reference.identifier}")

    def parse_candidates(
        self,
        reference: DependencyReference,
        payload: dict[str, Any] | None,
    ) -> list[str]:
        if not payload:
            return []
        repository = (payload.get("crate") or {}).get("repository")
        return [repository] if repository else []
