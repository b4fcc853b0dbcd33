"""Ecosystem registry for managing adapter instances."""

from __future__ import annotations

from typing import TYPE_CHECKING

from breadscan.core.types import Ecosystem
from breadscan.resolution.projects import (
    BreadManifestEcosystem,
    GolangEcosystem,
    JavaEcosystem,
    JavaScriptEcosystem,
    ProjectEcosystem,
    PythonEcosystem,
    RustEcosystem,
)
from breadscan.resolution.system import ArchEcosystem, DebianEcosystem, SystemEcosystem

if TYPE_CHECKING:
    from breadscan.config import BreadScanSettings


class EcosystemRegistry:
    """
    Holds one adapter per ecosystem.

    Project adapters are run against every scan root. The bread manifest
    adapter is kept apart because it only applies to sub-roots, and system
    adapters are only run when their source is selected.
    """

    def __init__(self, manifest: BreadManifestEcosystem | None = None) -> None:
        self._projects: dict[Ecosystem, ProjectEcosystem] = {}
        self._systems: dict[Ecosystem, SystemEcosystem] = {}
        self.manifest = manifest or BreadManifestEcosystem()

    def register_project(self, adapter: ProjectEcosystem) -> None:
        """Register a project manifest adapter."""
        self._projects[adapter.ecosystem] = adapter

    def register_system(self, adapter: SystemEcosystem) -> None:
        """Register an OS package manager adapter."""
        self._systems[adapter.ecosystem] = adapter

    def project_ecosystems(self) -> list[ProjectEcosystem]:
        return list(self._projects.values())

    def system(self, ecosystem: Ecosystem) -> SystemEcosystem:
        try:
            return self._systems[ecosystem]
        except KeyError:
            raise ValueError(f"Unsupported system ecosystem: {ecosystem}") from None

    @classmethod
    def from_settings(cls, settings: "BreadScanSettings") -> "EcosystemRegistry":
        """Create a registry with every built-in adapter."""
        registry = cls(BreadManifestEcosystem(settings.manifest_filename))

        for adapter in (
            RustEcosystem(),
            PythonEcosystem(),
            JavaScriptEcosystem(),
            JavaEcosystem(),
            GolangEcosystem(),
        ):
            registry.register_project(adapter)

        registry.register_system(DebianEcosystem())
        registry.register_system(ArchEcosystem())
        return registry
