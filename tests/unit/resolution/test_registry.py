"""Tests for the ecosystem registry."""

from __future__ import annotations

import pytest

from breadscan.config import BreadScanSettings
from breadscan.core.types import Ecosystem
from breadscan.resolution.projects import BreadManifestEcosystem, RustEcosystem
from breadscan.resolution.registry import EcosystemRegistry
from breadscan.resolution.system import ArchEcosystem, DebianEcosystem


class TestEcosystemRegistry:
    """Tests for adapter registration and lookup."""

    def test_from_settings(self, mock_settings: BreadScanSettings):
        registry = EcosystemRegistry.from_settings(mock_settings)

        assert [a.ecosystem for a in registry.project_ecosystems()] == [
            Ecosystem.RUST,
            Ecosystem.PYTHON,
            Ecosystem.JAVASCRIPT,
            Ecosystem.JAVA,
            Ecosystem.GOLANG,
        ]
        assert isinstance(registry.system(Ecosystem.DEBIAN), DebianEcosystem)
        assert isinstance(registry.system(Ecosystem.ARCH), ArchEcosystem)

    def test_manifest_filename_from_settings(self, tmp_path):
        settings = BreadScanSettings(_env_file=None, cache_dir=tmp_path, manifest_filename="bread.yaml")
        registry = EcosystemRegistry.from_settings(settings)
        assert registry.manifest.manifest_name == "bread.yaml"

    def test_manifest_kept_apart(self):
        registry = EcosystemRegistry()
        assert isinstance(registry.manifest, BreadManifestEcosystem)
        assert registry.project_ecosystems() == []

    def test_register_replaces(self):
        registry = EcosystemRegistry()
        first, second = RustEcosystem(), RustEcosystem()

        registry.register_project(first)
        registry.register_project(second)

        assert registry.project_ecosystems() == [second]

    def test_unknown_system(self):
        with pytest.raises(ValueError, match="Unsupported system ecosystem"):
            EcosystemRegistry().system(Ecosystem.DEBIAN)

    def test_project_is_not_a_system(self):
        registry = EcosystemRegistry()
        registry.register_project(RustEcosystem())
        with pytest.raises(ValueError):
            registry.system(Ecosystem.RUST)
