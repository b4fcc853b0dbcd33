"""Weights declared directly in a project's own bread manifest."""

from __future__ import annotations

import logging
from pathlib import Path

from breadscan.core.documents import parse_config
from breadscan.core.models import VersionedConfig
from breadscan.core.types import Ecosystem
from breadscan.resolution.base import ScanResult
from breadscan.resolution.projects.base import ProjectEcosystem

logger = logging.getLogger(__name__)


class BreadManifestEcosystem(ProjectEcosystem):
    """
    The ``.bread.yml`` of a dependency checked out locally.

    Its accounts and projects are contributed as-is with their explicit
    weights; nothing is resolved over the network.
    """

    ECOSYSTEM = Ecosystem.BREAD
    MANIFEST = ".bread.yml"

    def __init__(self, filename: str | None = None) -> None:
        self._filename = filename or self.MANIFEST

    @property
    def manifest_name(self) -> str:
        return self._filename

    def load_manifest(self, raw: bytes) -> VersionedConfig:
        return parse_config(raw)

    async def parse_manifest(self, root: Path, document: VersionedConfig) -> ScanResult:
        config = document.latest
        if config.disabled:
            logger.info(f"Bread manifest in {root} is disabled, skipping")
            return ScanResult()
        return ScanResult(weights=config.weights.to_working())

    def __repr__(self) -> str:
        return f"{type(self).__name__}(filename={self._filename!r})"
