"""Concurrent resolution of every dependency reachable from a scan root."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from breadscan.core.exceptions import ManifestError
from breadscan.core.models import WorkingWeights
from breadscan.resolution.unit import ResolutionUnit, UnitOutcome

if TYPE_CHECKING:
    from breadscan.resolution.base import AbstractEcosystem, ScanResult
    from breadscan.resolution.context import ResolutionContext
    from breadscan.resolution.registry import EcosystemRegistry
    from breadscan.resolution.system.base import SystemEcosystem

logger = logging.getLogger(__name__)


class ResolutionOrchestrator:
    """
    Spawns one :class:`ResolutionUnit` per dependency reference and one
    recursive scan per sub-root, and joins all of them before returning.

    Units of one root share that root's WorkingWeights. Each sub-root gets
    its own WorkingWeights, merged into the parent's only after the join.
    No ordering holds between siblings; if two of them record the same URL
    the surviving weight is whichever wrote last.
    """

    def __init__(self, context: ResolutionContext, registry: EcosystemRegistry) -> None:
        self.context = context
        self.registry = registry

    async def scan_root(
        self,
        root: Path | str,
        *,
        ecosystems: Sequence[AbstractEcosystem] | None = None,
        include_manifest: bool = False,
        _ancestors: frozenset[Path] = frozenset(),
    ) -> WorkingWeights:
        """
        Resolve every dependency declared at ``root`` and below it.

        Args:
            root: Directory to scan
            ecosystems: Adapters to run (default: every project adapter)
            include_manifest: Also read the root's own bread manifest
        """
        root = Path(root).resolve()
        weights = WorkingWeights()
        if root in _ancestors:
            logger.debug(f"Skipping {root}, already being scanned")
            return weights

        start = time.monotonic()
        adapters = list(ecosystems) if ecosystems is not None else self.registry.project_ecosystems()
        if include_manifest:
            adapters.insert(0, self.registry.manifest)

        ancestors = _ancestors | {root}
        units: list[ResolutionUnit] = []
        sub_scans = []
        for adapter in adapters:
            result = await self._scan(adapter, root, weights)
            if result is None:
                continue
            if result.weights is not None:
                weights.merge(result.weights)
            for reference in result.references:
                if reference.path is not None:
                    sub_scans.append(self._sub_root(reference.path, adapter, ancestors))
                else:
                    units.append(ResolutionUnit(reference, adapter, self.context, weights))
            for sub_root in result.sub_roots:
                sub_scans.append(self._sub_root(sub_root, adapter, ancestors))

        outcomes, sub_weights = await asyncio.gather(
            self._run_units(units),
            asyncio.gather(*sub_scans),
        )
        for sub in sub_weights:
            weights.merge(sub)

        duration = time.monotonic() - start
        logger.info(
            f"Scanned {root} in {duration:.2f}s: {self._summary(outcomes)}, "
            f"{len(sub_scans)} sub-roots"
        )
        return weights

    async def scan_system(self, adapter: SystemEcosystem) -> WorkingWeights:
        """
        Resolve every package installed through an OS package manager.

        Raises:
            SourceError: If the installed packages cannot be listed.
        """
        start = time.monotonic()
        weights = WorkingWeights()
        result = await adapter.scan(None)
        units = [ResolutionUnit(ref, adapter, self.context, weights) for ref in result.references]
        outcomes = await self._run_units(units)

        duration = time.monotonic() - start
        logger.info(f"Scanned {adapter.ecosystem} packages in {duration:.2f}s: {self._summary(outcomes)}")
        return weights

    async def _scan(
        self,
        adapter: AbstractEcosystem,
        root: Path,
        weights: WorkingWeights,
    ) -> ScanResult | None:
        """Read one adapter's manifest; a broken manifest reads as no dependencies."""
        try:
            return await adapter.scan(root)
        except (ManifestError, OSError, ValueError) as e:
            logger.warning(f"Error loading {adapter.ecosystem} manifest in {root}: {e}")
            weights.record_failure()
            return None

    def _sub_root(self, path: Path, adapter: AbstractEcosystem, ancestors: frozenset[Path]):
        return self.scan_root(
            path,
            ecosystems=[adapter],
            include_manifest=True,
            _ancestors=ancestors,
        )

    @staticmethod
    async def _run_units(units: list[ResolutionUnit]) -> list[UnitOutcome]:
        return await asyncio.gather(*(unit.run() for unit in units))

    @staticmethod
    def _summary(outcomes: list[UnitOutcome]) -> str:
        recorded = sum(1 for outcome in outcomes if outcome.recorded)
        failed = sum(1 for outcome in outcomes if outcome.error is not None)
        return f"{recorded}/{len(outcomes)} dependencies recorded, {failed} failed"
