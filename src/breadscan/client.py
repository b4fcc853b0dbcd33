"""Main library client for standalone usage."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from breadscan.aggregation import (
    Destination,
    DonationAccountClient,
    FileDestination,
    FileSource,
    ProjectSource,
    PruneOptions,
    RemoteDestination,
    RemoteSource,
    StreamDestination,
    SystemSource,
    WeightAggregator,
    WeightSource,
)
from breadscan.config import BreadScanSettings
from breadscan.core.models import WorkingWeights
from breadscan.core.types import Ecosystem
from breadscan.resolution.context import ResolutionContext
from breadscan.resolution.orchestrator import ResolutionOrchestrator
from breadscan.resolution.registry import EcosystemRegistry
from breadscan.services.scan import ScanReport, ScanService

logger = logging.getLogger(__name__)


class BreadScanClient:
    """
    Main client for the breadscan library.

    Owns the process-wide resolution context (HTTP fetcher with its per-host
    rate limiters, and the persistent cache) and builds sources and
    destinations on top of it.

    Usage:
        async with BreadScanClient() as client:
            # Resolve the dependencies of one project
            weights = await client.scan_project("path/to/project")

            # Merge sources into destinations
            report = await client.run(
                [client.project_source("."), client.file_source("old.yml")],
                [client.manifest_destination(Path.cwd())],
            )

    Settings are loaded from environment variables or can be passed explicitly.
    """

    def __init__(
        self,
        settings: BreadScanSettings | None = None,
        *,
        use_cache: bool = True,
        context: ResolutionContext | None = None,
        registry: EcosystemRegistry | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            settings: Application settings. If not provided, loaded from environment.
            use_cache: Whether to use the on-disk lookup cache.
            context: Prebuilt resolution context, mainly for tests.
            registry: Prebuilt adapter registry, mainly for tests.
        """
        self._settings = settings or BreadScanSettings()
        self._use_cache = use_cache
        self._context = context
        self._registry = registry
        self._orchestrator: ResolutionOrchestrator | None = None
        self._accounts: DonationAccountClient | None = None

    @property
    def settings(self) -> BreadScanSettings:
        return self._settings

    async def __aenter__(self) -> BreadScanClient:
        """Initialize resources on context entry."""
        await self._initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Clean up resources on context exit."""
        await self.close()

    async def _initialize(self) -> None:
        """Initialize client resources."""
        if self._context is None:
            self._context = ResolutionContext.from_settings(self._settings, use_cache=self._use_cache)
        await self._context.open()
        if self._registry is None:
            self._registry = EcosystemRegistry.from_settings(self._settings)
        self._orchestrator = ResolutionOrchestrator(self._context, self._registry)

    async def close(self) -> None:
        """Close all resources."""
        if self._accounts:
            await self._accounts.close()
            self._accounts = None

        if self._context:
            await self._context.close()
            self._context = None
        self._orchestrator = None

    def _ensure_initialized(self) -> ResolutionOrchestrator:
        """Ensure client is initialized."""
        if self._orchestrator is None:
            raise RuntimeError(
                "Client not initialized. Use 'async with BreadScanClient() as client:'"
            )
        return self._orchestrator

    def _account_client(self) -> DonationAccountClient:
        if self._accounts is None:
            self._accounts = DonationAccountClient.from_settings(self._settings)
        return self._accounts

    # Direct scans

    async def scan_project(self, root: Path | str) -> WorkingWeights:
        """Resolve every dependency of a project tree."""
        return await self._ensure_initialized().scan_root(root)

    async def scan_system(self, ecosystem: Ecosystem) -> WorkingWeights:
        """Resolve every explicitly installed OS package."""
        orchestrator = self._ensure_initialized()
        return await orchestrator.scan_system(orchestrator.registry.system(ecosystem))

    # Sources

    def project_source(self, root: Path | str) -> WeightSource:
        return ProjectSource(Path(root), self._ensure_initialized())

    def system_source(self, ecosystem: Ecosystem) -> WeightSource:
        orchestrator = self._ensure_initialized()
        return SystemSource(orchestrator.registry.system(ecosystem), orchestrator)

    def remote_source(self) -> WeightSource:
        """
        Raises:
            MissingConfigurationError: If no account endpoint or token is configured.
        """
        return RemoteSource(self._account_client())

    def file_source(self, path: Path | str) -> WeightSource:
        return FileSource(Path(path))

    # Destinations

    def manifest_destination(self, project: Path | str) -> Destination:
        """The bread manifest at the top of a project."""
        return FileDestination(Path(project) / self._settings.manifest_filename)

    def file_destination(self, path: Path | str) -> Destination:
        return FileDestination(Path(path))

    def remote_destination(self) -> Destination:
        """
        Raises:
            MissingConfigurationError: If no account endpoint or token is configured.
        """
        return RemoteDestination(self._account_client())

    def stdout_destination(self) -> Destination:
        return StreamDestination()

    async def clear_cache(self) -> None:
        """Empty the lookup cache; a client without a cache does nothing."""
        cache = self._ensure_initialized().context.cache
        if cache is not None:
            await cache.clear()

    async def run(
        self,
        sources: Sequence[WeightSource],
        destinations: Sequence[Destination],
        prune: PruneOptions | None = None,
    ) -> ScanReport:
        """Merge every source and write the result to every destination."""
        self._ensure_initialized()
        service = ScanService(WeightAggregator(self._settings.default_weight))
        return await service.run(sources, destinations, prune)
