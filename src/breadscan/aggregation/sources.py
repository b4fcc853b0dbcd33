"""Sources of working weights: project trees, OS packages, remote accounts, files."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

from breadscan.core.documents import read_config
from breadscan.core.exceptions import BreadScanError, SourceError
from breadscan.core.models import WorkingWeights

if TYPE_CHECKING:
    from breadscan.aggregation.remote import DonationAccountClient
    from breadscan.resolution.orchestrator import ResolutionOrchestrator
    from breadscan.resolution.system.base import SystemEcosystem

logger = logging.getLogger(__name__)


class WeightSource(ABC):
    """Produces one WorkingWeights; failures of an explicit source are SourceErrors."""

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    async def load(self) -> WorkingWeights: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class ProjectSource(WeightSource):
    """Dependencies of a local project tree."""

    def __init__(self, root: Path, orchestrator: ResolutionOrchestrator) -> None:
        self.root = Path(root)
        self._orchestrator = orchestrator

    @property
    def name(self) -> str:
        return f"project {self.root}"

    async def load(self) -> WorkingWeights:
        return await self._orchestrator.scan_root(self.root)


class SystemSource(WeightSource):
    """Packages installed through an OS package manager."""

    def __init__(self, adapter: SystemEcosystem, orchestrator: ResolutionOrchestrator) -> None:
        self.adapter = adapter
        self._orchestrator = orchestrator

    @property
    def name(self) -> str:
        return f"{self.adapter.ecosystem} packages"

    async def load(self) -> WorkingWeights:
        return await self._orchestrator.scan_system(self.adapter)


class RemoteSource(WeightSource):
    """Current weights of the remote donation account."""

    def __init__(self, client: DonationAccountClient) -> None:
        self._client = client

    @property
    def name(self) -> str:
        return f"remote {self._client.url}"

    async def load(self) -> WorkingWeights:
        try:
            weights = await self._client.get_weights()
        except BreadScanError as e:
            raise SourceError(f"Error reading remote account: {e.message}", {"url": self._client.url}) from e
        return weights.to_working()


class FileSource(WeightSource):
    """A previously saved weighted configuration. A missing file contributes nothing."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    @property
    def name(self) -> str:
        return f"file {self.path}"

    async def load(self) -> WorkingWeights:
        try:
            config = await asyncio.to_thread(read_config, self.path)
        except (OSError, ValueError) as e:
            raise SourceError(f"Error reading {self.path}: {e}", {"path": str(self.path)}) from e
        if config is None:
            logger.info(f"{self.path} does not exist, treating it as empty")
            return WorkingWeights()
        return config.latest.weights.to_working()
