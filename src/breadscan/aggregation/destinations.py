"""Destinations that merged weights are written to."""

from __future__ import annotations

import asyncio
import logging
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from breadscan.core.documents import dump_config, read_config, write_config
from breadscan.core.exceptions import BreadScanError, DestinationError
from breadscan.core.models import ConfigV1, VersionedConfig, Weights

if TYPE_CHECKING:
    from breadscan.aggregation.remote import DonationAccountClient

logger = logging.getLogger(__name__)


class Destination(ABC):
    """
    A persisted weighted configuration.

    :meth:`load` is called for every destination before :meth:`save` is
    called for any of them.
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    async def load(self) -> Weights:
        """Current state, or empty weights if there is none yet."""
        ...

    @abstractmethod
    async def save(self, weights: Weights) -> None: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class FileDestination(Destination):
    """A YAML configuration file, replaced atomically."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._config: VersionedConfig | None = None

    @property
    def name(self) -> str:
        return str(self.path)

    async def load(self) -> Weights:
        try:
            config = await asyncio.to_thread(read_config, self.path)
        except (OSError, ValueError) as e:
            raise DestinationError(f"Error reading {self.path}: {e}", {"path": str(self.path)}) from e
        self._config = config or VersionedConfig()
        return self._config.latest.weights

    async def save(self, weights: Weights) -> None:
        # Keep flags of the existing document
        disabled = self._config.latest.disabled if self._config else False
        config = VersionedConfig(V1=ConfigV1(disabled=disabled, weights=weights))
        try:
            await asyncio.to_thread(write_config, self.path, config)
        except OSError as e:
            raise DestinationError(f"Error writing {self.path}: {e}", {"path": str(self.path)}) from e
        logger.info(f"Wrote {len(weights.accounts)} accounts and {len(weights.projects)} projects to {self.path}")


class RemoteDestination(Destination):
    """The remote donation account."""

    def __init__(self, client: DonationAccountClient) -> None:
        self._client = client

    @property
    def name(self) -> str:
        return f"remote {self._client.url}"

    async def load(self) -> Weights:
        try:
            return await self._client.get_weights()
        except BreadScanError as e:
            raise DestinationError(f"Error reading remote account: {e.message}", {"url": self._client.url}) from e

    async def save(self, weights: Weights) -> None:
        try:
            await self._client.put_weights(weights)
        except BreadScanError as e:
            raise DestinationError(f"Error updating remote account: {e.message}", {"url": self._client.url}) from e
        logger.info(f"Updated remote account with {len(weights.accounts)} accounts and {len(weights.projects)} projects")


class StreamDestination(Destination):
    """Prints the merged document, starting from empty state."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    @property
    def name(self) -> str:
        return "stdout"

    async def load(self) -> Weights:
        return Weights()

    async def save(self, weights: Weights) -> None:
        stream = self._stream or sys.stdout
        stream.write(dump_config(VersionedConfig(V1=ConfigV1(weights=weights))))
        stream.flush()
