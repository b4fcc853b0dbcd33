"""Base class for adapters that read dependency manifests from a project tree."""

from __future__ import annotations

import asyncio
import logging
from abc import abstractmethod
from pathlib import Path
from typing import Any, ClassVar

from breadscan.core.exceptions import ManifestError
from breadscan.resolution.base import AbstractEcosystem, ScanResult

logger = logging.getLogger(__name__)


def maybe_read(path: Path) -> bytes | None:
    """Read a file, returning None when it (or a parent directory) does not exist."""
    try:
        return path.read_bytes()
    except (FileNotFoundError, NotADirectoryError):
        return None


class ProjectEcosystem(AbstractEcosystem):
    """
    Adapter reading one manifest file at the top of a scan root.

    Subclasses set ``MANIFEST`` and implement :meth:`parse_manifest`. A
    missing manifest means "no dependencies here"; a manifest that exists
    but cannot be parsed, or whose tables have the wrong type, raises
    :class:`ManifestError`.
    """

    MANIFEST: ClassVar[str]

    @property
    def manifest_name(self) -> str:
        return self.MANIFEST

    async def scan(self, root: Path) -> ScanResult:
        path = root / self.manifest_name
        raw = await asyncio.to_thread(maybe_read, path)
        if raw is None:
            return ScanResult()

        try:
            document = self.load_manifest(raw)
        except ManifestError:
            raise
        except ValueError as e:
            raise ManifestError(f"Error loading {path}: {e}", {"path": str(path)}) from e

        try:
            result = await self.parse_manifest(root, document)
        except (AttributeError, TypeError) as e:
            # Parsed, but a table has the wrong shape (e.g. a list of dependencies)
            raise ManifestError(f"Unexpected structure in {path}: {e}", {"path": str(path)}) from e

        logger.debug(
            f"Read {len(result.references)} dependencies and "
            f"{len(result.sub_roots)} sub-roots from {path}"
        )
        return result

    @abstractmethod
    def load_manifest(self, raw: bytes) -> Any:
        """Decode the raw manifest; ValueError subclasses become ManifestError."""
        ...

    @abstractmethod
    async def parse_manifest(self, root: Path, document: Any) -> ScanResult:
        """Extract references and sub-roots from a decoded manifest."""
        ...
