"""Debian adapter: manually installed packages and their source copyright files."""

from __future__ import annotations

import asyncio
import logging
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from breadscan.core.exceptions import ResolutionError
from breadscan.core.models import DependencyReference
from breadscan.core.types import Ecosystem, SelectionPolicy
from breadscan.resolution.base import ScanResult
from breadscan.resolution.projects.base import maybe_read
from breadscan.resolution.system.base import SystemEcosystem

if TYPE_CHECKING:
    from breadscan.resolution.context import ResolutionContext

logger = logging.getLogger(__name__)


def control_field(text: str, name: str) -> str | None:
    """Value of the first ``<name>: <value>`` line of a deb822 style document."""
    prefix = f"{name}:"
    for line in text.splitlines():
        if line.startswith(prefix):
            return line[len(prefix) :].strip() or None
    return None


def copyright_source(source_dir: Path) -> str | None:
    """``Source:`` of the ``debian/copyright`` unpacked by ``apt-get source``."""
    for entry in sorted(source_dir.iterdir()):
        if not entry.is_dir():
            continue
        raw = maybe_read(entry / "debian" / "copyright")
        if raw is not None:
            return control_field(raw.decode("utf-8", errors="replace"), "Source")
    return None


class DebianEcosystem(SystemEcosystem):
    """
    Packages marked as manually installed by apt.

    Upstream locations are taken from the ``Source:`` field of each
    package's machine-readable copyright file, which requires downloading
    the source package. The result is cached per package name.
    """

    ECOSYSTEM = Ecosystem.DEBIAN
    POLICY = SelectionPolicy.FIRST_FORGE

    async def list_packages(self) -> ScanResult:
        output = await self.list_output("apt-mark", "showmanual")
        packages = dict.fromkeys(line.strip() for line in output.splitlines() if line.strip())
        logger.info(f"Found {len(packages)} manually installed Debian packages")
        return ScanResult(references=[self.reference(package) for package in packages])

    async def fetch_metadata(
        self,
        reference: DependencyReference,
        context: ResolutionContext,
    ) -> str | None:
        package = reference.identifier
        info = await self.run("dpkg", "-s", package)
        if not info.ok:
            raise ResolutionError(f"Getting package info failed: {info.stderr.strip()}")
        version = control_field(info.stdout, "Version")
        if version is None:
            raise ResolutionError(f"Unable to determine version for package {package}")

        with tempfile.TemporaryDirectory(prefix="breadscan-") as source_dir:
            res = await self.run("apt-get", "source", f"{package}={version}", cwd=source_dir)
            if not res.ok:
                raise ResolutionError(f"Unable to get source for package {package}: {res.stderr.strip()}")
            return await asyncio.to_thread(copyright_source, Path(source_dir))

    def parse_candidates(self, reference: DependencyReference, payload: str | None) -> list[str]:
        return [payload] if payload else []
