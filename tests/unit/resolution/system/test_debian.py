"""Tests for the Debian adapter."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from breadscan.core.exceptions import ResolutionError, SourceError
from breadscan.core.models import WorkingWeights
from breadscan.core.types import UnitState
from breadscan.resolution.context import ResolutionContext
from breadscan.resolution.system import DebianEcosystem
from breadscan.resolution.system.base import CommandResult
from breadscan.resolution.system.debian import control_field, copyright_source
from breadscan.resolution.unit import ResolutionUnit

DPKG_STATUS = """Package: curl
Status: install ok installed
Version: 7.88.1-10+deb12u5
Description: command line tool for transferring data with URL syntax
"""

COPYRIGHT = """Format: https://www.debian.org/doc/packaging-manuals/copyright-format/1.0/
Upstream-Name: curl
Source: https://github.com/curl/curl

Files: *
"""


def result(*args: str, returncode: int = 0, stdout: str = "", stderr: str = "") -> CommandResult:
    return CommandResult(args=args, returncode=returncode, stdout=stdout, stderr=stderr)


class FakeApt:
    """Answers apt-mark, dpkg and apt-get like a small Debian system would."""

    def __init__(self, copyright: str | None = COPYRIGHT, source_ok: bool = True) -> None:
        self.copyright = copyright
        self.source_ok = source_ok
        self.calls: list[tuple[str, ...]] = []

    async def run(self, *args: str, cwd=None) -> CommandResult:
        self.calls.append(args)
        if args[0] == "apt-mark":
            return result(*args, stdout="curl\ngit\n\ncurl\n")
        if args[0] == "dpkg":
            if args[-1] != "curl":
                return result(*args, returncode=1, stderr=f"package '{args[-1]}' is not installed")
            return result(*args, stdout=DPKG_STATUS)
        if args[0] == "apt-get":
            if not self.source_ok:
                return result(*args, returncode=100, stderr="E: You must put some 'deb-src' URIs")
            unpacked = Path(cwd) / "curl-7.88.1"
            (unpacked / "debian").mkdir(parents=True)
            if self.copyright is not None:
                (unpacked / "debian" / "copyright").write_text(self.copyright)
            return result(*args)
        raise AssertionError(f"unexpected command {args}")


@pytest.fixture
def apt() -> FakeApt:
    return FakeApt()


@pytest.fixture
def ecosystem(apt: FakeApt) -> DebianEcosystem:
    ecosystem = DebianEcosystem()
    ecosystem.run = AsyncMock(side_effect=apt.run)
    return ecosystem


# ============================================================================
# Helper Tests
# ============================================================================


class TestControlFiles:
    """Tests for deb822 field lookup."""

    def test_control_field(self):
        assert control_field(DPKG_STATUS, "Version") == "7.88.1-10+deb12u5"
        assert control_field(COPYRIGHT, "Source") == "https://github.com/curl/curl"
        assert control_field(DPKG_STATUS, "Source") is None

    def test_copyright_source(self, tmp_path: Path):
        (tmp_path / "curl-7.88.1.orig.tar.gz").write_text("")
        (tmp_path / "curl-7.88.1" / "debian").mkdir(parents=True)
        (tmp_path / "curl-7.88.1" / "debian" / "copyright").write_text(COPYRIGHT)

        assert copyright_source(tmp_path) == "https://github.com/curl/curl"

    def test_copyright_missing(self, tmp_path: Path):
        (tmp_path / "curl-7.88.1").mkdir()
        assert copyright_source(tmp_path) is None


# ============================================================================
# Adapter Tests
# ============================================================================


class TestDebianEcosystem:
    """Tests for listing and looking up Debian packages."""

    async def test_list_packages(self, ecosystem: DebianEcosystem):
        result = await ecosystem.scan()
        assert [ref.identifier for ref in result.references] == ["curl", "git"]

    async def test_listing_failure(self):
        ecosystem = DebianEcosystem()
        ecosystem.run = AsyncMock(return_value=result("apt-mark", returncode=1, stderr="boom"))

        with pytest.raises(SourceError, match="boom"):
            await ecosystem.scan()

    async def test_listing_without_apt(self):
        ecosystem = DebianEcosystem()
        ecosystem.run = AsyncMock(side_effect=FileNotFoundError("apt-mark"))

        with pytest.raises(SourceError):
            await ecosystem.scan()

    async def test_fetch_metadata(self, ecosystem: DebianEcosystem, apt: FakeApt, context: ResolutionContext):
        payload = await ecosystem.fetch_metadata(ecosystem.reference("curl"), context)

        assert payload == "https://github.com/curl/curl"
        assert ("apt-get", "source", "curl=7.88.1-10+deb12u5") in apt.calls

    async def test_not_installed(self, ecosystem: DebianEcosystem, context: ResolutionContext):
        with pytest.raises(ResolutionError):
            await ecosystem.fetch_metadata(ecosystem.reference("git"), context)

    async def test_no_source_available(self, context: ResolutionContext):
        ecosystem = DebianEcosystem()
        ecosystem.run = AsyncMock(side_effect=FakeApt(source_ok=False).run)

        with pytest.raises(ResolutionError, match="Unable to get source"):
            await ecosystem.fetch_metadata(ecosystem.reference("curl"), context)

    async def test_no_copyright_source(self, context: ResolutionContext):
        ecosystem = DebianEcosystem()
        ecosystem.run = AsyncMock(side_effect=FakeApt(copyright="Format: x\n").run)

        assert await ecosystem.fetch_metadata(ecosystem.reference("curl"), context) is None

    async def test_unit_records_and_caches(self, ecosystem: DebianEcosystem, apt: FakeApt, context: ResolutionContext):
        weights = WorkingWeights()

        first = await ResolutionUnit(ecosystem.reference("curl"), ecosystem, context, weights).run()
        second = await ResolutionUnit(ecosystem.reference("curl"), ecosystem, context, weights).run()

        assert first.url == second.url == "https://github.com/curl/curl"
        assert [call[0] for call in apt.calls].count("apt-get") == 1
        assert second.state == UnitState.RECORDED

    async def test_unit_failure_drops_package(self, ecosystem: DebianEcosystem, context: ResolutionContext):
        weights = WorkingWeights()

        outcome = await ResolutionUnit(ecosystem.reference("git"), ecosystem, context, weights).run()

        assert outcome.state == UnitState.DROPPED
        assert weights.failures == 1
