"""Go adapter: go.mod require directives."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from breadscan.core.types import Ecosystem
from breadscan.resolution.base import ScanResult
from breadscan.resolution.projects.base import ProjectEcosystem

logger = logging.getLogger(__name__)

_DIRECTIVE = re.compile(r"^\s*(?P<keyword>\S+)\s+(?P<remainder>.*?)\s*$")
_REQUIRE = re.compile(r"^\s*(?P<module>\S+)\s+(?P<version>\S+)(?:\s*//\s*(?P<comment>.*?))?\s*$")


class GolangEcosystem(ProjectEcosystem):
    """
    Go modules.

    A module path is already a repository location, so every direct
    requirement becomes an explicit ``https://<module>`` URL. Requirements
    marked ``// indirect`` are skipped.
    """

    ECOSYSTEM = Ecosystem.GOLANG
    MANIFEST = "go.mod"

    def load_manifest(self, raw: bytes) -> str:
        return raw.decode("utf-8", errors="replace")

    async def parse_manifest(self, root: Path, document: str) -> ScanResult:
        result = ScanResult()
        depth = 0
        in_require = False
        for line in document.splitlines():
            if depth == 0:
                directive = _DIRECTIVE.match(line)
                if directive is None:
                    continue
                remainder = directive["remainder"]
                if remainder.startswith("("):
                    depth += 1
                    in_require = directive["keyword"] == "require"
                elif directive["keyword"] == "require":
                    self._add(result, remainder, line)
            elif line.strip() == ")":
                depth -= 1
                in_require = False
            elif in_require and line.strip() and not line.strip().startswith("//"):
                self._add(result, line, line)
        return result

    def _add(self, result: ScanResult, requirement: str, line: str) -> None:
        match = _REQUIRE.match(requirement)
        if match is None:
            logger.warning(f"Error parsing require line {line.strip()!r}")
            return
        if (match["comment"] or "").strip() == "indirect":
            return
        module = match["module"]
        result.references.append(
            self.reference(module, url=f"https://{module}", version=match["version"])
        )
