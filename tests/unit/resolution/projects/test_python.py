"""Tests for the pyproject.toml adapter."""

from __future__ import annotations

from pathlib import Path

import pytest
import respx
from httpx import Response

from breadscan.core.types import SelectionPolicy
from breadscan.resolution.context import ResolutionContext
from breadscan.resolution.projects import PythonEcosystem
from breadscan.resolution.projects.python import requirement_name


@pytest.fixture
def ecosystem() -> PythonEcosystem:
    return PythonEcosystem()


POETRY_PYPROJECT = """
[tool.poetry.dependencies]
python = "^3.11"
requests = "^2.31"
forked = { git = "https://github.com/me/forked.git" }
sibling = { path = "../sibling" }
wheel-only = { url = "https://example.com/pkg.whl" }

[tool.poetry.dev-dependencies]
pytest = "^8"

[tool.poetry.group.docs.dependencies]
mkdocs = "*"
"""

PEP621_PYPROJECT = """
[project]
name = "demo"
dependencies = [
    "httpx>=0.27",
    "Requests[socks] >= 2.0 ; python_version < '4'",
    "pinned @ git+https://gitlab.com/pin/pinned.git",
    "local @ file:///opt/local",
]

[project.optional-dependencies]
yaml = ["PyYAML>=6"]
"""


# ============================================================================
# Requirement Parsing Tests
# ============================================================================


class TestRequirementName:
    """Tests for extracting names from requirement strings."""

    @pytest.mark.parametrize(
        "requirement,expected",
        [
            ("requests", "requests"),
            ("requests>=2.0", "requests"),
            ("requests[socks]~=2.0", "requests"),
            ("zope.interface ; python_version < '3'", "zope.interface"),
            ("pkg @ https://example.com/pkg.zip", "pkg"),
            ("  python-dateutil  ", "python-dateutil"),
        ],
    )
    def test_names(self, requirement: str, expected: str):
        assert requirement_name(requirement) == expected

    def test_invalid(self):
        assert requirement_name(">=1.0") is None


# ============================================================================
# Manifest Tests
# ============================================================================


class TestPyprojectManifest:
    """Tests for reading pyproject.toml."""

    async def test_poetry(self, ecosystem: PythonEcosystem, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text(POETRY_PYPROJECT)

        result = await ecosystem.scan(tmp_path)

        by_id = {ref.identifier: ref for ref in result.references}
        assert list(by_id) == ["requests", "forked", "sibling", "pytest", "mkdocs"]
        assert by_id["forked"].url == "https://github.com/me/forked.git"
        assert by_id["sibling"].path == tmp_path / "../sibling"

    async def test_pep621(self, ecosystem: PythonEcosystem, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text(PEP621_PYPROJECT)

        result = await ecosystem.scan(tmp_path)

        by_id = {ref.identifier: ref for ref in result.references}
        assert list(by_id) == ["httpx", "Requests", "pinned", "PyYAML"]
        assert by_id["pinned"].url == "git+https://gitlab.com/pin/pinned.git"
        assert by_id["httpx"].url is None

    async def test_duplicates_case_insensitive(self, ecosystem: PythonEcosystem, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text(
            POETRY_PYPROJECT + '\n[project]\ndependencies = ["REQUESTS>=2", "attrs"]\n'
        )

        result = await ecosystem.scan(tmp_path)

        identifiers = [ref.identifier for ref in result.references]
        assert identifiers.count("requests") == 1
        assert "REQUESTS" not in identifiers
        assert "attrs" in identifiers


# ============================================================================
# Registry Tests
# ============================================================================


class TestPyPI:
    """Tests for PyPI JSON API lookups."""

    def test_policy(self, ecosystem: PythonEcosystem):
        assert ecosystem.policy == SelectionPolicy.FIRST_FORGE

    @respx.mock
    async def test_fetch_metadata(self, ecosystem: PythonEcosystem, context: ResolutionContext):
        route = respx.get("https://pypi.org/pypi/httpx/json").mock(
            return_value=Response(200, json={"info": {"project_url": "https://pypi.org/project/httpx/"}})
        )

        payload = await ecosystem.fetch_metadata(ecosystem.reference("httpx"), context)

        assert route.called
        assert payload["info"]["project_url"] == "https://pypi.org/project/httpx/"

    def test_candidate_order(self, ecosystem: PythonEcosystem):
        payload = {
            "info": {
                "project_url": "https://pypi.org/project/httpx/",
                "project_urls": {
                    "Documentation": "https://www.python-httpx.org",
                    "Source": "https://github.com/encode/httpx",
                    "Empty": None,
                },
                "home_page": "https://github.com/encode/httpx",
            }
        }

        assert ecosystem.parse_candidates(ecosystem.reference("httpx"), payload) == [
            "https://pypi.org/project/httpx/",
            "https://www.python-httpx.org",
            "https://github.com/encode/httpx",
            "https://github.com/encode/httpx",
        ]

    def test_not_found(self, ecosystem: PythonEcosystem):
        assert ecosystem.parse_candidates(ecosystem.reference("x"), None) == []
