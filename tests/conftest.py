"""Shared test fixtures for all tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from breadscan.config import BreadScanSettings
from breadscan.core.models import AccountWeight, DependencyReference, Weights, WorkingWeights
from breadscan.core.types import Ecosystem

# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture
def mock_settings(tmp_path: Path) -> BreadScanSettings:
    """Create settings isolated from the environment, with a temporary cache."""
    return BreadScanSettings(
        _env_file=None,
        cache_dir=tmp_path / "cache",
        max_jitter_ms=0,
        account_url="https://donate.example.com/api/account",
        account_token="test-token",
        log_level="DEBUG",
    )


@pytest.fixture
def mock_settings_minimal(tmp_path: Path) -> BreadScanSettings:
    """Create settings without a remote account."""
    return BreadScanSettings(
        _env_file=None,
        cache_dir=tmp_path / "cache",
        max_jitter_ms=0,
        account_url=None,
        account_token=None,
    )


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_reference() -> DependencyReference:
    """A registry-resolved Rust dependency."""
    return DependencyReference(ecosystem=Ecosystem.RUST, identifier="serde", version="1.0")


@pytest.fixture
def sample_working_weights() -> WorkingWeights:
    """Working weights with one bare and one weighted project."""
    weights = WorkingWeights()
    weights.add_project("https://github.com/serde-rs/serde")
    weights.add_project("https://github.com/tokio-rs/tokio", 30)
    weights.add_account("acct-1", memo="maintainer")
    return weights


@pytest.fixture
def sample_weights() -> Weights:
    """Destination state with explicit weights."""
    return Weights(
        accounts={"acct-1": AccountWeight(weight=10)},
        projects={
            "https://github.com/serde-rs/serde": 50,
            "https://gitlab.com/foo/bar": 70,
        },
    )


# ============================================================================
# Test Data Constants
# ============================================================================


FORGE_URL = "https://github.com/foo/bar"
DEEP_FORGE_URL = "https://github.com/foo/bar/tree/main/sub"
PAGES_URL = "https://foo.github.io/docs/x"
NON_FORGE_URL = "https://example.com/project?x=1#y"
