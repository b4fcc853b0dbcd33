"""Unit test fixtures with HTTP mocking and a controllable clock."""

from __future__ import annotations

from pathlib import Path

import pytest
import respx
from httpx import Response

from breadscan.cache.client import AsyncDiskCache
from breadscan.config import BreadScanSettings
from breadscan.resolution.base import RateLimitConfig, RateLimitedFetcher
from breadscan.resolution.canonical import Canonicalizer
from breadscan.resolution.context import ResolutionContext

# ============================================================================
# Clock
# ============================================================================


class FakeClock:
    """Monotonic clock that only advances when something sleeps on it.

    With ``advance`` off, sleeps are recorded but time stands still, so
    concurrent callers all reserve against the same instant.
    """

    def __init__(self, start: float = 1000.0, advance: bool = True) -> None:
        self.now = start
        self.advance = advance
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        if self.advance:
            self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


# ============================================================================
# HTTP Mocking Fixtures
# ============================================================================


@pytest.fixture
def respx_mock():
    """Provide a respx mock router for HTTP mocking.

    Use this when you need fine-grained control over mocked responses.
    The mock is automatically started and stopped by respx.
    """
    with respx.mock(assert_all_called=False) as router:
        yield router


def mock_html_response(head: str = "", body: str = "", status_code: int = 200) -> Response:
    """Create a mock HTML response."""
    return Response(
        status_code,
        text=f"<html><head>{head}</head><body>{body}</body></html>",
        headers={"Content-Type": "text/html"},
    )


@pytest.fixture
def html_response():
    """Provide the HTML response helper."""
    return mock_html_response


# ============================================================================
# Resolution Fixtures
# ============================================================================


@pytest.fixture
async def fetcher(fake_clock: FakeClock):
    """Fetcher with a fast, jitter-free limiter on a fake clock."""
    fetcher = RateLimitedFetcher(
        RateLimitConfig(requests_per_second=5.0, max_jitter=0.0),
        clock=fake_clock,
        sleep=fake_clock.sleep,
    )
    yield fetcher
    await fetcher.close()


@pytest.fixture
def cache(tmp_path: Path) -> AsyncDiskCache:
    return AsyncDiskCache(tmp_path / "cache")


@pytest.fixture
def context(
    mock_settings: BreadScanSettings,
    fetcher: RateLimitedFetcher,
    cache: AsyncDiskCache,
) -> ResolutionContext:
    return ResolutionContext(
        settings=mock_settings,
        fetcher=fetcher,
        cache=cache,
        canonicalizer=Canonicalizer(fetcher, cache),
    )


@pytest.fixture
def uncached_context(mock_settings: BreadScanSettings, fetcher: RateLimitedFetcher) -> ResolutionContext:
    return ResolutionContext(
        settings=mock_settings,
        fetcher=fetcher,
        cache=None,
        canonicalizer=Canonicalizer(fetcher),
    )
