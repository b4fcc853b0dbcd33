"""Process-wide resolution context shared by every unit."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from breadscan.cache.client import AsyncDiskCache
from breadscan.config import BreadScanSettings
from breadscan.resolution.base import RateLimitConfig, RateLimitedFetcher
from breadscan.resolution.canonical import Canonicalizer

logger = logging.getLogger(__name__)


@dataclass
class ResolutionContext:
    """
    The shared, not copied, state of one run.

    Holds the per-host limiter table (inside the fetcher) and the cache
    handle. Built once at startup and passed by reference to every unit.
    """

    settings: BreadScanSettings
    fetcher: RateLimitedFetcher
    cache: AsyncDiskCache | None
    canonicalizer: Canonicalizer

    @classmethod
    def from_settings(
        cls,
        settings: BreadScanSettings,
        *,
        fetcher: RateLimitedFetcher | None = None,
        use_cache: bool = True,
    ) -> "ResolutionContext":
        fetcher = fetcher or RateLimitedFetcher(
            RateLimitConfig(
                requests_per_second=settings.requests_per_second,
                max_jitter=settings.max_jitter_ms / 1000.0,
            ),
            user_agent=settings.user_agent,
            timeout=settings.http_timeout,
        )
        cache = AsyncDiskCache(settings.cache_dir) if use_cache else None
        return cls(
            settings=settings,
            fetcher=fetcher,
            cache=cache,
            canonicalizer=Canonicalizer(fetcher, cache),
        )

    async def open(self) -> None:
        if self.cache is not None:
            await self.cache.connect()
            logger.debug(f"Using cache at {self.cache.directory}")

    async def close(self) -> None:
        await self.fetcher.close()
        if self.cache is not None:
            await self.cache.close()

    async def __aenter__(self) -> "ResolutionContext":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
