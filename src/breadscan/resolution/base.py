"""Per-host rate limiting, HTTP access and the abstract ecosystem adapter."""

from __future__ import annotations

import asyncio
import random
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, AsyncIterator, ClassVar

import httpx

from breadscan.cache.keys import CacheKeys
from breadscan.core.exceptions import InvalidURLError, RemoteUnavailableError, ResolutionError
from breadscan.core.models import DependencyReference, WorkingWeights
from breadscan.core.normalization import parse_url
from breadscan.core.types import Ecosystem, SelectionPolicy

if TYPE_CHECKING:
    from breadscan.resolution.context import ResolutionContext

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]
Jitter = Callable[[float, float], float]

JSON_ACCEPT = "application/json"
HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


@dataclass(frozen=True)
class RateLimitConfig:
    """Configuration for rate limiting one destination host."""

    requests_per_second: float = 5.0
    burst_size: int = 1
    max_jitter: float = 0.5  # seconds


class AsyncRateLimiter:
    """
    Async rate limiter with token bucket algorithm (GCRA form).

    A caller reserves the next free slot under a short lock and sleeps
    outside of it, so no lock is ever held across an await. A random jitter
    of up to ``max_jitter`` seconds is added on top of the strict wait.
    """

    def __init__(
        self,
        config: RateLimitConfig,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
        jitter: Jitter = random.uniform,
    ) -> None:
        self.config = config
        self._interval = 1.0 / config.requests_per_second
        self._tolerance = (max(config.burst_size, 1) - 1) * self._interval
        self._theoretical_arrival: float | None = None
        self._lock = threading.Lock()
        self._clock = clock
        self._sleep = sleep
        self._jitter = jitter

    def reserve(self) -> float:
        """Claim the next slot, returning how long the caller must wait for it."""
        with self._lock:
            now = self._clock()
            tat = now if self._theoretical_arrival is None else max(self._theoretical_arrival, now)
            start = max(now, tat - self._tolerance)
            self._theoretical_arrival = max(tat, start) + self._interval
        return start - now

    async def acquire(self) -> float:
        """Acquire a permit to make a request. Returns the time slept."""
        wait = self.reserve()
        if self.config.max_jitter > 0:
            wait += self._jitter(0.0, self.config.max_jitter)
        if wait > 0:
            await self._sleep(wait)
        return wait


class RateLimitedFetcher:
    """
    Throttled HTTP access shared by every resolution unit.

    One limiter per destination host, created on first use and kept for the
    life of the fetcher. Requests are never retried here; only their rate
    is controlled.
    """

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        *,
        user_agent: str = "breadscan/0.1.0",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
        jitter: Jitter = random.uniform,
    ) -> None:
        self.config = config or RateLimitConfig()
        self._user_agent = user_agent
        self._timeout = timeout
        self._client = client
        self._limiters: dict[str, AsyncRateLimiter] = {}
        self._limiters_lock = threading.Lock()
        self._clock = clock
        self._sleep = sleep
        self._jitter = jitter

    def limiter_for(self, host: str) -> AsyncRateLimiter:
        """Get or create the limiter shared by all callers for ``host``."""
        with self._limiters_lock:
            limiter = self._limiters.get(host)
            if limiter is None:
                limiter = AsyncRateLimiter(
                    self.config, clock=self._clock, sleep=self._sleep, jitter=self._jitter
                )
                self._limiters[host] = limiter
            return limiter

    @property
    def hosts(self) -> frozenset[str]:
        with self._limiters_lock:
            return frozenset(self._limiters)

    async def acquire(self, url: str) -> str:
        """
        Block until ``url``'s host has a free slot.

        Returns:
            The host the permit was granted for

        Raises:
            InvalidURLError: If the URL cannot be parsed; the limiter table is untouched.
        """
        parsed = parse_url(url)
        if parsed is None:
            raise InvalidURLError(url)
        host = parsed.hostname or ""
        await self.limiter_for(host).acquire()
        return host

    @asynccontextmanager
    async def _get_client(self, source: str) -> AsyncIterator[httpx.AsyncClient]:
        """Get or create HTTP client with proper lifecycle."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                headers={"User-Agent": self._user_agent},
                follow_redirects=True,
            )

        try:
            yield self._client
        except httpx.HTTPError as e:
            raise RemoteUnavailableError(
                message=f"HTTP error: {e}",
                source=source,
            ) from e

    async def get(self, url: str, *, accept: str = JSON_ACCEPT, **kwargs: Any) -> httpx.Response:
        """Make a rate-limited GET request; the status code is not checked."""
        host = await self.acquire(url)
        headers = {"Accept": accept, **kwargs.pop("headers", {})}
        async with self._get_client(host) as client:
            return await client.get(url, headers=headers, **kwargs)

    async def get_json(self, url: str) -> Any | None:
        """GET a JSON document. A 404 reads as ``None``."""
        response = await self.get(url, accept=JSON_ACCEPT)
        if response.status_code == 404:
            return None
        self._raise_for_status(response)
        try:
            return response.json()
        except ValueError as e:
            raise ResolutionError(f"Invalid JSON from {url}: {e}") from e

    async def get_bytes(self, url: str, *, accept: str = "*/*") -> bytes | None:
        """GET a raw body. A 404 reads as ``None``."""
        response = await self.get(url, accept=accept)
        if response.status_code == 404:
            return None
        self._raise_for_status(response)
        return response.content

    async def get_text(self, url: str, *, accept: str = HTML_ACCEPT) -> str:
        """GET a page as text; any non-2xx status is an error."""
        response = await self.get(url, accept=accept)
        self._raise_for_status(response)
        return response.text

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if not response.is_success:
            raise RemoteUnavailableError(
                message=f"HTTP {response.status_code} from {response.request.url}",
                source=response.request.url.host,
                status_code=response.status_code,
            )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "RateLimitedFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


@dataclass
class ScanResult:
    """What an adapter found at one scan root."""

    references: list[DependencyReference] = field(default_factory=list)
    sub_roots: list[Path] = field(default_factory=list)
    # Contributions read directly from the root (e.g. a bread manifest)
    weights: WorkingWeights | None = None


class AbstractEcosystem(ABC):
    """
    Abstract base class for all ecosystem adapters.

    An adapter turns a scan root into dependency references, and knows how
    to ask its registry for the candidate repository URLs of one reference.
    The resolution workflow itself (cache, canonicalization, recording)
    lives in :class:`breadscan.resolution.unit.ResolutionUnit`.
    """

    # Class-level configuration (to be overridden by subclasses)
    ECOSYSTEM: ClassVar[Ecosystem]
    POLICY: ClassVar[SelectionPolicy] = SelectionPolicy.FIRST_FORGE

    @property
    def ecosystem(self) -> Ecosystem:
        return self.ECOSYSTEM

    @property
    def policy(self) -> SelectionPolicy:
        return self.POLICY

    def reference(self, identifier: str, **kwargs: Any) -> DependencyReference:
        """Build a reference tagged with this adapter's ecosystem."""
        return DependencyReference(ecosystem=self.ECOSYSTEM, identifier=identifier, **kwargs)

    def cache_key(self, reference: DependencyReference) -> str | None:
        """Key for the raw candidate list; None disables caching for this reference."""
        return CacheKeys.registry(self.ECOSYSTEM, reference.identifier)

    async def fetch_metadata(
        self,
        reference: DependencyReference,
        context: ResolutionContext,
    ) -> Any | None:
        """One registry call (or command) for ``reference``. None means not found."""
        return None

    def parse_candidates(self, reference: DependencyReference, payload: Any | None) -> list[str]:
        """Extract candidate repository URLs, in source order, from fetched metadata."""
        return []

    async def fallback_candidates(
        self,
        reference: DependencyReference,
        context: ResolutionContext,
    ) -> list[str]:
        """Second-stage candidates, searched only when no primary candidate was recognized."""
        return []

    # Abstract methods
    @abstractmethod
    async def scan(self, root: Path) -> ScanResult:
        """
        Read the dependency references declared at ``root``.

        Returns an empty result when there is nothing to read. Raises
        ManifestError when a manifest exists but cannot be parsed.
        """
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
