"""Resolution of a single dependency reference."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from breadscan.cache.decorators import is_string_list
from breadscan.core.normalization import dedupe_candidates, explicit_project_url
from breadscan.core.types import SelectionPolicy, UnitState

if TYPE_CHECKING:
    from breadscan.core.models import DependencyReference, WorkingWeights
    from breadscan.resolution.base import AbstractEcosystem
    from breadscan.resolution.context import ResolutionContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnitOutcome:
    """Terminal state of a unit and the project URL it recorded, if any."""

    reference: DependencyReference
    state: UnitState
    url: str | None = None
    error: str | None = None

    @property
    def recorded(self) -> bool:
        return self.state == UnitState.RECORDED


class ResolutionUnit:
    """
    Resolves one dependency reference to at most one project URL.

    Pending -> CacheCheck -> (CacheHit | CacheMiss -> Fetching -> Parsing)
    -> Canonicalizing -> Recorded | Dropped.

    Every error is caught at :meth:`run` and turns the unit into Dropped;
    siblings and the parent root never see it.
    """

    def __init__(
        self,
        reference: DependencyReference,
        ecosystem: AbstractEcosystem,
        context: ResolutionContext,
        weights: WorkingWeights,
    ) -> None:
        self.reference = reference
        self.ecosystem = ecosystem
        self.context = context
        self.weights = weights
        self.state = UnitState.PENDING
        self.transitions: list[UnitState] = [self.state]

    def _enter(self, state: UnitState) -> None:
        self.state = state
        self.transitions.append(state)

    async def run(self) -> UnitOutcome:
        """Resolve and record; never raises."""
        try:
            url = await self._resolve()
        except Exception as e:
            logger.warning(f"Error processing dependency {self.reference.label}: {e!r}")
            self.weights.record_failure()
            self._enter(UnitState.DROPPED)
            return UnitOutcome(self.reference, self.state, error=str(e))

        if url is None:
            logger.info(f"No repository URL found for {self.reference.label}")
            self._enter(UnitState.DROPPED)
            return UnitOutcome(self.reference, self.state)

        self.weights.add_project(url)
        self._enter(UnitState.RECORDED)
        logger.debug(f"Recorded {url} for {self.reference.label}")
        return UnitOutcome(self.reference, self.state, url=url)

    async def _resolve(self) -> str | None:
        reference = self.reference

        # The manifest named the repository: no network, no cache
        if reference.url:
            self._enter(UnitState.CANONICALIZING)
            return explicit_project_url(reference.url)

        candidates = await self._candidates()

        self._enter(UnitState.CANONICALIZING)
        url = await self._select(candidates, self.ecosystem.policy)
        if url is not None:
            return url

        fallback = await self.ecosystem.fallback_candidates(reference, self.context)
        return await self._select(fallback, SelectionPolicy.FIRST_FORGE)

    async def _candidates(self) -> list[str]:
        """Raw candidate URLs, from the cache or from one registry call."""
        cache = self.context.cache
        key = self.ecosystem.cache_key(self.reference)

        self._enter(UnitState.CACHE_CHECK)
        if cache is not None and key is not None:
            cached = await cache.get(key)
            if is_string_list(cached):
                self._enter(UnitState.CACHE_HIT)
                return cached
            if cached is not None:
                logger.debug(f"Ignoring malformed cache entry {key}")

        self._enter(UnitState.CACHE_MISS)
        self._enter(UnitState.FETCHING)
        payload = await self.ecosystem.fetch_metadata(self.reference, self.context)

        self._enter(UnitState.PARSING)
        candidates = self.ecosystem.parse_candidates(self.reference, payload)

        # Stored before canonicalizing so a canonicalization change needs no refetch
        if cache is not None and key is not None:
            await cache.set(key, candidates)
        return candidates

    async def _select(self, candidates: list[str], policy: SelectionPolicy) -> str | None:
        """First recognized candidate wins; under CANONICAL_FALLBACK the first parseable one."""
        canonicalizer = self.context.canonicalizer
        fallback = None
        for candidate in dedupe_candidates(candidates):
            match = await canonicalizer.maybe_canonicalize(candidate)
            if match is None:
                continue
            if match.recognized:
                return match.url
            if fallback is None:
                fallback = match.url

        if policy is SelectionPolicy.CANONICAL_FALLBACK:
            return fallback
        return None
