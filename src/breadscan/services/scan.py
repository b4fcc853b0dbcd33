"""Scan service for orchestrating the sources → merge → destinations flow."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from breadscan.aggregation.weights import PruneOptions, WeightAggregator

if TYPE_CHECKING:
    from breadscan.aggregation.destinations import Destination
    from breadscan.aggregation.sources import WeightSource
    from breadscan.core.models import Weights, WorkingWeights

logger = logging.getLogger(__name__)


@dataclass
class ScanReport:
    """What a run merged and what it wrote where."""

    merged: WorkingWeights
    written: dict[str, Weights] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return self.merged.complete


class ScanService:
    """
    Runs a full scan.

    1. Load every source concurrently
    2. Merge them in the order given
    3. Load every destination
    4. Apply the merge to each destination's state
    5. Persist each destination

    Any failure up to step 4 aborts before anything is written.
    """

    def __init__(self, aggregator: WeightAggregator | None = None) -> None:
        self._aggregator = aggregator or WeightAggregator()

    async def run(
        self,
        sources: Sequence[WeightSource],
        destinations: Sequence[Destination],
        prune: PruneOptions | None = None,
    ) -> ScanReport:
        start = time.monotonic()

        loaded = await asyncio.gather(*(source.load() for source in sources))
        for source, weights in zip(sources, loaded):
            logger.info(f"Loaded {source.name}: {weights!r}")
        merged = self._aggregator.combine(loaded)

        states = [await destination.load() for destination in destinations]
        updated = [self._aggregator.apply(merged, state, prune) for state in states]

        report = ScanReport(merged=merged)
        for destination, weights in zip(destinations, updated):
            await destination.save(weights)
            report.written[destination.name] = weights

        duration = time.monotonic() - start
        logger.info(f"Scan completed in {duration:.2f}s: {merged!r}")
        return report
