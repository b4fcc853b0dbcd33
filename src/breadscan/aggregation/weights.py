"""Merging working weights from many sources into destination configurations."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from breadscan.core.models import DEFAULT_WEIGHT, AccountWeight, Weights, WorkingWeights

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PruneOptions:
    """Which absent entries to delete from a destination."""

    accounts: bool = False
    projects: bool = False
    # Prune even when a source did not complete and may have missed entries
    allow_partial: bool = False

    @property
    def requested(self) -> bool:
        return self.accounts or self.projects


class WeightAggregator:
    """
    Combines WorkingWeights from independent sources and applies them to
    destination state.

    Merging is sequential: an explicit weight in a later source overwrites
    the running value, a bare (``None``) contribution never blanks one out.
    """

    def __init__(self, default_weight: int = DEFAULT_WEIGHT) -> None:
        self.default_weight = default_weight

    def combine(self, sources: Iterable[WorkingWeights]) -> WorkingWeights:
        """Merge sources in order into a new WorkingWeights."""
        merged = WorkingWeights()
        for source in sources:
            merged.merge(source)
        return merged

    def apply(
        self,
        merged: WorkingWeights,
        state: Weights,
        prune: PruneOptions | None = None,
    ) -> Weights:
        """
        Upsert ``merged`` into a copy of a destination's ``state``.

        Existing keys change only when ``merged`` carries an explicit weight
        (or a memo); new keys get their explicit weight or the default.
        Absent keys are removed only as requested by ``prune``, and only if
        every source behind ``merged`` completed.
        """
        prune = prune or PruneOptions()
        accounts = {k: v.model_copy() for k, v in state.accounts.items()}
        projects = dict(state.projects)

        for account_id, entry in merged.accounts.items():
            current = accounts.get(account_id)
            if current is None:
                weight = entry.weight if entry.weight is not None else self.default_weight
                accounts[account_id] = AccountWeight(weight=weight, memo=entry.memo or None)
                continue
            if entry.weight is not None:
                current.weight = entry.weight
            if entry.memo:
                current.memo = entry.memo

        for url, weight in merged.projects.items():
            if weight is not None:
                projects[url] = weight
            elif url not in projects:
                projects[url] = self.default_weight

        if prune.requested:
            if merged.complete or prune.allow_partial:
                if prune.accounts:
                    accounts = self._prune(accounts, merged.accounts, "accounts")
                if prune.projects:
                    projects = self._prune(projects, merged.projects, "projects")
            else:
                logger.warning(
                    f"Not pruning: {merged.failures} lookups failed in this run, so absent "
                    f"entries may simply not have been reached (use --prune-on-partial to force)"
                )

        return Weights(accounts=accounts, projects=projects)

    @staticmethod
    def _prune(current: dict, keep: dict, kind: str) -> dict:
        removed = [key for key in current if key not in keep]
        if removed:
            logger.info(f"Pruning {len(removed)} {kind}: {', '.join(sorted(removed))}")
        return {key: value for key, value in current.items() if key in keep}
