"""Domain models for dependency references and donation weights."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, model_validator

from .types import Ecosystem

DEFAULT_WEIGHT = 100


class DependencyReference(BaseModel):
    """A raw dependency reference produced by an ecosystem adapter.

    Exactly one of the shapes applies:
    - ``url`` set: the manifest named the repository directly (git dependency,
      go module path, npm ``repository`` field). Recorded without any lookup.
    - ``path`` set: a local path dependency, scanned recursively as a sub-root.
    - neither: resolved through the ecosystem's registry by ``identifier``.
    """

    model_config = ConfigDict(frozen=True)

    ecosystem: Ecosystem = Field(..., description="Ecosystem discriminant")
    identifier: str = Field(..., min_length=1, description="Package name within the ecosystem")
    url: str | None = Field(default=None, description="Explicit repository URL")
    path: Path | None = Field(default=None, description="Local path dependency")
    version: str | None = Field(default=None, description="Version, where the registry needs it")
    homepage: str | None = Field(default=None, description="Project homepage from local metadata")

    @model_validator(mode="after")
    def validate_shape(self) -> Self:
        if self.url is not None and self.path is not None:
            raise ValueError(f"Dependency {self.identifier} has both a url and a path")
        return self

    @property
    def label(self) -> str:
        """Identity used in log messages."""
        return f"{self.ecosystem}:{self.identifier}"


@dataclass
class AccountEntry:
    """A donation account contribution inside WorkingWeights."""

    memo: str = ""
    weight: int | None = None


class WorkingWeights:
    """In-memory aggregation target for one scan root or source.

    ``None`` as a weight means "seen, no explicit weight". Writes within one
    root overwrite; combining separate roots goes through :meth:`merge`, which
    never lets a bare contribution blank out a known weight.
    """

    def __init__(self) -> None:
        self.accounts: dict[str, AccountEntry] = {}
        self.projects: dict[str, int | None] = {}
        self.failures: int = 0
        self._lock = threading.Lock()

    @property
    def complete(self) -> bool:
        """Whether every unit that contributed here finished without an error."""
        return self.failures == 0

    def add_project(self, url: str, weight: int | None = None) -> None:
        with self._lock:
            self.projects[url] = weight

    def add_account(self, account_id: str, memo: str = "", weight: int | None = None) -> None:
        with self._lock:
            self.accounts[account_id] = AccountEntry(memo=memo, weight=weight)

    def record_failure(self) -> None:
        with self._lock:
            self.failures += 1

    def merge(self, other: WorkingWeights) -> None:
        """Fold ``other`` into this map; explicit values win, ``None`` keeps ours."""
        with self._lock:
            for account_id, entry in other.accounts.items():
                current = self.accounts.get(account_id)
                if current is None:
                    self.accounts[account_id] = AccountEntry(entry.memo, entry.weight)
                    continue
                if entry.weight is not None:
                    current.weight = entry.weight
                if entry.memo:
                    current.memo = entry.memo
            for url, weight in other.projects.items():
                if weight is not None or url not in self.projects:
                    self.projects[url] = weight
            self.failures += other.failures

    def __len__(self) -> int:
        return len(self.accounts) + len(self.projects)

    def __repr__(self) -> str:
        return (
            f"WorkingWeights(accounts={len(self.accounts)}, "
            f"projects={len(self.projects)}, failures={self.failures})"
        )


# ============================================================================
# Persisted / remote documents
# ============================================================================


class AccountWeight(BaseModel):
    """Weight (and optional memo) of a donation account at a destination."""

    weight: int = Field(..., ge=0)
    memo: str | None = None


class Weights(BaseModel):
    """Accounts and projects with their weights."""

    accounts: dict[str, AccountWeight] = Field(default_factory=dict)
    projects: dict[str, NonNegativeInt] = Field(default_factory=dict)

    def to_working(self) -> WorkingWeights:
        """Every entry here carries an explicit weight."""
        working = WorkingWeights()
        for account_id, account in self.accounts.items():
            working.add_account(account_id, memo=account.memo or "", weight=account.weight)
        for url, weight in self.projects.items():
            working.add_project(url, weight)
        return working


class ConfigV1(BaseModel):
    """Version 1 of the weighted configuration document."""

    disabled: bool = False
    weights: Weights = Field(default_factory=Weights)


class VersionedConfig(BaseModel):
    """Version-tagged configuration document, e.g. ``V1: {weights: ...}``."""

    model_config = ConfigDict(populate_by_name=True)

    v1: ConfigV1 = Field(default_factory=ConfigV1, alias="V1")

    @property
    def latest(self) -> ConfigV1:
        return self.v1

    def to_document(self) -> dict:
        """Serializable form with file-style accounts (weight only)."""
        weights = self.v1.weights
        return {
            "V1": {
                "disabled": self.v1.disabled,
                "weights": {
                    "accounts": {
                        account_id: {"weight": account.weight}
                        for account_id, account in sorted(weights.accounts.items())
                    },
                    "projects": dict(sorted(weights.projects.items())),
                },
            }
        }
