"""Dependency resolution: adapters, rate-limited fetching, canonicalization and orchestration."""

from .base import (
    AbstractEcosystem,
    AsyncRateLimiter,
    RateLimitConfig,
    RateLimitedFetcher,
    ScanResult,
)
from .canonical import CanonicalMatch, Canonicalizer
from .context import ResolutionContext
from .orchestrator import ResolutionOrchestrator
from .registry import EcosystemRegistry
from .unit import ResolutionUnit, UnitOutcome

__all__ = [
    # Base classes
    "AbstractEcosystem",
    "ScanResult",
    # Fetching
    "AsyncRateLimiter",
    "RateLimitConfig",
    "RateLimitedFetcher",
    # Canonicalization
    "CanonicalMatch",
    "Canonicalizer",
    # Orchestration
    "EcosystemRegistry",
    "ResolutionContext",
    "ResolutionOrchestrator",
    "ResolutionUnit",
    "UnitOutcome",
]
