"""breadscan - find the upstream repositories of dependencies and weight them for donations."""

from breadscan.aggregation import PruneOptions, WeightAggregator
from breadscan.client import BreadScanClient
from breadscan.config import BreadScanSettings, get_settings
from breadscan.core.models import DependencyReference, VersionedConfig, Weights, WorkingWeights
from breadscan.core.types import Ecosystem, MatchKind, SelectionPolicy, UnitState

__version__ = "0.1.0"
__all__ = [
    # Client
    "BreadScanClient",
    # Settings
    "BreadScanSettings",
    "get_settings",
    # Types
    "Ecosystem",
    "MatchKind",
    "SelectionPolicy",
    "UnitState",
    # Models
    "DependencyReference",
    "VersionedConfig",
    "Weights",
    "WorkingWeights",
    # Aggregation
    "PruneOptions",
    "WeightAggregator",
    # Version
    "__version__",
]
