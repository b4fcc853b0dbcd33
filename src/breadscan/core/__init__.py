"""Core types, models, and utilities."""

from .documents import dump_config, parse_config, read_config, write_config
from .exceptions import (
    BreadScanError,
    DestinationError,
    InvalidURLError,
    ManifestError,
    MissingConfigurationError,
    RemoteUnavailableError,
    ResolutionError,
    SourceError,
)
from .models import (
    DEFAULT_WEIGHT,
    AccountEntry,
    AccountWeight,
    ConfigV1,
    DependencyReference,
    VersionedConfig,
    Weights,
    WorkingWeights,
)
from .normalization import (
    clean_repository_url,
    dedupe_candidates,
    explicit_project_url,
    forge_project_url,
    is_forge_host,
    parse_url,
    strip_url,
)
from .types import Ecosystem, MatchKind, SelectionPolicy, UnitState

__all__ = [
    # Types
    "Ecosystem",
    "MatchKind",
    "SelectionPolicy",
    "UnitState",
    # Models
    "DEFAULT_WEIGHT",
    "AccountEntry",
    "AccountWeight",
    "ConfigV1",
    "DependencyReference",
    "VersionedConfig",
    "Weights",
    "WorkingWeights",
    # Documents
    "dump_config",
    "parse_config",
    "read_config",
    "write_config",
    # Normalization
    "clean_repository_url",
    "dedupe_candidates",
    "explicit_project_url",
    "forge_project_url",
    "is_forge_host",
    "parse_url",
    "strip_url",
    # Exceptions
    "BreadScanError",
    "DestinationError",
    "InvalidURLError",
    "ManifestError",
    "MissingConfigurationError",
    "RemoteUnavailableError",
    "ResolutionError",
    "SourceError",
]
