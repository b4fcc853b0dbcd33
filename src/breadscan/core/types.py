"""Core enums and type definitions."""

from enum import StrEnum


class Ecosystem(StrEnum):
    """Package ecosystems that dependency references originate from."""

    # Project manifests
    RUST = "rust"
    PYTHON = "python"
    JAVASCRIPT = "javascript"
    JAVA = "java"
    GOLANG = "golang"
    BREAD = "bread"

    # Operating system package managers
    DEBIAN = "debian"
    ARCH = "arch"


class SelectionPolicy(StrEnum):
    """How a unit picks a project URL out of its candidate list."""

    # Only a recognized forge match (or a discovered canonical forge link) counts
    FIRST_FORGE = "first_forge"
    # Like FIRST_FORGE, but fall back to the first syntactically normalized candidate
    CANONICAL_FALLBACK = "canonical_fallback"


class MatchKind(StrEnum):
    """How a canonical project URL was obtained."""

    FORGE = "forge"
    DISCOVERED = "discovered"
    SYNTACTIC = "syntactic"


class UnitState(StrEnum):
    """Lifecycle of a single resolution unit."""

    PENDING = "pending"
    CACHE_CHECK = "cache_check"
    CACHE_HIT = "cache_hit"
    CACHE_MISS = "cache_miss"
    FETCHING = "fetching"
    PARSING = "parsing"
    CANONICALIZING = "canonicalizing"
    RECORDED = "recorded"
    DROPPED = "dropped"
