"""Persistent lookup cache."""

from .client import AsyncDiskCache
from .decorators import cached, is_string_list
from .keys import CacheKeys

__all__ = [
    "AsyncDiskCache",
    "CacheKeys",
    "cached",
    "is_string_list",
]
