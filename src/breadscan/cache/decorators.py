"""Memoizing async lookups in the persistent cache."""

import logging
from collections.abc import Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar

P = ParamSpec("P")
R = TypeVar("R")

logger = logging.getLogger(__name__)


def is_string_list(value: Any) -> bool:
    """Shape check for cached candidate and link lists."""
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def cached(
    key_builder: Callable[..., str],
    *,
    validate: Callable[[Any], bool] | None = None,
    cache_none: bool = False,
):
    """
    Decorator memoizing an async method's result in ``self._cache``.

    Args:
        key_builder: Takes the decorated method's arguments (without self)
                    and returns the cache key.
        validate: Shape check for entries read back. An entry failing it was
                  written by something else and is recomputed and overwritten.
        cache_none: Whether to store None results (default False).

    Exceptions are never stored, so a failed lookup is retried next run.

    Usage:
        @cached(CacheKeys.canonical, validate=is_string_list)
        async def discover_canonical_links(self, url: str) -> list[str]:
            ...
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        async def wrapper(self, *args: P.args, **kwargs: P.kwargs) -> R:
            cache = getattr(self, "_cache", None)
            if cache is None:
                return await func(self, *args, **kwargs)

            key = key_builder(*args, **kwargs)
            hit = await cache.get(key)
            if hit is not None:
                if validate is None or validate(hit):
                    return hit
                logger.debug(f"Discarding malformed cache entry {key}")

            result = await func(self, *args, **kwargs)
            if result is not None or cache_none:
                await cache.set(key, result)
            return result

        return wrapper

    return decorator
