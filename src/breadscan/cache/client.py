"""Async on-disk cache with JSON serialization."""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class AsyncDiskCache:
    """
    Durable key/value store, one JSON file per key.

    Entries have no TTL: once written they are trusted until :meth:`clear`.
    The cache is advisory. Misses, unreadable files and corrupt payloads all
    read as ``None``, and failed writes are logged and dropped, so callers
    always keep a path that recomputes the value.
    """

    def __init__(self, directory: Path | str) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    async def connect(self) -> None:
        """Create the cache directory."""
        try:
            await asyncio.to_thread(self._directory.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Cache directory {self._directory} unavailable: {e}")

    async def close(self) -> None:
        """Nothing is held open between operations."""

    def _path(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self._directory / digest[:2] / f"{digest}.json"

    def _read(self, key: str) -> Any | None:
        try:
            raw = self._path(key).read_bytes()
        except FileNotFoundError:
            return None
        entry = json.loads(raw)
        if not isinstance(entry, dict) or entry.get("key") != key:
            raise ValueError("entry does not belong to this key")
        return entry.get("value")

    def _write(self, key: str, value: Any) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps({"key": key, "value": value})
        fd, tmp = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    async def get(self, key: str) -> Any | None:
        """Get a value from cache."""
        try:
            value = await asyncio.to_thread(self._read, key)
        except (OSError, ValueError) as e:
            logger.debug(f"Ignoring unreadable cache entry {key}: {e}")
            return None
        if value is None:
            logger.debug(f"Cache miss: {key}")
        return value

    async def set(self, key: str, value: Any) -> None:
        """Set a value in cache. Failures never reach the caller."""
        try:
            await asyncio.to_thread(self._write, key, value)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Failed to write cache entry {key}: {e}")

    async def clear(self) -> None:
        """Remove every entry."""
        await asyncio.to_thread(shutil.rmtree, self._directory, True)
        logger.info(f"Cleared cache at {self._directory}")
        await self.connect()

    async def __aenter__(self) -> "AsyncDiskCache":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
