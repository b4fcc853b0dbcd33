"""YAML (de)serialization of the versioned weighted configuration document."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import VersionedConfig


def parse_config(text: str | bytes) -> VersionedConfig:
    """
    Parse a ``V1: {...}`` document. An empty document is an empty V1 config.

    Raises:
        ValueError: If the text is not YAML or does not have the V1 shape.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"invalid YAML: {e}") from e
    if data is None:
        return VersionedConfig()
    if not isinstance(data, dict) or set(data) != {"V1"}:
        raise ValueError("expected a document with a single V1 key")
    try:
        return VersionedConfig.model_validate({"V1": data["V1"] or {}})
    except ValidationError as e:
        raise ValueError(str(e)) from e


def dump_config(config: VersionedConfig) -> str:
    return yaml.safe_dump(config.to_document(), sort_keys=False, default_flow_style=False)


def read_config(path: Path) -> VersionedConfig | None:
    """Read a config file; None when the file does not exist."""
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return None
    return parse_config(raw)


def write_config(path: Path, config: VersionedConfig) -> None:
    """Replace ``path`` atomically: readers see the old or the new file, never a mix."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(dump_config(config))
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
