"""Shared logging helpers for breadscan."""

from __future__ import annotations

import logging


def configure_logging(*, level: int | str = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Output goes to stderr so that a document printed to stdout stays clean.
    Pass ``force=True`` to reconfigure during tests or specialised entry points.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    # Request lines from httpx drown out the dependency-level messages
    logging.getLogger("httpx").setLevel(logging.WARNING)
