"""Adapters for operating system package managers."""

from .arch import ArchEcosystem
from .base import CommandResult, SystemEcosystem, run_command
from .debian import DebianEcosystem

__all__ = [
    "ArchEcosystem",
    "CommandResult",
    "DebianEcosystem",
    "SystemEcosystem",
    "run_command",
]
