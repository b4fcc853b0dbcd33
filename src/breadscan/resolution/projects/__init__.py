"""Adapters for dependency manifests found in a project tree."""

from .base import ProjectEcosystem, maybe_read
from .bread import BreadManifestEcosystem
from .golang import GolangEcosystem
from .java import JavaEcosystem
from .javascript import JavaScriptEcosystem
from .python import PythonEcosystem
from .rust import RustEcosystem

__all__ = [
    "BreadManifestEcosystem",
    "GolangEcosystem",
    "JavaEcosystem",
    "JavaScriptEcosystem",
    "ProjectEcosystem",
    "PythonEcosystem",
    "RustEcosystem",
    "maybe_read",
]
