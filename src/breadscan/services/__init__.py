"""Service layer for running scans."""

from .scan import ScanReport, ScanService

__all__ = [
    "ScanReport",
    "ScanService",
]
