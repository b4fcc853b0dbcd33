"""Combining working weights and writing them to destinations."""

from .destinations import Destination, FileDestination, RemoteDestination, StreamDestination
from .remote import DonationAccountClient
from .sources import FileSource, ProjectSource, RemoteSource, SystemSource, WeightSource
from .weights import PruneOptions, WeightAggregator

__all__ = [
    # Aggregation
    "PruneOptions",
    "WeightAggregator",
    # Sources
    "FileSource",
    "ProjectSource",
    "RemoteSource",
    "SystemSource",
    "WeightSource",
    # Destinations
    "Destination",
    "FileDestination",
    "RemoteDestination",
    "StreamDestination",
    # Remote account
    "DonationAccountClient",
]
