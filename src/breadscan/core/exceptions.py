"""Custom exception hierarchy for breadscan."""

from typing import Any


class BreadScanError(Exception):
    """Base exception for all breadscan errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidURLError(BreadScanError):
    """A URL could not be parsed or has no host."""

    def __init__(self, url: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(f"Invalid URL: {url!r}", details)
        self.url = url


class ResolutionError(BreadScanError):
    """Failed to resolve a dependency to a repository."""

    pass


class RemoteUnavailableError(ResolutionError):
    """A registry, web page or remote API could not be reached or answered non-2xx."""

    def __init__(
        self,
        message: str,
        source: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.source = source
        self.status_code = status_code


class ManifestError(BreadScanError):
    """A dependency manifest exists but could not be parsed."""

    pass


class SourceError(BreadScanError):
    """An explicitly selected weight source could not be read."""

    pass


class DestinationError(BreadScanError):
    """A destination could not be loaded or persisted."""

    pass


class MissingConfigurationError(BreadScanError):
    """Required configuration (endpoint, credentials) is absent."""

    pass
