"""HTTP client for the remote donation account."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from pydantic import ValidationError

from breadscan.config import BreadScanSettings
from breadscan.core.exceptions import RemoteUnavailableError
from breadscan.core.models import Weights

logger = logging.getLogger(__name__)


class DonationAccountClient:
    """
    Reads and replaces the weights of a remote donation account.

    ``GET`` returns ``{accounts: {id: {weight, memo}}, projects: {url: weight}}``
    and ``POST`` takes the same shape back. Requests carry the account token
    as a bearer token.
    """

    def __init__(
        self,
        url: str,
        token: str,
        *,
        timeout: float = 30.0,
        user_agent: str = "breadscan/0.1.0",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self._token = token
        self._timeout = timeout
        self._user_agent = user_agent
        self._client = client

    @classmethod
    def from_settings(cls, settings: BreadScanSettings) -> "DonationAccountClient":
        """
        Raises:
            MissingConfigurationError: If the endpoint or token is not configured.
        """
        url, token = settings.require_account()
        return cls(url, token, timeout=settings.http_timeout, user_agent=settings.user_agent)

    @asynccontextmanager
    async def _get_client(self) -> AsyncIterator[httpx.AsyncClient]:
        """Get or create HTTP client with proper lifecycle."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                headers={
                    "User-Agent": self._user_agent,
                    "Accept": "application/json",
                },
            )

        try:
            yield self._client
        except httpx.HTTPError as e:
            raise RemoteUnavailableError(
                message=f"HTTP error: {e}",
                source=self.url,
            ) from e

    @property
    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    async def get_weights(self) -> Weights:
        """Fetch the account's current accounts and projects."""
        async with self._get_client() as client:
            response = await client.get(self.url, headers=self._auth_headers)
        self._raise_for_status(response)
        try:
            return Weights.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise RemoteUnavailableError(
                message=f"Unexpected response from donation account: {e}",
                source=self.url,
                status_code=response.status_code,
            ) from e

    async def put_weights(self, weights: Weights) -> None:
        """Replace the account's weights."""
        async with self._get_client() as client:
            response = await client.post(
                self.url,
                headers=self._auth_headers,
                json=weights.model_dump(mode="json", exclude_none=True),
            )
        self._raise_for_status(response)
        logger.debug(f"Posted {len(weights.accounts)} accounts and {len(weights.projects)} projects")

    def _raise_for_status(self, response: httpx.Response) -> None:
        if not response.is_success:
            raise RemoteUnavailableError(
                message=f"Donation account answered HTTP {response.status_code}",
                source=self.url,
                status_code=response.status_code,
            )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "DonationAccountClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
