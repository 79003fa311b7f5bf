"""Shared httpx client handling for provider services.

Each service keeps one ``httpx.AsyncClient`` with connection pooling,
created on first use. Transport and HTTP errors surface as
``ExternalServiceError``. Nothing is retried.
"""

import logging
from typing import Any

import httpx

from route_eats.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


class SharedClientMixin:
    """Lazily created shared ``httpx.AsyncClient`` plus JSON helpers."""

    _timeout: float = 15.0
    _headers: dict[str, str] = {}
    _transport: httpx.AsyncBaseTransport | None = None
    _client: httpx.AsyncClient | None = None

    @property
    def provider_name(self) -> str:
        return type(self).__name__

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers=self._headers,
                transport=self._transport,
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request_json(
        self,
        method: str,
        url: str,
        *,
        params: dict | None = None,
        json: dict | None = None,
        headers: dict | None = None,
    ) -> Any:
        client = self._get_client()
        try:
            response = await client.request(method, url, params=params, json=json, headers=headers)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as exc:
            logger.warning(f"[HTTP] {self.provider_name} {method} failed: {exc}")
            raise ExternalServiceError(f"{self.provider_name} request failed") from exc
        except ValueError as exc:
            raise ExternalServiceError(f"{self.provider_name} returned invalid JSON") from exc
