"""Shared httpx plumbing for the HTTP-backed providers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar

import httpx

from vitrine.errors import AdapterApplicationError
from vitrine.providers._errors import (
    application_error,
    json_error_message,
    wrap_transport_error,
)

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class HTTPProvider:
    """Lazily creates one ``httpx.AsyncClient`` and maps its failures.

    Subclasses set ``name`` and may override ``error_message`` to read the
    provider's own error field out of a failed response.
    """

    name: ClassVar[str] = "http"
    error_message: ClassVar[Callable[[httpx.Response], str | None]] = staticmethod(
        json_error_message("message", "error")
    )

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Use *client* if given, otherwise build one on first request."""
        self._client = client
        self._transport = transport
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                transport=self._transport, follow_redirects=True
            )
        return self._client

    async def _post(
        self,
        url: str,
        *,
        json: dict[str, Any],
        headers: dict[str, str],
        timeout: float,
    ) -> httpx.Response:
        """POST and return a 2xx response, raising ``AdapterError`` otherwise."""
        try:
            response = await self._get_client().post(
                url, json=json, headers=headers, timeout=timeout
            )
        except httpx.HTTPError as exc:
            raise wrap_transport_error(exc, provider=self.name) from exc

        if not response.is_success:
            raise application_error(
                response, provider=self.name, extract=type(self).error_message
            )
        return response

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise AdapterApplicationError(
                f"{self.name} returned a non-JSON response",
                provider=self.name,
                status_code=response.status_code,
            ) from exc

    async def aclose(self) -> None:
        """Close the client if this provider created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            logger.debug("Closed HTTP client for %s", self.name)
        self._client = None
