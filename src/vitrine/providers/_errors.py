"""Shared provider-side error helpers.

Transport failures are mapped to ``AdapterTransientError`` with a structured
code so retry logic never has to inspect message text. HTTP failures become
``AdapterApplicationError`` carrying whatever message the provider sent back.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import httpx

from vitrine.errors import (
    AdapterApplicationError,
    AdapterError,
    AdapterTransientError,
    walk_exception_chain,
)

if TYPE_CHECKING:
    from collections.abc import Callable

# Codes for transport failures that are *not* retried.
CODE_REFUSED = "ECONNREFUSED"
CODE_NETWORK = "ENETWORK"


def transport_code(exc: BaseException) -> str:
    """Classify an httpx transport failure into a network error code."""
    if isinstance(exc, httpx.ConnectTimeout):
        return "ETIMEDOUT"
    if isinstance(exc, httpx.TimeoutException):
        return "ECONNABORTED"
    if isinstance(exc, (httpx.ReadError, httpx.WriteError, httpx.RemoteProtocolError)):
        return "ECONNRESET"
    for e in walk_exception_chain(exc):
        if isinstance(e, ConnectionResetError):
            return "ECONNRESET"
    if isinstance(exc, httpx.ConnectError):
        return CODE_REFUSED
    return CODE_NETWORK


def wrap_transport_error(exc: BaseException, *, provider: str) -> AdapterError:
    """Map an httpx exception into an adapter error with a stable code."""
    if isinstance(exc, asyncio.CancelledError):
        raise exc
    if isinstance(exc, AdapterError):
        if exc.provider is None:
            exc.provider = provider
        return exc
    if isinstance(exc, httpx.TransportError):
        code = transport_code(exc)
        cause = str(exc) or type(exc).__name__
        return AdapterTransientError(
            f"{cause} ({code})", provider=provider, code=code
        )
    return AdapterApplicationError(
        str(exc) or type(exc).__name__, provider=provider
    )


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def json_error_message(*keys: str) -> Callable[[httpx.Response], str | None]:
    """Build an extractor that returns the first non-empty message under *keys*.

    Nested ``{"error": {"message": ...}}`` bodies are unwrapped as well.
    """

    def extract(response: httpx.Response) -> str | None:
        body = _json_or_none(response)
        if not isinstance(body, dict):
            return response.text or None
        for key in keys:
            value = body.get(key)
            if isinstance(value, dict):
                value = value.get("message") or value.get("detail")
            if value:
                return str(value)
        return response.text or None

    return extract


def raw_text_message(response: httpx.Response) -> str | None:
    """Use the raw response body as the message."""
    return response.text or None


def application_error(
    response: httpx.Response,
    *,
    provider: str,
    extract: Callable[[httpx.Response], str | None],
) -> AdapterApplicationError:
    """Build an application error for a non-2xx response."""
    message = extract(response) or (
        f"{provider} request failed (status={response.status_code})"
    )
    return AdapterApplicationError(
        message, provider=provider, status_code=response.status_code
    )
