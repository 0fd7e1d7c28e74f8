"""Replicate provider: paid predictions with a server-side wait hint."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from vitrine.errors import AdapterApplicationError, ResponseShapeMismatch
from vitrine.providers._errors import json_error_message
from vitrine.providers._http import HTTPProvider

if TYPE_CHECKING:
    import httpx

    from vitrine.providers.base import ProviderKind
    from vitrine.retry import RetryPolicy

TIMEOUT_S = 70.0
PREDICTIONS_URL = "https://api.replicate.com/v1/predictions"
#: Seconds the server may hold the request open before answering.
WAIT_HINT_S = 60


def _url_from_mapping(item: Any) -> str | None:
    if not isinstance(item, dict):
        return None
    value = item.get("url") or item.get("href")
    return value if isinstance(value, str) and value else None


def normalize_output(output: Any) -> str | None:
    """Reduce the prediction ``output`` field to one URL.

    Accepted shapes: a plain URL string, a list of URL strings or
    ``{url|href}`` objects (first entry wins), or a single such object.
    """
    if isinstance(output, str):
        return output if output.startswith("http") else None
    if isinstance(output, list):
        if not output or not output[0]:
            return None
        first = output[0]
        if isinstance(first, str):
            return first
        return _url_from_mapping(first)
    return _url_from_mapping(output)


class ReplicateProvider(HTTPProvider):
    """Paid prediction endpoint; single-shot, heavily paced."""

    name = "replicate"
    error_message = staticmethod(json_error_message("detail", "error"))

    def __init__(
        self,
        token: str,
        *,
        model: str = "black-forest-labs/flux-schnell",
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize with an API token."""
        super().__init__(client=client, transport=transport)
        self.token = token
        self.model = model

    @property
    def kind(self) -> ProviderKind:
        """Provider identifier."""
        return "replicate"

    @property
    def retry_policy(self) -> RetryPolicy | None:
        """Single-shot: no retries."""
        return None

    async def render(self, prompt: str) -> str:
        """Submit a prediction and return the first output URL."""
        response = await self._post(
            PREDICTIONS_URL,
            json={"version": self.model, "input": {"prompt": prompt}},
            headers={
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/json",
                "Prefer": f"wait={WAIT_HINT_S}",
            },
            timeout=TIMEOUT_S,
        )
        body = self._json(response)
        if not isinstance(body, dict):
            raise ResponseShapeMismatch(
                "replicate response is not an object", provider=self.name
            )
        if body.get("status") == "failed" and body.get("error"):
            raise AdapterApplicationError(
                str(body["error"]), provider=self.name, status_code=response.status_code
            )
        url = normalize_output(body.get("output"))
        if url is None:
            raise ResponseShapeMismatch(
                f"replicate prediction {body.get('id', '?')} has no output url "
                f"(status={body.get('status')})",
                provider=self.name,
            )
        return url
