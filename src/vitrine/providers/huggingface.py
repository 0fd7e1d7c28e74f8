"""Hugging Face Inference API provider (free tier).

The endpoint answers with raw image bytes, which are inlined as a
``data:`` URL. This is the only provider whose result may be hundreds of
kilobytes of inline data rather than a remote link.
"""

from __future__ import annotations

import base64
from typing import TYPE_CHECKING

from vitrine.errors import ResponseShapeMismatch
from vitrine.providers._errors import raw_text_message
from vitrine.providers._http import HTTPProvider
from vitrine.retry import RetryPolicy

if TYPE_CHECKING:
    import httpx

    from vitrine.providers.base import ProviderKind

TIMEOUT_S = 120.0
INFERENCE_BASE = "https://api-inference.huggingface.co/models"
DEFAULT_CONTENT_TYPE = "image/png"


def to_data_url(data: bytes, content_type: str | None) -> str:
    """Encode *data* as a base64 ``data:`` URL."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type or DEFAULT_CONTENT_TYPE};base64,{encoded}"


class HuggingFaceProvider(HTTPProvider):
    """Free inference endpoint; the only provider that is retried."""

    name = "huggingface"
    error_message = staticmethod(raw_text_message)

    def __init__(
        self,
        token: str,
        *,
        model: str = "runwayml/stable-diffusion-v1-5",
        retry_policy: RetryPolicy | None = None,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize with an access token."""
        super().__init__(client=client, transport=transport)
        self.token = token
        self.model = model
        self._retry_policy = retry_policy or RetryPolicy()

    @property
    def kind(self) -> ProviderKind:
        """Provider identifier."""
        return "huggingface"

    @property
    def retry_policy(self) -> RetryPolicy:
        """Fixed-delay retry on transport transience."""
        return self._retry_policy

    async def render(self, prompt: str) -> str:
        """Run inference and return the image inline."""
        response = await self._post(
            f"{INFERENCE_BASE}/{self.model}",
            json={"inputs": prompt},
            headers={"Authorization": f"Bearer {self.token}"},
            timeout=TIMEOUT_S,
        )
        if not response.content:
            raise ResponseShapeMismatch(
                "huggingface returned an empty body", provider=self.name
            )
        return to_data_url(response.content, response.headers.get("content-type"))
