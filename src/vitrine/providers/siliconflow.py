"""SiliconFlow provider: the domestic fast image endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ValidationError

from vitrine.errors import ResponseShapeMismatch
from vitrine.providers._http import HTTPProvider

if TYPE_CHECKING:
    import httpx

    from vitrine.providers.base import ProviderKind
    from vitrine.retry import RetryPolicy

TIMEOUT_S = 120.0


class _Image(BaseModel):
    url: str | None = None


class ImagesResponse(BaseModel):
    """Subset of the ``/v1/images/generations`` response body."""

    images: list[_Image] = []

    def first_url(self) -> str | None:
        """Return the first image URL, if any."""
        if not self.images:
            return None
        return self.images[0].url or None


class SiliconFlowProvider(HTTPProvider):
    """Single synchronous call; the first image URL is the result."""

    name = "siliconflow"

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "Kwai-Kolors/Kolors",
        api_base: str = "https://api.siliconflow.cn",
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize with an API key."""
        super().__init__(client=client, transport=transport)
        self.api_key = api_key
        self.model = model
        self.api_base = api_base.rstrip("/")

    @property
    def kind(self) -> ProviderKind:
        """Provider identifier."""
        return "siliconflow"

    @property
    def retry_policy(self) -> RetryPolicy | None:
        """Single-shot: no retries."""
        return None

    async def render(self, prompt: str) -> str:
        """Generate one 1024x1024 image and return its URL."""
        response = await self._post(
            f"{self.api_base}/v1/images/generations",
            json={
                "model": self.model,
                "prompt": prompt,
                "image_size": "1024x1024",
                "batch_size": 1,
                "num_inference_steps": 20,
                "guidance_scale": 7.5,
            },
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            timeout=TIMEOUT_S,
        )
        body = self._json(response)
        try:
            url = ImagesResponse.model_validate(body).first_url()
        except ValidationError as exc:
            raise ResponseShapeMismatch(
                "siliconflow response has no usable images field", provider=self.name
            ) from exc
        if url is None:
            raise ResponseShapeMismatch(
                "siliconflow response contained no image url", provider=self.name
            )
        return url
