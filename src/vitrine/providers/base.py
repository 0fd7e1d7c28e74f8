"""Provider protocol: the uniform contract every image adapter satisfies."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal, Protocol, runtime_checkable

if TYPE_CHECKING:
    from vitrine.retry import RetryPolicy

ProviderKind = Literal["siliconflow", "huggingface", "replicate", "mock"]


@runtime_checkable
class ImageProvider(Protocol):
    """Minimal adapter protocol: render one prompt into one image URL.

    ``render`` raises ``AdapterError`` subclasses; converting failures into
    per-prompt outcomes is the orchestrator's job, so retry and pacing stay
    out of the adapters.
    """

    @property
    def kind(self) -> ProviderKind:
        """Stable provider identifier used for pacing and logging."""
        ...

    @property
    def retry_policy(self) -> RetryPolicy | None:
        """Retry policy for this provider, or None for single-shot calls."""
        ...

    async def render(self, prompt: str) -> str:
        """Return a remote URL or a ``data:`` URL for the generated image."""
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        ...
