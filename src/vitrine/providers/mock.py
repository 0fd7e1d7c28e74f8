"""Mock provider for offline runs and tests."""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vitrine.providers.base import ProviderKind
    from vitrine.retry import RetryPolicy


class MockProvider:
    """Returns a deterministic URL per prompt without touching the network."""

    def __init__(self) -> None:
        """Start with an empty call log."""
        self.calls: list[str] = []

    @property
    def kind(self) -> ProviderKind:
        """Provider identifier."""
        return "mock"

    @property
    def retry_policy(self) -> RetryPolicy | None:
        """Mock calls never fail, so there is nothing to retry."""
        return None

    async def render(self, prompt: str) -> str:
        """Return ``mock://images/<digest>.png`` for *prompt*."""
        self.calls.append(prompt)
        digest = hashlib.sha256(prompt.encode("utf-8")).hexdigest()[:12]
        return f"mock://images/{digest}.png"

    async def aclose(self) -> None:
        """Nothing to release."""
