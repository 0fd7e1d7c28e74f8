"""Per-prompt outcomes and JSON payload shaping."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, TypedDict

if TYPE_CHECKING:
    from collections.abc import Iterator

    from vitrine.providers.base import ProviderKind

BatchStatus = Literal["ok", "partial", "error"]


class OutcomePayload(TypedDict, total=False):
    """JSON shape of one outcome; ``error`` is omitted on success."""

    url: str | None
    prompt: str
    error: str


class SingleImagePayload(TypedDict, total=False):
    """JSON shape returned for a single-image regeneration."""

    url: str | None
    type: str
    error: str


@dataclass(frozen=True)
class GenerationOutcome:
    """Result for one prompt. Created once, never mutated."""

    prompt: str
    url: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """True when an image URL was produced."""
        return self.url is not None and self.error is None

    def to_payload(self) -> OutcomePayload:
        """Return the JSON-serializable record."""
        payload = OutcomePayload(url=self.url, prompt=self.prompt)
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass(frozen=True)
class BatchResult:
    """Outcomes of one batch, positionally aligned with the input prompts.

    ``status`` is ``"ok"`` when every prompt produced a URL, ``"partial"`` when
    some did, or ``"error"`` when none did.
    """

    outcomes: tuple[GenerationOutcome, ...]
    provider: ProviderKind
    duration_s: float = 0.0
    waited_s: float = 0.0

    def __len__(self) -> int:
        return len(self.outcomes)

    def __iter__(self) -> Iterator[GenerationOutcome]:
        return iter(self.outcomes)

    def __getitem__(self, idx: int) -> GenerationOutcome:
        return self.outcomes[idx]

    @property
    def status(self) -> BatchStatus:
        """Summary of how many prompts produced an image."""
        failed = sum(1 for o in self.outcomes if not o.ok)
        if failed == 0:
            return "ok"
        if failed == len(self.outcomes):
            return "error"
        return "partial"

    def to_payload(self) -> list[OutcomePayload]:
        """Return the ordered JSON-serializable records."""
        return [o.to_payload() for o in self.outcomes]
