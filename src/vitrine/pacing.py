"""Pacing: strictly sequential provider calls with a fixed inter-call delay.

The delay is applied before every call except the first in a batch, and a
call must fully settle before the next one is started.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
import time
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from vitrine.config import Settings
    from vitrine.providers.base import ProviderKind

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class PacingPolicy:
    """Minimum delay between successive calls of one batch."""

    delay_s: float

    def __post_init__(self) -> None:
        """Reject negative delays."""
        if self.delay_s < 0:
            raise ValueError("PacingPolicy.delay_s must be >= 0")

    @classmethod
    def for_provider(cls, kind: ProviderKind, settings: Settings) -> PacingPolicy:
        """Pick the delay for *kind*.

        The paid-prediction free tier allows one request in flight, so it gets
        a much longer pause than the other providers.
        """
        if kind == "replicate":
            return cls(settings.replicate_delay_ms / 1000.0)
        if kind == "mock":
            return cls(0.0)
        return cls(settings.fast_delay_ms / 1000.0)


@dataclass
class PacingScheduler:
    """Runs calls one after another, sleeping ``policy.delay_s`` between them."""

    policy: PacingPolicy
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    clock: Callable[[], float] = time.monotonic
    calls: int = 0
    waited_s: float = 0.0
    _started_at: float | None = field(default=None, repr=False)

    async def wait_turn(self) -> float:
        """Block until the next call may start; return the delay applied."""
        wait = self.policy.delay_s if self.calls > 0 else 0.0
        if wait > 0:
            logger.debug("Pacing: waiting %.1fs before call %d", wait, self.calls + 1)
            await self.sleep(wait)
            self.waited_s += wait
        if self._started_at is None:
            self._started_at = self.clock()
        self.calls += 1
        return wait

    async def run(
        self,
        items: Sequence[T],
        call: Callable[[int, T], Awaitable[R]],
    ) -> list[R]:
        """Invoke ``call(index, item)`` for each item in order, paced."""
        results: list[R] = []
        for idx, item in enumerate(items):
            await self.wait_turn()
            results.append(await call(idx, item))
        return results

    @property
    def elapsed_s(self) -> float:
        """Clock time since the first call started (0 before any call)."""
        if self._started_at is None:
            return 0.0
        return self.clock() - self._started_at
