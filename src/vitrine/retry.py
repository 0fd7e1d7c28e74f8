"""Narrow async retry: fixed delay, transport-level transience only.

Provider rate-limit and validation errors are not self-healing, so only a
fixed set of structured network codes is retried. Decisions never depend on
the wording of an error message.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, TypeVar

from vitrine.errors import AdapterError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from vitrine.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

#: Connection reset, connect timeout, request-abort timeout.
RETRYABLE_CODES: frozenset[str] = frozenset({"ECONNRESET", "ETIMEDOUT", "ECONNABORTED"})

MAX_ATTEMPTS_CEILING = 5


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry policy with a fixed (non-exponential) delay."""

    #: Total attempts including the first one.
    max_attempts: int = 3
    delay_s: float = 4.0

    def __post_init__(self) -> None:
        """Validate invariants to keep retry behavior predictable."""
        if self.max_attempts < 1:
            raise ValueError("RetryPolicy.max_attempts must be >= 1")
        if self.max_attempts > MAX_ATTEMPTS_CEILING:
            object.__setattr__(self, "max_attempts", MAX_ATTEMPTS_CEILING)
        if self.delay_s < 0:
            raise ValueError("RetryPolicy.delay_s must be >= 0")

    @classmethod
    def from_settings(cls, settings: Settings) -> RetryPolicy:
        """Build the free-inference policy from settings."""
        return cls(
            max_attempts=settings.hf_max_retries,
            delay_s=settings.hf_retry_delay_ms / 1000.0,
        )


@dataclass
class RetryState:
    """Per-call counters; discarded once the call settles."""

    attempt: int = 0
    last_error: BaseException | None = None


def should_retry(exc: BaseException) -> bool:
    """Return True only for adapter errors carrying a retryable transport code.

    Cancellation is never retried. HTTP 4xx/5xx responses surface as
    application errors and are never retried either.
    """
    if isinstance(exc, asyncio.CancelledError):
        return False
    return isinstance(exc, AdapterError) and exc.code in RETRYABLE_CODES


async def retry_async(
    factory: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    should_retry: Callable[[BaseException], bool] = should_retry,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    label: str = "call",
) -> T:
    """Run an async factory with bounded retries.

    Re-raises the last error once attempts are exhausted or as soon as a
    non-retryable error is observed.
    """
    state = RetryState()
    while True:
        state.attempt += 1
        try:
            return await factory()
        except Exception as exc:
            state.last_error = exc
            if not should_retry(exc) or state.attempt >= policy.max_attempts:
                raise
            logger.warning(
                "%s failed on attempt %d/%d (%s); retrying in %.1fs",
                label,
                state.attempt,
                policy.max_attempts,
                getattr(exc, "code", type(exc).__name__),
                policy.delay_s,
            )
            if policy.delay_s > 0:
                await sleep(policy.delay_s)
