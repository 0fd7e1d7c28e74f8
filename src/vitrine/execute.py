"""Batch execution: paced, sequential, partial-failure tolerant."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from vitrine.errors import AdapterError, ResponseShapeMismatch, truncate
from vitrine.pacing import PacingPolicy, PacingScheduler
from vitrine.result import BatchResult, GenerationOutcome
from vitrine.retry import retry_async

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from vitrine.providers.base import ImageProvider

logger = logging.getLogger(__name__)


async def generate_one(
    provider: ImageProvider,
    prompt: str,
    *,
    index: int = 0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> GenerationOutcome:
    """Render one prompt, applying the provider's retry policy if it has one.

    Never raises for provider failures: they come back as an outcome with
    ``error`` set. A response without a usable image yields ``url=None`` and
    no error.
    """
    label = f"{provider.kind} image [{index}]"
    policy = provider.retry_policy
    try:
        if policy is None:
            url = await provider.render(prompt)
        else:
            url = await retry_async(
                lambda: provider.render(prompt),
                policy=policy,
                sleep=sleep,
                label=label,
            )
    except ResponseShapeMismatch as exc:
        logger.warning("%s returned no image: %s", label, exc)
        return GenerationOutcome(prompt=prompt)
    except AdapterError as exc:
        logger.error("%s failed: %s", label, exc)
        return GenerationOutcome(prompt=prompt, error=exc.short_message)
    except Exception as exc:
        # Per-prompt failures are reported in-band.
        logger.exception("%s failed unexpectedly", label)
        return GenerationOutcome(prompt=prompt, error=truncate(exc))
    return GenerationOutcome(prompt=prompt, url=url)


async def execute_batch(
    prompts: Sequence[str],
    provider: ImageProvider,
    *,
    pacing: PacingPolicy,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> BatchResult:
    """Run every prompt through *provider*, one at a time, in input order.

    The returned outcomes are positionally aligned with *prompts*.
    """
    scheduler = PacingScheduler(pacing, sleep=sleep, clock=clock)

    async def call(idx: int, prompt: str) -> GenerationOutcome:
        return await generate_one(provider, prompt, index=idx, sleep=sleep)

    outcomes = await scheduler.run(prompts, call)
    result = BatchResult(
        outcomes=tuple(outcomes),
        provider=provider.kind,
        duration_s=scheduler.elapsed_s,
        waited_s=scheduler.waited_s,
    )
    logger.info(
        "Batch of %d via %s finished: status=%s",
        len(result),
        provider.kind,
        result.status,
    )
    return result
