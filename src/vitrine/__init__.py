"""Vitrine: multi-provider image generation for e-commerce product visuals.

Public API:
    - generate_images(): paced, sequential batch generation
    - regenerate_single(): one-off generation of a single image
    - Settings: configuration dataclass
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any

from vitrine.config import Settings, get_settings, reload_settings
from vitrine.errors import (
    AdapterApplicationError,
    AdapterError,
    AdapterTransientError,
    ConfigurationError,
    InputError,
    NoProviderConfigured,
    ResponseShapeMismatch,
    VitrineError,
)
from vitrine.execute import execute_batch, generate_one
from vitrine.pacing import PacingPolicy
from vitrine.request import normalize_image_type, normalize_prompt, normalize_prompts
from vitrine.result import (
    BatchResult,
    GenerationOutcome,
    OutcomePayload,
    SingleImagePayload,
)
from vitrine.retry import RetryPolicy
from vitrine.selector import select_provider

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    import httpx

    from vitrine.providers.base import ImageProvider

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("vitrine")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("vitrine").addHandler(logging.NullHandler())

logger = logging.getLogger(__name__)


async def generate_images(
    prompts: Any,
    *,
    settings: Settings | None = None,
    provider: ImageProvider | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> BatchResult:
    """Generate one image per prompt, in order, through a single provider.

    Args:
        prompts: Non-empty list of prompt strings.
        settings: Settings snapshot; defaults to the process-wide cache.
        provider: Pre-built adapter, bypassing selection (mainly for tests).
        transport: httpx transport handed to the selected adapter.
        sleep: Awaitable sleep used for pacing and retry delays.
        clock: Monotonic clock used for timing.

    Returns:
        BatchResult whose outcomes align positionally with *prompts*.

    Raises:
        InputError: If *prompts* is not a non-empty list.
        NoProviderConfigured: If no provider credential is configured.

    Example:
        result = await generate_images(["white-background shot of a cat bed"])
        print(result.to_payload())
    """
    normalized = normalize_prompts(prompts)
    settings = settings or get_settings()
    owns_provider = provider is None
    if provider is None:
        provider = select_provider(settings, transport=transport)
    pacing = PacingPolicy.for_provider(provider.kind, settings)

    try:
        return await execute_batch(
            normalized, provider, pacing=pacing, sleep=sleep, clock=clock
        )
    finally:
        if owns_provider:
            await _close_quietly(provider)


async def regenerate_single(
    prompt: Any,
    image_type: Any = "",
    *,
    settings: Settings | None = None,
    provider: ImageProvider | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> SingleImagePayload:
    """Regenerate a single image of the given type (no pacing).

    ``image_type`` accepts either the English key (``pure_product``,
    ``main_image``, ``infographic``, ``lifestyle``) or its Chinese label and is
    echoed back as the label.
    """
    text = normalize_prompt(prompt)
    label = normalize_image_type(image_type)
    settings = settings or get_settings()
    owns_provider = provider is None
    if provider is None:
        provider = select_provider(settings, transport=transport)

    try:
        outcome = await generate_one(provider, text, sleep=sleep)
    finally:
        if owns_provider:
            await _close_quietly(provider)

    payload = SingleImagePayload(url=outcome.url, type=label)
    if outcome.error is not None:
        payload["error"] = outcome.error
    return payload


async def _close_quietly(provider: ImageProvider) -> None:
    try:
        await provider.aclose()
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        # Cleanup should never mask the primary result.
        logger.warning("Provider cleanup failed: %s", exc)


__all__ = [
    "AdapterApplicationError",
    "AdapterError",
    "AdapterTransientError",
    "BatchResult",
    "ConfigurationError",
    "GenerationOutcome",
    "InputError",
    "NoProviderConfigured",
    "OutcomePayload",
    "ResponseShapeMismatch",
    "RetryPolicy",
    "Settings",
    "SingleImagePayload",
    "VitrineError",
    "generate_images",
    "regenerate_single",
    "reload_settings",
]
