"""Provider selection: one provider per batch, fixed priority order."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from vitrine.errors import NoProviderConfigured
from vitrine.retry import RetryPolicy

if TYPE_CHECKING:
    import httpx

    from vitrine.config import ProviderCredentials, Settings
    from vitrine.providers.base import ImageProvider, ProviderKind

logger = logging.getLogger(__name__)

#: Highest priority first.
PRIORITY: tuple[ProviderKind, ...] = ("siliconflow", "huggingface", "replicate")


def _first_configured(
    credentials: ProviderCredentials,
) -> tuple[ProviderKind, str]:
    available: dict[ProviderKind, str | None] = {
        "siliconflow": credentials.siliconflow_api_key,
        "huggingface": credentials.hf_token,
        "replicate": credentials.replicate_api_token,
    }
    for kind in PRIORITY:
        secret = available[kind]
        if secret:
            return kind, secret
    raise NoProviderConfigured(
        "No image provider configured",
        hint="Set one of SILICONFLOW_API_KEY, HF_TOKEN or REPLICATE_API_TOKEN.",
    )


def select_kind(credentials: ProviderCredentials) -> ProviderKind:
    """Return the highest-priority provider that has a credential.

    Raises:
        NoProviderConfigured: If no credential is present at all.
    """
    kind, _ = _first_configured(credentials)
    return kind


def select_provider(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ImageProvider:
    """Build the adapter for this batch from a settings snapshot."""
    if settings.use_mock:
        from vitrine.providers.mock import MockProvider

        logger.debug("Using mock image provider")
        return MockProvider()

    kind, secret = _first_configured(settings.credentials)
    logger.info("Selected image provider: %s", kind)

    if kind == "siliconflow":
        from vitrine.providers.siliconflow import SiliconFlowProvider

        return SiliconFlowProvider(
            secret,
            model=settings.siliconflow_image_model,
            api_base=settings.siliconflow_api_base,
            transport=transport,
        )

    if kind == "huggingface":
        from vitrine.providers.huggingface import HuggingFaceProvider

        return HuggingFaceProvider(
            secret,
            model=settings.hf_image_model,
            retry_policy=RetryPolicy.from_settings(settings),
            transport=transport,
        )

    from vitrine.providers.replicate import ReplicateProvider

    return ReplicateProvider(
        secret,
        model=settings.replicate_model,
        transport=transport,
    )
