"""Provider selection tests."""

from __future__ import annotations

import pytest

from vitrine.config import ProviderCredentials, Settings
from vitrine.errors import NoProviderConfigured
from vitrine.providers import (
    HuggingFaceProvider,
    MockProvider,
    ReplicateProvider,
    SiliconFlowProvider,
)
from vitrine.retry import RetryPolicy
from vitrine.selector import select_kind, select_provider

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("credentials", "expected"),
    [
        (ProviderCredentials("sf", "hf", "r8"), "siliconflow"),
        (ProviderCredentials("sf", None, None), "siliconflow"),
        (ProviderCredentials(None, "hf", "r8"), "huggingface"),
        (ProviderCredentials(None, None, "r8"), "replicate"),
    ],
)
def test_fixed_priority_order(credentials: ProviderCredentials, expected: str) -> None:
    assert select_kind(credentials) == expected


def test_no_credentials_is_terminal() -> None:
    with pytest.raises(NoProviderConfigured) as exc_info:
        select_kind(ProviderCredentials())
    assert "HF_TOKEN" in (exc_info.value.hint or "")


def test_select_provider_builds_configured_adapters() -> None:
    sf = select_provider(
        Settings(siliconflow_api_key="sf", siliconflow_image_model="custom/model")
    )
    assert isinstance(sf, SiliconFlowProvider)
    assert sf.model == "custom/model"
    assert sf.retry_policy is None

    hf = select_provider(
        Settings(hf_token="hf", hf_max_retries=2, hf_retry_delay_ms=500)
    )
    assert isinstance(hf, HuggingFaceProvider)
    assert hf.retry_policy == RetryPolicy(max_attempts=2, delay_s=0.5)

    r8 = select_provider(Settings(replicate_api_token="r8"))
    assert isinstance(r8, ReplicateProvider)
    assert r8.retry_policy is None


def test_mock_setting_wins_over_credentials() -> None:
    provider = select_provider(Settings(siliconflow_api_key="sf", use_mock=True))
    assert isinstance(provider, MockProvider)


def test_select_provider_without_credentials_raises() -> None:
    with pytest.raises(NoProviderConfigured):
        select_provider(Settings())


@pytest.mark.parametrize(
    ("settings", "attr", "expected"),
    [
        (Settings(siliconflow_api_key="sf", hf_token="hf"), "api_key", "sf"),
        (Settings(hf_token="hf", replicate_api_token="r8"), "token", "hf"),
        (Settings(replicate_api_token=" r8 "), "token", "r8"),
    ],
)
def test_selected_adapter_receives_its_own_credential(
    settings: Settings, attr: str, expected: str
) -> None:
    provider = select_provider(settings)
    assert getattr(provider, attr) == expected
