"""Configuration: frozen Settings plus a process-wide cache with reload().

Credentials are read from the environment, optionally seeded from ``.env``
and ``sili.env`` files. A snapshot is taken once per batch; when no provider
credential is present the cache re-reads the env files before giving up.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

import dotenv

from vitrine.errors import ConfigurationError
from vitrine.retry import MAX_ATTEMPTS_CEILING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

logger = logging.getLogger(__name__)

DEFAULT_ENV_FILES: tuple[str, ...] = (".env", "sili.env")

MIN_REPLICATE_DELAY_MS = 10_000

_SECRET_FIELDS = frozenset({"siliconflow_api_key", "hf_token", "replicate_api_token"})


def _clean_secret(raw: str | None) -> str | None:
    """Strip a BOM and every whitespace character; empty becomes None."""
    if raw is None:
        return None
    value = "".join(raw.replace("\ufeff", "").split())
    return value or None


def _positive_int(raw: str | None, default: int) -> int:
    # Junk and non-positive values fall back to the default.
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return value if value > 0 else default


def load_env_files(
    paths: Iterable[str | Path] = DEFAULT_ENV_FILES, *, override: bool = False
) -> list[Path]:
    """Load dotenv files that exist and return the ones that were read."""
    loaded: list[Path] = []
    for raw in paths:
        path = Path(raw)
        if not path.is_file():
            continue
        dotenv.load_dotenv(path, override=override, encoding="utf-8-sig")
        loaded.append(path)
    return loaded


@dataclass(frozen=True)
class ProviderCredentials:
    """Read-only snapshot of the configured provider credentials."""

    siliconflow_api_key: str | None = None
    hf_token: str | None = None
    replicate_api_token: str | None = None

    def has_any(self) -> bool:
        """Return True when at least one provider can be used."""
        return bool(self.siliconflow_api_key or self.hf_token or self.replicate_api_token)

    def __repr__(self) -> str:
        """Return a redacted representation."""
        parts = [
            f"{f.name}={'[REDACTED]' if getattr(self, f.name) else None}"
            for f in fields(self)
        ]
        return f"ProviderCredentials({', '.join(parts)})"


@dataclass(frozen=True)
class Settings:
    """Immutable configuration for one batch.

    Every credential is optional; the absence of all of them is the only hard
    configuration error, and it is raised by provider selection rather than here.

    Example:
        settings = Settings(siliconflow_api_key="sk-...")
        result = await generate_images(["a cat on a sofa"], settings=settings)
    """

    siliconflow_api_key: str | None = None
    siliconflow_api_base: str = "https://api.siliconflow.cn"
    siliconflow_image_model: str = "Kwai-Kolors/Kolors"
    hf_token: str | None = None
    hf_image_model: str = "runwayml/stable-diffusion-v1-5"
    #: Total attempts for the free-inference provider; values above 5 are clamped.
    hf_max_retries: int = 3
    hf_retry_delay_ms: int = 4000
    replicate_api_token: str | None = None
    replicate_model: str = "black-forest-labs/flux-schnell"
    #: Never below 10 s: the free tier allows one request in flight.
    replicate_delay_ms: int = 15_000
    fast_delay_ms: int = 2000
    use_mock: bool = False

    def __post_init__(self) -> None:
        """Normalize secrets and validate numeric fields."""
        for name in _SECRET_FIELDS:
            object.__setattr__(self, name, _clean_secret(getattr(self, name)))
        object.__setattr__(
            self, "siliconflow_api_base", self.siliconflow_api_base.rstrip("/")
        )

        if self.hf_max_retries < 1:
            raise ConfigurationError(
                f"hf_max_retries must be >= 1, got {self.hf_max_retries}",
                hint="This is the total number of attempts per image.",
            )
        if self.hf_max_retries > MAX_ATTEMPTS_CEILING:
            object.__setattr__(self, "hf_max_retries", MAX_ATTEMPTS_CEILING)
        for name in ("hf_retry_delay_ms", "fast_delay_ms"):
            if getattr(self, name) < 0:
                raise ConfigurationError(
                    f"{name} must be >= 0, got {getattr(self, name)}"
                )
        if self.replicate_delay_ms < MIN_REPLICATE_DELAY_MS:
            object.__setattr__(self, "replicate_delay_ms", MIN_REPLICATE_DELAY_MS)

    @property
    def credentials(self) -> ProviderCredentials:
        """Credential snapshot used by provider selection."""
        return ProviderCredentials(
            siliconflow_api_key=self.siliconflow_api_key,
            hf_token=self.hf_token,
            replicate_api_token=self.replicate_api_token,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            siliconflow_api_key=env.get("SILICONFLOW_API_KEY"),
            siliconflow_api_base=(
                env.get("SILICONFLOW_API_BASE") or defaults.siliconflow_api_base
            ).strip(),
            siliconflow_image_model=(
                env.get("SILICONFLOW_IMAGE_MODEL") or defaults.siliconflow_image_model
            ).strip(),
            hf_token=_clean_secret(env.get("HF_TOKEN"))
            or env.get("HUGGINGFACE_TOKEN"),
            hf_image_model=(
                env.get("HF_IMAGE_MODEL") or defaults.hf_image_model
            ).strip(),
            hf_max_retries=_positive_int(
                env.get("HF_MAX_RETRIES"), defaults.hf_max_retries
            ),
            hf_retry_delay_ms=_positive_int(
                env.get("HF_RETRY_DELAY_MS"), defaults.hf_retry_delay_ms
            ),
            replicate_api_token=env.get("REPLICATE_API_TOKEN"),
            replicate_model=(
                env.get("REPLICATE_MODEL") or defaults.replicate_model
            ).strip(),
            replicate_delay_ms=_positive_int(
                env.get("REPLICATE_DELAY_MS"), defaults.replicate_delay_ms
            ),
            use_mock=env.get("VITRINE_USE_MOCK", "").strip().lower()
            in {"1", "true", "yes"},
        )

    def __repr__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        parts = []
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in _SECRET_FIELDS and value:
                parts.append(f"{f.name}=[REDACTED]")
            else:
                parts.append(f"{f.name}={value!r}")
        return f"Settings({', '.join(parts)})"

    __str__ = __repr__


class SettingsCache:
    """Process-wide settings snapshot with an explicit reload.

    ``get()`` reloads on a miss, meaning no provider credential is present,
    so keys dropped into an env file after start-up are still picked up.
    """

    def __init__(self, env_files: Iterable[str | Path] = DEFAULT_ENV_FILES) -> None:
        """Create an empty cache; nothing is read until first use."""
        self._env_files = tuple(env_files)
        self._settings: Settings | None = None

    def get(self) -> Settings:
        """Return the cached snapshot, reloading once if it has no credentials."""
        if self._settings is None:
            load_env_files(self._env_files)
            self._settings = Settings.from_env()
        if not self._settings.use_mock and not self._settings.credentials.has_any():
            logger.debug("No provider credential cached; reloading env files")
            return self.reload()
        return self._settings

    def reload(self) -> Settings:
        """Re-read env files (overriding the environment) and rebuild the snapshot."""
        loaded = load_env_files(self._env_files, override=True)
        self._settings = Settings.from_env()
        logger.debug("Settings reloaded from %d env file(s)", len(loaded))
        return self._settings

    def clear(self) -> None:
        """Drop the snapshot; the next ``get()`` rebuilds it."""
        self._settings = None


_cache = SettingsCache()


def get_settings() -> Settings:
    """Return the process-wide settings snapshot."""
    return _cache.get()


def reload_settings() -> Settings:
    """Force a re-read of env files and environment variables."""
    return _cache.reload()
