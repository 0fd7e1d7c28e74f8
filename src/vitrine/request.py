"""Input normalization for batch and single-image requests."""

from __future__ import annotations

from typing import Any

from vitrine.errors import InputError

DEFAULT_IMAGE_TYPE = "白底图"

#: English keys and Chinese labels both resolve to the Chinese label.
IMAGE_TYPE_LABELS: dict[str, str] = {
    "白底图": "白底图",
    "主图": "主图",
    "卖点图": "卖点图",
    "场景图": "场景图",
    "pure_product": "白底图",
    "main_image": "主图",
    "infographic": "卖点图",
    "lifestyle": "场景图",
}


def normalize_prompts(prompts: Any) -> tuple[str, ...]:
    """Validate a batch of prompts and coerce each entry to a stripped string.

    Raises:
        InputError: If *prompts* is not a list/tuple or is empty.
    """
    if not isinstance(prompts, (list, tuple)):
        raise InputError(
            f"prompts must be a list, got {type(prompts).__name__}",
            hint="Pass a list of prompt strings.",
        )
    if not prompts:
        raise InputError("prompts is empty", hint="Pass at least one prompt.")
    return tuple(str(p).strip() for p in prompts)


def normalize_prompt(prompt: Any) -> str:
    """Validate a single prompt.

    Raises:
        InputError: If the prompt is missing or whitespace-only.
    """
    text = "" if prompt is None else str(prompt).strip()
    if not text:
        raise InputError("prompt is empty", hint="Pass a non-empty prompt string.")
    return text


def normalize_image_type(value: Any) -> str:
    """Map an image type key to its label; unknown labels pass through."""
    text = "" if value is None else str(value).strip()
    if not text:
        return DEFAULT_IMAGE_TYPE
    return IMAGE_TYPE_LABELS.get(text, text)
