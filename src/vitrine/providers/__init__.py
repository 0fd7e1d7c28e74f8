"""Provider implementations."""

from .base import ImageProvider, ProviderKind
from .huggingface import HuggingFaceProvider
from .mock import MockProvider
from .replicate import ReplicateProvider
from .siliconflow import SiliconFlowProvider

__all__ = [
    "HuggingFaceProvider",
    "ImageProvider",
    "MockProvider",
    "ProviderKind",
    "ReplicateProvider",
    "SiliconFlowProvider",
]
