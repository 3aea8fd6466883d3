"""
Image Provider Abstraction.

모델 교체 가능하게 설계. 모델명은 config만 SSOT.
"""

from .base import ImageProvider, ProviderError
from .gemini import GeminiImageProvider

__all__ = [
    "ImageProvider",
    "ProviderError",
    "GeminiImageProvider",
]
