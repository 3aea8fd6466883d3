"""
Application Services.

역할:
- merge: 이미지 2장 → Gemini 병합 → 결과 해석
"""

from .merge import MergeService

__all__ = [
    "MergeService",
]
