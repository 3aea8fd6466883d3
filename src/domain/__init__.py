"""Domain layer: errors and schemas."""

from .errors import MergeError
from .schemas import (
    EncodedImage,
    ImageInput,
    MergeOutcome,
    MergeRequest,
    MergeRunLog,
)

__all__ = [
    "MergeError",
    "ImageInput",
    "EncodedImage",
    "MergeRequest",
    "MergeOutcome",
    "MergeRunLog",
]
