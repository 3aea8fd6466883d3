"""
Core layer: provider 독립 핵심 로직.

역할:
- 이미지 인코딩, 실패 텍스트 판정, run log
"""

from .encoding import encode_image, encode_image_file, normalize_media_type
from .heuristics import is_failure_text
from .ids import generate_run_id
from .logging import complete_run_log, create_run_log, save_run_log
from .storage import atomic_write_json

__all__ = [
    # encoding
    "encode_image",
    "encode_image_file",
    "normalize_media_type",
    # heuristics
    "is_failure_text",
    # ids
    "generate_run_id",
    # logging
    "create_run_log",
    "complete_run_log",
    "save_run_log",
    # storage
    "atomic_write_json",
]
