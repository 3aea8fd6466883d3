"""
Data schemas for the merge pipeline.

규칙:
- 이미지 바이트는 요청 1회 전달 후 보관하지 않음
- MergeRequest 파트 순서: base → addition → instruction (순서 = 의미)
- MergeOutcome: image_url / text_response 중 최소 하나는 비어있지 않음
"""

from dataclasses import dataclass, field
from typing import Any

from src.domain.errors import EmptyOutcomeError

# =============================================================================
# Input Schemas
# =============================================================================

@dataclass
class ImageInput:
    """사용자가 선택한 원본 이미지 (인코딩 후 폐기)."""
    data: bytes
    media_type: str = ""  # 업로드 시 선언된 MIME (비어있을 수 있음)
    filename: str | None = None


@dataclass(frozen=True)
class EncodedImage:
    """base64 인코딩된 이미지."""
    data: str  # base64 (표준 알파벳, 줄바꿈 없음)
    media_type: str  # 항상 image/*
    size: int = 0  # 원본 바이트 수 (로그용)


@dataclass(frozen=True)
class MergeRequest:
    """
    모델 요청.

    지시문이 "first image" / "second image"로 위치를 참조하므로
    parts 순서를 바꾸면 안 됨.
    """
    base: EncodedImage
    addition: EncodedImage
    instruction: str

    def __post_init__(self) -> None:
        if not isinstance(self.base, EncodedImage) or not isinstance(
            self.addition, EncodedImage
        ):
            raise TypeError("MergeRequest requires two EncodedImage parts")
        if not isinstance(self.instruction, str) or not self.instruction.strip():
            raise ValueError("MergeRequest requires a non-empty instruction")

    @property
    def parts(self) -> tuple[EncodedImage, EncodedImage, str]:
        return (self.base, self.addition, self.instruction)


@dataclass
class MergeOutcome:
    """병합 결과."""
    image_url: str | None
    text_response: str = ""

    def __post_init__(self) -> None:
        if not self.image_url and not self.text_response:
            raise EmptyOutcomeError()

    @property
    def merged(self) -> bool:
        """이미지가 최종 결과로 남았는지."""
        return self.image_url is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "image_url": self.image_url,
            "text_response": self.text_response,
        }


# =============================================================================
# Normalized Model Response (provider 독립)
# =============================================================================

@dataclass
class ResponsePart:
    """응답 파트: inline 데이터 또는 텍스트."""
    text: str | None = None
    mime_type: str | None = None
    data: bytes | None = None
    thought: bool = False

    @property
    def is_image(self) -> bool:
        return bool(
            self.data is not None
            and self.mime_type
            and self.mime_type.lower().startswith("image/")
        )


@dataclass
class ResponseCandidate:
    """
    응답 candidate.

    parts가 None이면 content 없음 (안전 차단 등).
    """
    parts: list[ResponsePart] | None = None
    finish_reason: str | None = None
    safety_ratings: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class GenerationResponse:
    """모델 응답 전체."""
    candidates: list[ResponseCandidate] = field(default_factory=list)
    block_reason: str | None = None  # 프롬프트 단위 차단
    model_version: str | None = None


# =============================================================================
# Run Log Schema
# =============================================================================

@dataclass
class MergeRunLog:
    """
    병합 실행 로그.

    병합 1회 단위 결과 및 메타데이터. 이미지 바이트는 기록하지 않음.
    """
    run_id: str
    started_at: str  # ISO 8601
    model: str | None = None
    finished_at: str | None = None
    result: str = "pending"  # pending, success, feedback, failed

    # Inputs
    inputs: list[dict[str, Any]] = field(default_factory=list)

    # Outcome
    image_returned: bool = False
    image_discarded: bool = False
    text_length: int = 0

    # Error (if failed)
    error_code: str | None = None
    error_context: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "result": self.result,
            "model": self.model,
            "inputs": self.inputs,
            "image_returned": self.image_returned,
            "image_discarded": self.image_discarded,
            "text_length": self.text_length,
            "error_code": self.error_code,
            "error_context": self.error_context,
        }
