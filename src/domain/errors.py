"""
Error definitions for the merge pipeline.

규칙:
- 조용한 실패 금지 → MergeError 계열로 명시적 실패
- 모든 실패는 사용자에게 보여줄 단일 메시지(message)로 변환
- 재시도/로컬 복구 없음: 호출자(UI)가 메시지 표시 후 수동 재시도
"""

import json
from typing import Any


class MergeError(Exception):
    """
    병합 파이프라인 에러의 기반 클래스.

    Usage:
        raise MergeError(ErrorCodes.UNKNOWN_ERROR, "...", cause=str(e))
    """

    # HTTP 매핑 (routes에서 사용)
    http_status = 500

    def __init__(self, code: str, message: str, **context: Any) -> None:
        self.code = code
        self.message = message
        self.context = context
        super().__init__(f"[{code}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            "message": self.message,
            **self.context,
        }


class ValidationError(MergeError):
    """필수 이미지 누락, 업로드 크기 초과 등 입력 검증 실패."""

    http_status = 400

    def __init__(
        self,
        code: str = "MISSING_IMAGE",
        message: str = "Please upload both a group photo and an individual photo.",
        **context: Any,
    ) -> None:
        super().__init__(code, message, **context)
        if code == ErrorCodes.FILE_TOO_LARGE:
            self.http_status = 413


class EncodingError(MergeError):
    """이미지 파일을 읽거나 인코딩할 수 없음."""

    http_status = 400

    def __init__(
        self,
        code: str = "READ_FAILED",
        message: str = "Could not read the selected image file.",
        **context: Any,
    ) -> None:
        super().__init__(code, message, **context)


class SafetyBlockedError(MergeError):
    """모델이 안전 사유로 생성을 거부."""

    http_status = 422

    def __init__(self, safety_ratings: list[dict[str, Any]] | None = None) -> None:
        self.safety_ratings = safety_ratings or []
        details = json.dumps(self.safety_ratings, indent=2, ensure_ascii=False)
        super().__init__(
            ErrorCodes.SAFETY_BLOCKED,
            "The request was blocked for safety reasons. "
            f"Please try different images. Details: {details}",
            safety_ratings=self.safety_ratings,
        )


class GenerationFailedError(MergeError):
    """모델이 안전 외의 사유(finish reason)로 생성을 중단."""

    http_status = 502

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(
            ErrorCodes.GENERATION_FAILED,
            f"Image generation failed. Reason: {reason}.",
            reason=reason,
        )


class EmptyResponseError(MergeError):
    """사용 가능한 candidate/content가 없음."""

    http_status = 502

    def __init__(self, **context: Any) -> None:
        super().__init__(
            ErrorCodes.EMPTY_RESPONSE,
            "The AI returned an invalid or empty response.",
            **context,
        )


class EmptyOutcomeError(MergeError):
    """파싱/휴리스틱 이후 이미지도 텍스트도 남지 않음."""

    http_status = 502

    def __init__(self, **context: Any) -> None:
        super().__init__(
            ErrorCodes.EMPTY_OUTCOME,
            "The AI's response was empty and did not contain "
            "a new image or any explanatory text.",
            **context,
        )


class TransportError(MergeError):
    """네트워크/API 클라이언트 실패 (재해석 없이 전파)."""

    http_status = 502


class ProviderError(MergeError):
    """Provider 구성 에러 (클라이언트 초기화 실패 등)."""

    http_status = 500


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Input ===
    MISSING_IMAGE = "MISSING_IMAGE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"

    # === Encoding ===
    EMPTY_FILE = "EMPTY_FILE"
    READ_FAILED = "READ_FAILED"
    UNSUPPORTED_MEDIA_TYPE = "UNSUPPORTED_MEDIA_TYPE"

    # === Model Outcome ===
    SAFETY_BLOCKED = "SAFETY_BLOCKED"
    GENERATION_FAILED = "GENERATION_FAILED"
    EMPTY_RESPONSE = "EMPTY_RESPONSE"
    EMPTY_OUTCOME = "EMPTY_OUTCOME"

    # === Transport / Provider ===
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    API_KEY_MISSING = "API_KEY_MISSING"
    CLIENT_INIT_FAILED = "CLIENT_INIT_FAILED"

    UNKNOWN_ERROR = "UNKNOWN_ERROR"
