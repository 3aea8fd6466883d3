"""
test_errors.py - MergeError 계열 테스트

DoD:
- 사용자 메시지 문구 고정
- HTTP 상태 매핑
- context 보존
"""

import json

import pytest

from src.domain.errors import (
    EmptyOutcomeError,
    EmptyResponseError,
    EncodingError,
    ErrorCodes,
    GenerationFailedError,
    MergeError,
    ProviderError,
    SafetyBlockedError,
    TransportError,
    ValidationError,
)


class TestMergeError:
    """MergeError 기반 클래스 테스트."""

    def test_str_includes_code(self):
        error = MergeError("SOME_CODE", "Something happened", detail=1)

        assert str(error) == "[SOME_CODE] Something happened"
        assert error.context == {"detail": 1}

    def test_to_dict(self):
        error = MergeError("SOME_CODE", "Something happened", detail=1)

        assert error.to_dict() == {
            "code": "SOME_CODE",
            "message": "Something happened",
            "detail": 1,
        }

    def test_default_status(self):
        assert MergeError("X", "y").http_status == 500


class TestValidationError:
    """ValidationError 테스트."""

    def test_defaults(self):
        error = ValidationError()

        assert error.code == ErrorCodes.MISSING_IMAGE
        assert error.message == "Please upload both a group photo and an individual photo."
        assert error.http_status == 400

    def test_file_too_large_status(self):
        error = ValidationError(ErrorCodes.FILE_TOO_LARGE, "Too big")

        assert error.http_status == 413
        # 클래스 속성은 그대로
        assert ValidationError.http_status == 400


class TestModelOutcomeErrors:
    """모델 응답 해석 에러 테스트."""

    def test_safety_blocked_message(self):
        ratings = [{"category": "HARM_CATEGORY_HARASSMENT", "probability": "HIGH"}]

        error = SafetyBlockedError(ratings)

        assert error.code == ErrorCodes.SAFETY_BLOCKED
        assert error.http_status == 422
        assert error.message.startswith(
            "The request was blocked for safety reasons. Please try different images. Details: "
        )
        assert error.message.endswith(json.dumps(ratings, indent=2))
        assert error.safety_ratings == ratings

    def test_safety_blocked_without_ratings(self):
        error = SafetyBlockedError()

        assert error.safety_ratings == []
        assert error.message.endswith("Details: []")

    def test_generation_failed_message(self):
        error = GenerationFailedError("RECITATION")

        assert error.message == "Image generation failed. Reason: RECITATION."
        assert error.reason == "RECITATION"
        assert error.http_status == 502

    def test_empty_response_message(self):
        error = EmptyResponseError(model_version="m-1")

        assert error.message == "The AI returned an invalid or empty response."
        assert error.context == {"model_version": "m-1"}

    def test_empty_outcome_message(self):
        error = EmptyOutcomeError()

        assert error.code == ErrorCodes.EMPTY_OUTCOME
        assert error.message == (
            "The AI's response was empty and did not contain "
            "a new image or any explanatory text."
        )


@pytest.mark.parametrize(
    "error_cls, status",
    [
        (EncodingError, 400),
        (TransportError, 502),
        (ProviderError, 500),
    ],
)
def test_http_status_mapping(error_cls, status):
    """코드/메시지를 받는 에러의 HTTP 상태."""
    error = error_cls("CODE", "message")

    assert isinstance(error, MergeError)
    assert error.http_status == status
