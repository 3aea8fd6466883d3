"""
Pytest fixtures for the merge pipeline tests.

외부 모델 API는 항상 mock (모델 출력은 비결정적).
"""

import base64
from pathlib import Path

import pytest
import yaml

from src.app.providers.base import ImageProvider
from src.domain.schemas import (
    EncodedImage,
    GenerationResponse,
    MergeRequest,
    ResponseCandidate,
    ResponsePart,
)

# 1x1 white pixel PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8/5+hHgAHggJ/PchI7wAAAABJRU5ErkJggg=="
)
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"


# =============================================================================
# Fake Provider
# =============================================================================

class FakeImageProvider(ImageProvider):
    """응답/예외를 미리 지정하는 provider."""

    def __init__(self, model: str = "fake-image-model"):
        self.model = model
        self.response: GenerationResponse | None = None
        self.error: Exception | None = None
        self.requests: list[MergeRequest] = []

    async def generate(self, request: MergeRequest) -> GenerationResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        assert self.response is not None, "test must set provider.response"
        return self.response


# =============================================================================
# Path / Config Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """프로젝트 루트 경로."""
    return Path(__file__).parent.parent


@pytest.fixture
def default_config(project_root: Path) -> dict:
    """기본 설정 로드."""
    with open(project_root / "default.yaml", encoding="utf-8") as f:
        return yaml.safe_load(f)


# =============================================================================
# Image Fixtures
# =============================================================================

@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def jpeg_bytes() -> bytes:
    return JPEG_BYTES


@pytest.fixture
def group_image() -> EncodedImage:
    """그룹 사진 (base)."""
    return EncodedImage(
        data=base64.b64encode(PNG_BYTES).decode("ascii"),
        media_type="image/png",
        size=len(PNG_BYTES),
    )


@pytest.fixture
def individual_image() -> EncodedImage:
    """추가할 인물 사진."""
    return EncodedImage(
        data=base64.b64encode(JPEG_BYTES).decode("ascii"),
        media_type="image/jpeg",
        size=len(JPEG_BYTES),
    )


# =============================================================================
# Provider / Response Fixtures
# =============================================================================

@pytest.fixture
def fake_provider() -> FakeImageProvider:
    return FakeImageProvider()


@pytest.fixture
def make_response():
    """
    정규화된 응답 생성기.

    Usage:
        make_response(image=b"...", text="설명")
        make_response(parts=[...], finish_reason="STOP")
    """

    def _make(
        image: bytes | None = None,
        text: str | None = None,
        parts: list[ResponsePart] | None = None,
        finish_reason: str | None = "STOP",
        mime_type: str = "image/png",
    ) -> GenerationResponse:
        if parts is None:
            parts = []
            if image is not None:
                parts.append(ResponsePart(mime_type=mime_type, data=image))
            if text is not None:
                parts.append(ResponsePart(text=text))

        return GenerationResponse(
            candidates=[ResponseCandidate(parts=parts, finish_reason=finish_reason)],
            model_version="fake-image-model-001",
        )

    return _make
