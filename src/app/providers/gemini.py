"""
Google Gemini Image Provider.

google-genai SDK의 generate_content로 이미지 2장 + 지시문 전송,
IMAGE/TEXT 응답 모달리티 요청.

예외 정책:
- 재시도/fallback 없음
- API 호출 중 발생한 예외는 TransportError로 감싸 전파 (원인 chain 유지)
- 응답 해석은 하지 않음 (services/merge.py 담당)
"""

import base64
import logging
import os
from typing import Any

import httpx
from google.genai import errors as genai_errors
from google.genai import types

from src.domain.constants import DEFAULT_MERGE_MODEL, DEFAULT_TIMEOUT_SECONDS
from src.domain.errors import ErrorCodes, ProviderError, TransportError
from src.domain.schemas import (
    EncodedImage,
    GenerationResponse,
    MergeRequest,
    ResponseCandidate,
    ResponsePart,
)

from .base import ImageProvider

logger = logging.getLogger(__name__)

API_KEY_ENV_VARS = ("GOOGLE_API_KEY", "GEMINI_API_KEY")


class GeminiImageProvider(ImageProvider):
    """
    Gemini 이미지 생성 Provider.

    Usage:
        provider = GeminiImageProvider(
            model="gemini-2.5-flash-image-preview",
            api_key=os.environ["GOOGLE_API_KEY"],
        )
        response = await provider.generate(request)
    """

    def __init__(
        self,
        model: str = DEFAULT_MERGE_MODEL,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: Any = None,
    ):
        """
        Args:
            model: 모델 ID (config에서 주입)
            api_key: API 키 (없으면 GOOGLE_API_KEY, GEMINI_API_KEY 순)
            timeout: HTTP 타임아웃(초)
            client: 미리 구성된 genai.Client (테스트/재사용)
        """
        self.model = model
        self.api_key = api_key or _api_key_from_env()
        self.timeout = timeout
        self._client: Any = client

    def _get_client(self) -> Any:
        """Gemini 클라이언트 (lazy init)."""
        if self._client is None:
            if not self.api_key:
                raise TransportError(
                    ErrorCodes.API_KEY_MISSING,
                    "The Gemini API key is not configured. "
                    "Set the GOOGLE_API_KEY environment variable.",
                )
            try:
                from google import genai

                self._client = genai.Client(
                    api_key=self.api_key,
                    http_options=types.HttpOptions(timeout=int(self.timeout * 1000)),
                )
            except Exception as e:
                raise ProviderError(
                    ErrorCodes.CLIENT_INIT_FAILED,
                    f"Could not initialise the Gemini client: {e}",
                ) from e
        return self._client

    async def generate(self, request: MergeRequest) -> GenerationResponse:
        """
        병합 요청 전송 후 응답 정규화.

        Raises:
            TransportError: API 호출 실패
        """
        client = self._get_client()
        contents = self._build_contents(request)
        config = types.GenerateContentConfig(
            response_modalities=[types.Modality.IMAGE, types.Modality.TEXT],
        )

        logger.info(
            f"Requesting merge from {self.model} "
            f"(base={request.base.media_type}, addition={request.addition.media_type})"
        )

        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=config,
            )
        except Exception as e:
            logger.error(f"Gemini request failed: {e}", exc_info=True)
            raise TransportError(
                ErrorCodes.TRANSPORT_ERROR,
                self._get_user_friendly_error_message(e),
                model=self.model,
                cause=type(e).__name__,
            ) from e

        return self._normalize_response(response)

    # =========================================================================
    # Request
    # =========================================================================

    def _build_contents(self, request: MergeRequest) -> list[types.Part]:
        """요청 파트 구성. 순서: base → addition → instruction."""
        return [
            self._image_part(request.base),
            self._image_part(request.addition),
            types.Part.from_text(text=request.instruction),
        ]

    def _image_part(self, image: EncodedImage) -> types.Part:
        return types.Part.from_bytes(
            data=base64.b64decode(image.data),
            mime_type=image.media_type,
        )

    # =========================================================================
    # Response
    # =========================================================================

    def _normalize_response(self, response: Any) -> GenerationResponse:
        """SDK 응답 → GenerationResponse."""
        candidates = [
            self._normalize_candidate(candidate)
            for candidate in (response.candidates or [])
        ]

        block_reason = None
        feedback = getattr(response, "prompt_feedback", None)
        if feedback is not None and feedback.block_reason:
            block_reason = _enum_value(feedback.block_reason)

        return GenerationResponse(
            candidates=candidates,
            block_reason=block_reason,
            model_version=getattr(response, "model_version", None),
        )

    def _normalize_candidate(self, candidate: Any) -> ResponseCandidate:
        content = candidate.content
        parts = None
        if content is not None and content.parts is not None:
            parts = [self._normalize_part(part) for part in content.parts]

        return ResponseCandidate(
            parts=parts,
            finish_reason=_enum_value(candidate.finish_reason),
            safety_ratings=[
                rating.model_dump(mode="json", exclude_none=True)
                for rating in (candidate.safety_ratings or [])
            ],
        )

    def _normalize_part(self, part: Any) -> ResponsePart:
        inline = part.inline_data
        return ResponsePart(
            text=part.text,
            mime_type=inline.mime_type if inline is not None else None,
            data=inline.data if inline is not None else None,
            thought=bool(part.thought),
        )

    # =========================================================================
    # Errors
    # =========================================================================

    def _get_user_friendly_error_message(self, error: Exception) -> str:
        """사용자 친화적인 에러 메시지 생성."""
        if isinstance(error, genai_errors.APIError):
            code = error.code
            if code == 401:
                return (
                    "Google API authentication failed. "
                    "Please check the GOOGLE_API_KEY setting."
                )
            elif code == 403:
                return (
                    "The API key is not allowed to use this model. "
                    "Please check the key's permissions."
                )
            elif code == 429:
                return (
                    "The API usage limit was exceeded. "
                    "Please wait a moment and try again."
                )
            elif code == 400:
                return (
                    "The request was rejected as invalid. "
                    "Please check the format and size of the photos."
                )
            elif code == 404:
                return f"The model '{self.model}' is not available."
            elif isinstance(error, genai_errors.ServerError):
                return (
                    "The Gemini service is temporarily unavailable. "
                    "Please try again later."
                )

        if isinstance(error, httpx.TimeoutException | TimeoutError):
            return "The request to the AI timed out. Please try again."
        if isinstance(error, httpx.TransportError | ConnectionError):
            return "A network error occurred while contacting the AI."

        error_str = str(error)
        lowered = error_str.lower()
        if "api_key" in lowered or "api key" in lowered:
            return "Please check the API key configuration."
        elif "quota" in lowered:
            return "The API usage limit was exceeded. Please try again later."

        return f"An error occurred while communicating with the AI: {error_str}"


def _api_key_from_env() -> str | None:
    for name in API_KEY_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value
    return None


def _enum_value(value: Any) -> str | None:
    """SDK enum → 문자열 (FinishReason.SAFETY → "SAFETY")."""
    if value is None:
        return None
    return str(getattr(value, "value", value))
