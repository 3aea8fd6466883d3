"""
Merge Service: 이미지 2장 → 병합 결과.

흐름:
1. 인코딩 (core/encoding)
2. 요청 구성: base → addition → instruction (순서 고정)
3. provider 호출 (IMAGE + TEXT 모달리티)
4. 응답 해석: 안전 차단 / 생성 실패 / 빈 응답 판정
5. 파트 스캔: 이미지 → data URI (마지막 것 채택), 텍스트 → 누적
6. 실패 텍스트 휴리스틱: 사과/거절 텍스트면 이미지 폐기
7. 이미지도 텍스트도 없으면 실패

재시도 없음. 모든 실패는 MergeError 하나로 호출자에게 전달.
"""

import base64
import logging
from collections.abc import Callable
from pathlib import Path

from src.app.providers.base import ImageProvider
from src.app.providers.gemini import GeminiImageProvider
from src.core.encoding import encode_image
from src.core.heuristics import is_failure_text
from src.core.logging import (
    complete_run_log,
    create_run_log,
    record_inputs,
    save_run_log,
)
from src.domain.constants import (
    DEFAULT_MERGE_MODEL,
    DEFAULT_TIMEOUT_SECONDS,
    FINISH_REASON_SAFETY,
    MERGE_INSTRUCTION,
)
from src.domain.errors import (
    EmptyOutcomeError,
    EmptyResponseError,
    ErrorCodes,
    GenerationFailedError,
    MergeError,
    SafetyBlockedError,
    ValidationError,
)
from src.domain.schemas import (
    EncodedImage,
    GenerationResponse,
    ImageInput,
    MergeOutcome,
    MergeRequest,
    MergeRunLog,
    ResponsePart,
)

logger = logging.getLogger(__name__)

# 값이 있어도 "사유 없음"으로 취급하는 finish/block reason
_UNSPECIFIED_REASONS = {"FINISH_REASON_UNSPECIFIED", "BLOCKED_REASON_UNSPECIFIED"}

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred while communicating with the AI."


class MergeService:
    """
    병합 서비스.

    provider(자격 증명 포함)는 외부에서 주입. 전역 클라이언트 없음.
    """

    def __init__(
        self,
        provider: ImageProvider,
        instruction: str = MERGE_INSTRUCTION,
        run_logs_dir: Path | None = None,
        failure_detector: Callable[[str], bool] = is_failure_text,
    ):
        """
        Args:
            provider: 이미지 생성 provider
            instruction: 모델 지시문
            run_logs_dir: run log 저장 디렉토리 (None이면 저장 안 함)
            failure_detector: 실패 텍스트 판정 함수
        """
        self.provider = provider
        self.instruction = instruction
        self.run_logs_dir = run_logs_dir
        self.failure_detector = failure_detector

    @classmethod
    def from_config(cls, config: dict, api_key: str | None = None) -> "MergeService":
        """
        설정 기반 생성.

        Args:
            config: 설정 (ai.merge, logging, paths 포함)
            api_key: API 키 (None이면 provider가 환경변수에서 로드)
        """
        merge_config = config.get("ai", {}).get("merge", {})
        provider = GeminiImageProvider(
            model=merge_config.get("model", DEFAULT_MERGE_MODEL),
            api_key=api_key,
            timeout=float(merge_config.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
        )

        run_logs_dir = None
        if config.get("logging", {}).get("run_logs", False):
            run_logs_dir = Path(config.get("paths", {}).get("logs_dir", "logs"))

        return cls(provider, run_logs_dir=run_logs_dir)

    # =========================================================================
    # Entry Point
    # =========================================================================

    async def merge_images(
        self,
        group: ImageInput | None,
        individual: ImageInput | None,
    ) -> MergeOutcome:
        """
        그룹 사진에 개인 사진 속 인물을 합성.

        Args:
            group: 그룹 사진 (base)
            individual: 추가할 인물 사진

        Returns:
            MergeOutcome

        Raises:
            MergeError: 모든 실패 (메시지 하나로 변환됨)
        """
        if group is None or individual is None:
            raise ValidationError(
                missing=[
                    name
                    for name, image in (("group", group), ("individual", individual))
                    if image is None
                ],
            )

        run_log = create_run_log(self.provider.model)

        try:
            base = encode_image(group)
            addition = encode_image(individual)
            record_inputs(run_log, base, addition)
            outcome = await self.merge(base, addition, run_log=run_log)

        except MergeError as e:
            logger.warning(f"Merge failed ({run_log.run_id}): {e}")
            complete_run_log(run_log, error=e)
            self._save_run_log(run_log)
            raise

        except Exception as e:
            logger.error(
                f"Merge failed with unexpected error ({run_log.run_id}): {e}",
                exc_info=True,
            )
            error = MergeError(
                ErrorCodes.UNKNOWN_ERROR,
                UNKNOWN_ERROR_MESSAGE,
                cause=type(e).__name__,
            )
            complete_run_log(run_log, error=error)
            self._save_run_log(run_log)
            raise error from e

        complete_run_log(run_log, outcome=outcome)
        self._save_run_log(run_log)
        logger.info(
            f"Merge finished ({run_log.run_id}): result={run_log.result}, "
            f"image_discarded={run_log.image_discarded}"
        )
        return outcome

    async def merge(
        self,
        base: EncodedImage,
        addition: EncodedImage,
        run_log: MergeRunLog | None = None,
    ) -> MergeOutcome:
        """
        인코딩된 이미지 2장 병합.

        Args:
            base: 그룹 사진 (첫 번째 이미지)
            addition: 추가할 인물 사진 (두 번째 이미지)
            run_log: 이미지 폐기 여부를 기록할 run log

        Returns:
            MergeOutcome
        """
        request = self.build_request(base, addition)
        response = await self.provider.generate(request)

        image_url, text_response = self.collect_parts(response)

        if image_url and self.failure_detector(text_response):
            logger.info("Response text indicates failure; discarding returned image")
            image_url = None
            if run_log is not None:
                run_log.image_discarded = True

        if not image_url and not text_response:
            raise EmptyOutcomeError(model_version=response.model_version)

        return MergeOutcome(image_url=image_url, text_response=text_response)

    # =========================================================================
    # Request / Response
    # =========================================================================

    def build_request(self, base: EncodedImage, addition: EncodedImage) -> MergeRequest:
        """요청 구성 (base → addition → instruction)."""
        return MergeRequest(base=base, addition=addition, instruction=self.instruction)

    def collect_parts(self, response: GenerationResponse) -> tuple[str | None, str]:
        """
        첫 번째 candidate의 파트 스캔.

        Returns:
            (image_url, text_response)

        Raises:
            SafetyBlockedError: 안전 사유 차단
            GenerationFailedError: 기타 사유로 생성 중단
            EmptyResponseError: candidate/content 없음
        """
        candidate = response.candidates[0] if response.candidates else None

        if candidate is None or candidate.parts is None:
            if candidate is not None:
                reason = _stated_reason(candidate.finish_reason)
                safety_ratings = candidate.safety_ratings
            else:
                reason = _stated_reason(response.block_reason)
                safety_ratings = []

            if reason == FINISH_REASON_SAFETY:
                raise SafetyBlockedError(safety_ratings)
            if reason:
                raise GenerationFailedError(reason)
            raise EmptyResponseError(model_version=response.model_version)

        image_url: str | None = None
        texts: list[str] = []

        for part in candidate.parts:
            if part.thought:
                continue
            if part.is_image:
                # 여러 개면 마지막 이미지 채택
                image_url = to_data_uri(part)
            elif part.text:
                texts.append(part.text.strip())

        return image_url, "\n".join(texts).strip()

    def _save_run_log(self, run_log: MergeRunLog) -> None:
        if self.run_logs_dir is None:
            return
        try:
            save_run_log(run_log, self.run_logs_dir)
        except OSError as e:
            logger.warning(f"Failed to save run log {run_log.run_id}: {e}")


def to_data_uri(part: ResponsePart) -> str:
    """이미지 파트 → data:<mediaType>;base64,<data>"""
    encoded = base64.b64encode(part.data or b"").decode("ascii")
    return f"data:{part.mime_type};base64,{encoded}"


def _stated_reason(reason: str | None) -> str | None:
    if not reason or reason in _UNSPECIFIED_REASONS:
        return None
    return reason
