"""
Domain Constants: 병합 파이프라인 전역 상수.

모델 지시문, 실패 키워드, 미디어 타입 테이블 등
시스템 전반에서 사용되는 값들.
"""

# =============================================================================
# Model (모델 기본값)
# =============================================================================
# 모델명은 default.yaml(ai.merge.model)이 SSOT. 여기 값은 설정 누락 시 기본값.

DEFAULT_MERGE_MODEL = "gemini-2.5-flash-image-preview"
DEFAULT_TIMEOUT_SECONDS = 120.0

# =============================================================================
# Merge Instruction (병합 지시문)
# =============================================================================
# "first image" / "second image"는 요청 파트 순서를 가리킨다.
# 파트 순서(base → addition → instruction)를 바꾸면 지시문 의미가 깨짐.

MERGE_INSTRUCTION = (
    "You are a skilled photo editor. Your task is to merge two images. "
    "The first image is the base group photo. "
    "The second image contains a person to add to the group.\n"
    "\n"
    "Please place the person from the second image into the first image, "
    "positioning them on the far left of the group.\n"
    "\n"
    "Ensure the final result is a single, realistic image where the added "
    "person blends in naturally. Only output the final merged photo."
)

# =============================================================================
# Failure Text Heuristic (실패 텍스트 휴리스틱)
# =============================================================================
# 소문자 부분 문자열 매칭. 하나라도 포함되면 반환 이미지를 폐기.

FAILURE_KEYWORDS: tuple[str, ...] = (
    "cannot",
    "unable",
    "instead",
    "failed",
    "sorry",
    "do not have the ability",
)

# =============================================================================
# Finish Reasons
# =============================================================================

FINISH_REASON_SAFETY = "SAFETY"

# =============================================================================
# Media Types (미디어 타입 정책)
# =============================================================================

DEFAULT_MEDIA_TYPE = "application/octet-stream"

EXTENSION_MEDIA_TYPES: dict[str, str] = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "jpe": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "bmp": "image/bmp",
    "heic": "image/heic",
    "heif": "image/heif",
    "pdf": "application/pdf",
}

# =============================================================================
# Upload Limits (업로드 제한)
# =============================================================================

DEFAULT_MAX_UPLOAD_BYTES = 20 * 1024 * 1024  # 20MB (inline data 한도)
