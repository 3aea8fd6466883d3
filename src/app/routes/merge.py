"""
Merge Routes: 사진 업로드 → 병합 결과.

- GET / → 업로드 화면 (HTMX)
- POST /merge → 결과/에러 HTML 조각 (HTMX swap 대상)
- POST /api/merge → JSON (image_url, text_response)

동시성: 요청 1건 진행 중에는 화면에서 버튼 비활성화 (hx-disabled-elt).
서버는 병합 간 공유 상태 없음.
"""

import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from src.app.services.merge import MergeService
from src.domain.constants import DEFAULT_MAX_UPLOAD_BYTES
from src.domain.errors import ErrorCodes, MergeError, ValidationError
from src.domain.schemas import ImageInput

logger = logging.getLogger(__name__)

# Jinja2 템플릿 설정
_templates_dir = Path(__file__).parent.parent / "templates"
jinja_templates = Jinja2Templates(directory=_templates_dir)

# Routers
router = APIRouter()  # HTML pages
api_router = APIRouter()  # API endpoints


# =============================================================================
# Helpers
# =============================================================================


def get_merge_service(request: Request) -> MergeService:
    """lifespan에서 구성된 MergeService."""
    service: MergeService = request.app.state.merge_service
    return service


def get_max_upload_bytes(request: Request) -> int:
    config: dict = getattr(request.app.state, "config", {}) or {}
    return int(config.get("upload", {}).get("max_bytes", DEFAULT_MAX_UPLOAD_BYTES))


async def read_upload(
    upload: UploadFile | None,
    label: str,
    max_bytes: int,
) -> ImageInput | None:
    """
    업로드 파일 → ImageInput.

    파일 미선택(None 또는 빈 filename)이면 None.

    Raises:
        ValidationError: 크기 초과
    """
    if upload is None or not upload.filename:
        return None

    data = await upload.read()
    if len(data) > max_bytes:
        raise ValidationError(
            ErrorCodes.FILE_TOO_LARGE,
            f"The {label} is too large. "
            f"Please use a photo under {max_bytes // (1024 * 1024)} MB.",
            filename=upload.filename,
            size=len(data),
        )

    return ImageInput(
        data=data,
        media_type=upload.content_type or "",
        filename=upload.filename,
    )


async def _run_merge(
    request: Request,
    group_photo: UploadFile | None,
    individual_photo: UploadFile | None,
) -> dict[str, Any]:
    max_bytes = get_max_upload_bytes(request)
    group = await read_upload(group_photo, "group photo", max_bytes)
    individual = await read_upload(individual_photo, "individual photo", max_bytes)

    service = get_merge_service(request)
    outcome = await service.merge_images(group, individual)
    return outcome.to_dict()


# =============================================================================
# Page Routes (HTML)
# =============================================================================


@router.get("/", response_class=HTMLResponse)
async def index_page(request: Request) -> HTMLResponse:
    """업로드 화면."""
    return jinja_templates.TemplateResponse(
        request,
        "index.html",
        {"max_upload_mb": get_max_upload_bytes(request) // (1024 * 1024)},
    )


@router.post("/merge", response_class=HTMLResponse)
async def merge_fragment(
    request: Request,
    group_photo: UploadFile | None = File(None),
    individual_photo: UploadFile | None = File(None),
) -> HTMLResponse:
    """
    병합 실행 후 결과 조각 반환.

    HTMX는 4xx/5xx 응답을 swap하지 않으므로 에러도 200 + 에러 카드로 반환.
    """
    try:
        result = await _run_merge(request, group_photo, individual_photo)
    except MergeError as e:
        return jinja_templates.TemplateResponse(
            request,
            "partials/error.html",
            {"error_message": f"Failed to merge images. {e.message}", "code": e.code},
        )

    return jinja_templates.TemplateResponse(
        request,
        "partials/result.html",
        {
            "image_url": result["image_url"],
            "text_response": result["text_response"],
        },
    )


# =============================================================================
# API Routes
# =============================================================================


@api_router.post("")
async def merge_api(
    request: Request,
    group_photo: UploadFile | None = File(None),
    individual_photo: UploadFile | None = File(None),
) -> dict[str, Any]:
    """
    병합 API.

    Returns:
        {"image_url": str | None, "text_response": str}
    """
    try:
        return await _run_merge(request, group_photo, individual_photo)
    except MergeError as e:
        raise HTTPException(
            status_code=e.http_status,
            detail={"code": e.code, "message": e.message},
        ) from e
