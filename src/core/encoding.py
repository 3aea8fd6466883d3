"""
이미지 인코딩: ImageInput → EncodedImage

규칙:
- 파일은 메모리로 1회만 읽음
- 미디어 타입 결정 순서: 선언된 image/* → 시그니처 → 확장자
- image/*로 확정되지 않으면 reject (EncodingError)
"""

import base64
import logging
from pathlib import Path

from src.domain.constants import DEFAULT_MEDIA_TYPE, EXTENSION_MEDIA_TYPES
from src.domain.errors import EncodingError, ErrorCodes
from src.domain.schemas import EncodedImage, ImageInput

logger = logging.getLogger(__name__)

# (offset, signature, media_type)
_SIGNATURES: tuple[tuple[int, bytes, str], ...] = (
    (0, b"\x89PNG\r\n\x1a\n", "image/png"),
    (0, b"\xff\xd8\xff", "image/jpeg"),
    (0, b"GIF87a", "image/gif"),
    (0, b"GIF89a", "image/gif"),
    (0, b"BM", "image/bmp"),
)

_HEIF_BRANDS = {
    b"heic": "image/heic",
    b"heix": "image/heic",
    b"mif1": "image/heif",
    b"msf1": "image/heif",
}


# =============================================================================
# Media Type
# =============================================================================

def normalize_media_type(value: str) -> str:
    """
    파일 타입을 MIME 타입으로 정규화.

    Args:
        value: MIME 타입 또는 확장자 (점 유무 무관)

    Returns:
        소문자 MIME 타입, 알 수 없으면 application/octet-stream
    """
    value = (value or "").strip().lower()

    # 이미 MIME 타입이면 파라미터(; charset=...)만 제거
    if "/" in value:
        return value.split(";", 1)[0].strip()

    return EXTENSION_MEDIA_TYPES.get(value.lstrip("."), DEFAULT_MEDIA_TYPE)


def sniff_media_type(data: bytes) -> str | None:
    """바이트 시그니처로 이미지 타입 추정."""
    for offset, signature, media_type in _SIGNATURES:
        if data[offset:offset + len(signature)] == signature:
            return media_type

    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"

    if data[4:8] == b"ftyp":
        return _HEIF_BRANDS.get(data[8:12])

    return None


def resolve_media_type(
    data: bytes,
    declared: str | None = None,
    filename: str | None = None,
) -> str:
    """
    이미지 미디어 타입 확정.

    Raises:
        EncodingError: image/*로 확정할 수 없는 경우
    """
    declared_type = normalize_media_type(declared) if declared else ""
    if declared_type.startswith("image/"):
        return declared_type

    sniffed = sniff_media_type(data)
    if sniffed:
        return sniffed

    if filename:
        by_extension = normalize_media_type(Path(filename).suffix)
        if by_extension.startswith("image/"):
            return by_extension

    raise EncodingError(
        ErrorCodes.UNSUPPORTED_MEDIA_TYPE,
        "The selected file is not a supported image. "
        "Please choose a JPEG, PNG, GIF or WEBP photo.",
        declared=declared or None,
        filename=filename,
    )


# =============================================================================
# Encoding
# =============================================================================

def encode_image(image: ImageInput) -> EncodedImage:
    """
    이미지 바이트를 base64로 인코딩.

    Args:
        image: ImageInput

    Returns:
        EncodedImage

    Raises:
        EncodingError: 빈 파일 또는 이미지가 아닌 파일
    """
    if not image.data:
        raise EncodingError(
            ErrorCodes.EMPTY_FILE,
            "The selected image file is empty.",
            filename=image.filename,
        )

    media_type = resolve_media_type(image.data, image.media_type, image.filename)
    encoded = base64.b64encode(image.data).decode("ascii")

    return EncodedImage(data=encoded, media_type=media_type, size=len(image.data))


def encode_image_file(path: Path, media_type: str | None = None) -> EncodedImage:
    """
    디스크의 이미지 파일 인코딩.

    Raises:
        EncodingError: 파일 읽기 실패
    """
    try:
        data = path.read_bytes()
    except OSError as e:
        logger.error(f"Failed to read image file {path}: {e}")
        raise EncodingError(
            ErrorCodes.READ_FAILED,
            f"Could not read the image file '{path.name}'.",
            path=str(path),
            cause=str(e),
        ) from e

    return encode_image(
        ImageInput(data=data, media_type=media_type or "", filename=path.name)
    )
