"""
응답 텍스트 실패 판정.

모델이 사과/설명 텍스트와 함께 엉뚱한 이미지를 돌려주는 경우가 있어
이미지 존재 여부보다 텍스트를 성공/실패 신호로 우선한다.

단순 키워드 매칭이라 오탐/미탐 가능. 교체 시 이 함수만 바꾸면 됨.
"""

from collections.abc import Iterable

from src.domain.constants import FAILURE_KEYWORDS


def is_failure_text(
    text: str | None,
    keywords: Iterable[str] = FAILURE_KEYWORDS,
) -> bool:
    """
    텍스트가 실패를 나타내는지 판정.

    Args:
        text: 모델 응답 텍스트 (trim 완료)
        keywords: 소문자 키워드 목록

    Returns:
        키워드가 하나라도 포함되면 True. 빈 텍스트는 False.
    """
    if not text:
        return False

    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)
