"""
Image Provider 추상 인터페이스.

- Provider 추상화로 모델/벤더 교체 가능
- 응답은 provider 독립 GenerationResponse로 정규화해서 반환
- 해석(안전 차단, 실패 텍스트 판정)은 services/merge.py 담당
"""

from abc import ABC, abstractmethod

from src.domain.errors import ProviderError
from src.domain.schemas import GenerationResponse, MergeRequest

__all__ = ["ImageProvider", "ProviderError"]


class ImageProvider(ABC):
    """
    이미지 생성 Provider 추상 인터페이스.

    역할: 요청 전송 + 응답 정규화 (성공/실패 판정 권한 없음)
    """

    model: str

    @abstractmethod
    async def generate(self, request: MergeRequest) -> GenerationResponse:
        """
        병합 요청 전송.

        Args:
            request: base → addition → instruction 순서의 요청

        Returns:
            GenerationResponse

        Raises:
            TransportError: 네트워크/API 클라이언트 실패
        """
        ...
