from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from src.catalog.models import Enrichment


class ListingExtractor(ABC):
    """
    ListingExtractor 인터페이스.

    외부 스토어 목록 API에서 상품 목록을 가져오는 메서드를 정의합니다.
    """

    @abstractmethod
    async def fetch_products(self, params: Mapping[str, Any]) -> list[dict[str, Any]]:
        """
        필터 파라미터로 상품 목록을 조회합니다.

        Args:
            params (Mapping[str, Any]): 목록 API 쿼리 문자열로 직렬화될 필터 옵션.

        Returns:
            list[dict[str, Any]]: 검증 전 원본 상품 데이터 목록.
        """
        raise NotImplementedError


class EnrichmentFetcher(ABC):
    """
    EnrichmentFetcher 인터페이스.

    상품 slug로 보조 설명 데이터를 가져옵니다. 실패 시 None을 반환해야 합니다.
    """

    @abstractmethod
    async def fetch(self, slug: str) -> Enrichment | None:
        raise NotImplementedError


class StorageClient(ABC):
    """
    StorageClient 인터페이스.

    컬렉션 단위의 범용 조회/생성과 바이너리 첨부 업로드를 정의합니다.
    """

    @abstractmethod
    async def find(
        self, collection: str, filters: Mapping[str, Any]
    ) -> list[dict[str, Any]]:
        """
        필터와 일치하는 레코드 목록을 반환합니다.

        Args:
            collection: 컬렉션 경로 (예: "developers", "games")
            filters: 정확히 일치해야 하는 속성 값

        Returns:
            일치하는 레코드의 속성 매핑 목록 (없으면 빈 리스트)
        """
        raise NotImplementedError

    @abstractmethod
    async def create(
        self, collection: str, attributes: Mapping[str, Any]
    ) -> dict[str, Any]:
        """
        레코드를 생성하고 생성된 레코드의 속성 매핑을 반환합니다.
        """
        raise NotImplementedError

    @abstractmethod
    async def upload(
        self,
        ref_id: Any,
        ref: str,
        field: str,
        filename: str,
        content: bytes,
        content_type: str = "image/jpeg",
    ) -> list[dict[str, Any]]:
        """
        바이너리 파일을 업로드하여 레코드의 필드에 첨부합니다.

        Args:
            ref_id: 첨부 대상 레코드 ID
            ref: 첨부 대상 모델 이름 (예: "game")
            field: 첨부 대상 필드 이름 (예: "cover", "gallery")
            filename: 업로드 파일 이름
            content: 파일 바이너리
            content_type: 파일 MIME 타입
        """
        raise NotImplementedError


class AuthProvider(ABC):
    """
    AuthProvider 인터페이스.

    이 인터페이스는 비동기적으로 유효한 토큰을 반환하는 메서드를 정의합니다.
    """

    @abstractmethod
    async def get_valid_token(self) -> str:
        """
        유효한 액세스 토큰을 비동기적으로 반환합니다.

        Returns:
            str: 유효한 액세스 토큰.
        """
        raise NotImplementedError
