from collections.abc import Mapping
from typing import Any

import httpx
from loguru import logger
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.catalog.constants import LISTING_BASE_PARAMS
from src.catalog.interfaces import ListingExtractor
from src.config import settings


class GogListingExtractor(ListingExtractor):
    """GOG 목록 API로부터 상품 데이터를 추출하는 Extractor 구현체."""

    def __init__(self, client: Any, api_url: str | None = None) -> None:
        """
        Args:
            client: HTTP 클라이언트 (httpx.AsyncClient 등)
            api_url: 목록 API URL (기본값: settings.listing_api_url)
        """
        self._client = client
        self._api_url = api_url or settings.listing_api_url

    @staticmethod
    def build_query(params: Mapping[str, Any]) -> dict[str, Any]:
        """
        호출자 필터와 고정 쿼리를 합칩니다. 키가 겹치면 고정 쿼리가 우선합니다.
        """
        return {**params, **LISTING_BASE_PARAMS}

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.TimeoutException)),
        reraise=True,
    )
    async def fetch_products(self, params: Mapping[str, Any]) -> list[dict[str, Any]]:
        """
        목록 API에서 첫 페이지 상품 목록을 가져옵니다.

        Args:
            params (Mapping[str, Any]): 쿼리 문자열로 직렬화될 필터 옵션 (예: {"price": "free"})

        Returns:
            list[dict[str, Any]]: 원본 상품 데이터 목록

        Raises:
            Exception: 요청 또는 응답 파싱 실패 시 예외를 그대로 전파합니다.
        """
        query = self.build_query(params)
        logger.info(f"상품 목록 조회 시작: {self._api_url} (params={query})")

        try:
            response = await self._client.get(self._api_url, params=query)
            response.raise_for_status()
            products = response.json().get("products") or []
        except Exception as e:
            logger.error(f"상품 목록 조회 중 오류 발생 (params={query}): {e}")
            raise

        logger.info(f"상품 목록 조회 완료: {len(products)}개")
        return products
