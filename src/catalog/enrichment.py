from typing import Any

from bs4 import BeautifulSoup
from loguru import logger

from src.catalog.constants import (
    DESCRIPTION_SELECTOR,
    FREE_RATING,
    SHORT_DESCRIPTION_LENGTH,
)
from src.catalog.interfaces import EnrichmentFetcher
from src.catalog.models import Enrichment
from src.catalog.utils import describe_error
from src.config import settings


class GogEnrichmentFetcher(EnrichmentFetcher):
    """
    GOG 상품 상세 페이지에서 설명을 추출하는 EnrichmentFetcher 구현체.

    상세 페이지의 `.description` 요소에서
    - short_description: 텍스트의 앞 160자 (단어 경계 무시)
    - description: 요소 내부 HTML
    을 가져오며, 등급은 항상 "FREE"입니다.
    """

    def __init__(self, client: Any, page_url_template: str | None = None) -> None:
        """
        Args:
            client: HTTP 클라이언트 (httpx.AsyncClient 등)
            page_url_template: '{slug}'를 포함한 상세 페이지 URL 템플릿
                (기본값: settings.detail_page_url)
        """
        self._client = client
        self._page_url_template = page_url_template or settings.detail_page_url

    async def fetch(self, slug: str) -> Enrichment | None:
        """
        상세 페이지를 가져와 설명 필드를 추출합니다.

        Args:
            slug (str): 스토어 상품 slug

        Returns:
            Enrichment | None: 추출 결과. 요청/파싱 실패 시 None.
        """
        url = self._page_url_template.format(slug=slug)

        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except Exception as e:
            logger.warning(f"[fetch_enrichment] 상세 페이지 요청 실패 ({url}): {describe_error(e)}")
            return None

        soup = BeautifulSoup(response.text, "html.parser")
        node = soup.select_one(DESCRIPTION_SELECTOR)

        if node is None:
            logger.warning(
                f"[fetch_enrichment] '{DESCRIPTION_SELECTOR}' 요소를 찾을 수 없습니다: {url}"
            )
            return None

        return Enrichment(
            rating=FREE_RATING,
            short_description=node.get_text()[:SHORT_DESCRIPTION_LENGTH],
            description=node.decode_contents(),
        )
