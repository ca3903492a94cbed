from typing import Any

import httpx
from loguru import logger
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.catalog.constants import IMAGE_SIZE_SUFFIX, UPLOAD_REF
from src.catalog.interfaces import StorageClient
from src.catalog.models import GameRecord, ImageField
from src.catalog.rate_limiter import HostRateLimiter, optional_rate_limiter
from src.catalog.utils import describe_error


class ImageUploader:
    """
    원격 이미지를 내려받아 저장소 백엔드의 업로드 엔드포인트로 첨부합니다.

    다운로드와 업로드는 하나의 rate limit 슬롯 안에서 수행됩니다.
    """

    def __init__(
        self,
        client: Any,
        storage: StorageClient,
        rate_limiter: HostRateLimiter | None = None,
    ) -> None:
        """
        Args:
            client: 이미지 다운로드용 HTTP 클라이언트
            storage: 업로드 대상 저장소 클라이언트
            rate_limiter: 이미지 요청 속도 제한기 (기본값: None)
        """
        self._client = client
        self._storage = storage
        self._rate_limiter = rate_limiter

    @staticmethod
    def build_image_url(source_ref: str) -> str:
        """
        이미지 참조에 크롭 크기 접미사를 붙여 다운로드 URL을 만듭니다.

        프로토콜 상대 참조('//images.gog.com/...')에는 'https:'를 붙입니다.
        """
        base = f"https:{source_ref}" if source_ref.startswith("//") else source_ref
        return f"{base}{IMAGE_SIZE_SUFFIX}"

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.TimeoutException)),
        reraise=True,
    )
    async def _download(self, url: str) -> bytes:
        response = await self._client.get(url)
        response.raise_for_status()
        return response.content

    async def upload_image(
        self,
        source_ref: str,
        game: GameRecord,
        field: ImageField = ImageField.COVER,
    ) -> bool:
        """
        이미지 한 장을 내려받아 게임 레코드의 필드에 업로드합니다.

        Args:
            source_ref (str): 이미지 참조 (프로토콜 상대 URL)
            game (GameRecord): 첨부 대상 게임 레코드
            field (ImageField): 첨부 필드 (cover 또는 gallery)

        Returns:
            bool: 업로드 성공 여부. 실패는 로그만 남기고 예외를 전파하지 않습니다.
        """
        url = self.build_image_url(source_ref)
        filename = f"{game.slug}.jpg"

        try:
            async with optional_rate_limiter(self._rate_limiter):
                content = await self._download(url)
                logger.info(f"{field} 이미지 업로드 중: {filename}")
                await self._storage.upload(
                    ref_id=game.id,
                    ref=UPLOAD_REF,
                    field=field,
                    filename=filename,
                    content=content,
                )
        except Exception as e:
            logger.error(
                f"[upload_image] '{game.name}' {field} 이미지 업로드 실패 ({url}): "
                f"{describe_error(e)}"
            )
            return False

        return True
