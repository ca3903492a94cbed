import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Self

from aiolimiter import AsyncLimiter
from loguru import logger

from src.config import Settings


class HostRateLimiter:
    """
    이미지 호스트/업로드 엔드포인트 요청 속도 제한기.

    상품은 모두 동시에 처리되므로 상품별 고정 대기만으로는 전체 요청 속도가
    줄지 않습니다. 이미지 한 장의 다운로드와 업로드를 하나의 슬롯으로 보고,
    동시 슬롯 수(Semaphore)와 초당 슬롯 획득 수(AsyncLimiter)를 함께 제한합니다.

    Example:
        >>> limiter = HostRateLimiter(requests_per_second=2, max_concurrency=2)
        >>> async with limiter:
        ...     content = await download(url)
        ...     await storage.upload(...)
    """

    def __init__(
        self,
        requests_per_second: float = 4.0,
        max_concurrency: int = 4,
    ) -> None:
        """
        Args:
            requests_per_second: 초당 새로 시작할 수 있는 슬롯 수.
            max_concurrency: 동시에 진행 중일 수 있는 슬롯 수.
        """
        self._rate_limiter = AsyncLimiter(requests_per_second, time_period=1.0)
        self._semaphore = asyncio.Semaphore(max_concurrency)

    @classmethod
    def from_settings(cls, settings: Settings) -> Self:
        """IMAGE_REQUESTS_PER_SECOND / IMAGE_MAX_CONCURRENCY 설정으로 생성합니다."""
        return cls(
            requests_per_second=settings.image_requests_per_second,
            max_concurrency=settings.image_max_concurrency,
        )

    async def __aenter__(self) -> Self:
        # 슬롯을 먼저 잡아야 대기 중인 요청이 토큰을 미리 소모하지 않는다
        await self._semaphore.acquire()
        try:
            await self._rate_limiter.acquire()
        except BaseException:
            self._semaphore.release()
            raise
        return self

    async def __aexit__(self, *args: object) -> None:
        self._semaphore.release()


@asynccontextmanager
async def optional_rate_limiter(
    limiter: HostRateLimiter | None,
) -> AsyncGenerator[None, None]:
    """limiter가 None이면 제한 없이 바로 진입합니다."""
    if limiter is None:
        logger.trace("rate limiter 없이 요청 진행")
        yield
        return

    async with limiter:
        yield
