import argparse
import asyncio
import sys

from loguru import logger

from src.catalog.auth import StaticAuthProvider
from src.catalog.enrichment import GogEnrichmentFetcher
from src.catalog.extractors import GogListingExtractor
from src.catalog.images import ImageUploader
from src.catalog.orchestrator import PopulateOrchestrator
from src.catalog.rate_limiter import HostRateLimiter
from src.catalog.storage import StrapiStorageClient, create_clients
from src.config import settings


def setup_logging() -> None:
    """
    로깅 설정을 초기화합니다.
    """
    logger.remove()
    log_level = "DEBUG" if settings.debug else settings.log_level.upper()
    logger.add(sys.stderr, level=log_level)

    logger.add(
        "logs/populate_{time:YYYY-MM-DD-HH-mm-ss}.log",
        rotation="10 MB",
        compression="zip",
        level=log_level,
    )


def parse_filters(filters: list[str]) -> dict[str, str]:
    """'key=value' 형식의 필터 목록을 딕셔너리로 변환합니다."""
    params: dict[str, str] = {}
    for item in filters:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise ValueError(f"필터 형식이 올바르지 않습니다: '{item}' (key=value)")
        params[key] = value
    return params


async def main(params: dict[str, str]) -> int:
    """
    카탈로그 적재 작업의 실행 진입점입니다.

    Returns:
        int: 종료 코드 (목록 조회 등 실행 전체가 실패하면 1)
    """
    setup_logging()

    logger.info(f"=== 카탈로그 적재 파이프라인 시작 ({settings.environment}) ===")

    auth_provider = (
        StaticAuthProvider(token=settings.storage_api_token)
        if settings.storage_api_token
        else None
    )

    async with create_clients() as http_client:
        storage = StrapiStorageClient(
            client=http_client,
            base_url=settings.storage_base_url,
            auth_provider=auth_provider,
        )
        image_limiter = HostRateLimiter.from_settings(settings)

        orchestrator = PopulateOrchestrator(
            extractor=GogListingExtractor(client=http_client),
            storage=storage,
            enrichment_fetcher=GogEnrichmentFetcher(client=http_client),
            image_uploader=ImageUploader(
                client=http_client, storage=storage, rate_limiter=image_limiter
            ),
            strict_slugs=settings.relation_slug_strict,
        )

        try:
            report = await orchestrator.populate(params)
        except Exception:
            logger.exception("카탈로그 적재 파이프라인 실패")
            return 1

    logger.success("=== 카탈로그 적재 파이프라인 완료 ===")
    logger.success(f"생성된 게임 수: {len(report.created)}")
    logger.success(f"건너뛴 게임 수: {len(report.skipped)}")
    if report.failed:
        logger.warning(f"실패한 게임 수: {len(report.failed)}")
    logger.success(f"총 소요 시간: {report.elapsed_seconds:.2f}초")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="카탈로그 적재 파이프라인 실행")
    parser.add_argument(
        "--filter",
        dest="filters",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="목록 API 필터 옵션 (여러 번 지정 가능, 예: --filter price=free)",
    )
    args = parser.parse_args()

    try:
        filter_params = parse_filters(args.filters)
    except ValueError as e:
        parser.error(str(e))

    sys.exit(asyncio.run(main(filter_params)))
