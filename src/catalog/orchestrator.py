import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any

from loguru import logger
from pydantic import ValidationError

from src.catalog.constants import CREATION_DELAY_SECONDS, GALLERY_LIMIT
from src.catalog.images import ImageUploader
from src.catalog.interfaces import EnrichmentFetcher, ListingExtractor, StorageClient
from src.catalog.models import (
    EntityType,
    Enrichment,
    ImageField,
    ItemStatus,
    ProductListing,
)
from src.catalog.relations import RelationResult, precompute_relations
from src.catalog.repositories import GameRepository
from src.catalog.resolver import RelationResolver
from src.catalog.utils import describe_error, normalize_game_slug, to_iso_release_date


@dataclass
class GameResult:
    """상품 하나의 처리 결과."""

    title: str
    status: ItemStatus
    reason: str | None = None
    record_id: Any = None
    uploaded_images: int = 0


@dataclass
class PopulateReport:
    """
    populate 실행 결과를 나타내는 데이터 클래스입니다.
    """

    games: list[GameResult] = field(default_factory=list)
    relations: list[RelationResult] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def created(self) -> list[str]:
        return [r.title for r in self.games if r.status is ItemStatus.CREATED]

    @property
    def skipped(self) -> list[str]:
        return [r.title for r in self.games if r.status is ItemStatus.SKIPPED]

    @property
    def failed(self) -> list[GameResult]:
        return [r for r in self.games if r.status is ItemStatus.FAILED]


class PopulateOrchestrator:
    """
    스토어 상품 목록을 카탈로그로 적재하는 과정을 조율하는 클래스입니다.

    실행 순서:
        1. 상품 목록 조회 및 검증
        2. 관계 엔티티(개발사/퍼블리셔/카테고리/플랫폼) 사전 생성 (모두 끝날 때까지 대기)
        3. 상품별 게임 레코드 생성 (상품 간 동시 실행)
           조회 → 생성 → 커버 업로드 → 갤러리 업로드 → 대기
    """

    def __init__(
        self,
        extractor: ListingExtractor,
        storage: StorageClient,
        enrichment_fetcher: EnrichmentFetcher,
        image_uploader: ImageUploader,
        creation_delay_seconds: float = CREATION_DELAY_SECONDS,
        strict_slugs: bool = False,
    ) -> None:
        self._extractor = extractor
        self._storage = storage
        self._enrichment_fetcher = enrichment_fetcher
        self._image_uploader = image_uploader
        self._creation_delay_seconds = creation_delay_seconds
        self._strict_slugs = strict_slugs
        self._games = GameRepository(storage)

    async def populate(self, params: Mapping[str, Any]) -> PopulateReport:
        """
        필터 파라미터로 상품 목록을 가져와 카탈로그에 적재합니다.

        Args:
            params (Mapping[str, Any]): 목록 API 필터 옵션

        Returns:
            PopulateReport: 생성/건너뜀/실패 상품과 관계 엔티티 처리 결과

        Raises:
            Exception: 상품 목록 조회 실패는 실행 전체를 중단시키므로 그대로 전파됩니다.
                상품/엔티티 단위 오류는 전파되지 않고 결과에 기록됩니다.
        """
        logger.info(f"populate 실행 시작 - params: {dict(params)}")
        start_time = perf_counter()

        raw_products = await self._extractor.fetch_products(params)
        products, rejected = self._validate_products(raw_products)

        # 실행 단위 캐시를 위해 resolver는 실행마다 새로 만든다
        resolver = RelationResolver(self._storage, strict_slugs=self._strict_slugs)
        relation_results = await precompute_relations(resolver, products)

        tasks: list[asyncio.Task[GameResult]] = []
        async with asyncio.TaskGroup() as tg:
            for product in products:
                tasks.append(tg.create_task(self._settle_game(product, resolver)))

        report = PopulateReport(
            games=rejected + [task.result() for task in tasks],
            relations=relation_results,
            elapsed_seconds=perf_counter() - start_time,
        )

        for result in report.failed:
            logger.warning(f"게임 처리 실패: '{result.title}' - {result.reason}")

        logger.success(
            f"populate 실행 완료 - 생성: {len(report.created)}, "
            f"건너뜀: {len(report.skipped)}, 실패: {len(report.failed)}, "
            f"소요 시간: {report.elapsed_seconds:.2f}초"
        )
        return report

    @staticmethod
    def _validate_products(
        raw_products: list[dict[str, Any]],
    ) -> tuple[list[ProductListing], list[GameResult]]:
        """
        원본 상품 데이터를 검증하고, 같은 배치 안에서 제목이 중복된 상품을 걸러냅니다.

        Returns:
            tuple: (처리할 상품 목록, 검증 실패/중복으로 제외된 상품 결과 목록)
        """
        products: list[ProductListing] = []
        rejected: list[GameResult] = []
        seen_titles: set[str] = set()

        for raw in raw_products:
            try:
                product = ProductListing.model_validate(raw)
            except ValidationError as e:
                title = str(raw.get("title", "<unknown>")) if isinstance(raw, dict) else "<unknown>"
                logger.error(f"유효하지 않은 상품 데이터: '{title}' - {e.error_count()}개 오류")
                rejected.append(
                    GameResult(
                        title=title,
                        status=ItemStatus.FAILED,
                        reason=f"유효하지 않은 상품 데이터: {e.errors()[0]['msg']}",
                    )
                )
                continue

            if product.title in seen_titles:
                rejected.append(
                    GameResult(
                        title=product.title,
                        status=ItemStatus.SKIPPED,
                        reason="배치 내 중복 제목",
                    )
                )
                continue

            seen_titles.add(product.title)
            products.append(product)

        return products, rejected

    async def _settle_game(
        self, product: ProductListing, resolver: RelationResolver
    ) -> GameResult:
        """예상하지 못한 오류도 실패 결과로 바꿔 다른 상품 처리가 취소되지 않게 한다."""
        try:
            return await self._create_game(product, resolver)
        except Exception as e:
            logger.exception(f"[create_game] '{product.title}' 처리 중 예상치 못한 오류")
            return GameResult(
                title=product.title, status=ItemStatus.FAILED, reason=describe_error(e)
            )

    async def _create_game(
        self, product: ProductListing, resolver: RelationResolver
    ) -> GameResult:
        """
        상품 하나에 대한 게임 레코드 생성 절차를 수행합니다.

        Args:
            product (ProductListing): 검증된 상품
            resolver (RelationResolver): 관계 엔티티 캐시가 채워진 resolver

        Returns:
            GameResult: 처리 결과 (CREATED, SKIPPED, FAILED 중 하나)
        """
        try:
            existing = await self._games.find_by_name(product.title)
        except Exception as e:
            logger.error(f"[create_game] '{product.title}' 조회 실패: {describe_error(e)}")
            return GameResult(
                title=product.title, status=ItemStatus.FAILED, reason=describe_error(e)
            )

        if existing is not None:
            logger.debug(f"이미 존재하는 게임, 건너뜀: '{product.title}'")
            return GameResult(
                title=product.title, status=ItemStatus.SKIPPED, record_id=existing.id
            )

        attributes = await self._build_game_attributes(product, resolver)

        logger.info(f"게임 생성 중: {product.title}...")
        try:
            game = await self._games.create(attributes)
        except Exception as e:
            logger.error(f"[create_game] '{product.title}' 생성 실패: {describe_error(e)}")
            return GameResult(
                title=product.title, status=ItemStatus.FAILED, reason=describe_error(e)
            )

        uploaded = 0
        if product.image:
            uploaded += await self._image_uploader.upload_image(
                product.image, game, field=ImageField.COVER
            )

        # 갤러리는 앞 5장까지만, 요청은 순서대로 시작하고 완료는 함께 기다린다
        async with asyncio.TaskGroup() as tg:
            gallery_tasks = [
                tg.create_task(
                    self._image_uploader.upload_image(ref, game, field=ImageField.GALLERY)
                )
                for ref in product.gallery[:GALLERY_LIMIT]
            ]
        uploaded += sum(task.result() for task in gallery_tasks)

        await asyncio.sleep(self._creation_delay_seconds)

        return GameResult(
            title=product.title,
            status=ItemStatus.CREATED,
            record_id=game.id,
            uploaded_images=uploaded,
        )

    async def _build_game_attributes(
        self, product: ProductListing, resolver: RelationResolver
    ) -> dict[str, Any]:
        categories = await asyncio.gather(
            *(resolver.lookup(name, EntityType.CATEGORY) for name in product.genres)
        )
        platforms = await asyncio.gather(
            *(
                resolver.lookup(name, EntityType.PLATFORM)
                for name in product.operating_systems
            )
        )
        developer = await resolver.lookup(product.developer, EntityType.DEVELOPER)
        publisher = await resolver.lookup(product.publisher, EntityType.PUBLISHER)

        attributes: dict[str, Any] = {
            "name": product.title,
            "slug": normalize_game_slug(product.slug),
            "price": product.price.amount,
            "categories": [entity.id for entity in categories if entity is not None],
            "platforms": [entity.id for entity in platforms if entity is not None],
            "developers": [developer.id] if developer is not None else [],
            "publisher": publisher.id if publisher is not None else None,
        }

        release_date = to_iso_release_date(product.release_timestamp)
        if release_date is not None:
            attributes["release_date"] = release_date

        enrichment = await self._fetch_enrichment(product.slug)
        if enrichment is not None:
            attributes.update(enrichment.as_attributes())

        return attributes

    async def _fetch_enrichment(self, slug: str) -> Enrichment | None:
        try:
            return await self._enrichment_fetcher.fetch(slug)
        except Exception as e:
            logger.error(f"[fetch_enrichment] '{slug}' 보조 설명 조회 실패: {describe_error(e)}")
            return None
