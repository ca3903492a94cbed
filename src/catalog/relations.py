"""게임 레코드 생성 전에 관계 엔티티를 일괄 생성하는 모듈."""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass

from loguru import logger

from src.catalog.models import EntityType, ItemStatus, ProductListing
from src.catalog.resolver import RelationResolver


@dataclass
class RelationResult:
    """관계 엔티티 하나의 처리 결과."""

    entity_type: EntityType
    name: str
    status: ItemStatus


def collect_relation_names(
    products: Iterable[ProductListing],
) -> dict[EntityType, list[str]]:
    """
    상품 목록을 한 번 순회하여 유형별 중복 없는 이름 목록을 만듭니다.

    처음 등장한 순서를 유지하며, 비어 있는 장르/OS 목록이나 이름은 무시합니다.

    Args:
        products: 검증된 상품 목록

    Returns:
        dict[EntityType, list[str]]: 유형별 이름 목록
    """
    names: dict[EntityType, dict[str, None]] = {
        entity_type: {} for entity_type in EntityType
    }

    for product in products:
        if product.developer:
            names[EntityType.DEVELOPER][product.developer] = None
        if product.publisher:
            names[EntityType.PUBLISHER][product.publisher] = None
        for genre in product.genres:
            if genre:
                names[EntityType.CATEGORY][genre] = None
        for operating_system in product.operating_systems:
            if operating_system:
                names[EntityType.PLATFORM][operating_system] = None

    return {entity_type: list(group) for entity_type, group in names.items()}


async def precompute_relations(
    resolver: RelationResolver,
    products: Iterable[ProductListing],
) -> list[RelationResult]:
    """
    모든 관계 엔티티를 동시에 조회/생성하고 전부 완료될 때까지 기다립니다.

    각 resolve 호출은 자체적으로 오류를 처리하므로 하나의 실패가
    다른 엔티티 처리를 취소하지 않습니다.

    Args:
        resolver: 관계 엔티티 resolver
        products: 검증된 상품 목록

    Returns:
        list[RelationResult]: 이름별 처리 결과
    """
    names = collect_relation_names(products)
    total = sum(len(group) for group in names.values())
    logger.info(f"관계 엔티티 사전 생성 시작: 총 {total}개 이름")

    pending: list[tuple[EntityType, str, asyncio.Task]] = []
    async with asyncio.TaskGroup() as tg:
        for entity_type, group in names.items():
            for name in group:
                task = tg.create_task(resolver.resolve_with_status(name, entity_type))
                pending.append((entity_type, name, task))

    results = [
        RelationResult(entity_type=entity_type, name=name, status=task.result()[1])
        for entity_type, name, task in pending
    ]

    created = sum(1 for r in results if r.status is ItemStatus.CREATED)
    failed = sum(1 for r in results if r.status is ItemStatus.FAILED)
    logger.success(
        f"관계 엔티티 사전 생성 완료 - 생성: {created}, 기존: {total - created - failed}, "
        f"실패: {failed}"
    )
    return results
