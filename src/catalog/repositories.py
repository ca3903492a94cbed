from abc import ABC, abstractmethod
from typing import Any

from src.catalog.constants import GAME_COLLECTION
from src.catalog.interfaces import StorageClient
from src.catalog.models import EntityType, GameRecord, RelationEntity


class RelationRepository(ABC):
    """
    관계 엔티티 저장소의 공통 로직 베이스 클래스.
    이름 기반 조회와 생성을 처리합니다.
    """

    # === 서브클래스에서 정의해야 하는 속성 ===
    @property
    @abstractmethod
    def collection(self) -> str:
        """저장소 컬렉션 경로. 서브클래스에서 정의해야 함."""
        pass

    def __init__(self, storage: StorageClient) -> None:
        self._storage = storage

    async def find_by_name(self, name: str) -> RelationEntity | None:
        """
        이름이 정확히 일치하는 엔티티를 조회합니다.

        Returns:
            RelationEntity | None: 첫 번째 일치 항목, 없으면 None
        """
        records = await self._storage.find(self.collection, {"name": name})
        return RelationEntity.from_record(records[0]) if records else None

    async def create(self, name: str, slug: str) -> RelationEntity:
        record = await self._storage.create(self.collection, {"name": name, "slug": slug})
        return RelationEntity.from_record(record)


class DeveloperRepository(RelationRepository):
    @property
    def collection(self) -> str:
        return "developers"


class PublisherRepository(RelationRepository):
    @property
    def collection(self) -> str:
        return "publishers"


class CategoryRepository(RelationRepository):
    @property
    def collection(self) -> str:
        return "categories"


class PlatformRepository(RelationRepository):
    @property
    def collection(self) -> str:
        return "platforms"


def repository_for(storage: StorageClient, entity_type: EntityType) -> RelationRepository:
    """엔티티 유형에 해당하는 저장소 구현체를 반환합니다."""
    match entity_type:
        case EntityType.DEVELOPER:
            return DeveloperRepository(storage)
        case EntityType.PUBLISHER:
            return PublisherRepository(storage)
        case EntityType.CATEGORY:
            return CategoryRepository(storage)
        case EntityType.PLATFORM:
            return PlatformRepository(storage)
    raise ValueError(f"알 수 없는 엔티티 유형: {entity_type!r}")


class GameRepository:
    """게임 레코드 저장소."""

    def __init__(self, storage: StorageClient) -> None:
        self._storage = storage

    async def find_by_name(self, name: str) -> GameRecord | None:
        records = await self._storage.find(GAME_COLLECTION, {"name": name})
        return GameRecord.from_record(records[0]) if records else None

    async def create(self, attributes: dict[str, Any]) -> GameRecord:
        record = await self._storage.create(GAME_COLLECTION, attributes)
        return GameRecord.from_record(record)
