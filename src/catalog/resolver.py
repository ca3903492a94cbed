from loguru import logger

from src.catalog.interfaces import StorageClient
from src.catalog.models import EntityType, ItemStatus, RelationEntity
from src.catalog.repositories import RelationRepository, repository_for
from src.catalog.utils import derive_relation_slug, describe_error


class RelationResolver:
    """
    관계 엔티티의 조회-후-생성(get-or-create)을 담당합니다.

    한 번의 실행 동안 (유형, 이름) 단위로 결과를 캐시하므로, 사전 생성 단계 이후
    게임 레코드 조립 단계에서는 대부분 저장소를 다시 조회하지 않습니다.

    Note:
        조회와 생성은 원자적이지 않습니다. 같은 (유형, 이름)에 대한 호출이
        동시에 진행되면 중복 생성될 수 있습니다.
    """

    def __init__(self, storage: StorageClient, strict_slugs: bool = False) -> None:
        """
        Args:
            storage: 저장소 클라이언트
            strict_slugs: slug 생성 시 허용되지 않는 문자를 모두 제거할지 여부
        """
        self._repositories: dict[EntityType, RelationRepository] = {
            entity_type: repository_for(storage, entity_type)
            for entity_type in EntityType
        }
        self._strict_slugs = strict_slugs
        self._cache: dict[tuple[EntityType, str], RelationEntity] = {}

    async def resolve(self, name: str, entity_type: EntityType) -> RelationEntity | None:
        """
        기존 엔티티를 반환하거나, 없으면 새로 생성하여 반환합니다.

        Args:
            name (str): 엔티티 표시 이름
            entity_type (EntityType): 엔티티 유형

        Returns:
            RelationEntity | None: 조회/생성된 엔티티. 저장소 오류 시 None.
        """
        entity, _ = await self.resolve_with_status(name, entity_type)
        return entity

    async def resolve_with_status(
        self, name: str, entity_type: EntityType
    ) -> tuple[RelationEntity | None, ItemStatus]:
        """
        resolve()와 같지만 생성 여부(CREATED/SKIPPED/FAILED)도 함께 반환합니다.
        """
        if not name:
            logger.warning(f"[resolve] 빈 {entity_type} 이름은 처리하지 않습니다.")
            return None, ItemStatus.FAILED

        key = (entity_type, name)
        if key in self._cache:
            return self._cache[key], ItemStatus.SKIPPED

        repository = self._repositories[entity_type]

        try:
            entity = await repository.find_by_name(name)
            if entity is not None:
                self._cache[key] = entity
                return entity, ItemStatus.SKIPPED

            slug = derive_relation_slug(name, strict=self._strict_slugs)
            entity = await repository.create(name=name, slug=slug)
            logger.info(f"{entity_type} 생성 완료: '{name}' (slug={slug})")

        except Exception as e:
            logger.error(f"[resolve] {entity_type} '{name}' 처리 실패: {describe_error(e)}")
            return None, ItemStatus.FAILED

        self._cache[key] = entity
        return entity, ItemStatus.CREATED

    async def lookup(self, name: str | None, entity_type: EntityType) -> RelationEntity | None:
        """
        엔티티를 조회만 합니다 (생성하지 않음).

        없거나 조회에 실패하면 None을 반환하며, 호출자는 이를 빈 참조로 취급합니다.
        """
        if not name:
            return None

        key = (entity_type, name)
        if key in self._cache:
            return self._cache[key]

        try:
            entity = await self._repositories[entity_type].find_by_name(name)
        except Exception as e:
            logger.error(f"[lookup] {entity_type} '{name}' 조회 실패: {describe_error(e)}")
            return None

        if entity is not None:
            self._cache[key] = entity
        return entity
