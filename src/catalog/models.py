"""파이프라인 전반에서 사용하는 도메인 모델."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EntityType(StrEnum):
    """게임 레코드가 참조하는 관계 엔티티 유형."""

    DEVELOPER = "developer"
    PUBLISHER = "publisher"
    CATEGORY = "category"
    PLATFORM = "platform"


class ImageField(StrEnum):
    """첨부 이미지가 연결되는 게임 레코드의 필드 슬롯."""

    COVER = "cover"
    GALLERY = "gallery"


class ItemStatus(StrEnum):
    CREATED = "created"
    SKIPPED = "skipped"
    FAILED = "failed"


class Price(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: float


class ProductListing(BaseModel):
    """
    스토어 목록 API가 반환하는 상품 한 건.

    API 응답의 camelCase 필드를 alias로 매핑하며, 알 수 없는 필드는 무시합니다.
    genres/supportedOperatingSystems/gallery가 null이거나 없으면 빈 리스트로 취급합니다.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    slug: str
    price: Price
    release_timestamp: int | None = Field(default=None, alias="globalReleaseDate")
    developer: str | None = None
    publisher: str | None = None
    genres: list[str] = Field(default_factory=list)
    operating_systems: list[str] = Field(
        default_factory=list, alias="supportedOperatingSystems"
    )
    image: str | None = None
    gallery: list[str] = Field(default_factory=list)

    @field_validator("genres", "operating_systems", "gallery", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


@dataclass(frozen=True)
class RelationEntity:
    """개발사/퍼블리셔/카테고리/플랫폼 레코드."""

    id: Any
    name: str
    slug: str

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "RelationEntity":
        return cls(id=record["id"], name=record["name"], slug=record.get("slug", ""))


@dataclass(frozen=True)
class GameRecord:
    """저장소에 생성된 게임 레코드."""

    id: Any
    name: str
    slug: str

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "GameRecord":
        return cls(id=record["id"], name=record["name"], slug=record.get("slug", ""))


@dataclass(frozen=True)
class Enrichment:
    """상세 페이지에서 가져온 보조 설명 필드."""

    rating: str
    short_description: str
    description: str

    def as_attributes(self) -> dict[str, str]:
        return {
            "rating": self.rating,
            "short_description": self.short_description,
            "description": self.description,
        }
