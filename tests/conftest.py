import json
import os
import sys
from collections import defaultdict
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest
from dotenv import load_dotenv

# .env 파일을 먼저 로드하여 실제 환경 변수 설정
load_dotenv(override=False)

# .env에 값이 없는 경우에만 테스트용 기본값 설정
os.environ.setdefault("STORAGE_HOST", "localhost")
os.environ.setdefault("STORAGE_PORT", "1337")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.catalog.interfaces import (  # noqa: E402
    EnrichmentFetcher,
    ListingExtractor,
    StorageClient,
)


class InMemoryStorage(StorageClient):
    """
    테스트용 인메모리 저장소 백엔드.

    find는 모든 필터 값이 정확히 일치하는 레코드를 반환하고,
    create는 순차 ID를 부여합니다. 호출 기록을 검증용으로 보관합니다.
    """

    def __init__(self) -> None:
        self.records: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.create_calls: list[tuple[str, dict[str, Any]]] = []
        self.uploads: list[dict[str, Any]] = []
        # (collection, name) 쌍으로 생성 실패를 흉내냄
        self.failing_creates: set[tuple[str, str]] = set()
        self._next_id = 1

    async def find(
        self, collection: str, filters: Mapping[str, Any]
    ) -> list[dict[str, Any]]:
        return [
            dict(record)
            for record in self.records[collection]
            if all(record.get(key) == value for key, value in filters.items())
        ]

    async def create(
        self, collection: str, attributes: Mapping[str, Any]
    ) -> dict[str, Any]:
        self.create_calls.append((collection, dict(attributes)))
        if (collection, attributes.get("name")) in self.failing_creates:
            raise RuntimeError(f"{collection} 생성 실패: {attributes.get('name')}")

        record = {"id": self._next_id, **attributes}
        self._next_id += 1
        self.records[collection].append(record)
        return dict(record)

    async def upload(
        self,
        ref_id: Any,
        ref: str,
        field: str,
        filename: str,
        content: bytes,
        content_type: str = "image/jpeg",
    ) -> list[dict[str, Any]]:
        self.uploads.append(
            {
                "ref_id": ref_id,
                "ref": ref,
                "field": field,
                "filename": filename,
                "content": content,
            }
        )
        return [{"id": len(self.uploads), "name": filename}]

    def names(self, collection: str) -> list[str]:
        return [record["name"] for record in self.records[collection]]

    def creates_for(self, collection: str) -> list[dict[str, Any]]:
        return [attrs for name, attrs in self.create_calls if name == collection]


@pytest.fixture(scope="session")
def mock_product_data() -> list[dict]:
    """
    [Fixture]
    GOG 목록 API 응답의 products 배열을 유닛 테스트용 Mock 데이터로 로드합니다.
    """
    file_path = ROOT / "tests" / "test_data" / "gog_products_mock.json"

    if not file_path.exists():
        pytest.skip("목록 API 응답 데이터 파일이 존재하지 않습니다.")

    with open(file_path, encoding="utf-8") as f:
        return json.load(f)["products"]


@pytest.fixture
def alpha_product() -> dict[str, Any]:
    """단일 상품 시나리오용 원본 상품 데이터"""
    return {
        "title": "Alpha",
        "slug": "alpha_x",
        "price": {"amount": 0},
        "globalReleaseDate": "1000000000",
        "genres": ["Action"],
        "supportedOperatingSystems": ["Windows"],
        "developer": "Dev1",
        "publisher": "Pub1",
        "image": "//img/a",
        "gallery": ["//img/g1", "//img/g2"],
    }


@pytest.fixture
def memory_storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def mock_client(mocker) -> AsyncMock:
    """httpx.AsyncClient의 기본 Mock"""
    mock = mocker.AsyncMock()
    # raise_for_status가 에러를 내지 않도록 기본 설정
    mock_response = mocker.Mock(raise_for_status=lambda: None, content=b"image-bytes")
    mock.get.return_value = mock_response
    mock.post.return_value = mock_response
    return mock


@pytest.fixture
def mock_extractor(mocker) -> AsyncMock:
    """ListingExtractor 인터페이스의 기본 Mock"""
    mock = mocker.AsyncMock(spec=ListingExtractor)
    mock.fetch_products.return_value = []
    return mock


@pytest.fixture
def mock_enrichment_fetcher(mocker) -> AsyncMock:
    """EnrichmentFetcher 인터페이스의 기본 Mock (보조 설명 없음)"""
    mock = mocker.AsyncMock(spec=EnrichmentFetcher)
    mock.fetch.return_value = None
    return mock
