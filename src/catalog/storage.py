from collections.abc import AsyncGenerator, Mapping
from contextlib import asynccontextmanager
from typing import Any

import httpx
from loguru import logger

from src.catalog.interfaces import AuthProvider, StorageClient


@asynccontextmanager
async def create_clients() -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    파이프라인에 필요한 비동기 HTTP 클라이언트를 생성하고 세션을 관리합니다.

    스토어 API, 이미지 호스트, 저장소 백엔드 호출이 모두 이 클라이언트를 공유합니다.

    Yields:
        httpx.AsyncClient: HTTP 클라이언트
    """
    logger.info("HTTPX AsyncClient 세션 생성...")
    timeout = httpx.Timeout(connect=10.0, read=60.0, write=10.0, pool=10.0)

    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as http_client:
        try:
            yield http_client
        finally:
            logger.info("클라이언트 세션 종료...")


class StrapiStorageClient(StorageClient):
    """
    Strapi REST API 기반 StorageClient 구현체.

    - 조회: GET {base_url}/{collection}?name=...
    - 생성: POST {base_url}/{collection} (JSON)
    - 업로드: POST {base_url}/upload (multipart/form-data)
    """

    def __init__(
        self,
        client: Any,
        base_url: str,
        auth_provider: AuthProvider | None = None,
    ) -> None:
        """
        Args:
            client: HTTP 클라이언트 (httpx.AsyncClient 등)
            base_url: 저장소 백엔드 기본 URL (예: http://localhost:1337)
            auth_provider: API 토큰 제공자 (없으면 인증 헤더 없이 요청)
        """
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._auth_provider = auth_provider

    async def _headers(self) -> dict[str, str]:
        if self._auth_provider is None:
            return {}
        token = await self._auth_provider.get_valid_token()
        return {"Authorization": f"Bearer {token}"}

    async def find(
        self, collection: str, filters: Mapping[str, Any]
    ) -> list[dict[str, Any]]:
        response = await self._client.get(
            f"{self._base_url}/{collection}",
            params=dict(filters),
            headers=await self._headers(),
        )
        response.raise_for_status()
        return response.json()

    async def create(
        self, collection: str, attributes: Mapping[str, Any]
    ) -> dict[str, Any]:
        response = await self._client.post(
            f"{self._base_url}/{collection}",
            json=dict(attributes),
            headers=await self._headers(),
        )
        response.raise_for_status()
        return response.json()

    async def upload(
        self,
        ref_id: Any,
        ref: str,
        field: str,
        filename: str,
        content: bytes,
        content_type: str = "image/jpeg",
    ) -> list[dict[str, Any]]:
        """
        multipart/form-data로 파일을 업로드합니다.

        boundary와 Content-Type 헤더는 httpx가 생성합니다.
        """
        response = await self._client.post(
            f"{self._base_url}/upload",
            data={"refId": str(ref_id), "ref": ref, "field": field},
            files={"files": (filename, content, content_type)},
            headers=await self._headers(),
        )
        response.raise_for_status()
        return response.json()
