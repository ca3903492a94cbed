"""Configuration management for the catalog populate pipeline.

이 파일은 환경 변수를 타입 안전하게 관리합니다.
Pydantic을 사용해서 자동으로 .env 파일을 읽고 검증합니다.

사용법:
    from src.config import settings

    # settings 객체를 통해 환경 변수 접근
    base_url = settings.storage_base_url
"""

from typing import Literal

from pydantic import Field, PositiveFloat, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):  # type: ignore[misc]
    """
    애플리케이션 설정 클래스.

    .env 파일의 환경 변수를 자동으로 로드하고 타입 검증합니다.
    모든 필드에 기본값이 있으므로 로컬 Strapi 기준으로 바로 실행할 수 있습니다.
    """

    # 환경 설정 (선택, 기본값 있음)
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # 저장소(Strapi) 백엔드
    storage_scheme: Literal["http", "https"] = "http"
    storage_host: str = Field(default="localhost", description="Storage backend host")
    storage_port: PositiveInt = Field(default=1337, description="Storage backend port")
    storage_api_token: str | None = Field(
        default=None, description="Storage backend bearer token"
    )

    # 외부 스토어 API
    listing_api_url: str = Field(
        default="https://www.gog.com/games/ajax/filtered",
        description="Storefront listing API URL",
    )
    detail_page_url: str = Field(
        default="https://www.gog.com/game/{slug}",
        description="Storefront detail page URL template",
    )

    # 이미지 다운로드/업로드 속도 제한
    image_requests_per_second: PositiveFloat = Field(
        default=4.0, description="Image download/upload rate (per second)"
    )
    image_max_concurrency: PositiveInt = Field(
        default=4, description="Max concurrent image download/upload pairs"
    )

    # True면 slug 생성 시 허용되지 않는 문자를 모두 제거 (기본값은 첫 문자만 제거)
    relation_slug_strict: bool = False

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    @property
    def storage_base_url(self) -> str:
        """저장소 백엔드의 기본 URL (예: http://localhost:1337)."""
        return f"{self.storage_scheme}://{self.storage_host}:{self.storage_port}"


# 전역 settings 인스턴스 (import해서 사용)
settings = Settings()
