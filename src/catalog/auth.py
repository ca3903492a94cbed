from src.catalog.interfaces import AuthProvider


class StaticAuthProvider(AuthProvider):
    """
    고정된 API 토큰을 반환하는 인증 제공자 구현체.
    저장소 백엔드의 API 토큰(STORAGE_API_TOKEN)에 사용합니다.
    """

    def __init__(self, token: str) -> None:
        self._token = token

    async def get_valid_token(self) -> str:
        return self._token
