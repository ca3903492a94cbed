import re
from datetime import UTC, datetime

import httpx
from slugify import slugify

_DISALLOWED_CHARS = re.compile(r"[^a-zA-Z0-9 ]")

# 기존 slug를 만든 slugify(npm)의 기본 기호 치환과 보존 문자 집합
_SLUG_REPLACEMENTS = [
    ["&", "and"],
    ["$", "dollar"],
    ["%", "percent"],
    ["<", "less"],
    [">", "greater"],
    ["|", "or"],
]
_SLUG_REMOVED_CHARS = r"[^-a-z0-9_.()!:@*+~]+"


def derive_relation_slug(name: str, strict: bool = False) -> str:
    """
    관계 엔티티 이름으로부터 slug를 생성합니다.

    소문자 변환 후 허용되지 않는 문자(영숫자/공백 외)를 제거하고, 공백을 없앤 뒤
    python-slugify로 URL 안전 토큰으로 변환합니다. 남은 기호는 기존 slug와 같도록
    '&' → 'and' 등으로 치환하고 '.', '(', '!' 등은 그대로 둡니다.

    Args:
        name (str): 엔티티 표시 이름.
        strict (bool): False면 허용되지 않는 문자 중 첫 번째만 제거합니다.
            기존에 저장된 slug와 동일한 결과를 내기 위한 기본 동작입니다.
            True면 모두 제거합니다.

    Returns:
        str: 생성된 slug.

    Example:
        >>> derive_relation_slug("Sci-fi & Fantasy")
        'scifiandfantasy'
    """
    lowered = name.lower()
    sanitized = _DISALLOWED_CHARS.sub("", lowered, count=0 if strict else 1)
    return slugify(
        sanitized.replace(" ", ""),
        replacements=_SLUG_REPLACEMENTS,
        regex_pattern=_SLUG_REMOVED_CHARS,
    )


def normalize_game_slug(slug: str) -> str:
    """스토어 slug의 밑줄을 하이픈으로 바꿉니다 (예: 'alpha_x' → 'alpha-x')."""
    return slug.replace("_", "-")


def to_iso_release_date(timestamp: int | None) -> str | None:
    """
    Unix timestamp(초)를 밀리초 정밀도의 ISO-8601 UTC 문자열로 변환합니다.

    Example:
        >>> to_iso_release_date(1000000000)
        '2001-09-09T01:46:40.000Z'
    """
    if timestamp is None:
        return None
    released_at = datetime.fromtimestamp(timestamp, tz=UTC)
    return released_at.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def describe_error(error: BaseException) -> str:
    """
    로그용 오류 설명을 만듭니다.

    저장소 백엔드의 HTTP 오류 응답에 구조화된 페이로드(data.errors 또는 message)가
    있으면 함께 포함합니다.
    """
    message = str(error) or error.__class__.__name__

    if isinstance(error, httpx.HTTPStatusError):
        try:
            payload = error.response.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict):
            data = payload.get("data")
            detail = (data.get("errors") if isinstance(data, dict) else None) or (
                payload.get("message")
            )
            if detail:
                return f"{message} - {detail}"

    return message
