from unittest.mock import AsyncMock, Mock

import pytest

from src.catalog.images import ImageUploader
from src.catalog.models import GameRecord, ImageField
from src.catalog.rate_limiter import HostRateLimiter

GAME = GameRecord(id=11, name="Alpha", slug="alpha-x")


def test_build_image_url_prefixes_protocol_and_suffix():
    """
    프로토콜 상대 참조에 https:와 크롭 접미사를 붙이는지 테스트합니다.
    """
    assert (
        ImageUploader.build_image_url("//images.gog.com/abc")
        == "https://images.gog.com/abc_bg_crop_16080x655.jpg"
    )
    assert (
        ImageUploader.build_image_url("https://cdn.example.com/abc")
        == "https://cdn.example.com/abc_bg_crop_16080x655.jpg"
    )


@pytest.mark.asyncio
async def test_upload_image_downloads_then_uploads(mock_client: AsyncMock, memory_storage):
    """
    [GREEN]
    이미지를 내려받아 게임 레코드에 첨부 업로드하는지 테스트합니다.

    Verifies:
        1. 다운로드 URL
        2. 업로드 파트 (refId, ref, field, 파일 이름, 내용)
        3. 성공 시 True 반환
    """
    mock_client.get.return_value = Mock(content=b"jpeg-bytes", raise_for_status=lambda: None)
    uploader = ImageUploader(client=mock_client, storage=memory_storage)

    uploaded = await uploader.upload_image("//img/a", GAME)

    assert uploaded is True
    mock_client.get.assert_awaited_once_with("https://img/a_bg_crop_16080x655.jpg")
    assert memory_storage.uploads == [
        {
            "ref_id": 11,
            "ref": "game",
            "field": ImageField.COVER,
            "filename": "alpha-x.jpg",
            "content": b"jpeg-bytes",
        }
    ]


@pytest.mark.asyncio
async def test_upload_image_gallery_field(mock_client: AsyncMock, memory_storage):
    uploader = ImageUploader(client=mock_client, storage=memory_storage)

    await uploader.upload_image("//img/g1", GAME, field=ImageField.GALLERY)

    assert memory_storage.uploads[0]["field"] == "gallery"


@pytest.mark.asyncio
async def test_upload_image_download_failure_is_soft(mock_client: AsyncMock, memory_storage):
    """
    다운로드 실패 시 업로드하지 않고 False를 반환하는지 테스트합니다.
    """
    mock_client.get.side_effect = Exception("이미지 호스트 응답 없음")
    uploader = ImageUploader(client=mock_client, storage=memory_storage)

    uploaded = await uploader.upload_image("//img/a", GAME)

    assert uploaded is False
    assert memory_storage.uploads == []


@pytest.mark.asyncio
async def test_upload_image_upload_failure_is_soft(mock_client: AsyncMock, memory_storage, mocker):
    mocker.patch.object(memory_storage, "upload", side_effect=Exception("413 Payload Too Large"))
    uploader = ImageUploader(client=mock_client, storage=memory_storage)

    assert await uploader.upload_image("//img/a", GAME) is False


@pytest.mark.asyncio
async def test_upload_image_releases_rate_limiter(mock_client: AsyncMock, memory_storage):
    """
    업로드 성공/실패와 관계없이 rate limiter 슬롯이 반환되는지 테스트합니다.
    """
    limiter = HostRateLimiter(requests_per_second=100, max_concurrency=2)
    uploader = ImageUploader(client=mock_client, storage=memory_storage, rate_limiter=limiter)

    await uploader.upload_image("//img/a", GAME)
    mock_client.get.side_effect = Exception("실패")
    await uploader.upload_image("//img/b", GAME)

    assert limiter._semaphore._value == 2
