from unittest.mock import AsyncMock, Mock

import pytest

from src.catalog.extractors import GogListingExtractor
from src.catalog.interfaces import ListingExtractor


@pytest.mark.asyncio
async def test_gog_listing_extractor_conforms_to_interface():
    assert issubclass(GogListingExtractor, ListingExtractor)


def test_build_query_fixed_params_take_precedence():
    """
    호출자 필터와 고정 쿼리를 합치되, 겹치는 키는 고정 값이 우선하는지 테스트합니다.
    """
    query = GogListingExtractor.build_query({"price": "free", "page": 7})

    assert query == {
        "price": "free",
        "mediaType": "game",
        "page": 1,
        "sort": "popularity",
    }


@pytest.mark.asyncio
async def test_fetch_products_returns_products(
    mock_client: AsyncMock, mock_product_data: list[dict]
):
    """
    [GREEN]
    목록 API 응답의 products 배열을 반환하는지 테스트합니다.
    """
    mock_client.get.return_value = Mock(
        status_code=200,
        json=lambda: {"products": mock_product_data, "totalPages": 1},
        raise_for_status=lambda: None,
    )
    extractor = GogListingExtractor(
        client=mock_client, api_url="https://www.gog.com/games/ajax/filtered"
    )

    products = await extractor.fetch_products({"price": "free"})

    assert len(products) == 3
    assert products[0]["title"] == "Beneath a Steel Sky"

    mock_client.get.assert_awaited_once()
    args, kwargs = mock_client.get.call_args
    assert args[0] == "https://www.gog.com/games/ajax/filtered"
    assert kwargs["params"]["price"] == "free"
    assert kwargs["params"]["mediaType"] == "game"


@pytest.mark.asyncio
async def test_fetch_products_handles_missing_products_key(mock_client: AsyncMock):
    mock_client.get.return_value = Mock(
        status_code=200, json=lambda: {"products": None}, raise_for_status=lambda: None
    )
    extractor = GogListingExtractor(client=mock_client)

    assert await extractor.fetch_products({}) == []


@pytest.mark.asyncio
async def test_fetch_products_propagates_error(mock_client: AsyncMock):
    """
    [GREEN]
    목록 조회 실패는 실행 전체 실패이므로 예외가 전파되는지 테스트합니다.
    """
    mock_response = Mock()
    mock_response.raise_for_status.side_effect = Exception("HTTP 500 Error")
    mock_client.get.return_value = mock_response
    extractor = GogListingExtractor(client=mock_client)

    with pytest.raises(Exception, match="HTTP 500 Error"):
        await extractor.fetch_products({"price": "free"})

    mock_client.get.assert_called_once()
