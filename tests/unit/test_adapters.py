# tests/unit/test_adapters.py
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from catalog_sync.adapters.data_dragon import DataDragonAdapter
from catalog_sync.adapters.open_brewery_db import OpenBreweryDbAdapter
from catalog_sync.adapters.open_food_facts import OpenFoodFactsLookupAdapter
from catalog_sync.domain.models import RecordOrigin
from catalog_sync.domain.ports import ExternalApiError, RecordNotFoundError, ResponseDecodeError

_BREWERY = {
    "id": "5494c1c9-3a6e-4c1e-b0c4-5e3b3a2f0d47",
    "name": "Stone Brewing",
    "brewery_type": "regional",
    "address_1": "1999 Citracado Pkwy",
    "city": "Escondido",
    "state_province": "California",
    "postal_code": "92029-4158",
    "country": "United States",
    "longitude": -117.1213,
    "latitude": "33.1157",
    "phone": "7602947899",
    "website_url": "http://www.stonebrewing.com",
    "state": "California",
    "street": "1999 Citracado Pkwy",
}

_CHAMPIONS = {
    "data": {
        "Ahri": {
            "id": "Ahri",
            "name": "Ahri",
            "title": "the Nine-Tailed Fox",
            "tags": ["Mage", "Assassin"],
            "image": {"full": "Ahri.png"},
            "stats": {"hp": 526.0, "armor": 21.0, "movespeed": 330.0},
        }
    }
}


def _response(payload: object, status_code: int = 200) -> MagicMock:
    mock_response = MagicMock(spec=httpx.Response)
    mock_response.status_code = status_code
    mock_response.json.return_value = payload
    mock_response.raise_for_status = MagicMock()
    return mock_response


def _client(response: MagicMock) -> AsyncMock:
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get.return_value = response
    return mock_client


@pytest.mark.asyncio  # type: ignore[misc]
async def test_brewery_page_is_normalized() -> None:
    client = _client(_response([_BREWERY]))
    adapter = OpenBreweryDbAdapter(http_client=client, base_url="https://api.example/v1/")

    records = await adapter.fetch_page(50, 2)

    assert len(records) == 1
    record = records[0]
    assert record.origin == RecordOrigin.REMOTE
    assert record.category == "regional"
    assert record.city == "Escondido"
    assert record.longitude == "-117.1213"
    assert record.address_1 == "1999 Citracado Pkwy"
    client.get.assert_called_once_with(
        "https://api.example/v1/breweries", params={"per_page": 50, "page": 2}, timeout=10.0
    )


@pytest.mark.asyncio  # type: ignore[misc]
async def test_brewery_without_name_gets_placeholder() -> None:
    adapter = OpenBreweryDbAdapter(
        http_client=_client(_response([{"id": "x1"}])), base_url="https://api.example/v1"
    )

    records = await adapter.fetch_page(50, 1)

    assert records[0].name == "Unknown"
    assert records[0].category == ""


@pytest.mark.asyncio  # type: ignore[misc]
async def test_brewery_page_malformed_raises_decode_error() -> None:
    adapter = OpenBreweryDbAdapter(
        http_client=_client(_response({"message": "nope"})), base_url="https://api.example/v1"
    )

    with pytest.raises(ResponseDecodeError):
        await adapter.fetch_page(50, 1)


@pytest.mark.asyncio  # type: ignore[misc]
async def test_brewery_connection_error_raises_external_api_error() -> None:
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get.side_effect = httpx.ConnectError("unreachable")
    adapter = OpenBreweryDbAdapter(http_client=mock_client, base_url="https://api.example/v1")

    with pytest.raises(ExternalApiError) as exc_info:
        await adapter.fetch_page(50, 1)
    assert exc_info.value.source == "open_brewery_db"


@pytest.mark.asyncio  # type: ignore[misc]
async def test_brewery_http_error_raises_external_api_error() -> None:
    mock_response = _response(None, status_code=500)
    mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
        "500 Internal Server Error",
        request=httpx.Request("GET", "https://api.example/v1/breweries/x"),
        response=MagicMock(spec=httpx.Response),
    )
    adapter = OpenBreweryDbAdapter(
        http_client=_client(mock_response), base_url="https://api.example/v1"
    )

    with pytest.raises(ExternalApiError):
        await adapter.fetch_detail("x")


@pytest.mark.asyncio  # type: ignore[misc]
async def test_brewery_detail_not_found() -> None:
    adapter = OpenBreweryDbAdapter(
        http_client=_client(_response({}, status_code=404)), base_url="https://api.example/v1"
    )

    with pytest.raises(RecordNotFoundError):
        await adapter.fetch_detail("missing")


@pytest.mark.asyncio  # type: ignore[misc]
async def test_brewery_detail() -> None:
    adapter = OpenBreweryDbAdapter(
        http_client=_client(_response(_BREWERY)), base_url="https://api.example/v1"
    )

    record = await adapter.fetch_detail(_BREWERY["id"])

    assert record.name == "Stone Brewing"
    assert record.website_url == "http://www.stonebrewing.com"


@pytest.mark.asyncio  # type: ignore[misc]
async def test_champions_are_a_single_page() -> None:
    client = _client(_response(_CHAMPIONS))
    adapter = DataDragonAdapter(
        http_client=client,
        base_url="https://dd.example/data/en_US",
        image_base_url="https://dd.example/img/champion/",
    )

    first = await adapter.fetch_page(50, 1)
    second = await adapter.fetch_page(50, 2)

    assert [r.id for r in first] == ["Ahri"]
    assert first[0].category == "Mage"
    assert first[0].tags == ("Mage", "Assassin")
    assert first[0].image_url == "https://dd.example/img/champion/Ahri.png"
    assert second == []
    client.get.assert_called_once()


@pytest.mark.asyncio  # type: ignore[misc]
async def test_champion_detail_maps_named_stats() -> None:
    payload = {"data": {"Ahri": {**_CHAMPIONS["data"]["Ahri"], "lore": "Innately connected..."}}}
    adapter = DataDragonAdapter(
        http_client=_client(_response(payload)),
        base_url="https://dd.example/data/en_US",
        image_base_url="https://dd.example/img/champion",
    )

    record = await adapter.fetch_detail("Ahri")

    assert record.lore == "Innately connected..."
    assert record.stats == {"HP": 526.0, "Move Speed": 330.0, "Armor": 21.0}


@pytest.mark.asyncio  # type: ignore[misc]
async def test_champion_detail_forbidden_means_not_found() -> None:
    adapter = DataDragonAdapter(
        http_client=_client(_response(None, status_code=403)),
        base_url="https://dd.example/data/en_US",
        image_base_url="https://dd.example/img/champion",
    )

    with pytest.raises(RecordNotFoundError):
        await adapter.fetch_detail("Nobody")


@pytest.mark.asyncio  # type: ignore[misc]
async def test_champion_list_forbidden_is_a_network_failure() -> None:
    mock_response = _response(None, status_code=403)
    mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
        "403 Forbidden",
        request=httpx.Request("GET", "https://dd.example/data/en_US/champion.json"),
        response=MagicMock(spec=httpx.Response),
    )
    adapter = DataDragonAdapter(
        http_client=_client(mock_response),
        base_url="https://dd.example/data/en_US",
        image_base_url="https://dd.example/img/champion",
    )

    with pytest.raises(ExternalApiError) as exc_info:
        await adapter.fetch_page(50, 1)
    assert exc_info.value.source == "data_dragon"


@pytest.mark.asyncio  # type: ignore[misc]
async def test_champion_detail_with_invalid_record_raises_decode_error() -> None:
    payload = {"data": {"Ahri": {**_CHAMPIONS["data"]["Ahri"], "id": ""}}}
    adapter = DataDragonAdapter(
        http_client=_client(_response(payload)),
        base_url="https://dd.example/data/en_US",
        image_base_url="https://dd.example/img/champion",
    )

    with pytest.raises(ResponseDecodeError):
        await adapter.fetch_detail("Ahri")


@pytest.mark.asyncio  # type: ignore[misc]
async def test_brewery_page_with_empty_id_raises_decode_error() -> None:
    adapter = OpenBreweryDbAdapter(
        http_client=_client(_response([{"id": "", "name": "B"}])),
        base_url="https://api.example/v1",
    )

    with pytest.raises(ResponseDecodeError):
        await adapter.fetch_page(50, 1)


@pytest.mark.asyncio  # type: ignore[misc]
async def test_brewery_detail_with_empty_id_raises_decode_error() -> None:
    adapter = OpenBreweryDbAdapter(
        http_client=_client(_response({"id": "", "name": "B"})),
        base_url="https://api.example/v1",
    )

    with pytest.raises(ResponseDecodeError):
        await adapter.fetch_detail("x")


@pytest.mark.asyncio  # type: ignore[misc]
async def test_off_lookup_detects_beer_by_category_tag() -> None:
    payload = {
        "status": 1,
        "product": {
            "code": "8594404000015",
            "product_name": "Original",
            "brands": "Budweiser Budvar",
            "categories_tags": ["en:beverages", "en:alcoholic-beverages", "en:beers"],
        },
    }
    adapter = OpenFoodFactsLookupAdapter(
        http_client=_client(_response(payload)), base_url="https://off.example"
    )

    product = await adapter.lookup_by_code("8594404000015")

    assert product is not None
    assert product.is_beer is True
    assert product.brand == "Budweiser Budvar"


@pytest.mark.asyncio  # type: ignore[misc]
async def test_off_lookup_detects_beer_by_keyword() -> None:
    payload = {"status": 1, "product": {"product_name": "Světlé výčepní pivo", "brands": "Zubr"}}
    adapter = OpenFoodFactsLookupAdapter(
        http_client=_client(_response(payload)), base_url="https://off.example"
    )

    product = await adapter.lookup_by_code("123")

    assert product is not None
    assert product.is_beer is True


@pytest.mark.asyncio  # type: ignore[misc]
async def test_off_lookup_non_beer() -> None:
    payload = {
        "status": 1,
        "product": {
            "product_name": "Coca-Cola Classic",
            "brands": "Coca-Cola",
            "categories_tags": ["en:beverages", "en:sodas"],
        },
    }
    adapter = OpenFoodFactsLookupAdapter(
        http_client=_client(_response(payload)), base_url="https://off.example"
    )

    product = await adapter.lookup_by_code("5449000000996")

    assert product is not None
    assert product.is_beer is False


@pytest.mark.asyncio  # type: ignore[misc]
async def test_off_lookup_not_found_returns_none() -> None:
    adapter = OpenFoodFactsLookupAdapter(
        http_client=_client(_response({"status": 0, "product": None})),
        base_url="https://off.example",
    )

    assert await adapter.lookup_by_code("0000000000000") is None


@pytest.mark.asyncio  # type: ignore[misc]
async def test_off_lookup_connection_error() -> None:
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get.side_effect = httpx.ConnectTimeout("timeout")
    adapter = OpenFoodFactsLookupAdapter(http_client=mock_client, base_url="https://off.example")

    with pytest.raises(ExternalApiError) as exc_info:
        await adapter.lookup_by_code("123")
    assert exc_info.value.source == "open_food_facts"
