from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from catalog_sync.domain.models import ScannedProduct
from catalog_sync.domain.ports import ExternalApiError, ProductLookupPort, ResponseDecodeError
from catalog_sync.services.remote_catalog import RemoteCatalogClient


@pytest.mark.asyncio  # type: ignore[misc]
async def test_pagination_stops_on_short_page(fake_catalog_factory: Callable) -> None:
    catalog = fake_catalog_factory(page_sizes=[50, 50, 13])
    client = RemoteCatalogClient(catalog, page_size=50)

    result = await client.fetch_all_pages()

    assert len(catalog.page_calls) == 3
    assert catalog.page_calls == [(50, 1), (50, 2), (50, 3)]
    assert len(result.records) == 113
    assert result.pages_fetched == 3
    assert result.is_partial is False


@pytest.mark.asyncio  # type: ignore[misc]
async def test_pagination_stops_on_empty_page(fake_catalog_factory: Callable) -> None:
    catalog = fake_catalog_factory(page_sizes=[50, 0])
    client = RemoteCatalogClient(catalog, page_size=50)

    result = await client.fetch_all_pages()

    assert len(catalog.page_calls) == 2
    assert len(result.records) == 50


@pytest.mark.asyncio  # type: ignore[misc]
async def test_failed_page_keeps_accumulated_records(fake_catalog_factory: Callable) -> None:
    catalog = fake_catalog_factory(page_sizes=[50, None, 50])
    client = RemoteCatalogClient(catalog, page_size=50)

    result = await client.fetch_all_pages()

    # Kein Retry, keine weiteren Seiten nach dem Fehler
    assert len(catalog.page_calls) == 2
    assert len(result.records) == 50
    assert result.pages_fetched == 1
    assert result.is_partial is True
    assert "unreachable" in (result.error or "")


@pytest.mark.asyncio  # type: ignore[misc]
async def test_failed_first_page_returns_empty_result(fake_catalog_factory: Callable) -> None:
    client = RemoteCatalogClient(fake_catalog_factory(page_sizes=[None]), page_size=50)

    result = await client.fetch_all_pages()

    assert result.records == ()
    assert result.pages_fetched == 0
    assert result.is_partial is True


@pytest.mark.asyncio  # type: ignore[misc]
async def test_decode_error_also_stops_pagination() -> None:
    catalog = AsyncMock()
    catalog.source = "broken"
    catalog.fetch_page.side_effect = ResponseDecodeError("broken", "expected a JSON array")
    client = RemoteCatalogClient(catalog, page_size=10)

    result = await client.fetch_all_pages()

    assert result.pages_fetched == 0
    catalog.fetch_page.assert_called_once_with(10, 1)


def test_page_size_must_be_positive(fake_catalog_factory: Callable) -> None:
    with pytest.raises(ValueError):
        RemoteCatalogClient(fake_catalog_factory(), page_size=0)


@pytest.mark.asyncio  # type: ignore[misc]
async def test_lookup_by_code_delegates(fake_catalog_factory: Callable) -> None:
    lookup = AsyncMock(spec=ProductLookupPort)
    lookup.source = "off"
    product = ScannedProduct(code="859", name="Original", brand="Budvar", is_beer=True)
    lookup.lookup_by_code.return_value = product
    client = RemoteCatalogClient(fake_catalog_factory(), product_lookup=lookup)

    assert await client.lookup_by_code("859") == product
    lookup.lookup_by_code.assert_called_once_with("859")


@pytest.mark.asyncio  # type: ignore[misc]
async def test_lookup_without_service_raises(fake_catalog_factory: Callable) -> None:
    client = RemoteCatalogClient(fake_catalog_factory())

    with pytest.raises(ExternalApiError):
        await client.lookup_by_code("859")
