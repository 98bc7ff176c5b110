# src/catalog_sync/services/remote_catalog.py
from __future__ import annotations

import logging
import time
from collections.abc import Awaitable
from typing import TypeVar

from catalog_sync.core.metrics import EXTERNAL_API_COUNT, EXTERNAL_API_DURATION
from catalog_sync.domain.models import CatalogRecord, PageFetchResult, ScannedProduct
from catalog_sync.domain.ports import (
    REMOTE_ERRORS,
    ExternalApiError,
    ProductLookupPort,
    RemoteCatalogPort,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50

T = TypeVar("T")


async def _observed(source: str, call: Awaitable[T]) -> T:
    started = time.perf_counter()
    try:
        result = await call
    except Exception:
        EXTERNAL_API_COUNT.labels(source=source, status="error").inc()
        raise
    finally:
        EXTERNAL_API_DURATION.labels(source=source).observe(time.perf_counter() - started)
    EXTERNAL_API_COUNT.labels(source=source, status="ok").inc()
    return result


class RemoteCatalogClient:
    """
    Fassade über Katalog- und Produkt-Lookup-Adapter.
    Enthält die Paginierungsschleife eines Sync-Durchlaufs.
    """

    def __init__(
        self,
        catalog: RemoteCatalogPort,
        product_lookup: ProductLookupPort | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self._catalog = catalog
        self._product_lookup = product_lookup
        self._page_size = page_size

    @property
    def page_size(self) -> int:
        return self._page_size

    async def fetch_page(self, page_size: int, page_number: int) -> list[CatalogRecord]:
        return await _observed(
            self._catalog.source, self._catalog.fetch_page(page_size, page_number)
        )

    async def fetch_detail(self, record_id: str) -> CatalogRecord:
        return await _observed(self._catalog.source, self._catalog.fetch_detail(record_id))

    async def lookup_by_code(self, code: str) -> ScannedProduct | None:
        """
        Raises:
            ExternalApiError: Wenn kein Lookup-Dienst konfiguriert ist oder er nicht erreichbar ist.
        """
        if self._product_lookup is None:
            raise ExternalApiError("product_lookup", "No product lookup service configured")
        return await _observed(self._product_lookup.source, self._product_lookup.lookup_by_code(code))

    async def fetch_all_pages(self) -> PageFetchResult:
        """
        Holt Seite für Seite, bis eine Seite leer oder kürzer als page_size ist.

        Schlägt eine Seite fehl, wird abgebrochen (kein Retry) und das bis dahin
        Gesammelte zurückgegeben; der nächste Durchlauf beginnt wieder bei Seite 1.
        """
        accumulated: list[CatalogRecord] = []
        page_number = 1
        pages_fetched = 0
        while True:
            try:
                page = await self.fetch_page(self._page_size, page_number)
            except REMOTE_ERRORS as e:
                logger.warning(
                    "Stopping pagination at page %d after %d records: %s",
                    page_number,
                    len(accumulated),
                    e,
                )
                return PageFetchResult(
                    records=tuple(accumulated), pages_fetched=pages_fetched, error=str(e)
                )
            pages_fetched += 1
            accumulated.extend(page)
            if len(page) < self._page_size:
                break
            page_number += 1

        logger.info("Fetched %d records in %d pages", len(accumulated), pages_fetched)
        return PageFetchResult(records=tuple(accumulated), pages_fetched=pages_fetched)
