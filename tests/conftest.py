# tests/conftest.py
from collections.abc import Callable

import pytest

from catalog_sync.domain.models import CatalogRecord, RecordOrigin, origin_for_id
from catalog_sync.domain.ports import ExternalApiError, RecordNotFoundError, RemoteCatalogPort
from catalog_sync.repositories.memory import InMemoryFavoritesStore, InMemoryRecordStore
from catalog_sync.services.favorites_ledger import FavoritesLedger


def make_record(record_id: str, name: str | None = None, **fields: object) -> CatalogRecord:
    fields.setdefault("origin", origin_for_id(record_id))
    return CatalogRecord(id=record_id, name=name or record_id.title(), **fields)


class FakeCatalog(RemoteCatalogPort):
    """Remote-Katalog mit vorgegebenen Seitengrößen; None in pages simuliert einen Fehler."""

    source = "fake_catalog"

    def __init__(
        self,
        page_sizes: list[int | None] | None = None,
        details: dict[str, CatalogRecord] | None = None,
        detail_error: Exception | None = None,
        id_prefix: str = "r",
    ) -> None:
        self._page_sizes = page_sizes or []
        self._details = details or {}
        self._detail_error = detail_error
        self._id_prefix = id_prefix
        self.page_calls: list[tuple[int, int]] = []
        self.detail_calls: list[str] = []

    async def fetch_page(self, page_size: int, page_number: int) -> list[CatalogRecord]:
        self.page_calls.append((page_size, page_number))
        if page_number > len(self._page_sizes):
            return []
        size = self._page_sizes[page_number - 1]
        if size is None:
            raise ExternalApiError(self.source, "Connection error: unreachable")
        return [
            CatalogRecord(
                id=f"{self._id_prefix}{page_number}-{i}",
                origin=RecordOrigin.REMOTE,
                name=f"Brewery {page_number}-{i:03d}",
                category="micro",
            )
            for i in range(size)
        ]

    async def fetch_detail(self, record_id: str) -> CatalogRecord:
        self.detail_calls.append(record_id)
        if self._detail_error is not None:
            raise self._detail_error
        if record_id not in self._details:
            raise RecordNotFoundError(record_id, self.source)
        return self._details[record_id]


@pytest.fixture
def record_factory() -> Callable[..., CatalogRecord]:
    return make_record


@pytest.fixture
def fake_catalog_factory() -> Callable[..., FakeCatalog]:
    return FakeCatalog


@pytest.fixture
def record_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def favorites_ledger() -> FavoritesLedger:
    return FavoritesLedger(InMemoryFavoritesStore())
