# src/catalog_sync/repositories/memory.py
from __future__ import annotations

from catalog_sync.domain.models import CatalogRecord, FavoriteEntry
from catalog_sync.repositories.base import AbstractFavoritesStore, AbstractRecordStore


class InMemoryRecordStore(AbstractRecordStore):
    """
    In-Memory Katalogtabelle für Tests und flüchtige Sessions.
    Interface kann gegen die SQLite-Implementierung ausgetauscht werden.
    """

    def __init__(self, records: list[CatalogRecord] | None = None) -> None:
        self._rows: dict[str, CatalogRecord] = {r.id: r for r in records or []}

    async def upsert(self, record: CatalogRecord) -> CatalogRecord:
        self._rows[record.id] = record
        return record

    async def upsert_many(self, records: list[CatalogRecord]) -> int:
        for record in records:
            self._rows[record.id] = record
        return len(records)

    async def get_all(self) -> list[CatalogRecord]:
        return list(self._rows.values())

    async def get_by_id(self, record_id: str) -> CatalogRecord | None:
        return self._rows.get(record_id)

    async def find_by_qr(self, code: str) -> CatalogRecord | None:
        return next((r for r in self._rows.values() if r.qr == code), None)

    async def delete_by_id(self, record_id: str) -> bool:
        return self._rows.pop(record_id, None) is not None


class InMemoryFavoritesStore(AbstractFavoritesStore):
    def __init__(self) -> None:
        self._entries: dict[str, FavoriteEntry] = {}

    async def insert(self, entry: FavoriteEntry) -> FavoriteEntry:
        self._entries[entry.id] = entry
        return entry

    async def delete(self, entry: FavoriteEntry) -> bool:
        return self._entries.pop(entry.id, None) is not None

    async def get_by_id(self, record_id: str) -> FavoriteEntry | None:
        return self._entries.get(record_id)

    async def get_all(self) -> list[FavoriteEntry]:
        return list(self._entries.values())
