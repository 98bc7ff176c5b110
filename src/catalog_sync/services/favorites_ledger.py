# src/catalog_sync/services/favorites_ledger.py
from __future__ import annotations

import logging

from catalog_sync.core.state import StateCell
from catalog_sync.domain.models import CatalogRecord, FavoriteEntry
from catalog_sync.repositories.base import AbstractFavoritesStore

logger = logging.getLogger(__name__)


class FavoritesLedger:
    """
    Unabhängige Favoritenmenge. Ein Favorit überlebt, auch wenn der
    zugehörige Katalogdatensatz gelöscht oder nie geladen wurde.
    Jede Änderung publiziert die komplette aktuelle Menge.
    """

    def __init__(self, store: AbstractFavoritesStore) -> None:
        self._store = store
        self._favorites: StateCell[tuple[FavoriteEntry, ...]] = StateCell(())

    @property
    def favorites(self) -> StateCell[tuple[FavoriteEntry, ...]]:
        return self._favorites

    async def refresh(self) -> tuple[FavoriteEntry, ...]:
        entries = await self._store.get_all()
        snapshot = tuple(sorted(entries, key=lambda e: (e.name.lower(), e.id)))
        self._favorites.set(snapshot)
        return snapshot

    async def add(self, entry: FavoriteEntry) -> None:
        await self._store.insert(entry)
        await self.refresh()

    async def remove(self, entry: FavoriteEntry) -> None:
        await self._store.delete(entry)
        await self.refresh()

    async def is_favorite(self, record_id: str) -> bool:
        return await self._store.get_by_id(record_id) is not None

    async def toggle(self, record: CatalogRecord | FavoriteEntry) -> bool:
        """Returns the new favorite status of the record."""
        entry = record if isinstance(record, FavoriteEntry) else FavoriteEntry.from_record(record)
        if await self.is_favorite(entry.id):
            await self.remove(entry)
            return False
        await self.add(entry)
        return True

    async def update_snapshot(self, record: CatalogRecord) -> bool:
        """Aktualisiert den denormalisierten Eintrag, falls der Datensatz favorisiert ist."""
        if not await self.is_favorite(record.id):
            return False
        await self.add(FavoriteEntry.from_record(record))
        logger.debug("Refreshed favorite snapshot for %s", record.id)
        return True

    async def discard(self, record_id: str) -> bool:
        existing = await self._store.get_by_id(record_id)
        if existing is None:
            return False
        await self.remove(existing)
        return True
