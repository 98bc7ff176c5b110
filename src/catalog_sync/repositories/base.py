from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from catalog_sync.domain.models import CatalogRecord, FavoriteEntry


class AbstractRecordStore(ABC):
    """Persistierte Katalogtabelle, Schlüssel ist die Record-Id."""

    @abstractmethod
    async def upsert(self, record: CatalogRecord) -> CatalogRecord:
        """Inserts a record, replacing the whole row on id conflict."""
        ...

    @abstractmethod
    async def upsert_many(self, records: list[CatalogRecord]) -> int:
        """Upserts all records in one call. Returns the number of rows written."""
        ...

    @abstractmethod
    async def get_all(self) -> list[CatalogRecord]:
        ...

    @abstractmethod
    async def get_by_id(self, record_id: str) -> CatalogRecord | None:
        ...

    @abstractmethod
    async def find_by_qr(self, code: str) -> CatalogRecord | None:
        """Finds the first record carrying the given scanned code."""
        ...

    @abstractmethod
    async def delete_by_id(self, record_id: str) -> bool:
        """Deletes a record. Returns True if a row was removed."""
        ...


class AbstractFavoritesStore(ABC):
    """Persistierte Favoriten, unabhängig von der Katalogtabelle."""

    @abstractmethod
    async def insert(self, entry: FavoriteEntry) -> FavoriteEntry:
        """Inserts a favorite, replacing an existing entry with the same id."""
        ...

    @abstractmethod
    async def delete(self, entry: FavoriteEntry) -> bool:
        """Deletes the row matching the entry's primary key."""
        ...

    @abstractmethod
    async def get_by_id(self, record_id: str) -> FavoriteEntry | None:
        ...

    @abstractmethod
    async def get_all(self) -> list[FavoriteEntry]:
        ...
