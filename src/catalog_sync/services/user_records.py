# src/catalog_sync/services/user_records.py
from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime

from catalog_sync.domain.models import (
    DEFAULT_USER_ID_PREFIX,
    CatalogRecord,
    RecordCreate,
    RecordOrigin,
    RecordUpdate,
)
from catalog_sync.repositories.base import AbstractRecordStore
from catalog_sync.services.favorites_ledger import FavoritesLedger

logger = logging.getLogger(__name__)


def is_user_record(record: CatalogRecord) -> bool:
    """Nur vom User angelegte Datensätze dürfen bearbeitet und gelöscht werden."""
    return record.origin is RecordOrigin.USER


class UserRecordService:
    def __init__(
        self,
        store: AbstractRecordStore,
        favorites: FavoritesLedger,
        id_prefix: str = DEFAULT_USER_ID_PREFIX,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._favorites = favorites
        self._id_prefix = id_prefix
        self._clock = clock

    @property
    def id_prefix(self) -> str:
        return self._id_prefix

    def _new_id(self) -> str:
        return f"{self._id_prefix}{int(self._clock() * 1000)}"

    async def create(self, payload: RecordCreate) -> CatalogRecord:
        now = datetime.fromtimestamp(self._clock(), UTC).isoformat()
        record = CatalogRecord(
            id=self._new_id(),
            origin=RecordOrigin.USER,
            name=payload.name,
            category=payload.category,
            street=payload.street,
            city=payload.city,
            state=payload.state,
            state_province=payload.state or None,
            postal_code=payload.postal_code,
            country=payload.country,
            phone=payload.phone,
            website_url=payload.website_url,
            image_path=payload.image_path,
            qr=payload.qr,
            created_at=now,
            updated_at=now,
        )
        await self._store.upsert(record)
        logger.info("Created user record %s", record.id)
        return record

    async def update(self, record_id: str, payload: RecordUpdate) -> CatalogRecord | None:
        existing = await self._store.get_by_id(record_id)
        if existing is None:
            logger.info("Ignoring update for unknown record %s", record_id)
            return None

        changes = payload.model_dump(include=set(RecordUpdate.model_fields))
        if payload.image_path is None:
            changes.pop("image_path")
        changes["state_province"] = payload.state or None
        changes["updated_at"] = datetime.fromtimestamp(self._clock(), UTC).isoformat()
        updated = existing.model_copy(update=changes)

        await self._store.upsert(updated)
        # Zwei getrennte Schritte: ein parallel geänderter Favorit kann veraltet sein
        await self._favorites.update_snapshot(updated)
        return updated

    async def delete(self, record_id: str) -> bool:
        deleted = await self._store.delete_by_id(record_id)
        await self._favorites.discard(record_id)
        return deleted
