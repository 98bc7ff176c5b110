# src/catalog_sync/services/seed_loader.py
from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from catalog_sync.domain.models import SEED_ID_PREFIX, CatalogRecord, RecordOrigin
from catalog_sync.domain.ports import SeedParseError
from catalog_sync.repositories.base import AbstractRecordStore

logger = logging.getLogger(__name__)

DEFAULT_SEED_CATEGORY = "micro"

# ---------------------------------------------------------------------------
# Schema der gebündelten Seed-Datei
# ---------------------------------------------------------------------------


class _SeedBrewery(BaseModel):
    name: str = Field(min_length=1)
    location: str | None = None
    type: str | None = None
    notes: str | None = None
    beers: list[str] = Field(default_factory=list)
    qr: str | None = None

    @field_validator("beers", mode="before")
    @classmethod
    def beer_names(cls, value: object) -> object:
        # Biere dürfen als String oder als Objekt mit "name" angegeben sein
        if isinstance(value, list):
            return [b.get("name", "") if isinstance(b, dict) else b for b in value]
        return value


class _SeedRegion(BaseModel):
    breweries: list[_SeedBrewery] = Field(default_factory=list)


class _SeedDataset(BaseModel):
    regions: dict[str, _SeedRegion]
    # Kuratierte Listen werden vom Kern nicht ausgewertet
    lists: dict[str, object] | None = None


def seed_id(name: str) -> str:
    return SEED_ID_PREFIX + name.strip().lower().replace(" ", "_")


class SeedLoader:
    """
    Lädt den mitgelieferten Datensatz einmal pro Kaltstart in den Local Store.
    Wiederholtes Upserten derselben Ids ist idempotent.
    """

    def __init__(self, store: AbstractRecordStore, path: Path, country: str) -> None:
        self._store = store
        self._path = path
        self._country = country
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    async def load_seed_once(self) -> int:
        """Returns the number of upserted seed records (0 if skipped or unreadable)."""
        if self._loaded:
            return 0
        self._loaded = True

        try:
            dataset = await self._read_dataset()
        except SeedParseError as e:
            logger.warning("Skipping seed data: %s", e)
            return 0

        records = self._to_records(dataset)
        count = await self._store.upsert_many(records)
        logger.info("Loaded %d seed records from %s", count, self._path)
        return count

    async def _read_dataset(self) -> _SeedDataset:
        try:
            raw = await asyncio.to_thread(self._path.read_text, encoding="utf-8")
        except OSError as e:
            raise SeedParseError(str(self._path), str(e)) from e
        try:
            return _SeedDataset.model_validate_json(raw)
        except ValidationError as e:
            raise SeedParseError(str(self._path), str(e)) from e

    def _to_records(self, dataset: _SeedDataset) -> list[CatalogRecord]:
        records = []
        for region, content in dataset.regions.items():
            for brewery in content.breweries:
                records.append(
                    CatalogRecord(
                        id=seed_id(brewery.name),
                        origin=RecordOrigin.SEED,
                        name=brewery.name.strip(),
                        category=brewery.type or DEFAULT_SEED_CATEGORY,
                        city=brewery.location,
                        state=region,
                        state_province=region,
                        country=self._country,
                        notes=brewery.notes,
                        beers=tuple(b for b in brewery.beers if b),
                        qr=brewery.qr,
                    )
                )
        return records
