# src/catalog_sync/domain/models.py
from __future__ import annotations

from enum import StrEnum
from typing import Self

from pydantic import BaseModel, Field, field_validator, model_validator

SEED_ID_PREFIX = "seed_"
DEFAULT_USER_ID_PREFIX = "user_"

# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------


class RecordOrigin(StrEnum):
    REMOTE = "remote"
    SEED = "seed"
    USER = "user"


def origin_for_id(record_id: str, user_prefix: str = DEFAULT_USER_ID_PREFIX) -> RecordOrigin:
    """Leitet die Herkunft aus dem Id-Namespace ab (nur für Altdaten ohne origin-Feld)."""
    if record_id.startswith(SEED_ID_PREFIX):
        return RecordOrigin.SEED
    if record_id.startswith(user_prefix):
        return RecordOrigin.USER
    return RecordOrigin.REMOTE


class SyncPhase(StrEnum):
    IDLE = "idle"
    SEED_LOADING = "seed_loading"
    CACHE_HYDRATED = "cache_hydrated"
    REMOTE_FETCHING = "remote_fetching"
    RECONCILED = "reconciled"


class MessageAction(StrEnum):
    ADD_FROM_SCAN = "add_from_scan"


# ---------------------------------------------------------------------------
# Aggregate: CatalogRecord
# Kernkonzept: ein Datensatz, egal ob aus Remote-API, Seed-Datei oder vom User.
# ---------------------------------------------------------------------------


class CatalogRecord(BaseModel):
    """
    Einheitliches Katalogmodell für Brauereien und Champions.
    Ein Datensatz wird immer als Ganzes ersetzt, nie feldweise gepatcht.
    """

    id: str = Field(min_length=1)
    origin: RecordOrigin
    name: str
    category: str = ""
    tags: tuple[str, ...] = ()
    title: str | None = None

    street: str | None = None
    address_1: str | None = None
    address_2: str | None = None
    address_3: str | None = None
    city: str | None = None
    state: str | None = None
    county_province: str | None = None
    state_province: str | None = None
    postal_code: str | None = None
    country: str | None = None
    longitude: str | None = None
    latitude: str | None = None

    phone: str | None = None
    website_url: str | None = None
    updated_at: str | None = None
    created_at: str | None = None

    notes: str | None = None
    beers: tuple[str, ...] = ()
    lore: str | None = None
    stats: dict[str, float] | None = None

    image_url: str | None = None
    image_path: str | None = None
    # Nur bei User-Datensätzen oder per Scan zugeordneten Einträgen gesetzt
    qr: str | None = None

    model_config = {"frozen": True}

    @property
    def sort_key(self) -> str:
        return self.name.lower()


def sort_records(records: list[CatalogRecord] | tuple[CatalogRecord, ...]) -> tuple[CatalogRecord, ...]:
    return tuple(sorted(records, key=lambda r: (r.sort_key, r.id)))


# ---------------------------------------------------------------------------
# Aggregate: FavoriteEntry
# Denormalisierter Snapshot zum Zeitpunkt des Favorisierens.
# ---------------------------------------------------------------------------


class FavoriteEntry(BaseModel):
    id: str = Field(min_length=1)
    name: str
    category: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    image_url: str | None = None

    model_config = {"frozen": True}

    @classmethod
    def from_record(cls, record: CatalogRecord) -> FavoriteEntry:
        return cls(
            id=record.id,
            name=record.name,
            category=record.category,
            city=record.city or "",
            state=record.state or "",
            country=record.country or "",
            image_url=record.image_url,
        )


# ---------------------------------------------------------------------------
# Barcode-Lookup
# ---------------------------------------------------------------------------


class ScannedProduct(BaseModel):
    code: str
    name: str | None = None
    brand: str | None = None
    category_tags: tuple[str, ...] = ()
    is_beer: bool = False

    model_config = {"frozen": True}

    @property
    def display_name(self) -> str:
        parts = [p for p in (self.brand, self.name) if p]
        return " ".join(parts) if parts else self.code


class PageFetchResult(BaseModel):
    """Ergebnis eines Paginierungsdurchlaufs. Teilergebnisse sind erlaubt."""

    records: tuple[CatalogRecord, ...] = ()
    pages_fetched: int = 0
    error: str | None = None

    model_config = {"frozen": True}

    @property
    def is_partial(self) -> bool:
        return self.error is not None


# ---------------------------------------------------------------------------
# Eingabe-Schemas für User-Datensätze
# ---------------------------------------------------------------------------


class RecordUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=512)
    category: str = Field(min_length=1)
    city: str = Field(min_length=1)
    country: str = Field(min_length=1)
    state: str = ""
    street: str | None = None
    postal_code: str | None = None
    phone: str | None = None
    website_url: str | None = None
    # None bedeutet: vorhandenes Bild behalten
    image_path: str | None = None

    @field_validator("name", "category", "city", "country")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    model_config = {"frozen": True}


class RecordCreate(RecordUpdate):
    qr: str | None = None


class RecordPrefill(BaseModel):
    name: str = ""
    category: str = ""
    qr: str | None = None

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# UI-Zustand (abgeleitet, nie persistiert)
# ---------------------------------------------------------------------------


class UserMessage(BaseModel):
    text: str
    action_label: str | None = None
    action: MessageAction | None = None

    @model_validator(mode="after")
    def label_requires_action(self) -> Self:
        if (self.action_label is None) != (self.action is None):
            raise ValueError("action_label and action must be set together")
        return self

    model_config = {"frozen": True}


class UiViewState(BaseModel):
    all_records: tuple[CatalogRecord, ...] = ()
    filtered_records: tuple[CatalogRecord, ...] = ()
    favorites: tuple[FavoriteEntry, ...] = ()
    selected_record: CatalogRecord | None = None
    search_query: str = ""
    category_filter: str | None = None
    is_loading: bool = False
    sync_phase: SyncPhase = SyncPhase.IDLE
    message: UserMessage | None = None
    add_prefill: RecordPrefill | None = None

    model_config = {"frozen": True}

    def is_favorite(self, record_id: str) -> bool:
        return any(f.id == record_id for f in self.favorites)
