# src/catalog_sync/dependencies.py
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

import httpx

from catalog_sync.adapters.data_dragon import DataDragonAdapter
from catalog_sync.adapters.open_brewery_db import OpenBreweryDbAdapter
from catalog_sync.adapters.open_food_facts import OpenFoodFactsLookupAdapter
from catalog_sync.core.config import Settings, get_settings
from catalog_sync.domain.ports import ProductLookupPort, RemoteCatalogPort
from catalog_sync.repositories.sqlite_store import (
    SQLiteDatabase,
    SQLiteFavoritesStore,
    SQLiteRecordStore,
)
from catalog_sync.services.favorites_ledger import FavoritesLedger
from catalog_sync.services.remote_catalog import RemoteCatalogClient
from catalog_sync.services.seed_loader import SeedLoader
from catalog_sync.services.sync_reconciler import CatalogSyncService
from catalog_sync.services.user_records import UserRecordService


# Shared HTTP Client (Connection Pooling)
@lru_cache
def get_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers={"User-Agent": "BriefBeer/1.0 (catalog-sync)"},
        follow_redirects=True,
    )


def get_catalog_adapter(client: httpx.AsyncClient, settings: Settings) -> RemoteCatalogPort:
    if settings.catalog_kind == "champions":
        return DataDragonAdapter(
            http_client=client,
            base_url=settings.data_dragon_base_url,
            image_base_url=settings.data_dragon_image_base_url,
            timeout=settings.http_timeout_seconds,
        )
    return OpenBreweryDbAdapter(
        http_client=client,
        base_url=settings.open_brewery_db_base_url,
        timeout=settings.http_timeout_seconds,
    )


def get_product_lookup(client: httpx.AsyncClient, settings: Settings) -> ProductLookupPort | None:
    # Barcode-Scan gibt es nur im Brauerei-Katalog
    if settings.catalog_kind != "breweries":
        return None
    return OpenFoodFactsLookupAdapter(
        http_client=client,
        base_url=settings.open_food_facts_base_url,
        timeout=settings.http_timeout_seconds,
    )


@dataclass
class CatalogSession:
    """Alles, was eine Session besitzt und beim Beenden wieder freigibt."""

    service: CatalogSyncService
    database: SQLiteDatabase
    http_client: httpx.AsyncClient
    owns_http_client: bool = False

    async def aclose(self) -> None:
        self.service.close()
        await self.database.dispose()
        if self.owns_http_client:
            await self.http_client.aclose()
            get_http_client.cache_clear()


async def build_catalog_session(
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> CatalogSession:
    """Composition Root: erzeugt Datenbank, Stores, Adapter und den Sync-Dienst genau einmal."""
    settings = settings or get_settings()
    client = http_client or get_http_client()

    database = SQLiteDatabase(settings.database_url)
    await database.initialize()
    record_store = SQLiteRecordStore(database)
    favorites = FavoritesLedger(SQLiteFavoritesStore(database))

    remote = RemoteCatalogClient(
        catalog=get_catalog_adapter(client, settings),
        product_lookup=get_product_lookup(client, settings),
        page_size=settings.page_size,
    )
    seed_loader = (
        SeedLoader(record_store, settings.seed_dataset_path, settings.seed_country)
        if settings.catalog_kind == "breweries"
        else None
    )
    service = CatalogSyncService(
        store=record_store,
        favorites=favorites,
        remote=remote,
        user_records=UserRecordService(record_store, favorites, id_prefix=settings.user_id_prefix),
        seed_loader=seed_loader,
    )
    return CatalogSession(
        service=service,
        database=database,
        http_client=client,
        owns_http_client=http_client is None,
    )
