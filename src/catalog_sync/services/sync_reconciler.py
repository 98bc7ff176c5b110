# src/catalog_sync/services/sync_reconciler.py
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from catalog_sync.core.metrics import CACHE_HITS, CACHE_MISSES, SYNC_PASSES
from catalog_sync.core.state import StateCell
from catalog_sync.domain.models import (
    CatalogRecord,
    FavoriteEntry,
    MessageAction,
    RecordCreate,
    RecordOrigin,
    RecordPrefill,
    RecordUpdate,
    SyncPhase,
    UiViewState,
    UserMessage,
    origin_for_id,
    sort_records,
)
from catalog_sync.domain.ports import REMOTE_ERRORS, REMOTE_SYNC_ERRORS, RecordNotFoundError
from catalog_sync.repositories.base import AbstractRecordStore
from catalog_sync.services.favorites_ledger import FavoritesLedger
from catalog_sync.services.remote_catalog import RemoteCatalogClient
from catalog_sync.services.search import apply_filters
from catalog_sync.services.seed_loader import SeedLoader
from catalog_sync.services.user_records import UserRecordService

logger = logging.getLogger(__name__)

DETAIL_UNAVAILABLE_MESSAGE = "Could not load details. Check your connection and try again."
LOOKUP_UNAVAILABLE_MESSAGE = "Product lookup is unavailable right now."
ADD_ACTION_LABEL = "Add"


class CatalogSyncService:
    """
    Einziger Besitzer des Katalogzustands einer Session.

    Ablauf eines Durchlaufs: Seed -> Cache hydrieren -> Remote paginiert holen
    -> upserten -> kompletten Local Store neu lesen -> publizieren.
    Fehler beim Remote-Sync fallen still auf den Cache zurück.

    Der Dienst schützt nicht gegen parallele load_records()-Aufrufe;
    der Aufrufer muss das über is_loading serialisieren.
    """

    def __init__(
        self,
        store: AbstractRecordStore,
        favorites: FavoritesLedger,
        remote: RemoteCatalogClient,
        user_records: UserRecordService,
        seed_loader: SeedLoader | None = None,
    ) -> None:
        self._store = store
        self._favorites = favorites
        self._remote = remote
        self._user_records = user_records
        self._seed_loader = seed_loader
        self._state: StateCell[UiViewState] = StateCell(UiViewState())
        self._pending_prefill: RecordPrefill | None = None
        self._unsubscribe_favorites: Callable[[], None] | None = None

    @property
    def state(self) -> StateCell[UiViewState]:
        return self._state

    # ------------------------------------------------------------------
    # Zustand publizieren (immer als kompletter neuer Snapshot)
    # ------------------------------------------------------------------

    def _publish(self, **changes: object) -> UiViewState:
        return self._state.update(lambda s: s.model_copy(update=changes))

    def _publish_records(self, records: Iterable[CatalogRecord], **changes: object) -> UiViewState:
        all_records = sort_records(list(records))

        def _transform(s: UiViewState) -> UiViewState:
            filtered = apply_filters(all_records, s.search_query, s.category_filter)
            return s.model_copy(
                update={"all_records": all_records, "filtered_records": filtered, **changes}
            )

        return self._state.update(_transform)

    def _on_favorites(self, entries: tuple[FavoriteEntry, ...]) -> None:
        self._publish(favorites=entries)

    # ------------------------------------------------------------------
    # Lebenszyklus
    # ------------------------------------------------------------------

    async def start(self) -> UiViewState:
        """Kaltstart: Favoriten beobachten, Seed laden, dann den ersten Sync-Durchlauf."""
        if self._unsubscribe_favorites is None:
            self._unsubscribe_favorites = self._favorites.favorites.subscribe(self._on_favorites)
        await self._favorites.refresh()

        if self._seed_loader is not None:
            self._publish(sync_phase=SyncPhase.SEED_LOADING)
            await self._seed_loader.load_seed_once()

        return await self.load_records()

    def close(self) -> None:
        if self._unsubscribe_favorites is not None:
            self._unsubscribe_favorites()
            self._unsubscribe_favorites = None

    async def load_records(self) -> UiViewState:
        """Ein Abgleich-Durchlauf; kann jederzeit erneut aufgerufen werden (Refresh)."""
        cached = await self._store.get_all()
        self._publish_records(cached, sync_phase=SyncPhase.CACHE_HYDRATED)
        self._publish(sync_phase=SyncPhase.REMOTE_FETCHING, is_loading=True)

        try:
            result = await self._remote.fetch_all_pages()
        except REMOTE_ERRORS as e:
            logger.warning("Remote sync failed, keeping cached catalog: %s", e)
            return await self._fall_back_to_cache()
        except Exception:
            # Unerwarteter Fehler: Zustand trotzdem auf den Cache zurücksetzen, dann weiterreichen
            logger.exception("Remote sync aborted by an unexpected error")
            await self._fall_back_to_cache()
            raise

        if result.pages_fetched == 0:
            return await self._fall_back_to_cache()

        # Erst nach vollständiger Paginierung wird committet, als ein Batch
        await self._store.upsert_many(list(result.records))
        SYNC_PASSES.labels(outcome="partial" if result.is_partial else "ok").inc()

        records = await self._store.get_all()
        logger.info(
            "Reconciled %d remote records, %d records in store", len(result.records), len(records)
        )
        return self._publish_records(records, sync_phase=SyncPhase.RECONCILED, is_loading=False)

    async def _fall_back_to_cache(self) -> UiViewState:
        SYNC_PASSES.labels(outcome="cache_fallback").inc()
        records = await self._store.get_all()
        return self._publish_records(
            records, sync_phase=SyncPhase.CACHE_HYDRATED, is_loading=False
        )

    # ------------------------------------------------------------------
    # Suche und Filter
    # ------------------------------------------------------------------

    def set_search_query(self, query: str) -> UiViewState:
        return self._state.update(
            lambda s: s.model_copy(
                update={
                    "search_query": query,
                    "filtered_records": apply_filters(s.all_records, query, s.category_filter),
                }
            )
        )

    def set_category_filter(self, category: str | None) -> UiViewState:
        return self._state.update(
            lambda s: s.model_copy(
                update={
                    "category_filter": category,
                    "filtered_records": apply_filters(s.all_records, s.search_query, category),
                }
            )
        )

    # ------------------------------------------------------------------
    # Detailansicht
    # ------------------------------------------------------------------

    async def select_record(self, record_id: str) -> CatalogRecord | None:
        if not record_id:
            return None
        s = self._state.value
        if not any(r.id == record_id for r in s.all_records) and not s.is_favorite(record_id):
            return None

        cached = await self._store.get_by_id(record_id)
        if cached is not None:
            CACHE_HITS.inc()
            self._publish(selected_record=cached)
            return cached

        CACHE_MISSES.inc()
        if origin_for_id(record_id, self._user_records.id_prefix) is not RecordOrigin.REMOTE:
            # Seed- und User-Datensätze existieren nur lokal
            logger.info("Local-only record %s is no longer stored", record_id)
            return None

        failure: Exception | None = None
        try:
            record = await self._remote.fetch_detail(record_id)
        except RecordNotFoundError:
            logger.info("Record %s not found remotely", record_id)
        except REMOTE_SYNC_ERRORS as e:
            logger.warning("Detail fetch for %s failed: %s", record_id, e)
            failure = e
        else:
            await self._store.upsert(record)
            self._publish(selected_record=record)
            return record

        # Ein anderer Pfad kann den Datensatz inzwischen gecacht haben
        cached = await self._store.get_by_id(record_id)
        if cached is not None:
            self._publish(selected_record=cached)
            return cached
        if failure is not None:
            self._publish(message=UserMessage(text=DETAIL_UNAVAILABLE_MESSAGE))
        return None

    def clear_selected_record(self) -> UiViewState:
        return self._publish(selected_record=None)

    # ------------------------------------------------------------------
    # Favoriten
    # ------------------------------------------------------------------

    async def toggle_favorite(self, record: CatalogRecord | FavoriteEntry) -> bool:
        return await self._favorites.toggle(record)

    # ------------------------------------------------------------------
    # User-Datensätze
    # ------------------------------------------------------------------

    async def create_record(self, payload: RecordCreate) -> CatalogRecord:
        record = await self._user_records.create(payload)
        self._pending_prefill = None
        self._publish_records((*self._state.value.all_records, record), add_prefill=None)
        return record

    async def update_record(self, record_id: str, payload: RecordUpdate) -> CatalogRecord | None:
        updated = await self._user_records.update(record_id, payload)
        if updated is None:
            return None
        s = self._state.value
        records = [updated if r.id == record_id else r for r in s.all_records]
        if not any(r.id == record_id for r in s.all_records):
            records.append(updated)
        changes: dict[str, object] = {}
        if s.selected_record is not None and s.selected_record.id == record_id:
            changes["selected_record"] = updated
        self._publish_records(records, **changes)
        return updated

    async def delete_record(self, record_id: str) -> bool:
        deleted = await self._user_records.delete(record_id)
        s = self._state.value
        changes: dict[str, object] = {}
        if s.selected_record is not None and s.selected_record.id == record_id:
            changes["selected_record"] = None
        self._publish_records((r for r in s.all_records if r.id != record_id), **changes)
        return deleted

    # ------------------------------------------------------------------
    # Barcode / QR
    # ------------------------------------------------------------------

    async def search_by_code(self, code: str) -> CatalogRecord | None:
        """
        Ordnet einen gescannten Code einem Datensatz zu. Ohne lokalen Treffer
        wird der Produktdienst gefragt und ggf. das Anlegen angeboten.
        """
        code = code.strip()
        if not code:
            return None

        match = await self._store.find_by_qr(code)
        if match is not None:
            self._publish(selected_record=match)
            return match

        try:
            product = await self._remote.lookup_by_code(code)
        except REMOTE_SYNC_ERRORS as e:
            logger.warning("Product lookup for %s failed: %s", code, e)
            self._publish(message=UserMessage(text=LOOKUP_UNAVAILABLE_MESSAGE))
            return None

        if product is None:
            self._offer_add(RecordPrefill(qr=code), f"No product found for code {code}.")
        elif product.is_beer:
            prefill = RecordPrefill(name=product.brand or product.name or "", qr=code)
            self._offer_add(prefill, f"Found {product.display_name}. Add it to your breweries?")
        else:
            self._pending_prefill = None
            self._publish(
                message=UserMessage(text=f"{product.display_name} does not look like a beer.")
            )
        return None

    def _offer_add(self, prefill: RecordPrefill, text: str) -> None:
        self._pending_prefill = prefill
        self._publish(
            message=UserMessage(
                text=text, action_label=ADD_ACTION_LABEL, action=MessageAction.ADD_FROM_SCAN
            )
        )

    # ------------------------------------------------------------------
    # Nachrichten
    # ------------------------------------------------------------------

    def perform_message_action(self) -> UiViewState:
        s = self._state.value
        if s.message is None or s.message.action is not MessageAction.ADD_FROM_SCAN:
            return self.clear_message()
        prefill = self._pending_prefill or RecordPrefill()
        self._pending_prefill = None
        return self._publish(message=None, add_prefill=prefill)

    def clear_message(self) -> UiViewState:
        return self._publish(message=None)

    def dismiss_add_prefill(self) -> UiViewState:
        self._pending_prefill = None
        return self._publish(add_prefill=None)
