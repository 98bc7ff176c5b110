# src/catalog_sync/domain/ports.py
from abc import ABC, abstractmethod

from catalog_sync.domain.models import CatalogRecord, ScannedProduct


class RemoteCatalogPort(ABC):
    """
    Abstrakte Schnittstelle für einen entfernten, paginierten Katalog.
    Jeder Katalog-Adapter MUSS dieses Interface implementieren.
    """

    source: str = "remote"

    @abstractmethod
    async def fetch_page(self, page_size: int, page_number: int) -> list[CatalogRecord]:
        """
        Liefert eine Seite (1-basiert) des Katalogs als normalisierte Datensätze.

        Raises:
            ExternalApiError: Bei Netzwerk- oder HTTP-Fehlern.
            ResponseDecodeError: Wenn die Antwort nicht dem erwarteten Schema entspricht.
        """
        ...

    @abstractmethod
    async def fetch_detail(self, record_id: str) -> CatalogRecord:
        """
        Raises:
            RecordNotFoundError: Wenn die Id remote nicht existiert.
            ExternalApiError: Bei Kommunikationsproblemen.
            ResponseDecodeError: Bei ungültiger Antwort.
        """
        ...


class ProductLookupPort(ABC):
    """Produkt-Identifikation über einen gescannten Code (Barcode/QR)."""

    source: str = "product_lookup"

    @abstractmethod
    async def lookup_by_code(self, code: str) -> ScannedProduct | None:
        """Gibt None zurück, wenn der Dienst kein Produkt zum Code kennt."""
        ...


# ---------------------------------------------------------------------------
# Custom Domain Exceptions
# ---------------------------------------------------------------------------


class RecordNotFoundError(Exception):
    def __init__(self, record_id: str, source: str):
        super().__init__(f"Record '{record_id}' not found in source '{source}'")
        self.record_id = record_id
        self.source = source


class ExternalApiError(Exception):
    def __init__(self, source: str, detail: str):
        super().__init__(f"External API error from '{source}': {detail}")
        self.source = source
        self.detail = detail


class ResponseDecodeError(Exception):
    def __init__(self, source: str, detail: str):
        super().__init__(f"Malformed response from '{source}': {detail}")
        self.source = source
        self.detail = detail


class SeedParseError(Exception):
    def __init__(self, path: str, detail: str):
        super().__init__(f"Cannot read seed dataset '{path}': {detail}")
        self.path = path
        self.detail = detail


# Netzwerk- und Dekodierfehler: werden dem User bei Detail und Scan gemeldet
REMOTE_SYNC_ERRORS = (ExternalApiError, ResponseDecodeError)

# Alles, was ein Remote-Adapter werfen darf; ein Sync-Durchlauf fällt dabei still auf den Cache zurück
REMOTE_ERRORS = (*REMOTE_SYNC_ERRORS, RecordNotFoundError)
