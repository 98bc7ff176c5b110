# src/catalog_sync/adapters/open_brewery_db.py
from __future__ import annotations

import logging

import httpx
from pydantic import BaseModel, ValidationError

from catalog_sync.domain.models import CatalogRecord, RecordOrigin
from catalog_sync.domain.ports import (
    ExternalApiError,
    RecordNotFoundError,
    RemoteCatalogPort,
    ResponseDecodeError,
)

logger = logging.getLogger(__name__)

_SOURCE = "open_brewery_db"

# ---------------------------------------------------------------------------
# Interne Rohdaten-Schemas (Open Brewery DB liefert fast alles optional)
# ---------------------------------------------------------------------------


class _BreweryDto(BaseModel):
    id: str
    name: str | None = None
    brewery_type: str | None = None
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
    longitude: str | float | None = None
    latitude: str | float | None = None
    phone: str | None = None
    website_url: str | None = None
    updated_at: str | None = None
    created_at: str | None = None


def _coord(value: str | float | None) -> str | None:
    return None if value is None else str(value)


class OpenBreweryDbAdapter(RemoteCatalogPort):
    """
    Adapter für die Open Brewery DB.
    Normalisiert Brauerei-DTOs in das einheitliche CatalogRecord-Schema.
    """

    source = _SOURCE

    def __init__(self, http_client: httpx.AsyncClient, base_url: str, timeout: float = 10.0) -> None:
        self._client = http_client
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    async def fetch_page(self, page_size: int, page_number: int) -> list[CatalogRecord]:
        url = f"{self._base_url}/breweries"
        params = {"per_page": page_size, "page": page_number}
        try:
            response = await self._client.get(url, params=params, timeout=self._timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ExternalApiError(_SOURCE, str(e)) from e
        except httpx.RequestError as e:
            raise ExternalApiError(_SOURCE, f"Connection error: {e}") from e

        try:
            payload = response.json()
            if not isinstance(payload, list):
                raise ResponseDecodeError(_SOURCE, "expected a JSON array of breweries")
            return [self._normalize(_BreweryDto.model_validate(item)) for item in payload]
        except (ValueError, ValidationError) as e:
            raise ResponseDecodeError(_SOURCE, str(e)) from e

    async def fetch_detail(self, record_id: str) -> CatalogRecord:
        url = f"{self._base_url}/breweries/{record_id}"
        try:
            response = await self._client.get(url, timeout=self._timeout)
            if response.status_code == 404:
                raise RecordNotFoundError(record_id, _SOURCE)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ExternalApiError(_SOURCE, str(e)) from e
        except httpx.RequestError as e:
            raise ExternalApiError(_SOURCE, f"Connection error: {e}") from e

        try:
            return self._normalize(_BreweryDto.model_validate(response.json()))
        except (ValueError, ValidationError) as e:
            raise ResponseDecodeError(_SOURCE, str(e)) from e

    # ------------------------------------------------------------------
    # Private Normalisierungslogik
    # ------------------------------------------------------------------

    @staticmethod
    def _normalize(dto: _BreweryDto) -> CatalogRecord:
        return CatalogRecord(
            id=dto.id,
            origin=RecordOrigin.REMOTE,
            name=dto.name or "Unknown",
            category=dto.brewery_type or "",
            street=dto.street,
            address_1=dto.address_1,
            address_2=dto.address_2,
            address_3=dto.address_3,
            city=dto.city,
            state=dto.state,
            county_province=dto.county_province,
            state_province=dto.state_province,
            postal_code=dto.postal_code,
            country=dto.country,
            longitude=_coord(dto.longitude),
            latitude=_coord(dto.latitude),
            phone=dto.phone,
            website_url=dto.website_url,
            updated_at=dto.updated_at,
            created_at=dto.created_at,
        )
