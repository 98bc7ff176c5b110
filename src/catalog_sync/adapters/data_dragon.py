# src/catalog_sync/adapters/data_dragon.py
from __future__ import annotations

import httpx
from pydantic import BaseModel, Field, ValidationError

from catalog_sync.domain.models import CatalogRecord, RecordOrigin
from catalog_sync.domain.ports import (
    ExternalApiError,
    RecordNotFoundError,
    RemoteCatalogPort,
    ResponseDecodeError,
)

_SOURCE = "data_dragon"

# Anzeigename → Feld im Data-Dragon-Statsblock
_STAT_LABELS: dict[str, str] = {
    "HP": "hp",
    "HP per Level": "hpperlevel",
    "MP / Resource": "mp",
    "MP per Level": "mpperlevel",
    "Move Speed": "movespeed",
    "Armor": "armor",
    "Armor per Level": "armorperlevel",
    "Magic Resist": "spellblock",
    "Magic Resist per Level": "spellblockperlevel",
    "Attack Range": "attackrange",
    "HP Regen": "hpregen",
    "HP Regen per Level": "hpregenperlevel",
    "MP Regen": "mpregen",
    "MP Regen per Level": "mpregenperlevel",
    "Critical Strike": "crit",
    "Critical Strike per Level": "critperlevel",
    "Attack Damage": "attackdamage",
    "Attack Damage per Level": "attackdamageperlevel",
    "Attack Speed": "attackspeed",
    "Attack Speed per Level": "attackspeedperlevel",
}


class _ChampionImage(BaseModel):
    full: str


class _ChampionDto(BaseModel):
    id: str
    name: str
    title: str = ""
    lore: str | None = None
    tags: list[str] = Field(default_factory=list)
    image: _ChampionImage
    stats: dict[str, float] = Field(default_factory=dict)


class _ChampionResponse(BaseModel):
    data: dict[str, _ChampionDto]


class DataDragonAdapter(RemoteCatalogPort):
    """
    Adapter für Riot Data Dragon.
    Die Champion-Liste ist nicht paginiert: Seite 1 enthält alles, jede weitere Seite ist leer.
    """

    source = _SOURCE

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        image_base_url: str,
        timeout: float = 10.0,
    ) -> None:
        self._client = http_client
        self._base_url = base_url.rstrip("/")
        self._image_base_url = image_base_url.rstrip("/")
        self._timeout = timeout

    async def fetch_page(self, page_size: int, page_number: int) -> list[CatalogRecord]:
        if page_number > 1:
            return []
        response = await self._get(f"{self._base_url}/champion.json")
        try:
            raw = _ChampionResponse.model_validate(response.json())
            return [self._normalize(dto) for dto in raw.data.values()]
        except (ValueError, ValidationError) as e:
            raise ResponseDecodeError(_SOURCE, str(e)) from e

    async def fetch_detail(self, record_id: str) -> CatalogRecord:
        response = await self._get(
            f"{self._base_url}/champion/{record_id}.json", not_found_id=record_id
        )
        try:
            raw = _ChampionResponse.model_validate(response.json())
            dto = next(iter(raw.data.values()), None)
            record = None if dto is None else self._normalize(dto)
        except (ValueError, ValidationError) as e:
            raise ResponseDecodeError(_SOURCE, str(e)) from e
        if record is None:
            raise RecordNotFoundError(record_id, _SOURCE)
        return record

    async def _get(self, url: str, not_found_id: str | None = None) -> httpx.Response:
        try:
            response = await self._client.get(url, timeout=self._timeout)
            # Data Dragon antwortet bei unbekannten Champions mit 403
            if not_found_id is not None and response.status_code in (403, 404):
                raise RecordNotFoundError(not_found_id, _SOURCE)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ExternalApiError(_SOURCE, str(e)) from e
        except httpx.RequestError as e:
            raise ExternalApiError(_SOURCE, f"Connection error: {e}") from e
        return response

    def _normalize(self, dto: _ChampionDto) -> CatalogRecord:
        stats = {
            label: dto.stats[key] for label, key in _STAT_LABELS.items() if key in dto.stats
        }
        return CatalogRecord(
            id=dto.id,
            origin=RecordOrigin.REMOTE,
            name=dto.name,
            title=dto.title,
            category=dto.tags[0] if dto.tags else "",
            tags=tuple(dto.tags),
            lore=dto.lore,
            stats=stats or None,
            image_url=f"{self._image_base_url}/{dto.image.full}",
        )
