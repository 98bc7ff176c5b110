# src/catalog_sync/adapters/open_food_facts.py
from __future__ import annotations

import logging
import re

import httpx
from pydantic import BaseModel, Field, ValidationError

from catalog_sync.domain.models import ScannedProduct
from catalog_sync.domain.ports import ExternalApiError, ProductLookupPort, ResponseDecodeError

logger = logging.getLogger(__name__)

_SOURCE = "open_food_facts"

# ---------------------------------------------------------------------------
# Interne Rohdaten-Schemas (für typisiertes Parsing der OFF-Response)
# ---------------------------------------------------------------------------


class _OffProduct(BaseModel):
    code: str | None = None
    product_name: str | None = None
    generic_name: str | None = None
    brands: str | None = None
    categories: str | None = None
    categories_tags: list[str] = Field(default_factory=list)


class _OffResponse(BaseModel):
    status: int  # 1 = found, 0 = not found
    product: _OffProduct | None = None


# ---------------------------------------------------------------------------
# Bier-Heuristik
# ---------------------------------------------------------------------------

_BEER_CATEGORY_TAGS = frozenset({
    "en:beers",
    "en:beer",
    "en:lagers",
    "en:ales",
    "en:craft-beers",
    "en:wheat-beers",
    "en:stouts",
    "en:pale-ales",
    "en:non-alcoholic-beers",
})

_BEER_KEYWORDS = (
    "beer", "beers", "lager", "ale", "stout", "porter", "pilsner", "pils", "ipa",
    "bier", "weizen", "weissbier", "hefeweizen",  # de
    "pivo", "ležák", "lezak", "výčepní", "vycepni",  # cs
    "cerveza", "cerveja",  # es, pt
    "bière", "biere",  # fr
    "birra",  # it
    "piwo",  # pl
    "öl", "olut", "sör", "bira",  # sv/no, fi, hu, tr
)

_KEYWORD_PATTERN = re.compile(
    r"\b(" + "|".join(re.escape(k) for k in sorted(set(_BEER_KEYWORDS), key=len, reverse=True)) + r")\b",
    re.IGNORECASE,
)


def is_beer_product(product: _OffProduct) -> bool:
    """Explizite Kategorie-Tags zuerst, danach Schlüsselwörter in Name/Marke/Kategorien."""
    tags = {t.lower() for t in product.categories_tags}
    if tags & _BEER_CATEGORY_TAGS:
        return True
    if any(t.endswith(":beers") or t.endswith("-beers") for t in tags):
        return True
    haystack = " ".join(
        p for p in (product.product_name, product.generic_name, product.brands, product.categories) if p
    )
    return bool(_KEYWORD_PATTERN.search(haystack))


class OpenFoodFactsLookupAdapter(ProductLookupPort):
    """Produkt-Lookup über die Open Food Facts API (EAN/UPC oder QR-Inhalt)."""

    source = _SOURCE

    def __init__(self, http_client: httpx.AsyncClient, base_url: str, timeout: float = 10.0) -> None:
        self._client = http_client
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    async def lookup_by_code(self, code: str) -> ScannedProduct | None:
        url = f"{self._base_url}/api/v0/product/{code}.json"
        try:
            response = await self._client.get(url, timeout=self._timeout)
            if response.status_code == 404:
                return None
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ExternalApiError(_SOURCE, str(e)) from e
        except httpx.RequestError as e:
            raise ExternalApiError(_SOURCE, f"Connection error: {e}") from e

        try:
            raw = _OffResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ResponseDecodeError(_SOURCE, str(e)) from e

        if raw.status == 0 or raw.product is None:
            logger.info("No product found for code %s", code)
            return None

        return ScannedProduct(
            code=code,
            name=raw.product.product_name or raw.product.generic_name,
            brand=raw.product.brands,
            category_tags=tuple(raw.product.categories_tags),
            is_beer=is_beer_product(raw.product),
        )
