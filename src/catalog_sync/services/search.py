# src/catalog_sync/services/search.py
from __future__ import annotations

from collections.abc import Sequence

from catalog_sync.domain.models import CatalogRecord


def _matches_query(record: CatalogRecord, query: str) -> bool:
    fields = (record.name, record.title, record.city, record.state, record.country)
    return any(query in f.lower() for f in fields if f)


def _matches_category(record: CatalogRecord, category: str) -> bool:
    if record.category.lower() == category:
        return True
    return any(tag.lower() == category for tag in record.tags)


def apply_filters(
    records: tuple[CatalogRecord, ...],
    query: str,
    category_filter: str | None,
) -> tuple[CatalogRecord, ...]:
    """
    Filtert die vereinheitlichte Liste nach Freitext (Teilstring, case-insensitive)
    und optional nach Kategorie (exakt, case-insensitive). Die Reihenfolge bleibt erhalten.
    """
    needle = query.strip().lower()
    category = (category_filter or "").strip().lower() or None
    if not needle and not category:
        return records

    return tuple(
        r
        for r in records
        if (not needle or _matches_query(r, needle))
        and (category is None or _matches_category(r, category))
    )


def available_categories(records: Sequence[CatalogRecord]) -> list[str]:
    """Distinct, sortierte Kategorien für Filter-Chips."""
    seen: dict[str, str] = {}
    for record in records:
        for value in (record.category, *record.tags):
            if value and value.lower() not in seen:
                seen[value.lower()] = value
    return sorted(seen.values(), key=str.lower)
