from prometheus_client import Counter, Histogram

EXTERNAL_API_COUNT = Counter(
    "catalog_external_api_requests_total",
    "Total number of external API requests",
    ["source", "status"],
)

EXTERNAL_API_DURATION = Histogram(
    "catalog_external_api_duration_seconds",
    "Duration of external API requests in seconds",
    ["source"],
)

SYNC_PASSES = Counter(
    "catalog_sync_passes_total",
    "Total number of reconciliation passes",
    ["outcome"],
)

CACHE_HITS = Counter("catalog_detail_cache_hits_total", "Detail lookups served by the local store")
CACHE_MISSES = Counter(
    "catalog_detail_cache_misses_total", "Detail lookups that needed a remote fetch"
)
