"""Application constants."""

USER_AGENT = "malaysia-buildings/0.3 (+research; contact: configured-email)"
OVERPASS_ENDPOINT = "https://overpass-api.de/api/interpreter"
NOMINATIM_ENDPOINT = "https://nominatim.openstreetmap.org/search"
COUNTRY_NAME = "Malaysia"
COUNTRY_CODES = ("MY", "MALAYSIA")
QUERY_TAG_KEYS = (
    "building",
    "amenity",
    "shop",
    "office",
    "leisure",
    "tourism",
    "public_transport",
    "healthcare",
)
AREA_QUERY_TIMEOUT = 900
BBOX_QUERY_TIMEOUT = 120
BBOX_QUERY_MAXSIZE = 1073741824
CHUNK_SIZE = 1000
DEDUP_DEGREES = 0.001
TABLE_ROW_LIMIT = 1000
MAP_MARKER_LIMIT = 2000
COMMANDS = (
    "regions",
    "query",
    "fetch",
    "export",
    "polygon",
)
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "session_id",
    "stage",
    "region",
    "source",
    "event",
    "status",
    "attempt",
    "duration_ms",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
