"""Internal constants shared across the library."""

STREAM_URL = "wss://stream.aisstream.io/v0/stream"
LOGIN_PATH = "/api/users/login"
COLLECTION_PATH = "/api/collections/ais-logs"
CREATED_AT_OPERATOR = "gte"
DEFAULT_PORT = 3000

POSITION_REPORT_TYPE = "PositionReport"
#: Unrestricted bounding box, ``[[min_lat, min_lon], [max_lat, max_lon]]``.
WORLD_BOUNDING_BOX: tuple[tuple[float, float], tuple[float, float]] = ((-90.0, -180.0), (90.0, 180.0))

KEEPALIVE_INTERVAL_S: float = 25.0
INACTIVITY_INTERVAL_S: float = 300.0
RECONNECT_BASE_DELAY_S: float = 1.0
RECONNECT_MAX_DELAY_S: float = 30.0

# ------------------------------------------------------------------
# Duplicate detection windows
# ------------------------------------------------------------------

HISTORY_LIMIT = 50
HISTORY_WINDOW_HOURS = 12
RECENT_WINDOW_HOURS = 6

AUTH_FAILURE_STATUSES: frozenset[int] = frozenset({401, 403})

# Categories for one-time configuration warnings.
WARN_MISSING_STREAM_KEY = "missing_stream_key"
WARN_MISSING_CMS_HOST = "missing_cms_host"
WARN_MISSING_CMS_CREDENTIALS = "missing_cms_credentials"
