"""Internal constants shared across the library."""

BASE_URL = "http://127.0.0.1:8008"
API_PREFIX = "/oem/can-health"
USER_AGENT = "canhealth/0.1"

PAGE_SIZE = 50
ALL = "All"

# Endpoint paths, relative to the API prefix.
LISTING_ENDPOINT = ""
EXPORT_ENDPOINT = "/export"
QUALITY_ENDPOINT = "/data-quality"
REFRESH_ENDPOINT = "/refresh"
REFRESH_STATUS_ENDPOINT = "/refresh/status"

# Server status vocabulary.
STATUS_COMMUNICATING = "Communicating"
DETAIL_NO_API_INTEGRATION = "No API Integration"
DETAIL_NO_API_RESPONSE = "No API Response"

#: Providers offered by the OEM selector.  The server may report vehicles of
#: other providers (those without a live API carry ``No API Integration``).
KNOWN_OEMS: tuple[str, ...] = ("Switch", "Bajaj", "Eicher", "Euler", "Mahindra")

# ------------------------------------------------------------------
# Data quality score thresholds (percent)
# ------------------------------------------------------------------

QUALITY_HIGH_THRESHOLD = 80.0
QUALITY_MID_THRESHOLD = 40.0

CONNECTION_ERROR_MESSAGE = "Connection Error. Background task might be warming up."
REFRESH_ERROR_MESSAGE = "Force refresh failed. Please try again later."
