"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "Africa/Cairo"
CLAIM_TYPE = "attendance"

# Maximum age of a time-stamped QR claim.
FRESHNESS_WINDOW_MINUTES = 60

# Proxy denominator for attendance rate (no class calendar exists).
DEFAULT_EXPECTED_DAYS = 30
DEFAULT_DASHBOARD_DAYS = 30

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
MAX_UPLOAD_MB = 5
