"""Settings shared by every environment; environment modules override."""

import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_db"),
    "connect_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "10")),
}

# Civil timezone for every "same day" decision (duplicate window, stats buckets).
TIMEZONE = os.getenv("TIMEZONE", "Africa/Cairo")

FRESHNESS_WINDOW_MINUTES = int(os.getenv("FRESHNESS_WINDOW_MINUTES", "60"))
DEFAULT_EXPECTED_DAYS = int(os.getenv("DEFAULT_EXPECTED_DAYS", "30"))
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "5"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
