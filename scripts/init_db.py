"""Create the attendance database and apply database/schema.sql.

Usage: python scripts/init_db.py [schema.sql]
"""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.attendance_verification.attendance_verification.database.bootstrap import apply_schema, list_tables

logger = logging.getLogger("init_db")


def main(argv: list[str]) -> int:
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"), format="%(levelname)s %(message)s")

    db_config = dict(settings.DB_CONFIG)
    schema_path = Path(argv[1]) if len(argv) > 1 else REPO_ROOT / "database" / "schema.sql"
    if not schema_path.is_file():
        logger.error("Schema file not found: %s", schema_path)
        return 1

    apply_schema(db_config, schema_path=schema_path)
    tables = list_tables(db_config)
    missing = {"users", "courses", "live_meetings", "attendance_records"} - set(tables)
    if missing:
        logger.error("Schema applied but tables are missing: %s", ", ".join(sorted(missing)))
        return 1

    logger.info(
        "Schema ready on %s@%s:%s/%s (tables=%d)",
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        len(tables),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
