"""Example: drive the service layer directly (no Flask).

Records a manual attendance for a phone number and prints the user's stats.
Usage: python examples/example_usage.py <phone_number> <staff_user_id>
"""

import importlib
import sys

from config import get_settings_module

from src.attendance_verification.attendance_verification.attendance.model import Scope
from src.attendance_verification.attendance_verification.container import build_container
from src.attendance_verification.attendance_verification.core.exceptions import AttendanceRejected


def main(phone_number: str, staff_user_id: str):
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, timezone=settings.TIMEZONE)

    try:
        record = container.attendance_service.submit_manual(
            scope=Scope(), scanned_by=staff_user_id, phone_number=phone_number
        )
        print("recorded:", record.to_dict())
    except AttendanceRejected as e:
        print(f"rejected ({e.reason.value}): {e}")
        return

    print(container.stats_service.stats_for_user(record.user_id).to_dict())


if __name__ == "__main__":
    main(*sys.argv[1:3])
