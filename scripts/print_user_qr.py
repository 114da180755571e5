"""Write a user's attendance QR code to a PNG file.

Usage: python scripts/print_user_qr.py <user_id> [out.png]
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.attendance_verification.attendance_verification.container import build_container
from src.attendance_verification.attendance_verification.qr.generator import render_user_qr_png


def main(argv: list[str]) -> int:
    if len(argv) < 2:
        print(__doc__)
        return 2

    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, timezone=settings.TIMEZONE)
    user = container.users_repo.get_by_id(argv[1])
    if not user:
        print(f"No such user: {argv[1]}")
        return 1

    out = Path(argv[2] if len(argv) > 2 else f"qr_{user.user_id}.png")
    out.write_bytes(render_user_qr_png(user, issued_at=container.clock.now()))
    print(f"OK: {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
