from __future__ import annotations

import io
import json
from datetime import datetime

import qrcode
from PIL import ImageOps

from ..core.constants import CLAIM_TYPE
from ..users.model import User


def build_user_payload(user: User, *, issued_at: datetime) -> dict:
    """The JSON a user's personal attendance QR code carries."""
    payload = {
        "userId": user.user_id,
        "fullName": user.full_name,
        "phoneNumber": user.phone_number,
        "role": user.role.value,
        "timestamp": issued_at.isoformat(),
        "type": CLAIM_TYPE,
    }
    if user.email:
        payload["email"] = user.email
    return payload


def render_qr_png(data: str, *, inverted: bool = False) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white").convert("L")
    if inverted:
        img = ImageOps.invert(img)

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def render_user_qr_png(user: User, *, issued_at: datetime) -> bytes:
    payload = build_user_payload(user, issued_at=issued_at)
    return render_qr_png(json.dumps(payload, separators=(",", ":")))
