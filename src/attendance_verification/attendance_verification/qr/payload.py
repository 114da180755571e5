from __future__ import annotations

import json
from typing import Any, Dict, Optional

from ..core.constants import CLAIM_TYPE
from ..core.exceptions import Undecodable
from ..identity.shapes import classify_bare_text, is_internal_id

_FIELD_KEYS = {"user_id": "userId", "phone_number": "phoneNumber"}


def _try_json_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        parsed = json.loads(text)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def parse_decoded_text(raw_text: str) -> Dict[str, str]:
    """Normalize decoded QR text into ``{type, userId?, phoneNumber?}``.

    Structured JSON wins; otherwise the bare text is classified by shape
    (internal id first, then phone number). Raises ``Undecodable`` when neither
    yields an identifier.
    """

    out: Dict[str, str] = {"type": CLAIM_TYPE}
    text = (raw_text or "").strip()

    parsed = _try_json_object(text)
    if parsed is not None:
        user_id = parsed.get("userId")
        if isinstance(user_id, str) and is_internal_id(user_id):
            out["userId"] = user_id
        if parsed.get("phoneNumber"):
            out["phoneNumber"] = str(parsed["phoneNumber"]).strip()
    elif text:
        hit = classify_bare_text(text)
        if hit:
            field_name, value = hit
            out[_FIELD_KEYS[field_name]] = value

    if "userId" not in out and "phoneNumber" not in out:
        raise Undecodable()
    return out
