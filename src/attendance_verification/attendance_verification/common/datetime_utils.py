from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_optional_date(value: Optional[str], field_name: str) -> Optional[date]:
    if not value:
        return None
    try:
        return parse_iso_date(value.strip()[:10])
    except ValueError as e:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD") from e


def _from_epoch_millis(millis) -> datetime:
    try:
        return datetime.fromtimestamp(millis / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise ValidationError("Invalid timestamp") from e


def parse_timestamp(value: Any) -> datetime:
    """Parse a client-supplied claim timestamp.

    Accepts ISO-8601 strings (with or without offset, trailing ``Z`` allowed),
    epoch milliseconds as produced by browsers, and datetime objects. Anything
    else, including out-of-range or NaN epochs, is a ``ValidationError``.
    """

    if isinstance(value, datetime):
        return value
    if isinstance(value, bool):
        raise ValidationError("Invalid timestamp")
    if isinstance(value, (int, float)):
        return _from_epoch_millis(value)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.isdigit():
            return _from_epoch_millis(int(text))
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError as e:
            raise ValidationError("Invalid timestamp") from e
    raise ValidationError("Invalid timestamp")
