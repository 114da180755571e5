from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def optional_text(value: Any) -> Optional[str]:
    """Trim a loosely typed input field; empty values become None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_enum(enum_cls, value: Any, field_name: str):
    try:
        return enum_cls(str(value).strip())
    except ValueError as e:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}") from e


def parse_positive_int(value: Any, field_name: str, *, default: int, maximum: Optional[int] = None) -> int:
    if value in (None, ""):
        return default
    try:
        n = int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{field_name} must be an integer") from e
    if n < 1:
        raise ValidationError(f"{field_name} must be positive")
    if maximum is not None:
        n = min(n, maximum)
    return n
