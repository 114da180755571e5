"""Shapes of bare identifiers found in QR codes and manual input."""

from __future__ import annotations

import re
from typing import Callable, Optional, Sequence, Tuple

INTERNAL_ID_RE = re.compile(r"^[a-f\d]{24}$", re.IGNORECASE)
INTERNAL_ID_SEARCH_RE = re.compile(r"[a-f\d]{24}", re.IGNORECASE)
# Local mobile numbers: "01" followed by nine digits.
PHONE_SEARCH_RE = re.compile(r"01\d{9}")

# (field name, extractor) pairs; extractor returns the matched value or None.
Classifier = Tuple[str, Callable[[str], Optional[str]]]


def _fullmatch_internal_id(text: str) -> Optional[str]:
    return text if INTERNAL_ID_RE.match(text) else None


def _search(pattern: re.Pattern) -> Callable[[str], Optional[str]]:
    def extract(text: str) -> Optional[str]:
        m = pattern.search(text)
        return m.group(0) if m else None

    return extract


BARE_TEXT_CLASSIFIERS: Sequence[Classifier] = (
    ("user_id", _fullmatch_internal_id),
    ("user_id", _search(INTERNAL_ID_SEARCH_RE)),
    ("phone_number", _search(PHONE_SEARCH_RE)),
)


def is_internal_id(value: Optional[str]) -> bool:
    return bool(value) and bool(INTERNAL_ID_RE.match(value))


def classify_bare_text(text: str) -> Optional[Tuple[str, str]]:
    """Return ``(field, value)`` for the first classifier that matches."""
    text = text.strip()
    for field_name, extract in BARE_TEXT_CLASSIFIERS:
        value = extract(text)
        if value:
            return field_name, value
    return None
