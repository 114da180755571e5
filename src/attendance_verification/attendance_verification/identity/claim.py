from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from ..core.constants import CLAIM_TYPE
from ..core.enums import MatchedBy, ScanMethod
from ..users.model import User


@dataclass(frozen=True)
class Claim:
    """An unverified identity assertion submitted through an attendance channel."""

    provenance: ScanMethod
    user_id: Optional[str] = None
    phone_number: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    issued_at: Optional[datetime] = None
    type: str = CLAIM_TYPE
    raw: Mapping[str, Any] = field(default_factory=dict)

    @property
    def has_identifier(self) -> bool:
        return bool(self.user_id or self.phone_number)

    @property
    def is_attendance_claim(self) -> bool:
        return self.type == CLAIM_TYPE


@dataclass(frozen=True)
class ResolvedIdentity:
    """The directory record a claim was matched to."""

    user: User
    matched_by: MatchedBy

    @property
    def user_id(self) -> str:
        return self.user.user_id

    def snapshot(self) -> dict:
        """Identity fields copied onto the attendance record at creation."""
        return {
            "user_full_name": self.user.full_name,
            "user_phone_number": self.user.phone_number,
            "user_email": self.user.email,
        }
