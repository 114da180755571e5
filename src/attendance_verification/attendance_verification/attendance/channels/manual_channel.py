from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from ...common.validators import optional_text, parse_enum
from ...core.constants import CLAIM_TYPE
from ...core.enums import AttendanceStatus, ScanMethod
from ...identity.claim import Claim, ResolvedIdentity
from .base import ClaimChannel


class ManualChannel(ClaimChannel):
    """Phone number and/or user id typed in by staff.

    Also the channel a photo-decoded claim is re-submitted through. Staff may
    set the status explicitly (late arrival, retroactive absence).
    """

    scan_method = ScanMethod.MANUAL

    def to_claim(self, submission: Mapping[str, Any]) -> Claim:
        return Claim(
            provenance=ScanMethod.MANUAL,
            user_id=optional_text(submission.get("userId")),
            phone_number=optional_text(submission.get("phoneNumber")),
            type=CLAIM_TYPE,
            raw={k: submission[k] for k in ("userId", "phoneNumber") if submission.get(k)},
        )

    def status_for(self, submission: Mapping[str, Any]) -> Optional[AttendanceStatus]:
        value = submission.get("status")
        if value in (None, ""):
            return None
        return parse_enum(AttendanceStatus, value, "status")

    def audit_payload(self, claim: Claim, resolved: ResolvedIdentity, *, now: datetime) -> dict:
        user = resolved.user
        return {
            "userId": user.user_id,
            "fullName": user.full_name,
            "phoneNumber": user.phone_number,
            "email": user.email,
            "role": user.role.value,
            "timestamp": now.isoformat(),
            "type": CLAIM_TYPE,
            "method": "phone_and_id",
            "submitted": dict(claim.raw),
        }
