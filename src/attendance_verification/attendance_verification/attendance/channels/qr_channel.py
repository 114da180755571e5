from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from ...common.datetime_utils import parse_timestamp
from ...common.validators import optional_text
from ...core.enums import ScanMethod
from ...core.exceptions import Incomplete, ValidationError
from ...identity.claim import Claim, ResolvedIdentity
from .base import ClaimChannel


class QrPayloadChannel(ClaimChannel):
    """A structured payload read from a user's QR code by the scanning device."""

    scan_method = ScanMethod.QR_CODE

    def to_claim(self, submission: Mapping[str, Any]) -> Claim:
        payload = submission.get("qrData")
        if not isinstance(payload, Mapping):
            raise Incomplete("Invalid QR data")

        issued_at = None
        if payload.get("timestamp"):
            try:
                issued_at = parse_timestamp(payload["timestamp"])
            except ValidationError as e:
                raise Incomplete("Invalid QR timestamp") from e

        return Claim(
            provenance=ScanMethod.QR_CODE,
            user_id=optional_text(payload.get("userId")),
            phone_number=optional_text(payload.get("phoneNumber")),
            full_name=optional_text(payload.get("fullName")),
            email=optional_text(payload.get("email")),
            role=optional_text(payload.get("role")),
            issued_at=issued_at,
            type=str(payload.get("type") or ""),
            raw=dict(payload),
        )

    def audit_payload(self, claim: Claim, resolved: ResolvedIdentity, *, now: datetime) -> dict:
        return dict(claim.raw)
