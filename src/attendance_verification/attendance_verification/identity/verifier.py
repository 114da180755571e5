from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from ..common.clock import CivilClock
from ..core.constants import FRESHNESS_WINDOW_MINUTES
from ..core.enums import MatchedBy, RejectionReason, ScanMethod
from ..core.exceptions import REJECTIONS_BY_REASON
from .claim import Claim, ResolvedIdentity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Verdict:
    accepted: bool
    reason: Optional[RejectionReason] = None

    @classmethod
    def accept(cls) -> "Verdict":
        return cls(accepted=True)

    @classmethod
    def reject(cls, reason: RejectionReason) -> "Verdict":
        return cls(accepted=False, reason=reason)

    def raise_if_rejected(self) -> None:
        if not self.accepted:
            raise REJECTIONS_BY_REASON[self.reason]()


def _same(a: str, b: Optional[str]) -> bool:
    return b is not None and a.strip() == b.strip()


def _same_name(a: str, b: Optional[str]) -> bool:
    # Names are stored lower-cased by the user directory.
    return b is not None and a.strip().casefold() == b.strip().casefold()


class ClaimVerifier:
    """Cross-check a claim against the resolved user and the freshness window.

    Fields missing from the claim are vacuously satisfied, so a phone-only
    claim is fine as long as the phone matches.
    """

    def __init__(self, clock: CivilClock, *, freshness_minutes: int = FRESHNESS_WINDOW_MINUTES):
        self._clock = clock
        self._window = timedelta(minutes=int(freshness_minutes))

    def verify(self, claim: Claim, resolved: Optional[ResolvedIdentity]) -> Verdict:
        if not claim.is_attendance_claim or not claim.has_identifier:
            return Verdict.reject(RejectionReason.INCOMPLETE)
        if resolved is None:
            return Verdict.reject(RejectionReason.NOT_FOUND)

        user = resolved.user
        if claim.user_id:
            expected = user.student_id if resolved.matched_by == MatchedBy.STUDENT_ID else user.user_id
            if not _same(claim.user_id, expected):
                return self._mismatch(claim, resolved)
        if claim.phone_number and not _same(claim.phone_number, user.phone_number):
            return self._mismatch(claim, resolved)
        if claim.full_name and not _same_name(claim.full_name, user.full_name):
            return self._mismatch(claim, resolved)

        if claim.provenance == ScanMethod.QR_CODE and claim.issued_at is not None:
            age = self._clock.now() - self._clock.to_civil(claim.issued_at)
            if age > self._window:
                logger.warning("Expired QR claim for user %s (age=%s)", user.user_id, age)
                return Verdict.reject(RejectionReason.EXPIRED)

        return Verdict.accept()

    def _mismatch(self, claim: Claim, resolved: ResolvedIdentity) -> Verdict:
        logger.warning(
            "Claim does not match user %s (provenance=%s, matched_by=%s)",
            resolved.user_id,
            claim.provenance.value,
            resolved.matched_by.value,
        )
        return Verdict.reject(RejectionReason.IDENTITY_MISMATCH)
