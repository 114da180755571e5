from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Mapping, Optional

from ...core.enums import AttendanceStatus, ScanMethod
from ...identity.claim import Claim, ResolvedIdentity


class ClaimChannel(ABC):
    """Strategy Pattern: one input channel turning raw submissions into Claims.

    Everything after ``to_claim`` (resolve, verify, record) is shared.
    """

    scan_method: ScanMethod

    @abstractmethod
    def to_claim(self, submission: Mapping[str, Any]) -> Claim:
        raise NotImplementedError

    def status_for(self, submission: Mapping[str, Any]) -> Optional[AttendanceStatus]:
        """Explicit status override carried by the submission, if the channel allows one."""
        return None

    @abstractmethod
    def audit_payload(self, claim: Claim, resolved: ResolvedIdentity, *, now: datetime) -> dict:
        """What gets stored on the record as the raw claim."""
        raise NotImplementedError
