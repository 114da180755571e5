from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence, Tuple

from ..core.enums import AttendanceStatus
from .model import AttendanceFilter, AttendanceRecord, NewAttendance, Scope


class AttendanceRepository(Protocol):
    def find_valid_in_window(
        self,
        *,
        user_id: str,
        scope: Scope,
        start: datetime,
        end: datetime,
    ) -> Optional[AttendanceRecord]:
        """Valid record of the user in [start, end].

        Scoped lookups match the course / live meeting; a general-scope lookup
        matches any valid record of the user.
        """

        raise NotImplementedError

    def create(self, new: NewAttendance) -> AttendanceRecord:
        """Persist a new record; raises ``UniqueViolation`` on a day-key clash."""

        raise NotImplementedError

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def update_status_notes(
        self,
        *,
        record_id: int,
        status: Optional[AttendanceStatus],
        notes: Optional[str],
        set_notes: bool,
    ) -> bool:
        raise NotImplementedError

    def set_validity(self, *, record_id: int, is_valid: bool, invalid_reason: Optional[str]) -> bool:
        raise NotImplementedError

    def delete(self, record_id: int) -> bool:
        raise NotImplementedError

    def list_valid(self, flt: AttendanceFilter, *, offset: int, limit: int) -> Tuple[Sequence[AttendanceRecord], int]:
        """Page of valid records, newest first, with the total count."""

        raise NotImplementedError

    def list_valid_between(
        self,
        *,
        start: Optional[datetime],
        end: Optional[datetime],
        user_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        """All valid records in range; read model for statistics."""

        raise NotImplementedError
