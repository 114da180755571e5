from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping, Optional

from ..common.clock import CivilClock
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.enums import MANAGER_ROLES, AttendanceStatus, AttendanceType, Role, ScanMethod
from ..core.exceptions import (
    AuthorizationError,
    DuplicateForDay,
    GroupNotFound,
    RecordNotFound,
    UniqueViolation,
    ValidationError,
)
from ..groups.repository import GroupRegistry
from ..identity.resolver import IdentityResolver
from ..identity.verifier import ClaimVerifier
from ..qr.decoder import QRDecoder
from ..qr.payload import parse_decoded_text
from .channels.base import ClaimChannel
from .channels.factory import ChannelFactory
from .enrichment import RecordEnricher
from .model import AttendanceFilter, AttendanceRecord, Page, Scope
from .recorder import AttendanceRecorder
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class AttendanceService:
    """Use cases around attendance: the Claim -> Resolve -> Verify -> Record
    pipeline shared by every channel, plus staff/admin record management."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        resolver: IdentityResolver,
        verifier: ClaimVerifier,
        recorder: AttendanceRecorder,
        clock: CivilClock,
        *,
        decoder: Optional[QRDecoder] = None,
        channels: Optional[ChannelFactory] = None,
        enricher: Optional[RecordEnricher] = None,
        groups: Optional[GroupRegistry] = None,
    ):
        self._attendance = attendance
        self._resolver = resolver
        self._verifier = verifier
        self._recorder = recorder
        self._clock = clock
        self._decoder = decoder or QRDecoder()
        self._channels = channels or ChannelFactory()
        self._enricher = enricher
        self._groups = groups

    # ----- submission pipeline -----

    def submit(
        self,
        submission: Mapping[str, Any],
        *,
        scope: Scope,
        scanned_by: str,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        channel = self._channels.for_submission(submission)
        return self._run(channel, submission, scope=scope, scanned_by=scanned_by, location=location, notes=notes)

    def submit_qr(
        self,
        payload: Any,
        *,
        scope: Scope,
        scanned_by: str,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        channel = self._channels.for_method(ScanMethod.QR_CODE)
        return self._run(channel, {"qrData": payload}, scope=scope, scanned_by=scanned_by, location=location, notes=notes)

    def submit_manual(
        self,
        *,
        scope: Scope,
        scanned_by: str,
        phone_number: Optional[str] = None,
        user_id: Optional[str] = None,
        status: Optional[str] = None,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        channel = self._channels.for_method(ScanMethod.MANUAL)
        submission = {"phoneNumber": phone_number, "userId": user_id, "status": status}
        return self._run(channel, submission, scope=scope, scanned_by=scanned_by, location=location, notes=notes)

    def _run(
        self,
        channel: ClaimChannel,
        submission: Mapping[str, Any],
        *,
        scope: Scope,
        scanned_by: str,
        location: Optional[str],
        notes: Optional[str],
    ) -> AttendanceRecord:
        claim = channel.to_claim(submission)
        status = channel.status_for(submission)

        resolved = self._resolver.try_resolve(claim) if claim.has_identifier else None
        self._verifier.verify(claim, resolved).raise_if_rejected()

        record = self._recorder.record(
            resolved,
            scope,
            scan_method=channel.scan_method,
            scanned_by=scanned_by,
            status=status,
            notes=notes,
            location=location,
            claim_payload=channel.audit_payload(claim, resolved, now=self._clock.now()),
        )
        return self._shown(record)

    def _shown(self, record: AttendanceRecord) -> AttendanceRecord:
        return self._enricher.enrich_one(record) if self._enricher else record

    def analyze_photo(self, image_bytes: bytes) -> dict:
        """Decode a QR code from a photo into a claim for the manual channel.

        Nothing is recorded here; callers re-submit the returned claim.
        """
        if not image_bytes:
            raise ValidationError("No image provided")
        return parse_decoded_text(self._decoder.decode(image_bytes))

    # ----- queries -----

    def _page(self, flt: AttendanceFilter, page: int, limit: int) -> Page:
        page = max(int(page), 1)
        limit = min(max(int(limit), 1), MAX_PAGE_SIZE)
        items, total = self._attendance.list_valid(flt, offset=(page - 1) * limit, limit=limit)
        items = self._enricher.enrich(items) if self._enricher else list(items)
        return Page(items=items, total=total, page=page, limit=limit)

    def _range_or_month(self, start_date: Optional[date], end_date: Optional[date]):
        if start_date or end_date:
            start = self._clock.start_of_date(start_date) if start_date else None
            end = self._clock.end_of_date(end_date) if end_date else None
            return start, end
        return self._clock.month_window()

    def get_user_attendance(
        self,
        user_id: str,
        *,
        requesting_user_id: str,
        requesting_role: Role,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        attendance_type: Optional[AttendanceType] = None,
        status: Optional[AttendanceStatus] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Page:
        if str(user_id) != str(requesting_user_id) and requesting_role not in MANAGER_ROLES:
            raise AuthorizationError("Access denied")

        flt = AttendanceFilter(
            user_id=str(user_id),
            attendance_type=attendance_type,
            status=status,
            start=self._clock.start_of_date(start_date) if start_date else None,
            end=self._clock.end_of_date(end_date) if end_date else None,
        )
        return self._page(flt, page, limit)

    def list_attendance(
        self,
        *,
        user_id: Optional[str] = None,
        course_id: Optional[str] = None,
        live_meeting_id: Optional[str] = None,
        attendance_type: Optional[AttendanceType] = None,
        status: Optional[AttendanceStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Page:
        """All users' valid records; defaults to the current civil month."""
        start, end = self._range_or_month(start_date, end_date)
        flt = AttendanceFilter(
            user_id=user_id,
            course_id=course_id,
            live_meeting_id=live_meeting_id,
            attendance_type=attendance_type,
            status=status,
            start=start,
            end=end,
        )
        return self._page(flt, page, limit)

    def list_group_attendance(
        self,
        group_id: str,
        *,
        current_role: Role,
        status: Optional[AttendanceStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Page:
        """Valid records of a group's members; defaults to the current civil month."""
        if current_role not in MANAGER_ROLES:
            raise AuthorizationError("Access denied")
        group = self._groups.get_by_id(str(group_id)) if self._groups is not None else None
        if group is None:
            raise GroupNotFound("Group not found")

        start, end = self._range_or_month(start_date, end_date)
        flt = AttendanceFilter(user_ids=tuple(group.member_ids), status=status, start=start, end=end)
        return self._page(flt, page, limit)

    # ----- staff / admin corrections -----

    def _get_or_404(self, record_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(record_id))
        if not record:
            raise RecordNotFound("Attendance record not found")
        return record

    @staticmethod
    def _require_manager(current_role: Role, action: str) -> None:
        if current_role not in MANAGER_ROLES:
            raise AuthorizationError(f"Not allowed to {action} attendance records")

    def update_record(
        self,
        record_id: int,
        *,
        current_role: Role,
        status: Optional[AttendanceStatus] = None,
        notes: Any = _UNSET,
    ) -> AttendanceRecord:
        self._require_manager(current_role, "update")
        self._get_or_404(record_id)

        set_notes = notes is not _UNSET
        self._attendance.update_status_notes(
            record_id=int(record_id),
            status=status,
            notes=notes if set_notes else None,
            set_notes=set_notes,
        )
        logger.info("Attendance %s updated (status=%s, notes=%s)", record_id, status, set_notes)
        return self._shown(self._get_or_404(record_id))

    def invalidate_record(self, record_id: int, *, current_role: Role, reason: str) -> AttendanceRecord:
        self._require_manager(current_role, "invalidate")
        if not reason or not reason.strip():
            raise ValidationError("Invalid reason is required")
        self._get_or_404(record_id)

        self._attendance.set_validity(record_id=int(record_id), is_valid=False, invalid_reason=reason.strip())
        logger.info("Attendance %s invalidated: %s", record_id, reason.strip())
        return self._shown(self._get_or_404(record_id))

    def restore_record(self, record_id: int, *, current_role: Role) -> AttendanceRecord:
        """Undo an invalidation, unless the day slot has been taken since."""
        self._require_manager(current_role, "restore")
        self._get_or_404(record_id)
        try:
            self._attendance.set_validity(record_id=int(record_id), is_valid=True, invalid_reason=None)
        except UniqueViolation:
            raise DuplicateForDay() from None
        logger.info("Attendance %s restored", record_id)
        return self._shown(self._get_or_404(record_id))

    def delete_record(self, record_id: int, *, current_role: Role) -> None:
        self._require_manager(current_role, "delete")
        self._get_or_404(record_id)
        self._attendance.delete(int(record_id))
        logger.info("Attendance %s deleted", record_id)
