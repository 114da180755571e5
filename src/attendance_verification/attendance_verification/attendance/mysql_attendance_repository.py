from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..common.clock import CivilClock
from ..core.enums import AttendanceStatus, AttendanceType, ScanMethod
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceFilter, AttendanceRecord, NewAttendance, Scope
from .repository import AttendanceRepository

_COLUMNS = """
    record_id, user_id, course_id, live_meeting_id, attendance_type, scanned_by, scan_method,
    status, attendance_date, civil_day, is_valid, invalid_reason, claim_payload, scan_location,
    notes, user_full_name, user_phone_number, user_email, created_at, updated_at
"""


class MySQLAttendanceRepository(AttendanceRepository):
    """MySQL storage for attendance records.

    DATETIME columns hold naive civil time; values are converted through the
    clock on the way in and out.
    """

    def __init__(self, conn_factory: DatabaseConnection, clock: CivilClock):
        self._conn_factory = conn_factory
        self._clock = clock

    def _db_time(self, value: datetime) -> datetime:
        return self._clock.to_civil(value).replace(tzinfo=None)

    def _to_record(self, r: Dict[str, Any]) -> AttendanceRecord:
        payload = r.get("claim_payload")
        if isinstance(payload, (bytes, bytearray)):
            payload = payload.decode("utf-8")
        if isinstance(payload, str):
            payload = json.loads(payload) if payload else {}
        return AttendanceRecord(
            record_id=int(r["record_id"]),
            user_id=str(r["user_id"]),
            course_id=r.get("course_id"),
            live_meeting_id=r.get("live_meeting_id"),
            attendance_type=AttendanceType(r["attendance_type"]),
            scanned_by=str(r["scanned_by"]),
            scan_method=ScanMethod(r["scan_method"]),
            status=AttendanceStatus(r["status"]),
            attendance_date=self._clock.to_civil(r["attendance_date"]),
            civil_day=r["civil_day"],
            is_valid=bool(r["is_valid"]),
            invalid_reason=r.get("invalid_reason"),
            claim_payload=payload or {},
            scan_location=r.get("scan_location"),
            notes=r.get("notes"),
            user_full_name=r.get("user_full_name"),
            user_phone_number=r.get("user_phone_number"),
            user_email=r.get("user_email"),
            created_at=self._clock.to_civil(r["created_at"]) if r.get("created_at") else None,
            updated_at=self._clock.to_civil(r["updated_at"]) if r.get("updated_at") else None,
        )

    def find_valid_in_window(
        self,
        *,
        user_id: str,
        scope: Scope,
        start: datetime,
        end: datetime,
    ) -> Optional[AttendanceRecord]:
        clauses = ["user_id=%s", "is_valid=1", "attendance_date BETWEEN %s AND %s"]
        params: List[object] = [user_id, self._db_time(start), self._db_time(end)]
        if scope.course_id:
            clauses.append("course_id=%s")
            params.append(scope.course_id)
        if scope.live_meeting_id:
            clauses.append("live_meeting_id=%s")
            params.append(scope.live_meeting_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE {' AND '.join(clauses)} LIMIT 1",
                tuple(params),
            )
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def create(self, new: NewAttendance) -> AttendanceRecord:
        """Insert a valid record; raises ``UniqueViolation`` when the day slot is taken."""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    user_id, course_id, live_meeting_id, attendance_type, scanned_by, scan_method,
                    status, attendance_date, civil_day, is_valid, claim_payload, scan_location, notes,
                    user_full_name, user_phone_number, user_email
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,1,%s,%s,%s,%s,%s,%s)
                """,
                (
                    new.user_id,
                    new.course_id,
                    new.live_meeting_id,
                    new.attendance_type.value,
                    new.scanned_by,
                    new.scan_method.value,
                    new.status.value,
                    self._db_time(new.attendance_date),
                    new.civil_day,
                    json.dumps(dict(new.claim_payload), default=str),
                    new.scan_location,
                    new.notes,
                    new.user_full_name,
                    new.user_phone_number,
                    new.user_email,
                ),
            )
            record_id = int(cur.lastrowid)

        record = self.get_by_id(record_id)
        if record is None:
            raise RuntimeError(f"attendance record {record_id} vanished after insert")
        return record

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=%s", (int(record_id),))
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def update_status_notes(
        self,
        *,
        record_id: int,
        status: Optional[AttendanceStatus],
        notes: Optional[str],
        set_notes: bool,
    ) -> bool:
        sets: List[str] = []
        params: List[object] = []
        if status is not None:
            sets.append("status=%s")
            params.append(status.value)
        if set_notes:
            sets.append("notes=%s")
            params.append(notes)
        if not sets:
            return self.get_by_id(record_id) is not None

        params.append(int(record_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE attendance_records SET {', '.join(sets)} WHERE record_id=%s", tuple(params))
            return cur.rowcount > 0

    def set_validity(self, *, record_id: int, is_valid: bool, invalid_reason: Optional[str]) -> bool:
        # Re-validating a record whose day slot has since been taken raises UniqueViolation.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_records SET is_valid=%s, invalid_reason=%s WHERE record_id=%s",
                (1 if is_valid else 0, invalid_reason, int(record_id)),
            )
            return cur.rowcount > 0

    def delete(self, record_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE record_id=%s", (int(record_id),))
            return cur.rowcount > 0

    def _where(self, flt: AttendanceFilter) -> Tuple[str, List[object]]:
        clauses = ["is_valid=1"]
        params: List[object] = []
        if flt.user_ids is not None:
            if not flt.user_ids:
                return "1=0", []
            clauses.append(f"user_id IN ({', '.join(['%s'] * len(flt.user_ids))})")
            params.extend(flt.user_ids)
        for column, value in (
            ("user_id", flt.user_id),
            ("course_id", flt.course_id),
            ("live_meeting_id", flt.live_meeting_id),
            ("attendance_type", flt.attendance_type.value if flt.attendance_type else None),
            ("status", flt.status.value if flt.status else None),
        ):
            if value is not None:
                clauses.append(f"{column}=%s")
                params.append(value)
        if flt.start is not None:
            clauses.append("attendance_date >= %s")
            params.append(self._db_time(flt.start))
        if flt.end is not None:
            clauses.append("attendance_date <= %s")
            params.append(self._db_time(flt.end))
        return " AND ".join(clauses), params

    def list_valid(self, flt: AttendanceFilter, *, offset: int, limit: int) -> Tuple[Sequence[AttendanceRecord], int]:
        where, params = self._where(flt)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM attendance_records WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("n", 0))
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY attendance_date DESC, record_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (int(limit), int(offset)),
            )
            return [self._to_record(r) for r in fetchall(cur)], total

    def list_valid_between(
        self,
        *,
        start: Optional[datetime],
        end: Optional[datetime],
        user_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        where, params = self._where(AttendanceFilter(user_id=user_id, start=start, end=end))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE {where} ORDER BY attendance_date ASC",
                tuple(params),
            )
            return [self._to_record(r) for r in fetchall(cur)]
