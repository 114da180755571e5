from __future__ import annotations

import io
import logging
from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, request, send_file, session
from werkzeug.datastructures import FileStorage
from werkzeug.exceptions import HTTPException

from ..common.datetime_utils import parse_optional_date
from ..common.validators import optional_text, parse_enum, parse_positive_int
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.enums import MANAGER_ROLES, SCANNER_ROLES, AttendanceStatus, AttendanceType, Role
from ..core.exceptions import AttendanceRejected, AuthorizationError, DomainError, NotFound, ValidationError
from ..container import Container
from ..qr.generator import render_user_qr_png
from .model import Scope

logger = logging.getLogger(__name__)

API = "/api/v1/attendance"
_LISTING_ROLES = MANAGER_ROLES | {Role.ASSISTANT}


def _fail(message: str, status: int, reason: Optional[str] = None):
    body: dict[str, Any] = {"success": False, "message": message}
    if reason:
        body["reason"] = reason
    return jsonify(body), status


def _current_role() -> Optional[Role]:
    try:
        return Role(session.get("role"))
    except ValueError:
        return None


def _body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("JSON body required")
    return data


def _scope_from(data) -> Scope:
    return Scope(
        course_id=optional_text(data.get("courseId")),
        live_meeting_id=optional_text(data.get("liveMeetingId")),
    )


def _optional_enum(enum_cls, value, field_name: str):
    return parse_enum(enum_cls, value, field_name) if value else None


def _read_upload(file: Optional[FileStorage]) -> bytes:
    if file is None or not file.filename:
        raise ValidationError("No image provided")
    return file.read()


def register(app: Flask, container: Container) -> None:
    def json_errors(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except AttendanceRejected as e:
                return _fail(str(e), e.status_code, e.reason.value)
            except DomainError as e:
                return _fail(str(e), e.status_code)
            except HTTPException:
                raise
            except Exception:
                logger.exception("Unexpected failure in %s", request.path)
                return _fail("System error while processing attendance", 500)

        return wrapper

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session or _current_role() is None:
                return _fail("Please log in to continue", 401)
            return view(*args, **kwargs)

        return wrapper

    def roles_required(roles):
        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                if "user_id" not in session:
                    return _fail("Please log in to continue", 401)
                if _current_role() not in roles:
                    return _fail("Access denied", 403)
                return view(*args, **kwargs)

            return wrapper

        return decorator

    def _ensure_self_or_manager(user_id: str) -> None:
        if str(user_id) != str(session["user_id"]) and _current_role() not in MANAGER_ROLES:
            raise AuthorizationError("Access denied")

    svc = container.attendance_service

    @app.route(f"{API}/scan-qr", methods=["POST"], endpoint="attendance_scan_qr")
    @roles_required(SCANNER_ROLES)
    @json_errors
    def scan_qr():
        data = _body()
        record = svc.submit_qr(
            data.get("qrData"),
            scope=_scope_from(data),
            scanned_by=str(session["user_id"]),
            location=optional_text(data.get("scanLocation")),
            notes=optional_text(data.get("notes")),
        )
        return jsonify({"success": True, "message": "Attendance recorded", "data": {"attendance": record.to_dict()}}), 201

    @app.route(f"{API}/take-by-phone", methods=["POST"], endpoint="attendance_take_by_phone")
    @roles_required(SCANNER_ROLES)
    @json_errors
    def take_by_phone():
        data = _body()
        record = svc.submit_manual(
            scope=_scope_from(data),
            scanned_by=str(session["user_id"]),
            phone_number=optional_text(data.get("phoneNumber")),
            user_id=optional_text(data.get("userId")),
            status=optional_text(data.get("status")),
            location=optional_text(data.get("scanLocation")),
            notes=optional_text(data.get("notes")),
        )
        return (
            jsonify(
                {
                    "success": True,
                    "message": "Attendance recorded by phone number / user id",
                    "data": {"attendance": record.to_dict(), "method": "phone_and_id_verification"},
                }
            ),
            201,
        )

    @app.route(f"{API}/analyze-photo", methods=["POST"], endpoint="attendance_analyze_photo")
    @roles_required(SCANNER_ROLES)
    @json_errors
    def analyze_photo():
        qr_data = svc.analyze_photo(_read_upload(request.files.get("image")))
        return jsonify({"success": True, "message": "QR decoded successfully", "data": {"qrData": qr_data}}), 200

    @app.route(f"{API}/user/<user_id>", methods=["GET"], endpoint="attendance_for_user")
    @login_required
    @json_errors
    def user_attendance(user_id: str):
        args = request.args
        page = svc.get_user_attendance(
            user_id,
            requesting_user_id=str(session["user_id"]),
            requesting_role=_current_role(),
            start_date=parse_optional_date(args.get("startDate"), "startDate"),
            end_date=parse_optional_date(args.get("endDate"), "endDate"),
            attendance_type=_optional_enum(AttendanceType, args.get("attendanceType"), "attendanceType"),
            status=_optional_enum(AttendanceStatus, args.get("status"), "status"),
            page=parse_positive_int(args.get("page"), "page", default=1),
            limit=parse_positive_int(args.get("limit"), "limit", default=DEFAULT_PAGE_SIZE, maximum=MAX_PAGE_SIZE),
        )
        return jsonify({"success": True, "data": page.to_dict()}), 200

    @app.route(f"{API}/user/<user_id>/stats", methods=["GET"], endpoint="attendance_user_stats")
    @login_required
    @json_errors
    def user_stats(user_id: str):
        _ensure_self_or_manager(user_id)
        args = request.args
        expected = args.get("expectedDays")
        stats = container.stats_service.stats_for_user(
            user_id,
            start_date=parse_optional_date(args.get("startDate"), "startDate"),
            end_date=parse_optional_date(args.get("endDate"), "endDate"),
            expected_days=parse_positive_int(expected, "expectedDays", default=0) if expected else None,
        )
        return jsonify({"success": True, "data": stats.to_dict()}), 200

    @app.route(API, methods=["GET"], endpoint="attendance_list")
    @roles_required(_LISTING_ROLES)
    @json_errors
    def list_attendance():
        args = request.args
        page = svc.list_attendance(
            user_id=optional_text(args.get("userId")),
            course_id=optional_text(args.get("courseId")),
            live_meeting_id=optional_text(args.get("liveMeetingId")),
            attendance_type=_optional_enum(AttendanceType, args.get("attendanceType"), "attendanceType"),
            status=_optional_enum(AttendanceStatus, args.get("status"), "status"),
            start_date=parse_optional_date(args.get("startDate"), "startDate"),
            end_date=parse_optional_date(args.get("endDate"), "endDate"),
            page=parse_positive_int(args.get("page"), "page", default=1),
            limit=parse_positive_int(args.get("limit"), "limit", default=DEFAULT_PAGE_SIZE, maximum=MAX_PAGE_SIZE),
        )
        return jsonify({"success": True, "data": page.to_dict()}), 200

    @app.route(f"{API}/group/<group_id>", methods=["GET"], endpoint="attendance_for_group")
    @roles_required(MANAGER_ROLES)
    @json_errors
    def group_attendance(group_id: str):
        args = request.args
        page = svc.list_group_attendance(
            group_id,
            current_role=_current_role(),
            status=_optional_enum(AttendanceStatus, args.get("status"), "status"),
            start_date=parse_optional_date(args.get("startDate"), "startDate"),
            end_date=parse_optional_date(args.get("endDate"), "endDate"),
            page=parse_positive_int(args.get("page"), "page", default=1),
            limit=parse_positive_int(args.get("limit"), "limit", default=DEFAULT_PAGE_SIZE, maximum=MAX_PAGE_SIZE),
        )
        return jsonify({"success": True, "data": page.to_dict()}), 200

    @app.route(f"{API}/dashboard", methods=["GET"], endpoint="attendance_dashboard")
    @roles_required(MANAGER_ROLES)
    @json_errors
    def dashboard():
        args = request.args
        board = container.stats_service.dashboard(
            start_date=parse_optional_date(args.get("startDate"), "startDate"),
            end_date=parse_optional_date(args.get("endDate"), "endDate"),
        )
        return jsonify({"success": True, "data": board.to_dict()}), 200

    @app.route(f"{API}/<int:record_id>", methods=["PUT"], endpoint="attendance_update")
    @login_required
    @json_errors
    def update_record(record_id: int):
        data = _body()
        kwargs: dict[str, Any] = {}
        if "notes" in data:
            kwargs["notes"] = optional_text(data.get("notes"))
        record = svc.update_record(
            record_id,
            current_role=_current_role(),
            status=_optional_enum(AttendanceStatus, data.get("status"), "status"),
            **kwargs,
        )
        return jsonify({"success": True, "message": "Attendance record updated", "data": record.to_dict()}), 200

    @app.route(f"{API}/<int:record_id>/invalidate", methods=["POST"], endpoint="attendance_invalidate")
    @login_required
    @json_errors
    def invalidate_record(record_id: int):
        data = _body()
        record = svc.invalidate_record(record_id, current_role=_current_role(), reason=str(data.get("reason") or ""))
        return jsonify({"success": True, "message": "Attendance record invalidated", "data": record.to_dict()}), 200

    @app.route(f"{API}/<int:record_id>/restore", methods=["POST"], endpoint="attendance_restore")
    @login_required
    @json_errors
    def restore_record(record_id: int):
        record = svc.restore_record(record_id, current_role=_current_role())
        return jsonify({"success": True, "message": "Attendance record restored", "data": record.to_dict()}), 200

    @app.route(f"{API}/<int:record_id>", methods=["DELETE"], endpoint="attendance_delete")
    @login_required
    @json_errors
    def delete_record(record_id: int):
        svc.delete_record(record_id, current_role=_current_role())
        return jsonify({"success": True, "message": "Attendance record deleted"}), 200

    @app.route("/api/v1/users/<user_id>/qr", methods=["GET"], endpoint="user_attendance_qr")
    @login_required
    @json_errors
    def user_qr_image(user_id: str):
        """PNG of the user's personal attendance QR code (fresh timestamp)."""
        _ensure_self_or_manager(user_id)
        user = container.users_repo.get_by_id(user_id)
        if not user:
            raise NotFound()
        png = render_user_qr_png(user, issued_at=container.clock.now())
        return send_file(io.BytesIO(png), mimetype="image/png")
