import pytest

from src.attendance_verification.attendance_verification.attendance.channels.factory import ChannelFactory
from src.attendance_verification.attendance_verification.attendance.channels.manual_channel import ManualChannel
from src.attendance_verification.attendance_verification.attendance.channels.qr_channel import QrPayloadChannel
from src.attendance_verification.attendance_verification.core.enums import AttendanceStatus, ScanMethod
from src.attendance_verification.attendance_verification.core.exceptions import Incomplete, ValidationError


def test_factory_routes_by_submission_shape():
    f = ChannelFactory()
    assert isinstance(f.for_submission({"qrData": {}}), QrPayloadChannel)
    assert isinstance(f.for_submission({"phoneNumber": "01012345678"}), ManualChannel)
    assert isinstance(f.for_submission({"userId": "u1"}), ManualChannel)


def test_factory_rejects_submission_without_identifier():
    with pytest.raises(Incomplete):
        ChannelFactory().for_submission({"status": "late"})


def test_factory_by_method():
    f = ChannelFactory()
    assert f.for_method(ScanMethod.QR_CODE).scan_method == ScanMethod.QR_CODE
    assert f.for_method(ScanMethod.MANUAL).scan_method == ScanMethod.MANUAL


def test_qr_channel_requires_an_object_payload():
    with pytest.raises(Incomplete, match="Invalid QR data"):
        QrPayloadChannel().to_claim({"qrData": "507f1f77bcf86cd799439011"})


def test_qr_channel_reads_epoch_millis_timestamp():
    claim = QrPayloadChannel().to_claim({"qrData": {"userId": "u1", "timestamp": 1768464000000, "type": "attendance"}})
    assert claim.issued_at.isoformat() == "2026-01-15T08:00:00+00:00"
    assert claim.provenance == ScanMethod.QR_CODE


def test_qr_channel_rejects_garbage_timestamp():
    with pytest.raises(Incomplete):
        QrPayloadChannel().to_claim({"qrData": {"userId": "u1", "timestamp": "yesterday-ish"}})


@pytest.mark.parametrize("timestamp", [10**20, "99999999999999999999", float("nan"), float("inf")])
def test_qr_channel_rejects_out_of_range_epoch(timestamp):
    with pytest.raises(Incomplete, match="Invalid QR timestamp"):
        QrPayloadChannel().to_claim({"qrData": {"userId": "u1", "timestamp": timestamp, "type": "attendance"}})


def test_manual_channel_status_override():
    channel = ManualChannel()
    assert channel.status_for({"status": "late"}) == AttendanceStatus.LATE
    assert channel.status_for({}) is None
    with pytest.raises(ValidationError):
        channel.status_for({"status": "sleeping"})


def test_manual_claim_trims_fields():
    claim = ManualChannel().to_claim({"phoneNumber": " 01012345678 ", "userId": ""})
    assert claim.phone_number == "01012345678"
    assert claim.user_id is None
    assert claim.type == "attendance"
