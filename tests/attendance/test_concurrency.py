import threading

from src.attendance_verification.attendance_verification.attendance.model import Scope
from src.attendance_verification.attendance_verification.attendance.recorder import AttendanceRecorder
from src.attendance_verification.attendance_verification.core.enums import MatchedBy, ScanMethod
from src.attendance_verification.attendance_verification.core.exceptions import DuplicateForDay
from src.attendance_verification.attendance_verification.identity.claim import ResolvedIdentity

N = 8


class BarrierStore:
    """Holds every caller at the pre-check until all of them have passed it."""

    def __init__(self, inner, parties):
        self._inner = inner
        self._barrier = threading.Barrier(parties, timeout=5)

    def find_valid_in_window(self, **kwargs):
        found = self._inner.find_valid_in_window(**kwargs)
        self._barrier.wait()
        return found

    def create(self, new):
        return self._inner.create(new)


def test_concurrent_submissions_record_exactly_once(attendance_repo, courses, meetings, clock, user_a):
    recorder = AttendanceRecorder(BarrierStore(attendance_repo, N), courses, meetings, clock)
    resolved = ResolvedIdentity(user_a, MatchedBy.ID)
    created, duplicates, errors = [], [], []

    def submit():
        try:
            created.append(
                recorder.record(resolved, Scope(course_id="c1"), scan_method=ScanMethod.QR_CODE, scanned_by="staff-1")
            )
        except DuplicateForDay as e:
            duplicates.append(e)
        except Exception as e:  # noqa: BLE001
            errors.append(e)

    threads = [threading.Thread(target=submit) for _ in range(N)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(created) == 1
    assert len(duplicates) == N - 1
    assert len(attendance_repo.records) == 1
