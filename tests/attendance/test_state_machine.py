from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from checkmate.attendance.model import AttendanceRecord
from checkmate.attendance.service import AttendanceService
from checkmate.core.enums import AttendanceStatus, MarkedBy
from checkmate.core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    InvalidLocation,
    InvalidStatus,
    LocationRejected,
    NotCheckedIn,
    ValidationError,
)
from checkmate.geo.model import Geofence, Location

from conftest import InMemoryAttendance, InMemoryGeofences


def test_checkin_inside_fence_then_checkout(attendance_repo, office, fixed_now):
    svc = AttendanceService(attendance_repo, InMemoryGeofences([office]))

    rec = svc.check_in("p1", fixed_now.date(), fixed_now, Location(10.0, 10.0), is_late=False)

    assert rec.status == AttendanceStatus.PRESENT
    assert rec.check_in_at == fixed_now
    assert rec.check_in_location == Location(10.0, 10.0)
    assert rec.marked_by == MarkedBy.SELF

    later = fixed_now + timedelta(hours=8, minutes=30)
    out = svc.check_out("p1", fixed_now.date(), later)

    assert out.check_out_at == later
    assert out.status == AttendanceStatus.PRESENT
    assert out.worked_minutes == 510
    assert attendance_repo.get("p1", fixed_now.date()) == out


def test_late_checkin_sets_late_status(attendance_repo, fixed_now):
    svc = AttendanceService(attendance_repo)

    rec = svc.check_in("p1", fixed_now, fixed_now, None, is_late=True)

    assert rec.status == AttendanceStatus.LATE
    assert rec.is_late
    assert rec.work_date == fixed_now.date()


def test_second_checkin_fails_and_keeps_first_record(attendance_repo, fixed_now):
    svc = AttendanceService(attendance_repo)
    first = svc.check_in("p1", fixed_now.date(), fixed_now, None, is_late=False)

    with pytest.raises(AlreadyCheckedIn):
        svc.check_in("p1", fixed_now.date(), fixed_now + timedelta(minutes=5), None, is_late=True)

    assert attendance_repo.get("p1", fixed_now.date()) == first


def test_checkout_before_checkin_fails(attendance_repo, fixed_now):
    svc = AttendanceService(attendance_repo)

    with pytest.raises(NotCheckedIn):
        svc.check_out("p1", fixed_now.date(), fixed_now)

    assert attendance_repo.puts == 0


def test_checkout_on_admin_record_without_checkin_fails(fixed_now):
    day = fixed_now.date()
    repo = InMemoryAttendance(
        [AttendanceRecord(person_id="p1", work_date=day, status=AttendanceStatus.PRESENT, marked_by=MarkedBy.ADMIN)]
    )

    with pytest.raises(NotCheckedIn):
        AttendanceService(repo).check_out("p1", day, fixed_now)


def test_double_checkout_fails(attendance_repo, fixed_now):
    svc = AttendanceService(attendance_repo)
    svc.check_in("p1", fixed_now.date(), fixed_now, None, is_late=False)
    svc.check_out("p1", fixed_now.date(), fixed_now + timedelta(hours=1))

    with pytest.raises(AlreadyCheckedOut):
        svc.check_out("p1", fixed_now.date(), fixed_now + timedelta(hours=2))


def test_checkout_earlier_than_checkin_is_rejected(attendance_repo, fixed_now):
    svc = AttendanceService(attendance_repo)
    svc.check_in("p1", fixed_now.date(), fixed_now, None, is_late=False)

    with pytest.raises(ValidationError):
        svc.check_out("p1", fixed_now.date(), fixed_now - timedelta(minutes=1))


def test_checkin_outside_fences_is_atomic(attendance_repo, office, fixed_now):
    svc = AttendanceService(attendance_repo, InMemoryGeofences([office]))

    with pytest.raises(LocationRejected) as exc:
        svc.check_in("p1", fixed_now.date(), fixed_now, Location(10.01, 10.0), is_late=False)

    assert "outside all configured regions" in str(exc.value)
    assert exc.value.verdict.nearest_fence == "HQ"
    assert attendance_repo.get("p1", fixed_now.date()) is None
    assert attendance_repo.puts == 0


def test_checkin_without_location_rejected_when_fences_configured(attendance_repo, office, fixed_now):
    svc = AttendanceService(attendance_repo, InMemoryGeofences([office]))

    with pytest.raises(LocationRejected):
        svc.check_in("p1", fixed_now.date(), fixed_now, None, is_late=False)

    assert attendance_repo.puts == 0


def test_checkin_with_malformed_location_raises_invalid_location(attendance_repo, office, fixed_now):
    svc = AttendanceService(attendance_repo, InMemoryGeofences([office]))

    with pytest.raises(InvalidLocation):
        svc.check_in("p1", fixed_now.date(), fixed_now, {"latitude": 91, "longitude": 0}, is_late=False)

    assert attendance_repo.puts == 0


@pytest.mark.parametrize(
    "point",
    [
        {"latitude": float("nan"), "longitude": 0},
        {"latitude": 91, "longitude": 0},
        {"lat": 1, "lng": 2},
    ],
)
def test_malformed_location_never_blocks_checkin_without_fences(attendance_repo, fixed_now, point):
    svc = AttendanceService(attendance_repo, InMemoryGeofences([]))

    rec = svc.check_in("p1", fixed_now.date(), fixed_now, point, is_late=False)

    assert rec.status == AttendanceStatus.PRESENT
    assert rec.check_in_location is None
    assert attendance_repo.puts == 1


def test_checkin_allowed_when_every_fence_is_unusable(attendance_repo, fixed_now):
    broken = Geofence(name="Broken", center=Location(10.0, 10.0), radius_meters=0)
    svc = AttendanceService(attendance_repo, InMemoryGeofences([broken]))

    rec = svc.check_in("p1", fixed_now.date(), fixed_now, None, is_late=False)

    assert rec.check_in_at == fixed_now


def test_aware_timestamps_are_stored_as_local_time(attendance_repo):
    svc = AttendanceService(attendance_repo)
    checked_in = datetime(2026, 2, 2, 8, 58, tzinfo=timezone.utc)
    local_in = checked_in.astimezone().replace(tzinfo=None)

    rec = svc.check_in("p1", date(2026, 2, 2), checked_in, None, is_late=False)
    out = svc.check_out("p1", date(2026, 2, 2), local_in + timedelta(hours=8))

    assert rec.check_in_at == local_in
    assert rec.check_in_at.tzinfo is None
    assert out.worked_minutes == 480


def test_checkin_allowed_anywhere_without_fences(attendance_repo, fixed_now):
    svc = AttendanceService(attendance_repo, InMemoryGeofences([]))

    rec = svc.check_in("p1", fixed_now.date(), fixed_now, {"latitude": -1.5, "longitude": 36.8}, is_late=False)

    assert rec.check_in_location == Location(-1.5, 36.8)


def test_checkin_updates_admin_marked_absent_record(fixed_now):
    day = fixed_now.date()
    repo = InMemoryAttendance(
        [
            AttendanceRecord(
                person_id="p1",
                work_date=day,
                status=AttendanceStatus.ABSENT,
                marked_by=MarkedBy.ADMIN,
                notes="pre-marked",
            )
        ]
    )

    rec = AttendanceService(repo).check_in("p1", day, fixed_now, None, is_late=False)

    assert rec.status == AttendanceStatus.PRESENT
    assert rec.marked_by == MarkedBy.SELF
    assert rec.notes == "pre-marked"


def test_admin_set_status_keeps_timestamps(attendance_repo, fixed_now):
    svc = AttendanceService(attendance_repo)
    svc.check_in("p1", fixed_now.date(), fixed_now, None, is_late=True)

    rec = svc.admin_set_status("p1", fixed_now.date(), "Excused", "doctor's note")

    assert rec.status == AttendanceStatus.EXCUSED
    assert rec.check_in_at == fixed_now
    assert rec.marked_by == MarkedBy.ADMIN
    assert rec.notes == "doctor's note"


def test_admin_set_status_creates_record_without_checkin(attendance_repo):
    day = date(2026, 2, 3)
    rec = AttendanceService(attendance_repo).admin_set_status("p9", day, AttendanceStatus.PRESENT)

    assert rec.check_in_at is None
    assert attendance_repo.get("p9", day).status == AttendanceStatus.PRESENT


def test_admin_set_status_is_idempotent(attendance_repo):
    svc = AttendanceService(attendance_repo)
    day = date(2026, 2, 3)

    first = svc.admin_set_status("p1", day, "absent", "no show")
    second = svc.admin_set_status("p1", day, "absent", "no show")

    assert first == second
    assert attendance_repo.get("p1", day) == second


@pytest.mark.parametrize("status", ["holiday", "", None, "  "])
def test_admin_set_status_rejects_unknown_status(attendance_repo, status):
    with pytest.raises(InvalidStatus):
        AttendanceService(attendance_repo).admin_set_status("p1", date(2026, 2, 3), status)

    assert attendance_repo.puts == 0


def test_bulk_set_present_is_per_id(attendance_repo):
    day = date(2026, 2, 3)

    results = AttendanceService(attendance_repo).bulk_set_present(day, ["a", "", "c"], "marked by admin")

    assert [r.person_id for r in results] == ["a", "", "c"]
    assert [r.ok for r in results] == [True, False, True]
    assert results[1].error
    assert attendance_repo.get("a", day).status == AttendanceStatus.PRESENT
    assert attendance_repo.get("c", day).notes == "marked by admin"


def test_bulk_set_present_survives_store_failure():
    class FlakyAttendance(InMemoryAttendance):
        def put(self, record):
            if record.person_id == "b":
                raise RuntimeError("deadlock")
            super().put(record)

    repo = FlakyAttendance()
    results = AttendanceService(repo).bulk_set_present(date(2026, 2, 3), ["a", "b", "c"])

    assert [r.ok for r in results] == [True, False, True]
    assert results[1].error == "deadlock"


def test_store_error_during_checkin_propagates(fixed_now):
    class BrokenAttendance(InMemoryAttendance):
        def put(self, record):
            raise OSError("disk full")

    with pytest.raises(OSError):
        AttendanceService(BrokenAttendance()).check_in("p1", fixed_now.date(), fixed_now, None, is_late=False)


def test_history_is_most_recent_first(attendance_repo):
    svc = AttendanceService(attendance_repo)
    for day in (1, 3, 2):
        ts = datetime(2026, 2, day, 9, 0)
        svc.check_in("p1", ts, ts, None, is_late=False)

    history = svc.get_history("p1", limit=2)

    assert [r.work_date.day for r in history] == [3, 2]
