from __future__ import annotations

import logging
from datetime import date, datetime

import pytest

from checkmate.attendance.service import AttendanceService
from checkmate.core.exceptions import ValidationError
from checkmate.notifications.dispatcher import NotificationDispatcher
from checkmate.notifications.service import AbsenteeNotificationService, NotificationWorker

from conftest import FakeMailer

DAY = date(2026, 2, 2)


@pytest.fixture
def mailer():
    return FakeMailer(fail_for={"c@x.com"})


@pytest.fixture
def service(attendance_repo, roster, mailer):
    return AbsenteeNotificationService(
        attendance_repo,
        roster,
        NotificationDispatcher(delay_ms=0),
        mailer.send,
    )


def test_notify_absentees_end_to_end(service, mailer):
    report = service.notify_absentees(DAY)

    assert (report.total, report.sent, report.failed) == (3, 1, 2)
    assert [(r.person_id, r.success) for r in report.results] == [("a", True), ("b", False), ("c", False)]
    assert report.results[1].error == "missing email address"
    assert "SMTP rejected" in report.results[2].error
    assert [m.to for m in mailer.sent] == ["a@x.com"]
    assert mailer.sent[0].subject == "Attendance Inquiry - 2026-02-02"


def test_present_people_are_not_notified(service, attendance_repo, mailer):
    AttendanceService(attendance_repo).check_in("a", DAY, datetime(2026, 2, 2, 9, 0), None, is_late=False)

    absentees = service.list_absentees(DAY)
    report = service.notify_absentees(DAY)

    assert [p.person_id for p in absentees] == ["b", "c"]
    assert report.total == 2
    assert mailer.sent == []


def test_restrict_to_person_ids_keeps_roster_order(service):
    report = service.notify_absentees(DAY, ["c", "a", "zzz"])

    assert [r.person_id for r in report.results] == ["a", "c"]


def test_notify_person(service, mailer):
    result = service.notify_person("a", DAY)

    assert result.success
    assert mailer.sent[0].to == "a@x.com"


def test_notify_unknown_person(service):
    with pytest.raises(ValidationError):
        service.notify_person("nobody", DAY)


def test_worker_runs_batch_in_background(service):
    worker = NotificationWorker(service)
    try:
        report = worker.submit(DAY, ["a"]).result(timeout=5)
    finally:
        worker.shutdown()

    assert (report.total, report.sent) == (1, 1)


class BrokenAttendance:
    def list_by_date(self, work_date):
        raise RuntimeError("db down")


def test_worker_logs_failed_batch(roster, mailer, caplog):
    broken = AbsenteeNotificationService(
        BrokenAttendance(),
        roster,
        NotificationDispatcher(delay_ms=0),
        mailer.send,
    )
    worker = NotificationWorker(broken)
    try:
        future = worker.submit(DAY)
        with pytest.raises(RuntimeError):
            future.result(timeout=5)
    finally:
        worker.shutdown()

    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert "2026-02-02" in errors[0].getMessage()
    assert str(errors[0].exc_info[1]) == "db down"
    assert mailer.sent == []
