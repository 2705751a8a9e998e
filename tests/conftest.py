from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import pytest

from checkmate.attendance.model import AttendanceRecord
from checkmate.geo.model import Geofence, Location
from checkmate.notifications.model import Message, SendResult
from checkmate.people.model import Person


class InMemoryAttendance:
    def __init__(self, records=()):
        self._by_key: dict[tuple[str, date], AttendanceRecord] = {}
        self.puts = 0
        for r in records:
            self._by_key[(r.person_id, r.work_date)] = r

    def get(self, person_id: str, work_date: date) -> Optional[AttendanceRecord]:
        return self._by_key.get((person_id, work_date))

    def put(self, record: AttendanceRecord) -> None:
        self.puts += 1
        self._by_key[(record.person_id, record.work_date)] = record

    def list_by_date(self, work_date: date):
        return [r for r in self._by_key.values() if r.work_date == work_date]

    def list_for_person(self, person_id: str, limit: int):
        items = [r for r in self._by_key.values() if r.person_id == person_id]
        items.sort(key=lambda r: r.work_date, reverse=True)
        return items[:limit]


class InMemoryGeofences:
    def __init__(self, fences=()):
        self.fences = list(fences)

    def list_geofences(self):
        return list(self.fences)


class InMemoryRoster:
    def __init__(self, people=()):
        self.people = list(people)

    def list_active_people(self):
        return list(self.people)

    def get_by_id(self, person_id: str) -> Optional[Person]:
        for p in self.people:
            if p.person_id == person_id:
                return p
        return None


class FakeMailer:
    """Records sent messages; raises for addresses in `fail_for`."""

    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.sent: list[Message] = []
        self.verified = False

    def send(self, message: Message) -> SendResult:
        if message.to in self.fail_for:
            raise ConnectionError(f"SMTP rejected {message.to}")
        self.sent.append(message)
        return SendResult(success=True, message_id=f"<{len(self.sent)}@test>")

    def verify(self) -> bool:
        self.verified = True
        return True


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 8, 55, 0)


@pytest.fixture
def office() -> Geofence:
    return Geofence(name="HQ", center=Location(10.0, 10.0), radius_meters=50)


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def roster() -> InMemoryRoster:
    return InMemoryRoster(
        [
            Person(person_id="a", name="Alice", email="a@x.com", department="IT"),
            Person(person_id="b", name="Bob", email=None, department="HR"),
            Person(person_id="c", name="Carol", email="c@x.com", department="IT", supervisor="Dana"),
        ]
    )


@pytest.fixture
def no_sleep():
    calls: list[float] = []
    return calls, calls.append
