"""Example: use the service layer directly (no Flask).

Controllers are a thin layer; the attendance rules live in the services.
"""

from datetime import date, datetime

from checkmate.attendance.service import AttendanceService
from checkmate.geo.model import Geofence, Location
from checkmate.notifications.dispatcher import NotificationDispatcher
from checkmate.notifications.model import SendResult
from checkmate.notifications.templates import render_absentee_notice
from checkmate.attendance.absentees import find_absentees
from checkmate.people.model import Person


class DictStore:
    def __init__(self):
        self.rows = {}

    def get(self, person_id, work_date):
        return self.rows.get((person_id, work_date))

    def put(self, record):
        self.rows[(record.person_id, record.work_date)] = record

    def list_by_date(self, work_date):
        return [r for r in self.rows.values() if r.work_date == work_date]

    def list_for_person(self, person_id, limit):
        return [r for r in self.rows.values() if r.person_id == person_id][:limit]


class OneFence:
    def list_geofences(self):
        return [Geofence(name="Office", center=Location(6.5244, 3.3792), radius_meters=150)]


def main():
    today = date.today()
    roster = [
        Person(person_id="1", name="Ada", email="ada@example.com"),
        Person(person_id="2", name="Tunde", email="tunde@example.com"),
    ]
    store = DictStore()
    attendance = AttendanceService(store, OneFence())
    attendance.check_in("1", today, datetime.now(), Location(6.5245, 3.3791), is_late=False)

    absent = find_absentees(today, roster, store.list_by_date(today))
    report = NotificationDispatcher(delay_ms=0).dispatch(
        absent,
        today,
        render_absentee_notice,
        lambda message: SendResult(success=True, message_id=f"<dry-run {message.to}>"),
    )
    print(report.as_dict())


if __name__ == "__main__":
    main()
