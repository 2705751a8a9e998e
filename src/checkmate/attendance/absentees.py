from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Sequence, Union

from ..common.datetime_utils import to_day
from ..core.enums import AttendanceStatus
from ..people.model import Person
from .model import AttendanceRecord

_NOT_ATTENDING = {AttendanceStatus.ABSENT.value, AttendanceStatus.UNMARKED.value}


def _counts_as_absent(record: AttendanceRecord) -> bool:
    status = record.status
    if status is None:
        return True
    value = status.value if isinstance(status, AttendanceStatus) else str(status).strip().lower()
    return not value or value in _NOT_ATTENDING


def find_absentees(
    work_date: Union[date, datetime],
    roster: Sequence[Person],
    records: Iterable[AttendanceRecord],
) -> list[Person]:
    """People on the roster who are absent or unmarked on `work_date`.

    Having no record counts as absent. Present, late and excused exclude a
    person. The result keeps roster order.
    """

    day = to_day(work_date)
    by_person = {r.person_id: r for r in records if to_day(r.work_date) == day}

    absentees: list[Person] = []
    for person in roster:
        record = by_person.get(person.person_id)
        if record is None or _counts_as_absent(record):
            absentees.append(person)
    return absentees
