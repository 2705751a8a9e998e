from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Record store keyed by (person_id, work_date).

    `put` is an upsert and must be atomic for a single record.
    """

    def get(self, person_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def put(self, record: AttendanceRecord) -> None:
        raise NotImplementedError

    def list_by_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_person(self, person_id: str, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
