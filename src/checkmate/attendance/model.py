from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, MarkedBy
from ..geo.model import Location


@dataclass(frozen=True)
class AttendanceRecord:
    """One person's attendance for one calendar day.

    At most one record exists per (person_id, work_date); the store enforces it.
    """

    person_id: str
    work_date: date
    status: AttendanceStatus = AttendanceStatus.UNMARKED
    check_in_at: Optional[datetime] = None
    check_out_at: Optional[datetime] = None
    check_in_location: Optional[Location] = None
    check_out_location: Optional[Location] = None
    marked_by: MarkedBy = MarkedBy.SELF
    notes: Optional[str] = None

    @property
    def is_checked_in(self) -> bool:
        return self.check_in_at is not None

    @property
    def is_checked_out(self) -> bool:
        return self.check_out_at is not None

    @property
    def is_late(self) -> bool:
        return self.status == AttendanceStatus.LATE

    @property
    def worked_minutes(self) -> Optional[int]:
        if self.check_in_at is None or self.check_out_at is None:
            return None
        return int((self.check_out_at - self.check_in_at).total_seconds() // 60)


@dataclass(frozen=True)
class BulkMarkResult:
    person_id: str
    record: Optional[AttendanceRecord] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class DailySummary:
    """Read-model for the dashboard 'today' cards."""

    work_date: date
    total: int
    present: int
    late: int
    excused: int
    absent: int
    unmarked: int

    @property
    def attendance_rate(self) -> float:
        # Excused absences count towards attendance.
        if not self.total:
            return 0.0
        return (self.present + self.late + self.excused) / self.total
