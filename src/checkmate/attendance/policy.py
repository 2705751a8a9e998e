from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta

from ..common.datetime_utils import parse_hhmm
from ..core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_WORK_START


@dataclass(frozen=True)
class LatenessPolicy:
    """Caller-side rule deciding whether a check-in counts as late.

    The attendance service only receives the resulting boolean.
    """

    work_start: time = parse_hhmm(DEFAULT_WORK_START)
    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES

    @classmethod
    def from_settings(cls, *, work_start: str, grace_minutes: int) -> "LatenessPolicy":
        return cls(work_start=parse_hhmm(work_start), grace_minutes=int(grace_minutes))

    def deadline(self, timestamp: datetime) -> datetime:
        start = datetime.combine(timestamp.date(), self.work_start, tzinfo=timestamp.tzinfo)
        return start + timedelta(minutes=self.grace_minutes)

    def is_late(self, timestamp: datetime) -> bool:
        return timestamp > self.deadline(timestamp)
