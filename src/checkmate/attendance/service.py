from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence, Union

from ..common.datetime_utils import to_day, to_local_naive
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus, MarkedBy
from ..core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    DomainError,
    InvalidLocation,
    LocationRejected,
    NotCheckedIn,
    ValidationError,
)
from ..geo.model import Location
from ..geo.repository import GeofenceRepository
from ..geo.validator import GeoValidator, ensure_location, usable_geofences
from ..people.model import Person
from .model import AttendanceRecord, BulkMarkResult, DailySummary
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

DayLike = Union[date, datetime]


class AttendanceService:
    """Per-person, per-day check-in/check-out state machine.

    NoRecord -> CheckedIn -> CheckedOut, plus an admin-settable status label
    that may be applied at any point. Mutations for the same (person, day)
    must be serialized by the caller; this service does no locking.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        geofences: Optional[GeofenceRepository] = None,
        *,
        validator: Optional[GeoValidator] = None,
    ):
        self._attendance = attendance
        self._geofences = geofences
        self._validator = validator or GeoValidator()

    def _check_location(self, location: Any) -> Optional[Location]:
        fences = usable_geofences(self._geofences.list_geofences()) if self._geofences else []

        if not fences:
            if location is None:
                return None
            try:
                return ensure_location(location)
            except InvalidLocation as e:
                logger.info("Dropping unusable check-in location: %s", e)
                return None

        if location is None:
            raise LocationRejected("location is required to check in at a configured site")

        verdict = self._validator.validate(location, fences)
        if not verdict.is_valid:
            message = verdict.reason
            if verdict.nearest_fence:
                message += f" (nearest: {verdict.nearest_fence}, {verdict.nearest_distance_meters:.0f} m away)"
            raise LocationRejected(message, verdict)
        return ensure_location(location)

    def check_in(
        self,
        person_id: str,
        work_date: DayLike,
        timestamp: datetime,
        location: Any = None,
        is_late: bool = False,
    ) -> AttendanceRecord:
        person_id = require_non_empty(person_id, "person id")
        day = to_day(work_date)
        timestamp = to_local_naive(timestamp)

        existing = self._attendance.get(person_id, day)
        if existing and existing.check_in_at is not None:
            raise AlreadyCheckedIn()

        checked_location = self._check_location(location)

        record = replace(
            existing or AttendanceRecord(person_id=person_id, work_date=day),
            status=AttendanceStatus.LATE if is_late else AttendanceStatus.PRESENT,
            check_in_at=timestamp,
            check_in_location=checked_location,
            marked_by=MarkedBy.SELF,
        )
        self._attendance.put(record)
        return record

    def check_out(
        self,
        person_id: str,
        work_date: DayLike,
        timestamp: datetime,
        location: Any = None,
    ) -> AttendanceRecord:
        person_id = require_non_empty(person_id, "person id")
        day = to_day(work_date)
        timestamp = to_local_naive(timestamp)

        record = self._attendance.get(person_id, day)
        if not record or record.check_in_at is None:
            raise NotCheckedIn()
        if record.check_out_at is not None:
            raise AlreadyCheckedOut()
        if timestamp < record.check_in_at:
            raise ValidationError("check-out time cannot be earlier than check-in time")

        updated = replace(
            record,
            check_out_at=timestamp,
            check_out_location=ensure_location(location) if location is not None else None,
        )
        self._attendance.put(updated)
        return updated

    def admin_set_status(
        self,
        person_id: str,
        work_date: DayLike,
        status: Union[AttendanceStatus, str],
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        """Admin override: any status, regardless of recorded timestamps."""
        new_status = AttendanceStatus.parse(status)
        person_id = require_non_empty(person_id, "person id")
        day = to_day(work_date)

        existing = self._attendance.get(person_id, day)
        record = replace(
            existing or AttendanceRecord(person_id=person_id, work_date=day),
            status=new_status,
            marked_by=MarkedBy.ADMIN,
            notes=notes,
        )
        self._attendance.put(record)
        return record

    def bulk_set_present(
        self,
        work_date: DayLike,
        person_ids: Iterable[str],
        notes: Optional[str] = None,
    ) -> list[BulkMarkResult]:
        results: list[BulkMarkResult] = []
        for person_id in person_ids:
            try:
                record = self.admin_set_status(person_id, work_date, AttendanceStatus.PRESENT, notes)
            except DomainError as e:
                results.append(BulkMarkResult(person_id=person_id, error=str(e)))
                continue
            except Exception as e:
                logger.exception("Bulk mark present failed for %r", person_id)
                results.append(BulkMarkResult(person_id=person_id, error=str(e) or type(e).__name__))
                continue
            results.append(BulkMarkResult(person_id=person_id, record=record))

        failed = sum(1 for r in results if not r.ok)
        if failed:
            logger.warning("Bulk mark present on %s: %d of %d failed", to_day(work_date), failed, len(results))
        return results

    def get_record(self, person_id: str, work_date: DayLike) -> Optional[AttendanceRecord]:
        return self._attendance.get(person_id, to_day(work_date))

    def get_history(self, person_id: str, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_person(person_id, int(limit))

    def daily_summary(self, work_date: DayLike, roster: Sequence[Person]) -> DailySummary:
        day = to_day(work_date)
        by_person = {r.person_id: r for r in self._attendance.list_by_date(day) if r.work_date == day}

        counts = {status: 0 for status in AttendanceStatus}
        for person in roster:
            record = by_person.get(person.person_id)
            status = record.status if record and record.status else AttendanceStatus.UNMARKED
            counts[AttendanceStatus.parse(status)] += 1

        return DailySummary(
            work_date=day,
            total=len(roster),
            present=counts[AttendanceStatus.PRESENT],
            late=counts[AttendanceStatus.LATE],
            excused=counts[AttendanceStatus.EXCUSED],
            absent=counts[AttendanceStatus.ABSENT],
            unmarked=counts[AttendanceStatus.UNMARKED],
        )
