from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus, MarkedBy
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..geo.model import Location
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    person_id, work_date, status, check_in_at, check_out_at,
    check_in_lat, check_in_lng, check_out_lat, check_out_lng, marked_by, notes
"""


def _location(lat: Any, lng: Any) -> Optional[Location]:
    if lat is None or lng is None:
        return None
    return Location(latitude=float(lat), longitude=float(lng))


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        person_id=str(r["person_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus.parse(r.get("status") or AttendanceStatus.UNMARKED.value),
        check_in_at=r.get("check_in_at"),
        check_out_at=r.get("check_out_at"),
        check_in_location=_location(r.get("check_in_lat"), r.get("check_in_lng")),
        check_out_location=_location(r.get("check_out_lat"), r.get("check_out_lng")),
        marked_by=MarkedBy(r.get("marked_by") or MarkedBy.SELF.value),
        notes=r.get("notes"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, person_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE person_id=%s AND work_date=%s
                """,
                (str(person_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def put(self, record: AttendanceRecord) -> None:
        cin = record.check_in_location
        cout = record.check_out_location
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO attendance_records({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    status=VALUES(status),
                    check_in_at=VALUES(check_in_at),
                    check_out_at=VALUES(check_out_at),
                    check_in_lat=VALUES(check_in_lat),
                    check_in_lng=VALUES(check_in_lng),
                    check_out_lat=VALUES(check_out_lat),
                    check_out_lng=VALUES(check_out_lng),
                    marked_by=VALUES(marked_by),
                    notes=VALUES(notes)
                """,
                (
                    record.person_id,
                    record.work_date,
                    record.status.value,
                    record.check_in_at,
                    record.check_out_at,
                    cin.latitude if cin else None,
                    cin.longitude if cin else None,
                    cout.latitude if cout else None,
                    cout.longitude if cout else None,
                    record.marked_by.value,
                    record.notes,
                ),
            )

    def list_by_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE work_date=%s
                ORDER BY attendance_id ASC
                """,
                (work_date,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_person(self, person_id: str, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE person_id=%s
                ORDER BY work_date DESC
                LIMIT %s
                """,
                (str(person_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]
