from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from flask import Flask, request

from ..common.datetime_utils import (
    now_local,
    parse_iso_date,
    parse_iso_datetime,
    to_day,
    to_local_naive,
)
from ..common.http import (
    domain_error_response,
    json_body,
    json_error,
    json_ok,
    unexpected_error_response,
)
from ..common.locks import KeyedLocks
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from ..geo.model import Location
from .model import AttendanceRecord


def _location_dict(loc: Optional[Location]) -> Optional[dict]:
    if loc is None:
        return None
    return {"latitude": loc.latitude, "longitude": loc.longitude}


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def record_to_dict(r: AttendanceRecord) -> dict:
    return {
        "person_id": r.person_id,
        "date": r.work_date.isoformat(),
        "status": r.status.value,
        "check_in_at": _iso(r.check_in_at),
        "check_out_at": _iso(r.check_out_at),
        "check_in_location": _location_dict(r.check_in_location),
        "check_out_location": _location_dict(r.check_out_location),
        "marked_by": r.marked_by.value,
        "notes": r.notes,
        "worked_minutes": r.worked_minutes,
    }


def _timestamp(data: dict) -> datetime:
    raw = data.get("timestamp")
    if not raw:
        return now_local()
    try:
        parsed = parse_iso_datetime(str(raw))
    except ValueError:
        raise ValidationError("timestamp must be an ISO-8601 date-time") from None
    return to_local_naive(parsed)


def _day(raw: Any, fallback: datetime):
    if not raw:
        return to_day(fallback)
    try:
        return parse_iso_date(str(raw))
    except ValueError:
        raise ValidationError("date must be YYYY-MM-DD") from None


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service
    locks = KeyedLocks()

    @app.route("/api/attendance/checkin", methods=["POST"], endpoint="api_checkin")
    def api_checkin():
        data = json_body()
        try:
            timestamp = _timestamp(data)
            day = _day(data.get("date"), timestamp)
            person_id = str(data.get("person_id") or "")
            is_late = container.lateness_policy.is_late(timestamp)

            with locks.hold((person_id, day)):
                record = service.check_in(person_id, day, timestamp, data.get("location"), is_late)
            return json_ok(record_to_dict(record), 201, message="Successfully checked in")
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return unexpected_error_response("checking in")

    @app.route("/api/attendance/checkout", methods=["POST"], endpoint="api_checkout")
    def api_checkout():
        data = json_body()
        try:
            timestamp = _timestamp(data)
            day = _day(data.get("date"), timestamp)
            person_id = str(data.get("person_id") or "")

            with locks.hold((person_id, day)):
                record = service.check_out(person_id, day, timestamp, data.get("location"))
            return json_ok(record_to_dict(record), message="Successfully checked out")
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return unexpected_error_response("checking out")

    @app.route("/api/attendance/status", methods=["PUT"], endpoint="api_admin_set_status")
    def api_admin_set_status():
        data = json_body()
        try:
            day = _day(data.get("date"), now_local())
            person_id = str(data.get("person_id") or "")

            with locks.hold((person_id, day)):
                record = service.admin_set_status(person_id, day, data.get("status"), data.get("notes"))
            return json_ok(record_to_dict(record))
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return unexpected_error_response("updating attendance status")

    @app.route("/api/attendance/bulk-present", methods=["POST"], endpoint="api_bulk_present")
    def api_bulk_present():
        data = json_body()
        person_ids = data.get("person_ids")
        if not isinstance(person_ids, list):
            return json_error("person_ids must be a list")
        try:
            day = _day(data.get("date"), now_local())
            results = []
            for pid in person_ids:
                with locks.hold((str(pid), day)):
                    results.extend(service.bulk_set_present(day, [pid], data.get("notes")))
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return unexpected_error_response("marking attendance in bulk")

        return json_ok(
            [
                {
                    "person_id": r.person_id,
                    "success": r.ok,
                    "error": r.error,
                    "record": record_to_dict(r.record) if r.record else None,
                }
                for r in results
            ],
            updated=sum(1 for r in results if r.ok),
            failed=sum(1 for r in results if not r.ok),
        )

    @app.route("/api/attendance/<person_id>/history", methods=["GET"], endpoint="api_history")
    def api_history(person_id: str):
        try:
            limit = int(request.args.get("limit", 30))
        except ValueError:
            return json_error("limit must be an integer")
        try:
            rows = service.get_history(person_id, limit=limit)
        except Exception:
            return unexpected_error_response("loading attendance history")
        return json_ok([record_to_dict(r) for r in rows])

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="api_daily_summary")
    def api_daily_summary():
        try:
            day = _day(request.args.get("date"), now_local())
            summary = service.daily_summary(day, list(container.roster_repo.list_active_people()))
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return unexpected_error_response("building the daily summary")
        return json_ok(
            {
                "date": summary.work_date.isoformat(),
                "total": summary.total,
                "present": summary.present,
                "late": summary.late,
                "excused": summary.excused,
                "absent": summary.absent,
                "unmarked": summary.unmarked,
                "attendance_rate": round(summary.attendance_rate, 4),
            }
        )

    @app.route("/api/attendance/absentees", methods=["GET"], endpoint="api_absentees")
    def api_absentees():
        try:
            day = _day(request.args.get("date"), now_local())
            people = container.notification_service.list_absentees(day)
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return unexpected_error_response("listing absentees")
        return json_ok(
            [
                {
                    "person_id": p.person_id,
                    "name": p.name,
                    "email": p.email,
                    "department": p.department,
                    "supervisor": p.supervisor,
                }
                for p in people
            ],
            date=day.isoformat(),
            count=len(people),
        )
