from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.policy import LatenessPolicy
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .geo.mysql_geofence_repository import MySQLGeofenceRepository
from .geo.repository import GeofenceRepository
from .geo.validator import GeoValidator
from .notifications.dispatcher import NotificationDispatcher
from .notifications.mailer import SmtpConfig, SmtpMailer
from .notifications.service import AbsenteeNotificationService, NotificationWorker
from .people.mysql_person_repository import MySQLPersonRepository
from .people.repository import RosterRepository


@dataclass(frozen=True)
class Container:
    attendance_repo: AttendanceRepository
    geofence_repo: GeofenceRepository
    roster_repo: RosterRepository

    geo_validator: GeoValidator
    lateness_policy: LatenessPolicy
    attendance_service: AttendanceService
    mailer: Any
    notification_service: AbsenteeNotificationService
    notification_worker: NotificationWorker

    conn: Optional[DatabaseConnection] = None


def assemble(
    *,
    attendance_repo: AttendanceRepository,
    geofence_repo: GeofenceRepository,
    roster_repo: RosterRepository,
    mailer: Any,
    lateness_policy: Optional[LatenessPolicy] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over already-built repositories and mailer."""
    validator = GeoValidator()
    attendance_service = AttendanceService(attendance_repo, geofence_repo, validator=validator)
    notification_service = AbsenteeNotificationService(
        attendance_repo,
        roster_repo,
        dispatcher or NotificationDispatcher(),
        mailer.send,
    )

    return Container(
        attendance_repo=attendance_repo,
        geofence_repo=geofence_repo,
        roster_repo=roster_repo,
        geo_validator=validator,
        lateness_policy=lateness_policy or LatenessPolicy(),
        attendance_service=attendance_service,
        mailer=mailer,
        notification_service=notification_service,
        notification_worker=NotificationWorker(notification_service),
        conn=conn,
    )


def build_container(settings: Any) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))

    return assemble(
        attendance_repo=MySQLAttendanceRepository(conn),
        geofence_repo=MySQLGeofenceRepository(conn),
        roster_repo=MySQLPersonRepository(conn),
        mailer=SmtpMailer(SmtpConfig.from_dict(getattr(settings, "SMTP_CONFIG", {}))),
        lateness_policy=LatenessPolicy.from_settings(
            work_start=getattr(settings, "WORK_START_TIME", "09:00"),
            grace_minutes=getattr(settings, "LATE_GRACE_MINUTES", 5),
        ),
        dispatcher=NotificationDispatcher(delay_ms=getattr(settings, "NOTIFY_DELAY_MS", 1000)),
        conn=conn,
    )
