from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import date, datetime
from typing import Iterable, Optional, Union

from ..attendance.absentees import find_absentees
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import to_day
from ..core.exceptions import ValidationError
from ..people.model import Person
from ..people.repository import RosterRepository
from .dispatcher import NotificationDispatcher, Renderer, Sender
from .model import BulkNotificationReport, NotificationResult
from .templates import render_absentee_notice

logger = logging.getLogger(__name__)

DayLike = Union[date, datetime]


class AbsenteeNotificationService:
    """Use case: tell absent people that their absence was noticed."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        roster: RosterRepository,
        dispatcher: NotificationDispatcher,
        send: Sender,
        *,
        render: Renderer = render_absentee_notice,
    ):
        self._attendance = attendance
        self._roster = roster
        self._dispatcher = dispatcher
        self._send = send
        self._render = render

    def list_absentees(self, work_date: DayLike) -> list[Person]:
        day = to_day(work_date)
        roster = list(self._roster.list_active_people())
        return find_absentees(day, roster, self._attendance.list_by_date(day))

    def notify_absentees(
        self,
        work_date: DayLike,
        person_ids: Optional[Iterable[str]] = None,
        *,
        delay_ms: Optional[int] = None,
        cancel: Optional[threading.Event] = None,
    ) -> BulkNotificationReport:
        day = to_day(work_date)
        absentees = self.list_absentees(day)
        if person_ids is not None:
            wanted = {str(pid) for pid in person_ids}
            absentees = [p for p in absentees if p.person_id in wanted]

        return self._dispatcher.dispatch(
            absentees,
            day,
            self._render,
            self._send,
            delay_ms=delay_ms,
            cancel=cancel,
        )

    def notify_person(self, person_id: str, work_date: DayLike) -> NotificationResult:
        person = self._roster.get_by_id(person_id)
        if not person:
            raise ValidationError(f"Unknown person: {person_id}")
        return self._dispatcher.dispatch_one(person, to_day(work_date), self._render, self._send)


class NotificationWorker:
    """Runs absentee notification batches off the request thread.

    A single worker thread keeps batches, and the sends inside them,
    strictly sequential.
    """

    def __init__(self, service: AbsenteeNotificationService):
        self._service = service
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="checkmate-notify")
        self._lock = threading.Lock()
        self._signals: list[threading.Event] = []

    def submit(
        self,
        work_date: DayLike,
        person_ids: Optional[Iterable[str]] = None,
        *,
        delay_ms: Optional[int] = None,
    ) -> "Future[BulkNotificationReport]":
        ids = list(person_ids) if person_ids is not None else None
        signal = threading.Event()
        with self._lock:
            self._signals.append(signal)

        def run() -> BulkNotificationReport:
            try:
                return self._service.notify_absentees(work_date, ids, delay_ms=delay_ms, cancel=signal)
            except Exception:
                logger.exception("Background absentee notifications for %s failed", to_day(work_date))
                raise
            finally:
                with self._lock:
                    self._signals.remove(signal)

        logger.info("Queued absentee notifications for %s", to_day(work_date))
        return self._executor.submit(run)

    def cancel(self) -> None:
        """Stop running and queued batches before their next recipient."""
        with self._lock:
            for signal in self._signals:
                signal.set()

    def shutdown(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
