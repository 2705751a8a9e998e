from __future__ import annotations

import logging
import time
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence, Union

from ..common.validators import clean_email
from ..core.constants import DEFAULT_NOTIFY_DELAY_MS, MISSING_EMAIL_ERROR, SEND_FAILED_ERROR
from ..people.model import Person
from .model import BulkNotificationReport, Message, NotificationResult, SendResult

logger = logging.getLogger(__name__)

DayLike = Union[date, datetime]
Renderer = Callable[[Person, DayLike], Message]
Sender = Callable[[Message], Any]


class CancelSignal(Protocol):
    def is_set(self) -> bool: ...


def _as_send_result(raw: Any) -> SendResult:
    """Accept a SendResult or a {success, messageId|message_id, error} mapping."""
    if isinstance(raw, SendResult):
        return raw
    if isinstance(raw, Mapping):
        return SendResult(
            success=bool(raw.get("success")),
            message_id=raw.get("message_id") or raw.get("messageId"),
            error=raw.get("error"),
        )
    return SendResult(success=False, error=f"unexpected send result: {raw!r}")


class NotificationDispatcher:
    """Send one notification per person, strictly one at a time.

    The pause between recipients is backpressure against the mail provider's
    rate limit. One recipient's failure never stops the batch and nothing is
    retried here; retry policy belongs to `send`.
    """

    def __init__(self, *, delay_ms: int = DEFAULT_NOTIFY_DELAY_MS, sleep: Callable[[float], None] = time.sleep):
        self._delay_ms = int(delay_ms)
        self._sleep = sleep

    def _deliver(self, person: Person, work_date: DayLike, render: Renderer, send: Sender) -> NotificationResult:
        email = clean_email(person.email)
        if not email:
            return NotificationResult(
                person_id=person.person_id,
                email=person.email,
                success=False,
                error=MISSING_EMAIL_ERROR,
            )

        try:
            message = render(person, work_date)
            outcome = _as_send_result(send(message))
        except Exception as e:
            outcome = SendResult(success=False, error=str(e) or type(e).__name__)

        if outcome.success:
            return NotificationResult(
                person_id=person.person_id,
                email=email,
                success=True,
                message_id=outcome.message_id,
            )
        return NotificationResult(
            person_id=person.person_id,
            email=email,
            success=False,
            error=outcome.error or SEND_FAILED_ERROR,
        )

    def dispatch_one(self, person: Person, work_date: DayLike, render: Renderer, send: Sender) -> NotificationResult:
        result = self._deliver(person, work_date, render, send)
        if not result.success:
            logger.warning("Notification to %s failed: %s", person.person_id, result.error)
        return result

    def dispatch(
        self,
        people: Sequence[Person],
        work_date: DayLike,
        render: Renderer,
        send: Sender,
        *,
        delay_ms: Optional[int] = None,
        cancel: Optional[CancelSignal] = None,
    ) -> BulkNotificationReport:
        delay = self._delay_ms if delay_ms is None else int(delay_ms)
        logger.info("Dispatching %d notifications for %s", len(people), work_date)

        results: list[NotificationResult] = []
        for index, person in enumerate(people):
            if cancel is not None and cancel.is_set():
                logger.info("Dispatch cancelled after %d of %d recipients", index, len(people))
                break

            results.append(self.dispatch_one(person, work_date, render, send))

            if delay > 0 and index < len(people) - 1:
                self._sleep(delay / 1000.0)

        sent = sum(1 for r in results if r.success)
        report = BulkNotificationReport(
            total=len(results),
            sent=sent,
            failed=len(results) - sent,
            results=results,
            skipped=len(people) - len(results),
        )
        logger.info("Dispatch results: %d sent, %d failed, %d skipped", report.sent, report.failed, report.skipped)
        return report
