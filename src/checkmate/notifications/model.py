from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Message:
    to: str
    subject: str
    html: str
    text: Optional[str] = None


@dataclass(frozen=True)
class SendResult:
    """What a mailer reports for one message."""

    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class NotificationResult:
    person_id: str
    email: Optional[str]
    success: bool
    error: Optional[str] = None
    message_id: Optional[str] = None


@dataclass(frozen=True)
class BulkNotificationReport:
    """Outcome of one dispatch run, results in processing order.

    `skipped` counts recipients never attempted because the run was cancelled;
    they are not part of `total`.
    """

    total: int
    sent: int
    failed: int
    results: list[NotificationResult] = field(default_factory=list)
    skipped: int = 0

    def as_dict(self) -> dict:
        return {
            "total": self.total,
            "sent": self.sent,
            "failed": self.failed,
            "skipped": self.skipped,
            "results": [
                {
                    "person_id": r.person_id,
                    "email": r.email,
                    "success": r.success,
                    "error": r.error,
                    "message_id": r.message_id,
                }
                for r in self.results
            ],
        }
