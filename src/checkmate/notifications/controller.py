from __future__ import annotations

import logging

from flask import Flask

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.http import domain_error_response, json_body, json_error, json_ok, unexpected_error_response
from ..container import Container
from ..core.exceptions import DomainError, ValidationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    service = container.notification_service

    @app.route("/api/email/absent", methods=["POST"], endpoint="api_email_absent")
    def api_email_absent():
        """Email absentees for a day.

        Body: {"date": "YYYY-MM-DD", "person_id": "..."} for one person, or
        {"date": ..., "person_ids": [...]} to restrict the batch, or just a
        date to notify every absentee. With "background": true the batch is
        queued on the notification worker and 202 is returned.
        """

        data = json_body()
        try:
            raw_date = data.get("date")
            try:
                day = parse_iso_date(str(raw_date)) if raw_date else now_local().date()
            except ValueError:
                raise ValidationError("date must be YYYY-MM-DD") from None

            if data.get("person_id"):
                result = service.notify_person(str(data["person_id"]), day)
                payload = {
                    "person_id": result.person_id,
                    "email": result.email,
                    "success": result.success,
                    "error": result.error,
                    "message_id": result.message_id,
                }
                if not result.success:
                    return json_error(result.error or "Failed to send email", 502, data=payload)
                return json_ok(payload, message="Email sent successfully")

            person_ids = data.get("person_ids")
            if person_ids is not None and not isinstance(person_ids, list):
                raise ValidationError("person_ids must be a list")

            if data.get("background"):
                container.notification_worker.submit(day, person_ids)
                return json_ok({"date": day.isoformat()}, 202, message="Notifications queued")

            report = service.notify_absentees(day, person_ids)
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return unexpected_error_response("sending absentee notifications")

        return json_ok(
            report.as_dict(),
            message=f"Bulk email results: {report.sent} sent, {report.failed} failed",
        )

    @app.route("/api/email/test", methods=["GET"], endpoint="api_email_test")
    def api_email_test():
        try:
            container.mailer.verify()
        except Exception as e:
            logger.warning("Email configuration check failed: %s", e)
            return json_error(f"Email configuration error: {e}", 502)
        return json_ok(message="Email configuration is valid")
