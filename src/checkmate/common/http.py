from __future__ import annotations

import logging
from typing import Any, Optional

from flask import jsonify, request

from ..core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    DomainError,
    LocationRejected,
)

logger = logging.getLogger(__name__)


def json_ok(data: Any = None, status_code: int = 200, **extra: Any):
    body = {"status": "success", "data": data}
    body.update(extra)
    return jsonify(body), status_code


def json_error(message: str, status_code: int = 400, **extra: Any):
    body = {"status": "error", "message": message}
    body.update(extra)
    return jsonify(body), status_code


def domain_error_response(e: DomainError):
    if isinstance(e, (AlreadyCheckedIn, AlreadyCheckedOut)):
        return json_error(str(e), 409, error=type(e).__name__)
    if isinstance(e, LocationRejected):
        return json_error(str(e), 403, error=type(e).__name__)
    return json_error(str(e), 400, error=type(e).__name__)


def unexpected_error_response(action: str):
    logger.exception("Unexpected error while %s", action)
    return json_error(f"Internal error while {action}", 500)


def json_body() -> dict:
    data: Optional[dict] = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
