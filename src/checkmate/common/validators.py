from __future__ import annotations

from typing import Any

from ..core.exceptions import ValidationError


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def clean_email(value: Any) -> str:
    """Return a stripped email address, or '' when none is usable."""
    if not isinstance(value, str):
        return ""
    return value.strip()
