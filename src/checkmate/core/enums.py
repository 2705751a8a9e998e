from __future__ import annotations

from enum import Enum
from typing import Union

from .exceptions import InvalidStatus


class AttendanceStatus(str, Enum):
    """Canonical attendance status stored for a (person, day) record."""

    UNMARKED = "unmarked"
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"

    @classmethod
    def parse(cls, value: Union["AttendanceStatus", str, None]) -> "AttendanceStatus":
        """Normalize boundary input ("Present", " LATE ") into a member."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str) or not value.strip():
            raise InvalidStatus(f"Invalid attendance status: {value!r}")
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise InvalidStatus(f"Invalid attendance status: {value!r}") from None


class MarkedBy(str, Enum):
    """Who wrote the current status of a record."""

    SELF = "self"
    ADMIN = "admin"
