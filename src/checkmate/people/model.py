from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Person:
    """Roster entry (intern or staff member), read-only to attendance logic."""

    person_id: str
    name: str
    email: Optional[str]
    department: Optional[str] = None
    supervisor: Optional[str] = None
