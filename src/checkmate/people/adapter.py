"""Normalize upstream person payloads into `Person`.

Upstream APIs return interns in several shapes (`_id` vs `id`, the name and
email either at top level or nested under `user`). Everything past this
adapter sees only the canonical `Person`.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..common.validators import clean_email, require_non_empty
from .model import Person

DEFAULT_DEPARTMENT = "General"


def _first(raw: Mapping[str, Any], *keys: str) -> Optional[Any]:
    user = raw.get("user") if isinstance(raw.get("user"), Mapping) else {}
    for key in keys:
        if raw.get(key) not in (None, ""):
            return raw[key]
        if user.get(key) not in (None, ""):
            return user[key]
    return None


def person_from_upstream(raw: Mapping[str, Any]) -> Person:
    person_id = require_non_empty(_first(raw, "person_id", "id", "_id"), "person id")
    name = _first(raw, "name", "full_name") or "Team Member"

    return Person(
        person_id=person_id,
        name=str(name).strip(),
        email=clean_email(_first(raw, "email")) or None,
        department=_first(raw, "department") or DEFAULT_DEPARTMENT,
        supervisor=_first(raw, "supervisor"),
    )
