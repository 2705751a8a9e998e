from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Person
from .repository import RosterRepository


def _to_person(r: Dict[str, Any]) -> Person:
    return Person(
        person_id=str(r["person_id"]),
        name=r["full_name"],
        email=r.get("email"),
        department=r.get("department"),
        supervisor=r.get("supervisor"),
    )


class MySQLPersonRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active_people(self) -> Sequence[Person]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT person_id, full_name, email, department, supervisor
                FROM people
                WHERE is_active=1
                ORDER BY full_name ASC, person_id ASC
                """
            )
            return [_to_person(r) for r in fetchall(cur)]

    def get_by_id(self, person_id: str) -> Optional[Person]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT person_id, full_name, email, department, supervisor
                FROM people
                WHERE person_id=%s
                """,
                (str(person_id),),
            )
            r = fetchone(cur)
            return _to_person(r) if r else None
