from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Person


class RosterRepository(Protocol):
    """Read-only roster source.

    `list_active_people` must return a stable order: absentee lists and
    notification runs follow it.
    """

    def list_active_people(self) -> Sequence[Person]:
        raise NotImplementedError

    def get_by_id(self, person_id: str) -> Optional[Person]:
        raise NotImplementedError
