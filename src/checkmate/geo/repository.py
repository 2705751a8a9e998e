from __future__ import annotations

from typing import Protocol, Sequence

from .model import Geofence


class GeofenceRepository(Protocol):
    """Read-only source of configured geofences."""

    def list_geofences(self) -> Sequence[Geofence]:
        raise NotImplementedError
