from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Geofence, Location
from .repository import GeofenceRepository


class MySQLGeofenceRepository(GeofenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_geofences(self) -> Sequence[Geofence]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT name, latitude, longitude, radius_meters, description
                FROM geofences
                WHERE is_active=1
                ORDER BY geofence_id ASC
                """
            )
            rows = fetchall(cur)
            return [
                Geofence(
                    name=r["name"],
                    center=Location(latitude=float(r["latitude"]), longitude=float(r["longitude"])),
                    radius_meters=float(r["radius_meters"]),
                    description=r.get("description"),
                )
                for r in rows
            ]
