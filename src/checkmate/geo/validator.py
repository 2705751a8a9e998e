from __future__ import annotations

import math
from typing import Any, Sequence

from ..core.constants import EARTH_RADIUS_METERS
from ..core.exceptions import InvalidLocation
from .model import Geofence, GeoVerdict, Location

NO_GEOFENCES = "no geofences configured"
OUTSIDE_ALL = "outside all configured regions"


def haversine_distance(a: Location, b: Location) -> float:
    """Great-circle distance between two points, in meters."""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(b.longitude - a.longitude)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(h)))


def _coordinate(value: Any, name: str, limit: float) -> float:
    if isinstance(value, bool):
        raise InvalidLocation(f"{name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidLocation(f"{name} must be a number") from None
    if not math.isfinite(number):
        raise InvalidLocation(f"{name} must be a finite number")
    if not -limit <= number <= limit:
        raise InvalidLocation(f"{name} must be between -{limit:g} and {limit:g}")
    return number


def ensure_location(point: Any) -> Location:
    """Coerce a Location or a {latitude, longitude} mapping, checking ranges."""
    if point is None:
        raise InvalidLocation("location is missing")
    if isinstance(point, Location):
        lat, lon = point.latitude, point.longitude
    else:
        try:
            lat, lon = point["latitude"], point["longitude"]
        except (KeyError, TypeError):
            raise InvalidLocation("location must have latitude and longitude") from None

    return Location(
        latitude=_coordinate(lat, "latitude", 90),
        longitude=_coordinate(lon, "longitude", 180),
    )


def usable_geofences(geofences: Sequence[Geofence]) -> list[Geofence]:
    """Fences that can match anything; a non-positive radius is ignored."""
    return [fence for fence in geofences if fence.radius_meters > 0]


class GeoValidator:
    """Decide whether a point lies inside any configured geofence.

    An empty geofence list never blocks check-in (fail-open): the feature is
    optional for small deployments. A list holding only unusable fences
    counts as empty.
    """

    def validate(self, point: Any, geofences: Sequence[Geofence]) -> GeoVerdict:
        location = ensure_location(point)

        fences = usable_geofences(geofences)
        if not fences:
            return GeoVerdict(is_valid=True, reason=NO_GEOFENCES)

        nearest: Geofence = fences[0]
        nearest_distance = math.inf
        for fence in fences:
            distance = haversine_distance(location, fence.center)
            if distance <= fence.radius_meters:
                return GeoVerdict(
                    is_valid=True,
                    reason=f"inside {fence.name}",
                    matched_fence=fence.name,
                    nearest_fence=fence.name,
                    nearest_distance_meters=distance,
                )
            if distance < nearest_distance:
                nearest, nearest_distance = fence, distance

        return GeoVerdict(
            is_valid=False,
            reason=OUTSIDE_ALL,
            nearest_fence=nearest.name,
            nearest_distance_meters=nearest_distance,
        )
