from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Location:
    """A WGS84 point in degrees."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class Geofence:
    """Named circular region where check-in is allowed."""

    name: str
    center: Location
    radius_meters: float
    description: Optional[str] = None


@dataclass(frozen=True)
class GeoVerdict:
    is_valid: bool
    reason: str
    matched_fence: Optional[str] = None
    nearest_fence: Optional[str] = None
    nearest_distance_meters: Optional[float] = None
