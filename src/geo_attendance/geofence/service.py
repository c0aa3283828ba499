from __future__ import annotations

import math
from dataclasses import dataclass

from ..core.constants import EARTH_RADIUS_METERS


def distance_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Great-circle distance between two points (decimal degrees)
    using the Haversine formula. Returns meters.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lng2 - lng1)

    a = math.sin(dphi / 2.0) ** 2 + \
        math.cos(phi1) * math.cos(phi2) * \
        math.sin(dlambda / 2.0) ** 2

    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


def inside_geofence(
    point_lat: float,
    point_lng: float,
    office_lat: float,
    office_lng: float,
    radius_meters: float,
) -> bool:
    """True when the point is within radius_meters of the office (inclusive)."""
    return distance_meters(point_lat, point_lng, office_lat, office_lng) <= radius_meters


@dataclass(frozen=True)
class OfficeGeofence:
    """Circular boundary around the office reference point."""

    lat: float
    lng: float
    radius_meters: float

    def contains(self, lat: float, lng: float) -> bool:
        return inside_geofence(lat, lng, self.lat, self.lng, self.radius_meters)

    def distance_to(self, lat: float, lng: float) -> float:
        return distance_meters(lat, lng, self.lat, self.lng)
