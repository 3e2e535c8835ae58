from __future__ import annotations

import math
from dataclasses import dataclass
from math import asin, cos, radians, sin, sqrt
from typing import Iterable

"""
Geospatial helpers.

A tiny geometry layer so the proximity code can do distance math without
pulling in heavier GIS dependencies.
"""

EARTH_RADIUS_M = 6_371_000


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lon: float


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    """Compute great-circle distance in meters between two points.

    NaN inputs propagate as NaN instead of raising.
    """
    if not all(math.isfinite(v) for v in (a.lat, a.lon, b.lat, b.lon)):
        return math.nan
    lat1 = radians(a.lat)
    lon1 = radians(a.lon)
    lat2 = radians(b.lat)
    lon2 = radians(b.lon)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # Rounding can push h a hair above 1 for antipodal points.
    if h > 1.0:
        h = 1.0
    return 2 * EARTH_RADIUS_M * asin(sqrt(h))


def distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    return haversine_m(GeoPoint(lat=lat1, lon=lon1), GeoPoint(lat=lat2, lon=lon2))


def is_valid_coordinate(lat: float, lon: float) -> bool:
    """True for finite in-range coordinates that are not the (0, 0) placeholder."""
    try:
        lat_f = float(lat)
        lon_f = float(lon)
    except (TypeError, ValueError):
        return False
    if not (math.isfinite(lat_f) and math.isfinite(lon_f)):
        return False
    if not (-90.0 <= lat_f <= 90.0 and -180.0 <= lon_f <= 180.0):
        return False
    return not (lat_f == 0.0 and lon_f == 0.0)


def format_distance(meters: float) -> str:
    """Render a distance for display: `850 m` below one kilometer, `1.2 km` above."""
    if meters >= 1000:
        return f"{meters / 1000:.1f} km"
    return f"{round(meters)} m"


def centroid(points: Iterable[GeoPoint]) -> GeoPoint:
    pts = list(points)
    if not pts:
        raise ValueError("Cannot calculate centroid of an empty point list")
    return GeoPoint(
        lat=sum(p.lat for p in pts) / len(pts),
        lon=sum(p.lon for p in pts) / len(pts),
    )
