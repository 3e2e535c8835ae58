"""
Nearby-landmark computation.

Pipeline: drop landmarks with unusable coordinates, compute great-circle
distance from the user, keep those within the radius, rank nearest-first.
Re-run on every location or landmark-set change; nothing here is cached.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from proxitour.core.geo import GeoPoint, haversine_m, is_valid_coordinate
from proxitour.domain.models import Landmark, NearbyLandmark, UserLocation

logger = logging.getLogger(__name__)


def _valid_landmarks(landmarks: Iterable[Landmark]) -> list[Landmark]:
    out: list[Landmark] = []
    for lm in landmarks:
        if is_valid_coordinate(lm.latitude, lm.longitude):
            out.append(lm)
        else:
            logger.warning("Skipping landmark %r with invalid coordinates %s", lm.name, lm.coordinates)
    return out


def _with_distances(location: UserLocation, landmarks: Iterable[Landmark]) -> list[NearbyLandmark]:
    origin = location.point()
    return [
        NearbyLandmark(
            landmark=lm,
            distance_m=haversine_m(origin, GeoPoint(lat=lm.latitude, lon=lm.longitude)),
        )
        for lm in _valid_landmarks(landmarks)
    ]


def filter_within_radius(
    location: UserLocation, landmarks: Iterable[Landmark], radius_m: float
) -> list[NearbyLandmark]:
    """Return landmarks within `radius_m` meters of `location` (order unspecified)."""
    r = float(radius_m)
    return [n for n in _with_distances(location, landmarks) if n.distance_m <= r]


def rank_nearest(items: Iterable[NearbyLandmark]) -> list[NearbyLandmark]:
    """Stable ascending sort by distance."""
    return sorted(items, key=lambda n: n.distance_m)


def find_nearby_landmarks(
    location: UserLocation | None,
    landmarks: Sequence[Landmark],
    radius_m: float,
    *,
    max_results: int | None = None,
) -> list[NearbyLandmark]:
    """Filter + rank. No location or no landmarks is an empty result, not an error."""
    if location is None or not landmarks:
        return []
    ranked = rank_nearest(filter_within_radius(location, landmarks, radius_m))
    if max_results is not None:
        ranked = ranked[: max(0, int(max_results))]
    logger.debug("%d of %d landmarks within %.0f m", len(ranked), len(landmarks), radius_m)
    return ranked


def find_nearest(location: UserLocation | None, landmarks: Sequence[Landmark]) -> NearbyLandmark | None:
    if location is None:
        return None
    best: NearbyLandmark | None = None
    for n in _with_distances(location, landmarks):
        if best is None or n.distance_m < best.distance_m:
            best = n
    return best


def suggest_beyond_radius(
    location: UserLocation | None,
    landmarks: Sequence[Landmark],
    radius_m: float,
    *,
    factor: float = 3.0,
) -> list[NearbyLandmark]:
    """Landmarks just outside the radius (up to `radius * factor`), nearest first."""
    if location is None or not landmarks:
        return []
    outer = float(radius_m) * float(factor)
    ring = [n for n in _with_distances(location, landmarks) if float(radius_m) < n.distance_m <= outer]
    return rank_nearest(ring)
