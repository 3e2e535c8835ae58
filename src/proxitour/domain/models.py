"""
Domain models (Pydantic).

These types are the contract between the catalog, the proximity core, the
settings store and the API/CLI:
- `Landmark`: a named point of interest (coordinates are `(longitude, latitude)`)
- `UserLocation`: the latest device position
- `ProximitySettings`: per-user persisted preference
- `NearbyLandmark` / `ProximityAlert`: derived, never persisted

Landmark coordinates are deliberately not range-checked here: bad rows must
reach the radius filter, which drops and logs them.
"""

from __future__ import annotations

import time
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from proxitour.core.geo import GeoPoint as CoreGeoPoint


class Landmark(BaseModel):
    """A point of interest from a static list or an AI-generated tour."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    name: str
    coordinates: tuple[float, float]
    description: str = ""

    rating: float | None = Field(default=None, ge=0, le=5)
    photos: list[str] = Field(default_factory=list)
    types: list[str] = Field(default_factory=list)
    place_id: str | None = None
    formatted_address: str | None = None
    tour_id: str | None = None

    @property
    def longitude(self) -> float:
        return self.coordinates[0]

    @property
    def latitude(self) -> float:
        return self.coordinates[1]

    @property
    def key(self) -> str:
        """Stable identity used for cooldown bookkeeping."""
        return self.id or self.place_id or self.name


class UserLocation(BaseModel):
    """A device position in decimal degrees."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    accuracy: float | None = Field(default=None, ge=0)
    timestamp: float = Field(default_factory=time.time)

    def point(self) -> CoreGeoPoint:
        return CoreGeoPoint(lat=self.latitude, lon=self.longitude)


class ProximitySettings(BaseModel):
    """Per-user proximity preference (persisted, last writer wins)."""

    user_id: str = Field(..., min_length=1)
    is_enabled: bool = False
    notification_distance: float = Field(1000, gt=0)
    outer_distance: float = Field(250, gt=0)
    card_distance: float = Field(100, gt=0)

    grace_period_enabled: bool = True
    grace_period_initialization_s: float = Field(15, ge=5, le=60)
    grace_period_movement_s: float = Field(8, ge=3, le=30)
    grace_period_app_resume_s: float = Field(5, ge=2, le=15)
    significant_movement_threshold_m: float = Field(150, ge=50, le=500)

    updated_at: datetime | None = None

    @model_validator(mode="after")
    def _tiers_nested(self) -> "ProximitySettings":
        if not self.card_distance <= self.outer_distance <= self.notification_distance:
            raise ValueError(
                "tier distances must satisfy card_distance <= outer_distance <= notification_distance "
                f"(got {self.card_distance}, {self.outer_distance}, {self.notification_distance})"
            )
        return self


class NearbyLandmark(BaseModel):
    """A landmark paired with its distance from the current location."""

    landmark: Landmark
    distance_m: float


class ProximityTier(str, Enum):
    CARD = "card"
    ROUTE = "route"
    TOAST = "toast"


class ProximityAlert(BaseModel):
    landmark: Landmark
    distance_m: float
    tier: ProximityTier
    triggered_at: float


class NearbyQuery(BaseModel):
    """API/CLI request payload for a nearby-landmarks lookup."""

    location: UserLocation
    radius_m: float | None = Field(default=None, gt=0)
    max_results: int | None = Field(default=None, ge=1, le=200)
    settings_overrides: dict[str, Any] | None = None


class NearbyResult(BaseModel):
    radius_m: float
    results: list[NearbyLandmark]
    suggestions: list[NearbyLandmark] = Field(default_factory=list)
    meta: dict[str, Any] = Field(default_factory=dict)
