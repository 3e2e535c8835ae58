"""
Alert grace periods.

Right after proximity is switched on, after a significant jump in position, or
after the app returns from the background, the first location fixes are
unreliable. A grace period mutes alerts for a few seconds in those cases.
Durations come from the user's `ProximitySettings`.
"""

from __future__ import annotations

import logging
from enum import Enum

from proxitour.core.geo import haversine_m
from proxitour.core.time import Clock, SystemClock
from proxitour.domain.models import ProximitySettings, UserLocation

logger = logging.getLogger(__name__)

BACKGROUND_DETECTION_S = 10.0

PRESETS: dict[str, dict[str, float]] = {
    "conservative": {
        "grace_period_initialization_s": 20,
        "grace_period_movement_s": 12,
        "grace_period_app_resume_s": 8,
        "significant_movement_threshold_m": 200,
    },
    "balanced": {
        "grace_period_initialization_s": 15,
        "grace_period_movement_s": 8,
        "grace_period_app_resume_s": 5,
        "significant_movement_threshold_m": 150,
    },
    "aggressive": {
        "grace_period_initialization_s": 10,
        "grace_period_movement_s": 5,
        "grace_period_app_resume_s": 3,
        "significant_movement_threshold_m": 100,
    },
}


class GraceReason(str, Enum):
    INITIALIZATION = "initialization"
    MOVEMENT = "movement"
    APP_RESUME = "app_resume"


def preset_name(settings: ProximitySettings | None) -> str:
    """Name of the preset matching `settings`, `balanced` for None, else `custom`."""
    if settings is None:
        return "balanced"
    for name, values in PRESETS.items():
        if all(getattr(settings, k) == v for k, v in values.items()):
            return name
    return "custom"


def apply_preset(settings: ProximitySettings, name: str) -> ProximitySettings:
    if name not in PRESETS:
        raise ValueError(f"Unknown grace period preset '{name}'")
    return settings.model_copy(update=PRESETS[name])


class GracePeriod:
    def __init__(self, settings: ProximitySettings, *, clock: Clock | None = None):
        self._settings = settings
        self._clock = clock or SystemClock()
        self._until: float | None = None
        self._reason: GraceReason | None = None
        self._anchor: UserLocation | None = None

    @property
    def reason(self) -> GraceReason | None:
        return self._reason if self.active() else None

    def update_settings(self, settings: ProximitySettings) -> None:
        self._settings = settings

    def _duration(self, reason: GraceReason) -> float:
        s = self._settings
        if reason is GraceReason.INITIALIZATION:
            return s.grace_period_initialization_s
        if reason is GraceReason.MOVEMENT:
            return s.grace_period_movement_s
        return s.grace_period_app_resume_s

    def active(self) -> bool:
        return self._until is not None and self._clock.monotonic() < self._until

    def start(self, reason: GraceReason) -> bool:
        """Start a grace period; returns False when disabled or one is already running."""
        if not self._settings.grace_period_enabled or self.active():
            return False
        self._until = self._clock.monotonic() + self._duration(reason)
        self._reason = reason
        logger.debug("Grace period started (%s) for %.0fs", reason.value, self._duration(reason))
        return True

    def clear(self) -> None:
        self._until = None
        self._reason = None

    def on_movement(self, location: UserLocation) -> bool:
        """Start a movement grace period if the user jumped far enough since the last fix."""
        anchor = self._anchor
        self._anchor = location
        if anchor is None:
            return False
        moved = haversine_m(anchor.point(), location.point())
        if moved < self._settings.significant_movement_threshold_m:
            return False
        return self.start(GraceReason.MOVEMENT)

    def on_resume(self, background_s: float) -> bool:
        if background_s < BACKGROUND_DETECTION_S:
            return False
        return self.start(GraceReason.APP_RESUME)
