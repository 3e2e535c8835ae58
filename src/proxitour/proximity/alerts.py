"""
Multi-tier proximity alerts.

Each nearby landmark falls into the innermost tier it reaches:
- `card`:  within `card_distance` (floating landmark card)
- `route`: within `outer_distance` (route preview / Street View prep)
- `toast`: within `notification_distance` (plain notification)

A landmark alerts at most once per cooldown, and nothing alerts while a grace
period is running.
"""

from __future__ import annotations

import logging
from typing import Sequence

from proxitour.config.settings import ProximityDefaults
from proxitour.core.geo import format_distance
from proxitour.core.time import Clock, SystemClock
from proxitour.domain.models import (
    Landmark,
    ProximityAlert,
    ProximitySettings,
    ProximityTier,
    UserLocation,
)
from proxitour.proximity.grace import GracePeriod, GraceReason
from proxitour.proximity.nearby import find_nearby_landmarks

logger = logging.getLogger(__name__)


def classify_tier(distance_m: float, settings: ProximitySettings) -> ProximityTier | None:
    if distance_m <= settings.card_distance:
        return ProximityTier.CARD
    if distance_m <= settings.outer_distance:
        return ProximityTier.ROUTE
    if distance_m <= settings.notification_distance:
        return ProximityTier.TOAST
    return None


class ProximityMonitor:
    def __init__(
        self,
        settings: ProximitySettings,
        *,
        cooldown_s: float = 30 * 60,
        clock: Clock | None = None,
        grace: GracePeriod | None = None,
    ):
        self._settings = settings
        self._cooldown_s = float(cooldown_s)
        self._clock = clock or SystemClock()
        self._grace = grace or GracePeriod(settings, clock=self._clock)
        self._last_alert: dict[str, float] = {}

    @classmethod
    def from_settings(
        cls,
        settings: ProximitySettings,
        defaults: ProximityDefaults,
        *,
        clock: Clock | None = None,
        grace: GracePeriod | None = None,
    ) -> "ProximityMonitor":
        """Monitor for one user, with the cooldown taken from the `proximity` config section."""
        return cls(settings, cooldown_s=defaults.alert_cooldown_s, clock=clock, grace=grace)

    @property
    def cooldown_s(self) -> float:
        return self._cooldown_s

    @property
    def settings(self) -> ProximitySettings:
        return self._settings

    @property
    def grace(self) -> GracePeriod:
        return self._grace

    def update_settings(self, settings: ProximitySettings) -> None:
        """Swap settings; switching proximity on starts the initialization grace period."""
        was_enabled = self._settings.is_enabled
        self._settings = settings
        self._grace.update_settings(settings)
        if settings.is_enabled and not was_enabled:
            self._grace.start(GraceReason.INITIALIZATION)
        elif not settings.is_enabled:
            self._grace.clear()
            self._last_alert.clear()

    def reset_cooldowns(self) -> None:
        self._last_alert.clear()

    def update(self, location: UserLocation | None, landmarks: Sequence[Landmark]) -> list[ProximityAlert]:
        if not self._settings.is_enabled or location is None:
            return []

        self._grace.on_movement(location)
        nearby = find_nearby_landmarks(location, landmarks, self._settings.notification_distance)
        if not nearby:
            return []
        if self._grace.active():
            logger.debug("Muting %d nearby landmarks during %s grace period", len(nearby), self._grace.reason)
            return []

        now = self._clock.monotonic()
        alerts: list[ProximityAlert] = []
        for item in nearby:
            tier = classify_tier(item.distance_m, self._settings)
            if tier is None:
                continue
            key = item.landmark.key
            last = self._last_alert.get(key)
            if last is not None and now - last < self._cooldown_s:
                continue
            self._last_alert[key] = now
            alerts.append(
                ProximityAlert(landmark=item.landmark, distance_m=item.distance_m, tier=tier, triggered_at=now)
            )
            logger.info("Proximity alert: %s at %s (%s)", item.landmark.name, format_distance(item.distance_m), tier.value)
        return alerts
