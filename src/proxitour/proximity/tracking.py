"""
Geolocation tracking adapter.

Keeps the persisted `ProximitySettings.is_enabled` flag consistent with whether
the map's live-location tracking is running, in both directions:

- user presses the locate button  -> tracking toggles, the flag follows
- the flag changes in settings    -> tracking is started/stopped to match
- the provider starts/ends/fails  -> the flag follows

Two rules keep this from oscillating:

1. Every start/stop the adapter issues queues the provider event it expects
   back (the "echo"). Echoes are consumed in order and never write settings,
   so a settings-driven stop cannot disable settings a second time, and a
   quick start-then-stop does not replay as two outside events.
2. Settings-driven sync is suppressed for `user_sync_window_s` after a user
   locate action, so a stale settings read cannot undo what the user just did.

Each handler returns a `SyncDecision` so the outcome is observable without
relying on timing. The window is a policy knob, not a proof of race freedom:
two writers that both miss the window still resolve last-writer-wins in the
settings store.
"""

from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import Callable, Protocol

from proxitour.config.settings import TrackingSettings
from proxitour.core.time import Clock, SystemClock
from proxitour.domain.models import UserLocation
from proxitour.storage.settings_store import SettingsStore

logger = logging.getLogger(__name__)


class TrackingState(str, Enum):
    IDLE = "idle"
    TRACKING = "tracking"


class TriggerSource(str, Enum):
    USER = "user"
    SETTINGS = "settings"
    PROVIDER = "provider"


class SyncDecision(str, Enum):
    APPLIED = "applied"
    SUPPRESSED = "suppressed"
    ECHO = "echo"
    NOOP = "noop"
    IGNORED = "ignored"


class LocationControl(Protocol):
    """The map provider's live-location control."""

    def start(self) -> None: ...

    def stop(self) -> None: ...


class TrackingAdapter:
    def __init__(
        self,
        control: LocationControl,
        store: SettingsStore,
        user_id: str,
        *,
        policy: TrackingSettings | None = None,
        clock: Clock | None = None,
        notify: Callable[[str], None] | None = None,
    ):
        self._control = control
        self._store = store
        self._user_id = user_id
        self._policy = policy or TrackingSettings()
        self._clock = clock or SystemClock()
        self._notify = notify

        self._state = TrackingState.IDLE
        # Transitions we issued whose provider report has not arrived yet, oldest first.
        self._pending_echoes: deque[TrackingState] = deque()
        self._last_event: dict[TriggerSource, float] = {}
        self.location: UserLocation | None = None
        self.last_error: str | None = None

    @property
    def state(self) -> TrackingState:
        return self._state

    def last_event_at(self, source: TriggerSource) -> float | None:
        return self._last_event.get(source)

    def _mark(self, source: TriggerSource) -> float:
        now = self._clock.monotonic()
        self._last_event[source] = now
        return now

    def _within_user_window(self, now: float) -> bool:
        last_user = self._last_event.get(TriggerSource.USER)
        return last_user is not None and now - last_user < self._policy.user_sync_window_s

    def _drive(self, target: TrackingState) -> None:
        # The provider will report this transition back; that report is the echo.
        self._pending_echoes.append(target)
        self._state = target
        if target is TrackingState.TRACKING:
            self._control.start()
        else:
            self._control.stop()

    def _persist(self, enabled: bool, source: TriggerSource) -> bool:
        current = self._store.get_or_default(self._user_id)
        if current.is_enabled == enabled:
            return False
        self._store.upsert(current.model_copy(update={"is_enabled": enabled}))
        logger.info("Proximity %s for %s (%s)", "enabled" if enabled else "disabled", self._user_id, source.value)
        return True

    def user_locate(self) -> SyncDecision:
        """User pressed the locate button: toggle tracking, the flag follows."""
        self._mark(TriggerSource.USER)
        target = TrackingState.IDLE if self._state is TrackingState.TRACKING else TrackingState.TRACKING
        self._drive(target)
        self._persist(target is TrackingState.TRACKING, TriggerSource.USER)
        return SyncDecision.APPLIED

    def settings_changed(self, enabled: bool) -> SyncDecision:
        """The persisted flag changed: start/stop tracking to match."""
        now = self._clock.monotonic()
        if self._within_user_window(now):
            logger.debug("Skipping settings sync for %s: recent user locate action", self._user_id)
            return SyncDecision.SUPPRESSED

        target = TrackingState.TRACKING if enabled else TrackingState.IDLE
        if self._state is target:
            return SyncDecision.NOOP

        self._mark(TriggerSource.SETTINGS)
        self._drive(target)
        logger.info("Tracking %s from settings for %s", target.value, self._user_id)
        return SyncDecision.APPLIED

    def _provider_transition(self, target: TrackingState) -> SyncDecision:
        self._mark(TriggerSource.PROVIDER)
        if target in self._pending_echoes:
            # A provider may coalesce quick toggles; transitions it skipped are dropped too.
            while self._pending_echoes.popleft() is not target:
                pass
            # `_state` already holds the most recent transition we issued.
            return SyncDecision.ECHO

        self._pending_echoes.clear()
        if self._state is target:
            return SyncDecision.NOOP
        self._state = target
        self._persist(target is TrackingState.TRACKING, TriggerSource.PROVIDER)
        return SyncDecision.APPLIED

    def tracking_started(self) -> SyncDecision:
        return self._provider_transition(TrackingState.TRACKING)

    def tracking_ended(self) -> SyncDecision:
        return self._provider_transition(TrackingState.IDLE)

    def position(self, location: UserLocation) -> SyncDecision:
        if self._state is TrackingState.IDLE:
            return SyncDecision.IGNORED
        self.location = location
        self.last_error = None
        return SyncDecision.APPLIED

    def error(self, reason: str) -> SyncDecision:
        """Provider failure (permission denied, timeout): disable, surface, no retry."""
        self._mark(TriggerSource.PROVIDER)
        logger.warning("Location provider error for %s: %s", self._user_id, reason)
        self._pending_echoes.clear()
        self._state = TrackingState.IDLE
        self.last_error = reason
        self._persist(False, TriggerSource.PROVIDER)
        if self._notify is not None:
            self._notify(reason)
        return SyncDecision.APPLIED
