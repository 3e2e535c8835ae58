from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from proxitour.config.settings import ProximityDefaults
from proxitour.core.time import utc_now
from proxitour.domain.models import ProximitySettings

"""
Per-user proximity settings persistence.

Writes are read-modify-write upserts with last-writer-wins semantics; there is
no version check. Two backends:
- `InMemorySettingsStore`: process-local, used by tests and the tracking adapter demos.
- `JsonFileSettingsStore`: one JSON document keyed by user id, written via a
  temporary file + atomic replace so readers never see a partial file.
"""

logger = logging.getLogger(__name__)


class SettingsStore(Protocol):
    def get(self, user_id: str) -> ProximitySettings | None: ...

    def upsert(self, settings: ProximitySettings) -> ProximitySettings: ...

    def get_or_default(self, user_id: str) -> ProximitySettings: ...


def default_settings(user_id: str, defaults: ProximityDefaults | None = None) -> ProximitySettings:
    """Settings for a user that never saved any (proximity starts disabled)."""
    d = defaults or ProximityDefaults()
    return ProximitySettings(
        user_id=user_id,
        is_enabled=False,
        notification_distance=d.notification_distance_m,
        outer_distance=d.outer_distance_m,
        card_distance=d.card_distance_m,
    )


class InMemorySettingsStore:
    def __init__(self, defaults: ProximityDefaults | None = None):
        self._rows: dict[str, ProximitySettings] = {}
        self._defaults = defaults
        self.writes = 0

    def get(self, user_id: str) -> ProximitySettings | None:
        return self._rows.get(user_id)

    def upsert(self, settings: ProximitySettings) -> ProximitySettings:
        stamped = settings.model_copy(update={"updated_at": utc_now()})
        self._rows[stamped.user_id] = stamped
        self.writes += 1
        return stamped

    def get_or_default(self, user_id: str) -> ProximitySettings:
        return self.get(user_id) or default_settings(user_id, self._defaults)


class JsonFileSettingsStore:
    """A filesystem-backed store: `{user_id: settings}` in a single JSON file."""

    def __init__(self, path: Path, defaults: ProximityDefaults | None = None):
        self._path = path
        self._defaults = defaults

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, dict]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.error("Settings store %s is not valid JSON; treating as empty", self._path)
            return {}
        if not isinstance(raw, dict):
            return {}
        return {k: v for k, v in raw.items() if isinstance(k, str) and isinstance(v, dict)}

    def get(self, user_id: str) -> ProximitySettings | None:
        row = self._read_all().get(user_id)
        if row is None:
            return None
        return ProximitySettings.model_validate(row)

    def upsert(self, settings: ProximitySettings) -> ProximitySettings:
        stamped = settings.model_copy(update={"updated_at": utc_now()})
        rows = self._read_all()
        rows[stamped.user_id] = stamped.model_dump(mode="json")

        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(rows, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self._path)
        logger.debug("Saved proximity settings for %s (enabled=%s)", stamped.user_id, stamped.is_enabled)
        return stamped

    def get_or_default(self, user_id: str) -> ProximitySettings:
        return self.get(user_id) or default_settings(user_id, self._defaults)
