"""
Landmark catalog.

Landmarks come from a local JSON file (default: `data/catalogs/landmarks.json`)
or from a generated tour. `LandmarkCatalog` is the single holder of the current
tour: it is passed to whoever needs it instead of living as module state.
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Iterable

from pydantic import TypeAdapter

from proxitour.core.env import resolve_project_path
from proxitour.domain.models import Landmark

logger = logging.getLogger(__name__)

_LANDMARKS_ADAPTER = TypeAdapter(list[Landmark])


def load_landmarks(path: str | Path) -> list[Landmark]:
    """Load and validate a landmark catalog JSON file."""
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))
    return _LANDMARKS_ADAPTER.validate_python(payload)


def _usable(landmark: Landmark) -> bool:
    if not landmark.name.strip():
        return False
    return not any(math.isnan(c) for c in landmark.coordinates)


class LandmarkCatalog:
    def __init__(self, landmarks: Iterable[Landmark] = ()):
        self._landmarks: list[Landmark] = []
        self.replace(landmarks)

    @classmethod
    def from_file(cls, path: str | Path) -> "LandmarkCatalog":
        return cls(load_landmarks(path))

    def replace(self, landmarks: Iterable[Landmark]) -> int:
        """Swap in a new tour; returns how many landmarks were kept."""
        kept: list[Landmark] = []
        for lm in landmarks:
            if not _usable(lm):
                logger.warning("Dropping unusable landmark %r %s", lm.name, lm.coordinates)
                continue
            if lm.id is None and lm.place_id:
                lm = lm.model_copy(update={"id": lm.place_id})
            kept.append(lm)
        self._landmarks = kept
        logger.info("Landmark catalog set: %d landmarks", len(kept))
        return len(kept)

    def clear(self) -> None:
        self._landmarks = []

    def all(self) -> list[Landmark]:
        return list(self._landmarks)

    def get(self, landmark_id: str) -> Landmark | None:
        for lm in self._landmarks:
            if lm.id == landmark_id:
                return lm
        return None

    def __len__(self) -> int:
        return len(self._landmarks)
