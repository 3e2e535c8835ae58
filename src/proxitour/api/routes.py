"""
API routes.

Endpoints:
- GET  `/api/health`: liveness.
- GET  `/api/landmarks`: current landmark catalog.
- POST `/api/nearby`: landmarks within a radius of a location, nearest first.
- GET  `/api/settings/{user_id}`: a user's proximity settings (defaults if never saved).
- PUT  `/api/settings/{user_id}`: upsert a user's proximity settings (last writer wins).
- GET  `/api/photos`: resolve a Places photo resource name to a media URL.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from proxitour.catalog.loader import LandmarkCatalog
from proxitour.config.overrides import apply_settings_overrides
from proxitour.config.settings import get_settings
from proxitour.core.env import resolve_project_path
from proxitour.domain.models import Landmark, NearbyQuery, NearbyResult, ProximitySettings
from proxitour.photos import PhotoResolver, PhotoUrlCache
from proxitour.proximity.nearby import find_nearby_landmarks, suggest_beyond_radius
from proxitour.storage.settings_store import JsonFileSettingsStore, SettingsStore

router = APIRouter()


class SettingsUpdate(BaseModel):
    """Partial settings update; omitted fields keep their stored value."""

    is_enabled: bool | None = None
    notification_distance: float | None = Field(default=None, gt=0)
    outer_distance: float | None = Field(default=None, gt=0)
    card_distance: float | None = Field(default=None, gt=0)
    grace_period_enabled: bool | None = None


@lru_cache
def _catalog() -> LandmarkCatalog:
    settings = get_settings()
    return LandmarkCatalog.from_file(settings.catalog.path)


@lru_cache
def _store() -> SettingsStore:
    settings = get_settings()
    return JsonFileSettingsStore(
        resolve_project_path(settings.storage.settings_path), defaults=settings.proximity
    )


@lru_cache
def _photo_resolver() -> PhotoResolver:
    settings = get_settings()
    return PhotoResolver(
        settings.photos,
        PhotoUrlCache.from_settings(settings.photos),
        timeout_seconds=settings.app.http_timeout_seconds,
    )


def _validation_error(e: ValueError) -> HTTPException:
    return HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": str(e)})


@router.get("/api/health")
def get_health() -> dict:
    return {"status": "ok"}


@router.get("/api/landmarks", response_model=list[Landmark])
def get_landmarks() -> list[Landmark]:
    return _catalog().all()


@router.post("/api/nearby", response_model=NearbyResult)
def post_nearby(query: NearbyQuery) -> NearbyResult:
    """Radius-filtered, nearest-first landmarks for a single location fix."""
    try:
        settings = apply_settings_overrides(get_settings(), query.settings_overrides)
    except ValueError as e:
        raise _validation_error(e) from e

    cfg = settings.proximity
    radius = float(query.radius_m or cfg.notification_distance_m)
    landmarks = _catalog().all()
    results = find_nearby_landmarks(
        query.location, landmarks, radius, max_results=query.max_results or cfg.max_results
    )
    suggestions = suggest_beyond_radius(query.location, landmarks, radius, factor=cfg.suggestion_factor)
    return NearbyResult(
        radius_m=radius,
        results=results,
        suggestions=suggestions[: cfg.max_results],
        meta={"landmark_count": len(landmarks)},
    )


@router.get("/api/settings/{user_id}", response_model=ProximitySettings)
def get_proximity_settings(user_id: str) -> ProximitySettings:
    return _store().get_or_default(user_id)


@router.put("/api/settings/{user_id}", response_model=ProximitySettings)
def put_proximity_settings(user_id: str, update: SettingsUpdate) -> ProximitySettings:
    store = _store()
    current = store.get_or_default(user_id)
    changes: dict[str, Any] = update.model_dump(exclude_none=True)
    try:
        merged = ProximitySettings.model_validate({**current.model_dump(), **changes})
    except ValueError as e:
        raise _validation_error(e) from e
    return store.upsert(merged)


@router.get("/api/photos")
def get_photo(name: str, max_width_px: int = 800) -> dict:
    if not 1 <= max_width_px <= 4800:
        raise HTTPException(
            status_code=400,
            detail={"code": "VALIDATION_ERROR", "message": "max_width_px must be 1-4800"},
        )
    resolver = _photo_resolver()
    url = resolver.resolve(name, max_width_px)
    if url is None:
        raise HTTPException(status_code=404, detail={"code": "PHOTO_UNAVAILABLE", "message": name})
    return {"name": name, "url": url, "cache": resolver.cache.stats.as_dict()}
