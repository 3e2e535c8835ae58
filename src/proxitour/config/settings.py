# src/proxitour/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/proxitour/config/defaults.yaml`, then optionally overridden by:
- an external YAML file via `PROXITOUR_CONFIG_PATH`
- environment variables (e.g., `PROXITOUR_LOG_LEVEL`, `PROXITOUR_PHOTO_API_KEY`)

Design rule:
- Tuning knobs (radii, cooldowns, debounce windows) live in YAML, not in business logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any
from proxitour.core.env import load_dotenv_if_present

import yaml
from pydantic import BaseModel, Field


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `proxitour.config`."""
    text = resources.files("proxitour.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    log_level: str = "INFO"
    http_timeout_seconds: float = 10


class CatalogSettings(BaseModel):
    path: str = "data/catalogs/landmarks.json"


class StorageSettings(BaseModel):
    settings_path: str = ".data/proximity_settings.json"


class ProximityDefaults(BaseModel):
    """Values applied to users that have no persisted proximity settings yet."""

    notification_distance_m: float = Field(1000, gt=0)
    outer_distance_m: float = Field(250, gt=0)
    card_distance_m: float = Field(100, gt=0)
    alert_cooldown_s: float = Field(30 * 60, ge=0)
    suggestion_factor: float = Field(3.0, gt=1)
    max_results: int = Field(50, ge=1)


class TrackingSettings(BaseModel):
    # Settings-driven sync is skipped for this long after a user locate action.
    user_sync_window_s: float = Field(2.0, ge=0)


class PhotoSettings(BaseModel):
    api_key: str | None = None
    base_url: str = "https://places.googleapis.com/v1"
    max_size: int = Field(500, ge=1)
    valid_ttl_s: float = Field(30 * 60, gt=0)
    invalid_ttl_s: float = Field(5 * 60, gt=0)
    probe: bool = False


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    proximity: ProximityDefaults = Field(default_factory=ProximityDefaults)
    tracking: TrackingSettings = Field(default_factory=TrackingSettings)
    photos: PhotoSettings = Field(default_factory=PhotoSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("PROXITOUR_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    catalog_path = os.getenv("PROXITOUR_CATALOG_PATH")
    if catalog_path:
        data.setdefault("catalog", {})["path"] = catalog_path

    store_path = os.getenv("PROXITOUR_SETTINGS_STORE")
    if store_path:
        data.setdefault("storage", {})["settings_path"] = store_path

    api_key = os.getenv("PROXITOUR_PHOTO_API_KEY")
    if api_key:
        data.setdefault("photos", {})["api_key"] = api_key

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("PROXITOUR_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
