from __future__ import annotations

import pytest

from proxitour.config.settings import get_settings
from proxitour.config.overrides import apply_settings_overrides


def test_apply_settings_overrides_returns_same_object_when_none():
    settings = get_settings()
    assert apply_settings_overrides(settings, None) is settings
    assert apply_settings_overrides(settings, {}) is settings


def test_apply_settings_overrides_can_override_proximity_knobs():
    settings = get_settings()
    out = apply_settings_overrides(
        settings,
        {"proximity": {"notification_distance_m": 1234}, "tracking": {"user_sync_window_s": 3.0}},
    )
    assert out.proximity.notification_distance_m == 1234
    assert out.tracking.user_sync_window_s == 3.0
    # The shared cached settings must not change.
    assert settings.proximity.notification_distance_m != 1234


def test_apply_settings_overrides_rejects_disallowed_keys_with_clear_path():
    settings = get_settings()
    with pytest.raises(ValueError, match=r"disallowed key: 'storage'"):
        apply_settings_overrides(settings, {"storage": {"settings_path": "/etc/passwd"}})
    with pytest.raises(ValueError, match=r"photos"):
        apply_settings_overrides(settings, {"photos": {"api_key": "stolen"}})


def test_apply_settings_overrides_rejects_wrong_value_shapes_for_restricted_subtrees():
    settings = get_settings()
    with pytest.raises(ValueError, match=r"settings_overrides key 'tracking' must be a mapping"):
        apply_settings_overrides(settings, {"tracking": 1})


def test_apply_settings_overrides_revalidates_ranges():
    settings = get_settings()
    with pytest.raises(ValueError):
        apply_settings_overrides(settings, {"proximity": {"notification_distance_m": -5}})
