import pytest
from pydantic import ValidationError

from proxitour.domain.models import ProximitySettings, UserLocation
from proxitour.proximity.grace import GracePeriod, GraceReason, apply_preset, preset_name


def _settings(**kw) -> ProximitySettings:
    return ProximitySettings(user_id="u1", is_enabled=True, **kw)


def test_grace_period_expires(clock):
    grace = GracePeriod(_settings(grace_period_initialization_s=15), clock=clock)
    assert grace.start(GraceReason.INITIALIZATION)
    clock.advance(14)
    assert grace.active()
    clock.advance(1)
    assert not grace.active()
    assert grace.reason is None


def test_grace_periods_do_not_overlap(clock):
    grace = GracePeriod(_settings(), clock=clock)
    assert grace.start(GraceReason.INITIALIZATION)
    assert not grace.start(GraceReason.MOVEMENT)
    assert grace.reason is GraceReason.INITIALIZATION


def test_disabled_grace_never_starts(clock):
    grace = GracePeriod(_settings(grace_period_enabled=False), clock=clock)
    assert not grace.start(GraceReason.INITIALIZATION)
    assert not grace.active()


def test_significant_movement_starts_grace(clock):
    grace = GracePeriod(_settings(significant_movement_threshold_m=150), clock=clock)
    assert not grace.on_movement(UserLocation(latitude=19.4326, longitude=-99.1328))
    # ~110 m north: below threshold.
    assert not grace.on_movement(UserLocation(latitude=19.4336, longitude=-99.1328))
    # ~1.1 km further north.
    assert grace.on_movement(UserLocation(latitude=19.4436, longitude=-99.1328))
    assert grace.reason is GraceReason.MOVEMENT


def test_resume_needs_real_backgrounding(clock):
    grace = GracePeriod(_settings(), clock=clock)
    assert not grace.on_resume(3)
    assert grace.on_resume(30)
    assert grace.reason is GraceReason.APP_RESUME


def test_presets_round_trip():
    s = _settings()
    assert preset_name(s) == "balanced"
    assert preset_name(apply_preset(s, "aggressive")) == "aggressive"
    assert preset_name(s.model_copy(update={"grace_period_movement_s": 9})) == "custom"
    assert preset_name(None) == "balanced"
    with pytest.raises(ValueError):
        apply_preset(s, "reckless")


def test_grace_ranges_are_validated():
    with pytest.raises(ValidationError):
        _settings(grace_period_initialization_s=2)
    with pytest.raises(ValidationError):
        _settings(significant_movement_threshold_m=1000)
