"""
Clock helpers.

Proximity tracking compares event timestamps against policy windows. The clock
is injected so that ordering between trigger sources can be asserted in tests
without sleeping.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def monotonic(self) -> float:
        """Seconds from an arbitrary, non-decreasing origin."""
        ...


class SystemClock:
    def monotonic(self) -> float:
        return time.monotonic()


def utc_now() -> datetime:
    """Timezone-aware current time (UTC), used for persisted `updated_at` stamps."""
    return datetime.now(timezone.utc)
