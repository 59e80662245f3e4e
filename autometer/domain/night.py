"""Night window: 22:00 up to (not including) 05:00 local time."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

NIGHT_START_HOUR = 22
NIGHT_END_HOUR = 5


def is_night(now: Optional[datetime] = None) -> bool:
    """True when the local wall-clock hour falls in the night window."""
    hour = (now or datetime.now()).hour
    return hour >= NIGHT_START_HOUR or hour < NIGHT_END_HOUR
