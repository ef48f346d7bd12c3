"""
Epoch-second timestamps for claims.

Standard: claims store Unix epoch seconds (``iat``, ``nbf``, ``exp``).
"Now" always comes from a ``Clock`` so day-offset logic can be tested with
a ``FixedClock``.

Usage:
    from wascap.timestamps import SystemClock, days_from_now, format_epoch

    exp = days_from_now(30)                 # now + 30 * 86400
    nbf = days_from_now(None)               # None (no constraint)
    display = format_epoch(exp, SystemClock())
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Protocol

SECS_PER_DAY = 86400


class Clock(Protocol):
    def now(self) -> int:
        """Current time in whole seconds since the Unix epoch."""
        ...


class SystemClock:
    def now(self) -> int:
        return int(time.time())


@dataclass(frozen=True)
class FixedClock:
    """A clock pinned to one instant."""
    epoch_seconds: int

    def now(self) -> int:
        return self.epoch_seconds


DEFAULT_CLOCK: Clock = SystemClock()


def days_from_now(days: Optional[int], clock: Clock = DEFAULT_CLOCK) -> Optional[int]:
    """Absolute epoch seconds *days* from now, or None when *days* is None."""
    if days is None:
        return None
    if days < 0:
        raise ValueError(f"day offset must be non-negative, got {days}")
    return clock.now() + days * SECS_PER_DAY


def to_datetime(epoch_seconds: int) -> datetime:
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)


def format_relative(epoch_seconds: int, clock: Clock = DEFAULT_CLOCK) -> str:
    """Format a timestamp relative to now (e.g. 'in 3 days', '5 minutes ago')."""
    seconds = epoch_seconds - clock.now()
    future = seconds > 0
    seconds = abs(seconds)

    if seconds < 60:
        return "now"
    elif seconds < 3600:
        n, unit = int(seconds / 60), "minute"
    elif seconds < SECS_PER_DAY:
        n, unit = int(seconds / 3600), "hour"
    else:
        n, unit = int(seconds / SECS_PER_DAY), "day"

    phrase = f"{n} {unit}{'s' if n != 1 else ''}"
    return f"in {phrase}" if future else f"{phrase} ago"


def format_epoch(epoch_seconds: int, clock: Clock = DEFAULT_CLOCK) -> str:
    """
    Human-readable display: ISO-8601 UTC plus relative phrase.

    Timestamps outside the platform's datetime range fall back to the raw
    epoch seconds.
    """
    try:
        shown = to_datetime(epoch_seconds).isoformat()
    except (OverflowError, ValueError, OSError):
        shown = f"{epoch_seconds}s since epoch"
    return f"{shown} ({format_relative(epoch_seconds, clock)})"
