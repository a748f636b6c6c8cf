"""
Simulation Clock and Frame Context

The simulation clock is the only time source for orbital propagation. It is
owned by the render loop and advanced once per frame by the real frame delta
multiplied by the time scale, so satellites visibly move across the globe.

Every per-frame update receives its inputs through a FrameContext instead of
reading ambient state, which keeps the animation state machine and the point
pipeline deterministic under test.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from sgp4.api import jday

from globe_constellation.config import DEFAULT_VIEWPOINT, TIME_SCALE


def sanitize_delta(delta: float) -> float:
    """Return the frame delta, or 0.0 if it is non-finite or negative."""
    try:
        delta = float(delta)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(delta) or delta < 0.0:
        return 0.0
    return delta


def datetime_to_jd_fr(dt: datetime) -> Tuple[float, float]:
    """
    Convert datetime to Julian date and fraction.

    Naive datetimes are taken to be UTC.

    Args:
        dt: Datetime object

    Returns:
        Tuple of (julian_day, fraction)
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    seconds = dt.second + dt.microsecond / 1e6
    return jday(dt.year, dt.month, dt.day, dt.hour, dt.minute, seconds)


class SimulationClock:
    """
    Monotonic virtual time for the constellation.

    Args:
        start: Initial simulation time (default: now, UTC)
        time_scale: Simulated seconds per real second
    """

    def __init__(self, start: Optional[datetime] = None, time_scale: float = TIME_SCALE):
        if start is None:
            start = datetime.now(timezone.utc)
        elif start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)

        self._now = start
        self.time_scale = time_scale

    @property
    def now(self) -> datetime:
        return self._now

    def advance(self, real_delta_seconds: float) -> datetime:
        """Advance by one frame and return the new simulation time."""
        delta = sanitize_delta(real_delta_seconds)
        self._now = self._now + timedelta(seconds=delta * self.time_scale)
        return self._now

    def julian_date(self) -> Tuple[float, float]:
        return datetime_to_jd_fr(self._now)


@dataclass(frozen=True)
class FrameContext:
    """
    Inputs for one rendered frame.

    Attributes:
        delta: Real seconds since the previous frame
        scroll_offset: Pixels scrolled, sampled once for this frame
        viewpoint: Camera position in world space
        elapsed: Real seconds since the scene started (drives cosmetic pulses)
    """

    delta: float
    scroll_offset: float = 0.0
    viewpoint: Tuple[float, float, float] = DEFAULT_VIEWPOINT
    elapsed: float = 0.0
