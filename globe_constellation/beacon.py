"""
Beacon Emphasis Effect

A pulsing marker pinned to a fixed geographic location on the globe surface.
Two independent sine waves drive it: a fast blink (core and ring opacity) and
a slower pulse (ring and glow scale).

The marker position comes from the globe's coordinate lookup. While that
lookup is unavailable the beacon renders nothing and tries again next frame.
"""

import math
from dataclasses import dataclass
from typing import Optional

from globe_constellation.config import (
    BEACON_ALTITUDE_FRACTION,
    BEACON_BLINK_FREQUENCY,
    BEACON_LATITUDE,
    BEACON_LONGITUDE,
    BEACON_PULSE_FREQUENCY,
)
from globe_constellation.logging_config import get_logger
from globe_constellation.projector import GlobeSurface, Point

logger = get_logger(__name__)


@dataclass(frozen=True)
class BeaconFrame:
    """Per-frame render values for the beacon's layered meshes."""

    position: Point
    core_opacity: float
    ring_scale: float
    ring_opacity: float
    glow_scale: float
    glow_opacity: float


class BeaconEffect:
    def __init__(
        self,
        surface: Optional[GlobeSurface],
        latitude: float = BEACON_LATITUDE,
        longitude: float = BEACON_LONGITUDE,
        altitude_fraction: float = BEACON_ALTITUDE_FRACTION,
    ):
        self.surface = surface
        self.latitude = latitude
        self.longitude = longitude
        self.altitude_fraction = altitude_fraction
        self.position: Optional[Point] = None

    def _resolve_position(self) -> Optional[Point]:
        if self.surface is None:
            return None
        try:
            coords = self.surface.get_coords(self.latitude, self.longitude, self.altitude_fraction)
        except Exception as e:
            logger.debug("Beacon coordinates not available yet", error=str(e))
            return None

        if coords is None or not all(math.isfinite(c) for c in coords):
            return None
        return tuple(coords)

    def update(self, elapsed: float) -> Optional[BeaconFrame]:
        """
        Compute the beacon's appearance.

        Args:
            elapsed: Wall-clock seconds since the scene started

        Returns:
            BeaconFrame, or None while the globe cannot supply coordinates
        """
        if self.position is None:
            self.position = self._resolve_position()
            if self.position is None:
                return None

        if not math.isfinite(elapsed):
            elapsed = 0.0

        blink = math.sin(elapsed * BEACON_BLINK_FREQUENCY) * 0.5 + 0.5
        pulse = math.sin(elapsed * BEACON_PULSE_FREQUENCY) * 0.3 + 0.7

        return BeaconFrame(
            position=self.position,
            core_opacity=0.7 + blink * 0.3,
            ring_scale=0.8 + pulse * 0.8,
            ring_opacity=blink * 0.5,
            glow_scale=1.0 + pulse * 1.5,
            glow_opacity=pulse * 0.5,
        )
