"""
Globe Constellation Configuration and Constants

This module contains the physical constants and render-space constants used by
the satellite constellation visualization, plus the environment-driven scene
configuration.

Constants:
    WGS-84 ellipsoid parameters for the inertial to geodetic conversion.
    Mean Earth radius used to normalise satellite altitude in render space.

Render space:
    The globe is a sphere of GLOBE_RADIUS render units centred at the origin of
    its own group. The group itself is scaled by GLOBE_SCALE and moved vertically
    by the entry animation.

Environment:
    GLOBE_TLE_SOURCE         Path or http(s) URL of the element set text file
    GLOBE_TLE_FETCH_TIMEOUT  Fetch timeout in seconds
    GLOBE_LOG_LEVEL          Logging level name
    GLOBE_MAX_SATELLITES     Upper bound on loaded element sets (0 = unlimited)
"""

import os
from typing import Tuple

# WGS-84 ellipsoid
WGS84_SEMI_MAJOR_AXIS_KM: float = 6378.137
WGS84_FLATTENING: float = 1.0 / 298.257223563

# Mean Earth radius, used only for altitude normalisation
EARTH_RADIUS_KM: float = 6371.0

# Simulation clock
TIME_SCALE: float = 60.0  # simulated seconds per real second

# Globe geometry (render units)
GLOBE_RADIUS: float = 100.0
GLOBE_SCALE: float = 0.5
SATELLITE_BASE_OFFSET: float = 0.15  # shell offset above the surface
ALTITUDE_EXAGGERATION: float = 0.3

# Scroll coupling
EXPLOSION_RATE: float = 0.003  # factor increase per scrolled pixel
RISE_SCROLL_THRESHOLD: float = 300.0  # px before the globe starts to rise
RISE_RATE: float = 0.5  # render units per px past the threshold

# Entry animation
DROP_START_HEIGHT: float = 50.0
DROP_TARGET_HEIGHT: float = 0.0
DROP_DURATION: float = 3.0  # seconds
FLOAT_RATE: float = 0.5
FLOAT_AMPLITUDE: float = 2.0

# Beacon (London)
BEACON_LATITUDE: float = 51.5074
BEACON_LONGITUDE: float = -0.1278
BEACON_ALTITUDE_FRACTION: float = 0.01
BEACON_BLINK_FREQUENCY: float = 12.0  # rad/s
BEACON_PULSE_FREQUENCY: float = 4.0  # rad/s

# Renderer hints
DEFAULT_VIEWPOINT: Tuple[float, float, float] = (0.0, 0.0, 250.0)
POINT_SIZE: float = 1.2
POINT_COLOR: str = "#00ffaa"


class SceneConfig:
    """Scene configuration read from the environment."""

    def __init__(self):
        self.TLE_SOURCE = os.getenv("GLOBE_TLE_SOURCE", "data/space-track-leo.txt")
        self.FETCH_TIMEOUT = float(os.getenv("GLOBE_TLE_FETCH_TIMEOUT", "30"))
        self.LOG_LEVEL = os.getenv("GLOBE_LOG_LEVEL", "INFO").upper()
        self.MAX_SATELLITES = int(os.getenv("GLOBE_MAX_SATELLITES", "20000"))
