"""
Geodetic Projector

Converts TEME positions to geodetic latitude, longitude and altitude, then
places them in render space on a shell around a globe of radius GLOBE_RADIUS.

Render mapping:
    phi   = radians(90 - lat)
    theta = radians(lng + 180)
    s     = altitude_km / EARTH_RADIUS_KM
    r     = R * (1 + 0.3 * s + 0.15)
    x, y, z = r sin(phi) cos(theta), r cos(phi), r sin(phi) sin(theta)

Points with any non-finite intermediate are dropped from the frame, never
replaced by a default position.

References:
    Vallado, D. A. (2013). Fundamentals of Astrodynamics and Applications (4th ed.),
    Algorithm 12 (ECEF to lat/lon/alt).
"""

import math
from typing import Optional, Tuple

import numpy as np
from sgp4.propagation import gstime

from globe_constellation.config import (
    ALTITUDE_EXAGGERATION,
    EARTH_RADIUS_KM,
    GLOBE_RADIUS,
    SATELLITE_BASE_OFFSET,
    WGS84_FLATTENING,
    WGS84_SEMI_MAJOR_AXIS_KM,
)

Point = Tuple[float, float, float]

_E2 = 2.0 * WGS84_FLATTENING - WGS84_FLATTENING ** 2
_LATITUDE_ITERATIONS = 20

# floor of the shell radius in globe radii, keeps points off the surface
MIN_SHELL_FACTOR = 1.001


def greenwich_sidereal_time(jd: float, fr: float = 0.0) -> float:
    """Greenwich mean sidereal time (rad) for a UT1 Julian date split as jd + fr."""
    return gstime(jd + fr)


def eci_to_geodetic_arrays(
    positions_km: np.ndarray, gmst: float
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Vectorised TEME to geodetic conversion.

    Args:
        positions_km: (N, 3) TEME positions
        gmst: Greenwich sidereal time (rad)

    Returns:
        Tuple of (lat_deg, lng_deg, alt_km) arrays of shape (N,)
    """
    positions_km = np.asarray(positions_km, dtype=float).reshape(-1, 3)
    x, y, z = positions_km[:, 0], positions_km[:, 1], positions_km[:, 2]
    a = WGS84_SEMI_MAJOR_AXIS_KM

    with np.errstate(invalid="ignore", divide="ignore"):
        # Earth rotation: inertial right ascension minus sidereal angle
        lng = np.arctan2(y, x) - gmst
        lng = (lng + math.pi) % (2.0 * math.pi) - math.pi

        p = np.hypot(x, y)
        lat = np.arctan2(z, p)
        for _ in range(_LATITUDE_ITERATIONS):
            sin_lat = np.sin(lat)
            c = 1.0 / np.sqrt(1.0 - _E2 * sin_lat * sin_lat)
            lat = np.arctan2(z + a * c * _E2 * sin_lat, p)

        sin_lat = np.sin(lat)
        cos_lat = np.cos(lat)
        n = a / np.sqrt(1.0 - _E2 * sin_lat * sin_lat)

        # p / cos(lat) degenerates at the poles
        alt = np.where(
            np.abs(cos_lat) > 1e-10,
            p / cos_lat - n,
            z / sin_lat - n * (1.0 - _E2),
        )

    return np.degrees(lat), np.degrees(lng), alt


def eci_to_geodetic(position_km: Point, gmst: float) -> Tuple[float, float, float]:
    """
    Convert one TEME position to geodetic coordinates.

    Returns:
        Tuple of (latitude_deg, longitude_deg, altitude_km); may contain NaN for
        degenerate input
    """
    lat, lng, alt = eci_to_geodetic_arrays(np.asarray([position_km]), gmst)
    return float(lat[0]), float(lng[0]), float(alt[0])


def shell_radius(altitude_km, base_radius: float = GLOBE_RADIUS):
    """
    Render radius for a satellite at the given altitude.

    Follows R * (1 + 0.3 * alt / EARTH_RADIUS_KM + 0.15), including negative
    altitudes. Only altitudes deep enough to bring the shell within
    MIN_SHELL_FACTOR * R of the centre (about -3164 km) are held at that floor.
    """
    scale = np.asarray(altitude_km, dtype=float) / EARTH_RADIUS_KM
    factor = 1.0 + ALTITUDE_EXAGGERATION * scale + SATELLITE_BASE_OFFSET
    radius = base_radius * np.maximum(factor, MIN_SHELL_FACTOR)
    return float(radius) if np.ndim(radius) == 0 else radius


def spherical_to_cartesian_arrays(lat_deg, lng_deg, radius) -> np.ndarray:
    """Vectorised lat/lng/radius to render-space (N, 3) points."""
    phi = np.radians(90.0 - np.asarray(lat_deg, dtype=float))
    theta = np.radians(np.asarray(lng_deg, dtype=float) + 180.0)
    radius = np.asarray(radius, dtype=float)

    return np.stack(
        [
            radius * np.sin(phi) * np.cos(theta),
            radius * np.cos(phi),
            radius * np.sin(phi) * np.sin(theta),
        ],
        axis=-1,
    )


def spherical_to_cartesian(lat_deg: float, lng_deg: float, radius: float) -> Point:
    phi = math.radians(90.0 - lat_deg)
    theta = math.radians(lng_deg + 180.0)
    return (
        radius * math.sin(phi) * math.cos(theta),
        radius * math.cos(phi),
        radius * math.sin(phi) * math.sin(theta),
    )


def geodetic_to_render(
    lat_deg: float, lng_deg: float, altitude_km: float, base_radius: float = GLOBE_RADIUS
) -> Optional[Point]:
    """
    Place one geodetic position on the satellite shell.

    Returns:
        (x, y, z) in render units, or None if any value is non-finite
    """
    if not all(math.isfinite(v) for v in (lat_deg, lng_deg, altitude_km)):
        return None

    point = spherical_to_cartesian(lat_deg, lng_deg, shell_radius(altitude_km, base_radius))
    if not all(math.isfinite(c) for c in point):
        return None
    return point


class GeodeticProjector:
    """Vectorised projection of a frame's TEME positions into render space."""

    def __init__(self, base_radius: float = GLOBE_RADIUS):
        self.base_radius = base_radius

    def project(self, positions_km: np.ndarray, gmst: float) -> Tuple[np.ndarray, np.ndarray]:
        """
        Project TEME positions onto the satellite shell.

        Args:
            positions_km: (N, 3) TEME positions
            gmst: Greenwich sidereal time (rad)

        Returns:
            Tuple of (points (N, 3), finite (N,) bool). Rows where finite is False
            must be dropped.
        """
        lat, lng, alt = eci_to_geodetic_arrays(positions_km, gmst)

        with np.errstate(invalid="ignore"):
            finite = np.isfinite(lat) & np.isfinite(lng) & np.isfinite(alt)
            points = spherical_to_cartesian_arrays(
                lat, lng, shell_radius(alt, self.base_radius)
            ).reshape(-1, 3)
            finite &= np.isfinite(points).all(axis=1)

        return points, finite


class GlobeSurface:
    """
    Coordinate lookup on the globe surface.

    The lookup is unavailable until the globe has finished building (its
    texture and mesh); until then `get_coords` returns None.
    """

    def __init__(self, base_radius: float = GLOBE_RADIUS, ready: bool = False):
        self.base_radius = base_radius
        self._ready = ready

    @property
    def ready(self) -> bool:
        return self._ready

    def mark_ready(self) -> None:
        self._ready = True

    def get_coords(self, lat_deg: float, lng_deg: float, altitude_fraction: float = 0.0) -> Optional[Point]:
        """Surface point at lat/lng raised by altitude_fraction of the globe radius."""
        if not self._ready:
            return None
        return spherical_to_cartesian(
            lat_deg, lng_deg, self.base_radius * (1.0 + altitude_fraction)
        )
