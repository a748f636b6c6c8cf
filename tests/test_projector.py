"""
Unit Tests for the Geodetic Projector

Run with:
    python -m pytest tests/test_projector.py -v
"""

import math
import unittest

import numpy as np

from globe_constellation.config import (
    EARTH_RADIUS_KM,
    GLOBE_RADIUS,
    WGS84_FLATTENING,
    WGS84_SEMI_MAJOR_AXIS_KM,
)
from globe_constellation.projector import (
    MIN_SHELL_FACTOR,
    GeodeticProjector,
    GlobeSurface,
    eci_to_geodetic,
    geodetic_to_render,
    greenwich_sidereal_time,
    shell_radius,
    spherical_to_cartesian,
)


class TestEciToGeodetic(unittest.TestCase):

    def test_equator(self):
        lat, lng, alt = eci_to_geodetic((WGS84_SEMI_MAJOR_AXIS_KM + 500.0, 0.0, 0.0), 0.0)

        self.assertAlmostEqual(lat, 0.0, places=9)
        self.assertAlmostEqual(lng, 0.0, places=9)
        self.assertAlmostEqual(alt, 500.0, places=6)

    def test_earth_rotation_shifts_longitude(self):
        _, lng, _ = eci_to_geodetic((7000.0, 0.0, 0.0), math.pi / 2)

        self.assertAlmostEqual(lng, -90.0, places=9)

    def test_longitude_wraps(self):
        _, lng, _ = eci_to_geodetic((0.0, -7000.0, 0.0), math.pi)

        self.assertGreaterEqual(lng, -180.0)
        self.assertLess(lng, 180.0)
        self.assertAlmostEqual(lng, 90.0, places=9)

    def test_north_pole(self):
        lat, _, alt = eci_to_geodetic((0.0, 0.0, 7000.0), 0.0)
        polar_radius = WGS84_SEMI_MAJOR_AXIS_KM * (1.0 - WGS84_FLATTENING)

        self.assertAlmostEqual(lat, 90.0, places=9)
        self.assertAlmostEqual(alt, 7000.0 - polar_radius, places=3)

    def test_mid_latitude_is_geodetic(self):
        """Geodetic latitude is slightly larger than geocentric off the equator."""
        r = 7000.0
        geocentric = 45.0
        position = (r * math.cos(math.radians(geocentric)), 0.0, r * math.sin(math.radians(geocentric)))

        lat, _, alt = eci_to_geodetic(position, 0.0)

        self.assertGreater(lat, geocentric)
        self.assertLess(lat, geocentric + 0.5)
        self.assertGreater(alt, 600.0)
        self.assertLess(alt, 650.0)

    def test_nan_propagates(self):
        lat, lng, alt = eci_to_geodetic((math.nan, 1.0, 1.0), 0.0)

        self.assertTrue(math.isnan(lat) or math.isnan(lng) or math.isnan(alt))

    def test_sidereal_time_range(self):
        gmst = greenwich_sidereal_time(2460204.5, 0.5758)

        self.assertGreaterEqual(gmst, 0.0)
        self.assertLess(gmst, 2.0 * math.pi)


class TestRenderMapping(unittest.TestCase):

    def test_shell_radius(self):
        self.assertAlmostEqual(shell_radius(0.0), 115.0)
        self.assertAlmostEqual(shell_radius(EARTH_RADIUS_KM), 145.0)

    def test_shell_radius_below_surface_follows_formula(self):
        self.assertAlmostEqual(shell_radius(-200.0), 100.0 * (1.15 - 0.3 * 200.0 / EARTH_RADIUS_KM))
        self.assertAlmostEqual(shell_radius(-3000.0), 100.0 * (1.15 - 0.3 * 3000.0 / EARTH_RADIUS_KM))

    def test_shell_radius_floor(self):
        self.assertAlmostEqual(shell_radius(-EARTH_RADIUS_KM), 100.0 * MIN_SHELL_FACTOR)
        self.assertAlmostEqual(shell_radius(-50000.0), 100.0 * MIN_SHELL_FACTOR)
        self.assertGreater(shell_radius(-EARTH_RADIUS_KM / 2.0), GLOBE_RADIUS)

    def test_prime_antimeridian_on_x_axis(self):
        x, y, z = geodetic_to_render(0.0, -180.0, 0.0)

        self.assertAlmostEqual(x, 115.0, places=9)
        self.assertAlmostEqual(y, 0.0, places=9)
        self.assertAlmostEqual(z, 0.0, places=9)

    def test_north_pole_on_y_axis(self):
        x, y, z = geodetic_to_render(90.0, 0.0, 400.0)

        self.assertAlmostEqual(y, shell_radius(400.0), places=9)
        self.assertAlmostEqual(x, 0.0, places=9)
        self.assertAlmostEqual(z, 0.0, places=9)

    def test_points_lie_outside_globe(self):
        for lat in (-90.0, -45.0, 0.0, 30.0, 89.0):
            for lng in (-180.0, -90.0, 0.0, 120.0):
                for alt in (-200.0, 0.0, 420.0, 1200.0, 36000.0):
                    point = geodetic_to_render(lat, lng, alt)
                    self.assertGreater(math.sqrt(sum(c * c for c in point)), GLOBE_RADIUS)

    def test_radius_reflects_altitude(self):
        low = geodetic_to_render(10.0, 20.0, 400.0)
        high = geodetic_to_render(10.0, 20.0, 1200.0)

        self.assertLess(np.linalg.norm(low), np.linalg.norm(high))

    def test_non_finite_dropped(self):
        self.assertIsNone(geodetic_to_render(math.nan, 0.0, 400.0))
        self.assertIsNone(geodetic_to_render(0.0, math.inf, 400.0))
        self.assertIsNone(geodetic_to_render(0.0, 0.0, math.nan))


class TestGeodeticProjector(unittest.TestCase):

    def test_vectorised_matches_scalar(self):
        positions = np.array([
            [6778.0, 0.0, 0.0],
            [-4000.0, 3000.0, 4500.0],
            [1200.0, -6500.0, -1800.0],
        ])
        gmst = 1.234

        points, finite = GeodeticProjector().project(positions, gmst)

        self.assertTrue(finite.all())
        for row, position in enumerate(positions):
            expected = geodetic_to_render(*eci_to_geodetic(position, gmst))
            np.testing.assert_allclose(points[row], expected, atol=1e-9)

    def test_non_finite_rows_masked(self):
        positions = np.array([
            [6778.0, 0.0, 0.0],
            [np.nan, np.nan, np.nan],
            [0.0, 6778.0, 0.0],
        ])

        points, finite = GeodeticProjector().project(positions, 0.0)

        self.assertEqual(list(finite), [True, False, True])
        self.assertTrue(np.isfinite(points[finite]).all())

    def test_empty_input(self):
        points, finite = GeodeticProjector().project(np.empty((0, 3)), 0.0)

        self.assertEqual(points.shape, (0, 3))
        self.assertEqual(finite.shape, (0,))


class TestGlobeSurface(unittest.TestCase):

    def test_not_ready(self):
        self.assertIsNone(GlobeSurface().get_coords(51.5, 0.0, 0.01))

    def test_ready(self):
        surface = GlobeSurface()
        surface.mark_ready()

        coords = surface.get_coords(51.5074, -0.1278, 0.01)

        self.assertTrue(surface.ready)
        self.assertAlmostEqual(np.linalg.norm(coords), GLOBE_RADIUS * 1.01, places=9)
        self.assertEqual(coords, spherical_to_cartesian(51.5074, -0.1278, GLOBE_RADIUS * 1.01))


if __name__ == "__main__":
    unittest.main()
