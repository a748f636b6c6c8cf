"""
Unit Tests for the SGP4 Propagator

Covers single-satellite propagation against the Vallado et al. (2006) reference
state, the vectorised batch path and per-satellite failure isolation.

Run with:
    python -m pytest tests/test_propagator.py -v
"""

import math
import unittest
from datetime import timedelta
from pathlib import Path
from unittest import mock

import numpy as np

from globe_constellation.propagator import (
    NON_FINITE_ERROR,
    PropagationFailure,
    Propagator,
    SatelliteState,
)
from globe_constellation.tle_loader import parse_element_set, parse_element_sets

DATA_FILE = Path(__file__).resolve().parent.parent / "data" / "space-track-leo.txt"

ISS_LINE1 = "1 25544U 98067A   23259.57580000  .00012022  00000-0  21844-3 0  9995"
ISS_LINE2 = "2 25544  51.6416 220.9944 0004263 122.0101 312.2755 15.49541986415598"

VANGUARD_LINE1 = "1 00005U 58002B   00179.78495062  .00000023  00000-0  28098-4 0  4753"
VANGUARD_LINE2 = "2 00005  34.2682 348.7242 1859667 331.7664  19.3264 10.82419157413667"


def recent_element_sets():
    """Bundled element sets sharing the ISS 2023 epoch (Vanguard 2 excluded)."""
    element_sets = parse_element_sets(DATA_FILE.read_text(encoding="utf-8"))
    return tuple(s for s in element_sets if s.epoch.year == 2023)


class TestSinglePropagation(unittest.TestCase):

    def setUp(self):
        self.iss = parse_element_set("ISS (ZARYA)", ISS_LINE1, ISS_LINE2)
        self.vanguard = parse_element_set("VANGUARD 2", VANGUARD_LINE1, VANGUARD_LINE2)
        self.propagator = Propagator([self.iss, self.vanguard])

    def test_vallado_reference_at_epoch(self):
        """Vanguard 2 at tsince = 0 matches the published TEME position."""
        result = self.propagator.propagate(self.vanguard, self.vanguard.epoch)

        self.assertIsInstance(result, SatelliteState)
        expected = [2328.97048951, -5995.22076416, 1719.97067261]
        error_km = math.sqrt(sum((p - e) ** 2 for p, e in zip(result.position_km, expected)))
        self.assertLess(error_km, 1.0)

    def test_iss_radius(self):
        result = self.propagator.propagate(self.iss, self.iss.epoch + timedelta(minutes=45))

        self.assertIsInstance(result, SatelliteState)
        self.assertGreater(result.radius_km, 6600.0)
        self.assertLess(result.radius_km, 6900.0)
        self.assertEqual(len(result.velocity_kms), 3)

    def test_unknown_element_set_is_built_on_demand(self):
        propagator = Propagator()

        result = propagator.propagate(self.iss, self.iss.epoch)

        self.assertIsInstance(result, SatelliteState)
        self.assertEqual(result.catalog_number, "25544")

    def test_sgp4_error_reported_as_failure(self):
        failing = mock.Mock()
        failing.sgp4.return_value = (6, (math.nan,) * 3, (math.nan,) * 3)
        self.propagator.satellites[self.iss] = failing

        result = self.propagator.propagate(self.iss, self.iss.epoch)

        self.assertIsInstance(result, PropagationFailure)
        self.assertEqual(result.error_code, 6)
        self.assertIn("decayed", result.message)

    def test_non_finite_state_reported_as_failure(self):
        failing = mock.Mock()
        failing.sgp4.return_value = (0, (math.inf, 1.0, 2.0), (0.0, 0.0, 0.0))
        self.propagator.satellites[self.iss] = failing

        result = self.propagator.propagate(self.iss, self.iss.epoch)

        self.assertIsInstance(result, PropagationFailure)
        self.assertEqual(result.error_code, NON_FINITE_ERROR)

    def test_failure_does_not_affect_other_satellites(self):
        failing = mock.Mock()
        failing.sgp4.return_value = (5, (0.0,) * 3, (0.0,) * 3)
        self.propagator.satellites[self.iss] = failing

        self.assertIsInstance(self.propagator.propagate(self.iss, self.iss.epoch), PropagationFailure)
        self.assertIsInstance(
            self.propagator.propagate(self.vanguard, self.vanguard.epoch), SatelliteState
        )


class TestBatchPropagation(unittest.TestCase):

    def setUp(self):
        self.element_sets = recent_element_sets()
        self.propagator = Propagator(self.element_sets)
        self.when = self.element_sets[0].epoch + timedelta(hours=2)

    def test_shapes_and_success(self):
        positions, velocities, ok = self.propagator.propagate_all(self.when)

        n = len(self.element_sets)
        self.assertEqual(positions.shape, (n, 3))
        self.assertEqual(velocities.shape, (n, 3))
        self.assertEqual(ok.shape, (n,))
        self.assertTrue(ok.all())

        radii = np.linalg.norm(positions, axis=1)
        self.assertTrue((radii > 6500.0).all())
        self.assertTrue((radii < 8000.0).all())

    def test_batch_matches_scalar(self):
        positions, _, _ = self.propagator.propagate_all(self.when)

        for row, element_set in enumerate(self.element_sets[:3]):
            state = self.propagator.propagate(element_set, self.when)
            np.testing.assert_allclose(positions[row], state.position_km, atol=1e-6)

    def test_empty_collection(self):
        positions, velocities, ok = Propagator().propagate_all(self.when)

        self.assertEqual(positions.shape, (0, 3))
        self.assertEqual(velocities.shape, (0, 3))
        self.assertEqual(len(ok), 0)
        self.assertEqual(len(Propagator()), 0)

    def test_failed_rows_are_masked(self):
        n = len(self.element_sets)
        errors = np.zeros((n, 1), dtype=np.uint8)
        errors[1, 0] = 6
        positions = np.full((n, 1, 3), 7000.0)
        positions[2, 0, 0] = np.nan
        velocities = np.ones((n, 1, 3))

        self.propagator._array = mock.Mock()
        self.propagator._array.sgp4.return_value = (errors, positions, velocities)

        _, _, ok = self.propagator.propagate_all(self.when)

        self.assertFalse(ok[1])
        self.assertFalse(ok[2])
        self.assertEqual(int(ok.sum()), n - 2)


class TestDuplicateCatalogNumbers(unittest.TestCase):

    def setUp(self):
        self.first = parse_element_set("ISS (ZARYA)", ISS_LINE1, ISS_LINE2)
        self.second = parse_element_set(
            "ISS (ZARYA)", ISS_LINE1, ISS_LINE2.replace("312.2755", "132.2755")
        )
        self.propagator = Propagator([self.first, self.second])

    def test_each_record_keeps_its_own_satrec(self):
        when = self.first.epoch

        first = self.propagator.propagate(self.first, when)
        second = self.propagator.propagate(self.second, when)

        self.assertEqual(first.catalog_number, second.catalog_number)
        self.assertGreater(
            np.linalg.norm(np.subtract(first.position_km, second.position_km)), 1000.0
        )

    def test_scalar_and_batch_agree(self):
        when = self.first.epoch + timedelta(minutes=10)
        positions, _, ok = self.propagator.propagate_all(when)

        self.assertTrue(ok.all())
        for row, element_set in enumerate([self.first, self.second]):
            state = self.propagator.propagate(element_set, when)
            np.testing.assert_allclose(positions[row], state.position_km, atol=1e-6)


if __name__ == "__main__":
    unittest.main()
