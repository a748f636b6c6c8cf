"""
SGP4 Propagator

Advances every loaded satellite to the current simulation time with the sgp4
library and yields TEME (Earth-centred inertial) positions and velocities.

Failures are per satellite and per instant: a decayed orbit or a numerical
breakdown for one satellite is reported as a PropagationFailure (scalar path)
or a cleared mask entry (batch path). Nothing is retried; the next frame
recomputes from the then-current simulation time.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Sequence, Tuple, Union

import numpy as np
from sgp4.api import Satrec, SatrecArray

from globe_constellation.clock import datetime_to_jd_fr
from globe_constellation.tle_loader import OrbitalElementSet

# SGP4 error code meanings
SGP4_ERROR_CODES = {
    0: "No error",
    1: "Mean eccentricity < 0.0 or > 1.0",
    2: "Mean motion < 0.0",
    3: "Perturbed eccentricity < 0.0 or > 1.0",
    4: "Semi-latus rectum < 0.0",
    5: "Satellite has decayed",
    6: "Satellite has decayed (low altitude)",
}

# Returned for non-finite output that SGP4 itself did not flag
NON_FINITE_ERROR = -1


@dataclass(frozen=True)
class SatelliteState:
    """Inertial state of one satellite at one simulation instant."""

    catalog_number: str
    position_km: Tuple[float, float, float]
    velocity_kms: Tuple[float, float, float]

    @property
    def radius_km(self) -> float:
        return math.sqrt(sum(c * c for c in self.position_km))


@dataclass(frozen=True)
class PropagationFailure:
    """SGP4 could not produce a usable state for this satellite at this instant."""

    catalog_number: str
    error_code: int

    @property
    def message(self) -> str:
        if self.error_code == NON_FINITE_ERROR:
            return "Non-finite state vector"
        return SGP4_ERROR_CODES.get(self.error_code, f"Unknown error code {self.error_code}")


class Propagator:
    """
    SGP4 propagation for a fixed collection of element sets.

    One Satrec is built per element set at construction and keyed by the element
    set itself, so two records sharing a catalog number stay distinct in both
    `propagate` and `propagate_all`. `propagate_all` runs the whole collection
    through the vectorised SatrecArray in a single call, which is what the
    per-frame pipeline uses.
    """

    def __init__(self, element_sets: Sequence[OrbitalElementSet] = ()):
        self.element_sets = tuple(element_sets)
        self.satellites: Dict[OrbitalElementSet, Satrec] = {}
        self.catalog_numbers = []
        satrecs = []

        for element_set in self.element_sets:
            satellite = Satrec.twoline2rv(element_set.line1, element_set.line2)
            self.satellites[element_set] = satellite
            self.catalog_numbers.append(element_set.catalog_number)
            satrecs.append(satellite)

        self._array = SatrecArray(satrecs) if satrecs else None

    def __len__(self) -> int:
        return len(self.element_sets)

    def _satellite_for(self, element_set: OrbitalElementSet) -> Satrec:
        satellite = self.satellites.get(element_set)
        if satellite is None:
            satellite = Satrec.twoline2rv(element_set.line1, element_set.line2)
        return satellite

    def propagate(
        self, element_set: OrbitalElementSet, when: datetime
    ) -> Union[SatelliteState, PropagationFailure]:
        """
        Propagate one satellite.

        Args:
            element_set: Element set to propagate
            when: Simulation time

        Returns:
            SatelliteState, or PropagationFailure when SGP4 reports an error or
            returns a non-finite state
        """
        satellite = self._satellite_for(element_set)
        jd, fr = datetime_to_jd_fr(when)

        error, position, velocity = satellite.sgp4(jd, fr)

        if error != 0:
            return PropagationFailure(element_set.catalog_number, error)

        if not all(math.isfinite(c) for c in (*position, *velocity)):
            return PropagationFailure(element_set.catalog_number, NON_FINITE_ERROR)

        return SatelliteState(
            catalog_number=element_set.catalog_number,
            position_km=tuple(position),
            velocity_kms=tuple(velocity),
        )

    def propagate_all(self, when: datetime) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Propagate every satellite to the same instant.

        Args:
            when: Simulation time

        Returns:
            Tuple of (positions (N, 3) km, velocities (N, 3) km/s, ok (N,) bool).
            Rows with ok False must not be rendered this frame.
        """
        if self._array is None:
            empty = np.empty((0, 3))
            return empty, empty.copy(), np.zeros(0, dtype=bool)

        jd, fr = datetime_to_jd_fr(when)
        errors, positions, velocities = self._array.sgp4(np.array([jd]), np.array([fr]))

        errors = errors[:, 0]
        positions = positions[:, 0, :]
        velocities = velocities[:, 0, :]

        ok = (errors == 0) & np.isfinite(positions).all(axis=1) & np.isfinite(velocities).all(axis=1)

        return positions, velocities, ok
