"""Closest-approach analysis between a flight and catalog objects.

Distances use a simplified model: great-circle (haversine) ground distance
on a spherical Earth combined with the altitude difference as if the two
were orthogonal, ``sqrt(horizontal**2 + vertical**2)``. This is not the true
Cartesian separation; it is kept so reported distances stay comparable
across runs.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from skyclear.core.propagation import GeodeticPosition, propagate_track
from skyclear.core.report import (
    CollisionWarning,
    SafetyReport,
    Severity,
    build_report,
    classify_severity,
)
from skyclear.core.screening import filter_proximate
from skyclear.core.trajectory import FlightPlan, TrajectorySample, sample, validate_geometry
from skyclear.data.catalog import CatalogObject
from skyclear.utils.constants import (
    DEFAULT_SAMPLE_COUNT,
    EARTH_MEAN_RADIUS_KM,
    MAX_REPORT_WARNINGS,
)

logger = logging.getLogger(__name__)


def separation_km_arrays(
    lat1, lon1, alt1_m, lat2, lon2, alt2_m
) -> NDArray[np.float64]:
    """Vectorized separation in km between positions given in degrees and meters."""
    phi1 = np.radians(lat1)
    phi2 = np.radians(lat2)
    dphi = phi2 - phi1
    dlmb = np.radians(np.asarray(lon2) - np.asarray(lon1))

    a = np.sin(dphi / 2) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(dlmb / 2) ** 2
    horizontal = 2 * EARTH_MEAN_RADIUS_KM * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))
    vertical = (np.asarray(alt2_m) - np.asarray(alt1_m)) / 1000.0
    return np.sqrt(horizontal ** 2 + vertical ** 2)


def separation_km(a: GeodeticPosition, b: GeodeticPosition) -> float:
    """Separation in km between two geodetic positions."""
    return float(separation_km_arrays(
        a.latitude, a.longitude, a.altitude, b.latitude, b.longitude, b.altitude
    ))


def closest_approach(
    track_a: NDArray[np.float64],
    track_b: NDArray[np.float64],
    valid: NDArray[np.bool_] | None = None,
) -> tuple[int, float] | None:
    """Find the closest sample pair between two time-aligned tracks.

    Args:
        track_a: Array of shape (n, 3) with [lat_deg, lon_deg, alt_m].
        track_b: Array of the same shape, sampled at the same instants.
        valid: Optional mask of samples to consider.

    Returns:
        ``(index, distance_km)`` of the minimum, or None if no sample is usable.
    """
    distances = separation_km_arrays(
        track_a[:, 0], track_a[:, 1], track_a[:, 2],
        track_b[:, 0], track_b[:, 1], track_b[:, 2],
    )
    usable = np.isfinite(distances)
    if valid is not None:
        usable &= valid
    if not np.any(usable):
        return None
    masked = np.where(usable, distances, np.inf)
    index = int(np.argmin(masked))
    return index, float(masked[index])


def _track(samples: Sequence[TrajectorySample]) -> NDArray[np.float64]:
    return np.array(
        [(s.position.latitude, s.position.longitude, s.position.altitude) for s in samples],
        dtype=np.float64,
    )


def find_closest_approach(
    obj: CatalogObject,
    samples: Sequence[TrajectorySample],
    flight_track: NDArray[np.float64] | None = None,
) -> CollisionWarning | None:
    """Propagate one object along a flight's sample times and find its closest approach.

    Samples where the object fails to propagate are skipped.

    Returns:
        A warning if the minimum separation is reportable, else None.
    """
    if flight_track is None:
        flight_track = _track(samples)
    times = [s.timestamp for s in samples]

    object_track, valid = propagate_track(obj.record, times)
    found = closest_approach(flight_track, object_track, valid)
    if found is None:
        logger.debug("No usable samples for %s", obj.name)
        return None

    index, distance = found
    severity = classify_severity(distance)
    if severity is Severity.SAFE:
        return None

    lat, lon, alt = object_track[index]
    return CollisionWarning(
        object_name=obj.name,
        closest_distance_km=distance,
        time_of_closest_approach=times[index],
        flight_position=samples[index].position,
        object_position=GeodeticPosition(latitude=float(lat), longitude=float(lon), altitude=float(alt)),
        severity=severity,
    )


def analyze(
    flight: FlightPlan,
    candidates: Sequence[CatalogObject],
    sample_count: int = DEFAULT_SAMPLE_COUNT,
    max_warnings: int = MAX_REPORT_WARNINGS,
) -> SafetyReport:
    """Compute closest approaches between a flight and candidate objects.

    Args:
        flight: Flight to analyse.
        candidates: Objects to check, usually from ``filter_proximate``.
        sample_count: Trajectory resolution.
        max_warnings: Cap on warnings kept in the report.

    Returns:
        SafetyReport for the flight.

    Raises:
        InvalidFlightGeometry: If the flight's trajectory is undefined.
    """
    samples = sample(flight, sample_count)
    flight_track = _track(samples)

    warnings: list[CollisionWarning] = []
    for obj in candidates:
        warning = find_closest_approach(obj, samples, flight_track)
        if warning is not None:
            warnings.append(warning)

    logger.info(
        "analyze: flight %s, %d candidates, %d warnings",
        flight.id, len(candidates), len(warnings),
    )
    return build_report(flight.id, flight.name, len(candidates), warnings, max_warnings)


def assess_flight(
    flight: FlightPlan,
    catalog: Sequence[CatalogObject],
    at_time: datetime | None = None,
    sample_count: int = DEFAULT_SAMPLE_COUNT,
) -> SafetyReport:
    """Filter a catalog down to proximate objects, then analyse them.

    Raises:
        InvalidFlightGeometry: If the flight's trajectory is undefined.
    """
    validate_geometry(flight)
    candidates = filter_proximate(catalog, flight, at_time)
    return analyze(flight, candidates, sample_count=sample_count)
