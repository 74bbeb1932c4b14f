"""Flight-vs-flight conflict detection."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from itertools import combinations
from typing import Sequence

import numpy as np
from scipy.spatial import cKDTree

from skyclear.core.approach import separation_km_arrays
from skyclear.core.errors import InvalidFlightGeometry
from skyclear.core.propagation import GeodeticPosition
from skyclear.core.trajectory import FlightPlan, TrajectorySample, sample
from skyclear.utils.constants import (
    CONFLICT_SAFE_DISTANCE_KM,
    CONFLICT_TIME_TOLERANCE_S,
    DEFAULT_SAMPLE_COUNT,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConflictPoint:
    """Where and when two flights violate the safe separation.

    Attributes:
        position: Midpoint between the two flights' sample positions.
        time: Timestamp of the first flight's sample.
    """

    position: GeodeticPosition
    time: datetime


@dataclass(frozen=True)
class FlightConflict:
    """A pair of flights that come too close.

    Attributes:
        flight_id_a: Lower flight id of the pair.
        flight_id_b: Higher flight id of the pair.
        conflict_points: Conflict points, in first-flight sample order.
    """

    flight_id_a: int
    flight_id_b: int
    conflict_points: list[ConflictPoint] = field(default_factory=list)


def _midpoint(a: GeodeticPosition, b: GeodeticPosition) -> GeodeticPosition:
    return GeodeticPosition(
        latitude=(a.latitude + b.latitude) / 2,
        longitude=(a.longitude + b.longitude) / 2,
        altitude=(a.altitude + b.altitude) / 2,
    )


def find_conflict_points(
    first: Sequence[TrajectorySample],
    second: Sequence[TrajectorySample],
    time_tolerance_s: float = CONFLICT_TIME_TOLERANCE_S,
    safe_distance_km: float = CONFLICT_SAFE_DISTANCE_KM,
) -> list[ConflictPoint]:
    """Find conflict points between two sampled trajectories.

    For each sample of ``first``, samples of ``second`` within
    ``time_tolerance_s`` are scanned in order; the first one closer than
    ``safe_distance_km`` yields a conflict point and ends the scan for that
    sample. Later violating samples of ``second`` are not reported.
    """
    if not first or not second:
        return []

    epoch = first[0].timestamp
    t2 = np.array([(s.timestamp - epoch).total_seconds() for s in second], dtype=np.float64)
    p2 = np.array(
        [(s.position.latitude, s.position.longitude, s.position.altitude) for s in second],
        dtype=np.float64,
    )
    tree = cKDTree(t2[:, None])
    # inclusive bound, robust to microsecond rounding of sample timestamps
    radius = time_tolerance_s + 1e-6

    points: list[ConflictPoint] = []
    for s1 in first:
        t1 = (s1.timestamp - epoch).total_seconds()
        nearby = sorted(tree.query_ball_point([t1], r=radius))
        if not nearby:
            continue

        idx = np.asarray(nearby)
        distances = separation_km_arrays(
            s1.position.latitude, s1.position.longitude, s1.position.altitude,
            p2[idx, 0], p2[idx, 1], p2[idx, 2],
        )
        hits = np.flatnonzero(distances < safe_distance_km)
        if hits.size:
            match = second[int(idx[hits[0]])]
            points.append(ConflictPoint(position=_midpoint(s1.position, match.position), time=s1.timestamp))

    return points


def detect_conflicts(
    flights: Sequence[FlightPlan],
    sample_count: int = DEFAULT_SAMPLE_COUNT,
    time_tolerance_s: float = CONFLICT_TIME_TOLERANCE_S,
    safe_distance_km: float = CONFLICT_SAFE_DISTANCE_KM,
) -> list[FlightConflict]:
    """Find every pair of flights that violates the safe separation.

    Within a pair the flight with the lower id is always the first
    trajectory, so results do not depend on the order of ``flights``.
    Flights with invalid geometry are skipped.

    Args:
        flights: Currently visible flights.
        sample_count: Trajectory resolution for each flight.
        time_tolerance_s: Maximum timestamp difference between compared samples.
        safe_distance_km: Separation below which a conflict point is recorded.

    Returns:
        Conflicts sorted by (flight_id_a, flight_id_b).
    """
    trajectories: dict[int, list[TrajectorySample]] = {}
    for flight in sorted(flights, key=lambda f: f.id):
        try:
            trajectories[flight.id] = sample(flight, sample_count)
        except InvalidFlightGeometry as exc:
            logger.warning("Skipping flight %s in conflict detection: %s", flight.id, exc)

    conflicts: list[FlightConflict] = []
    for id_a, id_b in combinations(trajectories, 2):
        points = find_conflict_points(
            trajectories[id_a], trajectories[id_b], time_tolerance_s, safe_distance_km
        )
        if points:
            logger.debug("Flights %s and %s: %d conflict points", id_a, id_b, len(points))
            conflicts.append(FlightConflict(flight_id_a=id_a, flight_id_b=id_b, conflict_points=points))

    logger.info("detect_conflicts: %d flights, %d conflicting pairs", len(trajectories), len(conflicts))
    return conflicts
