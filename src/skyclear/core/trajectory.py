"""Parametric flight trajectories.

A flight is modelled as a straight line in latitude/longitude degree space
(not a great-circle path) with a single-hump ``sin`` altitude profile that
peaks at the temporal midpoint. Both sampling variants share
``_interpolate`` so display geometry and analysis geometry never diverge.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime

from skyclear.core.errors import InvalidFlightGeometry
from skyclear.core.propagation import GeodeticPosition, to_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlightPlan:
    """A registered flight.

    Attributes:
        id: Unique, caller-assigned flight identifier.
        name: Flight name.
        start_latitude: Launch site latitude in degrees.
        start_longitude: Launch site longitude in degrees.
        end_latitude: Landing site latitude in degrees.
        end_longitude: Landing site longitude in degrees.
        launch_time: Launch time (naive values are taken as UTC).
        landing_time: Landing time, after ``launch_time``.
        max_altitude_km: Apex altitude in km.
        craft_model: Spacecraft model.
    """

    id: int
    name: str
    start_latitude: float
    start_longitude: float
    end_latitude: float
    end_longitude: float
    launch_time: datetime
    landing_time: datetime
    max_altitude_km: float
    craft_model: str = ""

    @property
    def duration_s(self) -> float:
        return (to_utc(self.landing_time) - to_utc(self.launch_time)).total_seconds()


@dataclass(frozen=True)
class TrajectorySample:
    """One point on a flight's path."""

    position: GeodeticPosition
    timestamp: datetime


def validate_geometry(flight: FlightPlan) -> None:
    """Reject flights whose trajectory cannot be defined.

    Raises:
        InvalidFlightGeometry: If landing is not after launch, any
            coordinate is non-finite or out of range, or the apex altitude
            is not positive.
    """
    coords = (
        flight.start_latitude, flight.start_longitude,
        flight.end_latitude, flight.end_longitude,
        flight.max_altitude_km,
    )
    if not all(math.isfinite(c) for c in coords):
        logger.warning("Flight %s has non-finite coordinates: %r", flight.id, coords)
        raise InvalidFlightGeometry(f"Flight {flight.id} has non-finite coordinates")
    for lat in (flight.start_latitude, flight.end_latitude):
        if not -90.0 <= lat <= 90.0:
            logger.warning("Flight %s latitude %s out of range", flight.id, lat)
            raise InvalidFlightGeometry(f"Flight {flight.id}: latitude {lat} outside [-90, 90]")
    for lon in (flight.start_longitude, flight.end_longitude):
        if not -180.0 <= lon <= 180.0:
            logger.warning("Flight %s longitude %s out of range", flight.id, lon)
            raise InvalidFlightGeometry(f"Flight {flight.id}: longitude {lon} outside [-180, 180]")
    if flight.max_altitude_km <= 0:
        logger.warning("Flight %s has non-positive apex altitude %s", flight.id, flight.max_altitude_km)
        raise InvalidFlightGeometry(
            f"Flight {flight.id}: max altitude {flight.max_altitude_km} km must be positive"
        )
    if to_utc(flight.landing_time) <= to_utc(flight.launch_time):
        logger.warning("Flight %s lands before it launches", flight.id)
        raise InvalidFlightGeometry(
            f"Flight {flight.id}: landing time {flight.landing_time} is not after launch time {flight.launch_time}"
        )


def _interpolate(flight: FlightPlan, fraction: float) -> GeodeticPosition:
    lat = flight.start_latitude + (flight.end_latitude - flight.start_latitude) * fraction
    lon = flight.start_longitude + (flight.end_longitude - flight.start_longitude) * fraction
    alt = flight.max_altitude_km * 1000.0 * math.sin(fraction * math.pi)
    return GeodeticPosition(latitude=lat, longitude=lon, altitude=alt)


def _fractions(sample_count: int) -> list[float]:
    if sample_count < 2:
        raise ValueError(f"sample_count must be at least 2, got {sample_count}")
    return [i / (sample_count - 1) for i in range(sample_count)]


def sample_positions(flight: FlightPlan, sample_count: int) -> list[GeodeticPosition]:
    """Sample a flight's path for display (positions only).

    Raises:
        InvalidFlightGeometry: If the flight's geometry is invalid.
        ValueError: If ``sample_count`` < 2.
    """
    validate_geometry(flight)
    return [_interpolate(flight, f) for f in _fractions(sample_count)]


def sample(flight: FlightPlan, sample_count: int) -> list[TrajectorySample]:
    """Sample a flight's path with absolute timestamps.

    Args:
        flight: Flight plan to sample.
        sample_count: Number of samples, at least 2. Sample 0 is the launch
            site at launch time, sample ``n-1`` the landing site at landing time.

    Returns:
        Samples in increasing time order.

    Raises:
        InvalidFlightGeometry: If the flight's geometry is invalid.
        ValueError: If ``sample_count`` < 2.
    """
    validate_geometry(flight)
    launch = to_utc(flight.launch_time)
    duration = to_utc(flight.landing_time) - launch
    return [
        TrajectorySample(position=_interpolate(flight, f), timestamp=launch + duration * f)
        for f in _fractions(sample_count)
    ]
