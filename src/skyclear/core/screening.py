"""Proximity filtering: narrow a catalog to objects near a flight."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from skyclear.core.propagation import GeodeticPosition, propagate_batch
from skyclear.core.trajectory import FlightPlan
from skyclear.data.catalog import CatalogObject
from skyclear.utils.constants import ENVELOPE_ALTITUDE_MARGIN_KM, ENVELOPE_MARGIN_DEG

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProximityEnvelope:
    """Axis-aligned lat/lon/altitude box around a flight's operating volume.

    Longitudes are not wrapped: a flight crossing the antimeridian gets a box
    spanning the long way round.

    Attributes:
        min_latitude: Southern bound in degrees.
        max_latitude: Northern bound in degrees.
        min_longitude: Western bound in degrees.
        max_longitude: Eastern bound in degrees.
        min_altitude: Lower bound in meters.
        max_altitude: Upper bound in meters.
    """

    min_latitude: float
    max_latitude: float
    min_longitude: float
    max_longitude: float
    min_altitude: float
    max_altitude: float

    @classmethod
    def for_flight(
        cls,
        flight: FlightPlan,
        margin_deg: float = ENVELOPE_MARGIN_DEG,
        altitude_margin_km: float = ENVELOPE_ALTITUDE_MARGIN_KM,
    ) -> ProximityEnvelope:
        """Build the envelope from a flight's start/end points and apex altitude."""
        return cls(
            min_latitude=min(flight.start_latitude, flight.end_latitude) - margin_deg,
            max_latitude=max(flight.start_latitude, flight.end_latitude) + margin_deg,
            min_longitude=min(flight.start_longitude, flight.end_longitude) - margin_deg,
            max_longitude=max(flight.start_longitude, flight.end_longitude) + margin_deg,
            min_altitude=0.0,
            max_altitude=(flight.max_altitude_km + altitude_margin_km) * 1000.0,
        )

    def contains(self, position: GeodeticPosition) -> bool:
        return bool(
            self.min_latitude <= position.latitude <= self.max_latitude
            and self.min_longitude <= position.longitude <= self.max_longitude
            and self.min_altitude <= position.altitude <= self.max_altitude
        )

    def contains_array(self, positions: NDArray[np.float64]) -> NDArray[np.bool_]:
        """Vectorized ``contains`` over an (n, 3) [lat, lon, alt_m] array."""
        lat, lon, alt = positions[:, 0], positions[:, 1], positions[:, 2]
        return (
            (lat >= self.min_latitude) & (lat <= self.max_latitude)
            & (lon >= self.min_longitude) & (lon <= self.max_longitude)
            & (alt >= self.min_altitude) & (alt <= self.max_altitude)
        )


def filter_proximate(
    catalog: Sequence[CatalogObject],
    flight: FlightPlan,
    at_time: datetime | None = None,
    margin_deg: float = ENVELOPE_MARGIN_DEG,
    altitude_margin_km: float = ENVELOPE_ALTITUDE_MARGIN_KM,
) -> list[CatalogObject]:
    """Keep catalog objects whose position at ``at_time`` is inside the flight's envelope.

    This is a single-epoch approximation: the closest-approach pass
    re-checks every survivor over the whole flight.

    Args:
        catalog: Catalog objects to filter.
        flight: Flight whose envelope is used.
        at_time: Instant to propagate to. Defaults to the flight's launch time.
        margin_deg: Horizontal margin on each side in degrees.
        altitude_margin_km: Margin above the flight's apex in km.

    Returns:
        The subset of ``catalog`` inside the envelope, in catalog order.
        Objects that fail to propagate are left out.
    """
    if not catalog:
        return []

    if at_time is None:
        at_time = flight.launch_time

    envelope = ProximityEnvelope.for_flight(flight, margin_deg, altitude_margin_km)
    positions, valid = propagate_batch([obj.record for obj in catalog], at_time)

    with np.errstate(invalid="ignore"):
        keep = valid & envelope.contains_array(positions)

    failed = int(np.count_nonzero(~valid))
    if failed:
        logger.debug("filter_proximate: %d objects failed to propagate at %s", failed, at_time)

    candidates = [obj for obj, k in zip(catalog, keep) if k]
    logger.info(
        "filter_proximate: flight %s kept %d/%d objects",
        flight.id, len(candidates), len(catalog),
    )
    return candidates
