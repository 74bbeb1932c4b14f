"""Shared fixtures: hard-coded real TLEs (no network calls)."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from skyclear.core.propagation import GeodeticPosition, propagate
from skyclear.core.tle import OrbitalRecord
from skyclear.core.trajectory import FlightPlan
from skyclear.data.catalog import CatalogObject

ISS_TLE_LINES = (
    "1 25544U 98067A   24045.54896019  .00016717  00000-0  30093-3 0  9993",
    "2 25544  51.6412 207.4925 0004948 290.5508 178.9792 15.49583488439596",
)

CSS_TLE_LINES = (
    "1 48274U 21035A   24045.50261574  .00021540  00000-0  25163-3 0  9993",
    "2 48274  41.4681 279.1498 0005372 149.8847 345.3740 15.62096269157018",
)

HUBBLE_TLE_LINES = (
    "1 20580U 90037B   24045.55478014  .00001456  00000-0  73052-4 0  9994",
    "2 20580  28.4701  41.0696 0002622 348.3544 140.2428 15.09435694872912",
)

GEO_TLE_LINES = (
    "1 36516U 10012A   24045.39583333  .00000112  00000-0  00000+0 0  9991",
    "2 36516   0.0254 268.0254 0000567 142.5432 240.3076  1.00271953 50780",
)


@pytest.fixture
def iss_record() -> OrbitalRecord:
    return OrbitalRecord.from_lines(*ISS_TLE_LINES, name="ISS (ZARYA)")


@pytest.fixture
def iss(iss_record: OrbitalRecord) -> CatalogObject:
    return CatalogObject(name="ISS (ZARYA)", record=iss_record)


@pytest.fixture
def css() -> CatalogObject:
    return CatalogObject(name="CSS (TIANHE)", record=OrbitalRecord.from_lines(*CSS_TLE_LINES))


@pytest.fixture
def hubble() -> CatalogObject:
    return CatalogObject(name="HUBBLE", record=OrbitalRecord.from_lines(*HUBBLE_TLE_LINES))


@pytest.fixture
def geo() -> CatalogObject:
    return CatalogObject(name="SES-1", record=OrbitalRecord.from_lines(*GEO_TLE_LINES))


@pytest.fixture
def reference_time(iss_record: OrbitalRecord) -> datetime:
    """One hour after the ISS epoch."""
    return iss_record.epoch + timedelta(hours=1)


@pytest.fixture
def iss_position(iss_record: OrbitalRecord, reference_time: datetime) -> GeodeticPosition:
    return propagate(iss_record, reference_time)


def make_flight(
    flight_id: int = 1,
    start: tuple[float, float] = (31.42, -104.76),
    end: tuple[float, float] = (31.42, -104.76),
    launch: datetime = datetime(2024, 2, 14, 14, 0, tzinfo=timezone.utc),
    duration_s: float = 660.0,
    max_altitude_km: float = 107.0,
    name: str = "",
) -> FlightPlan:
    return FlightPlan(
        id=flight_id,
        name=name or f"Flight {flight_id}",
        start_latitude=start[0],
        start_longitude=start[1],
        end_latitude=end[0],
        end_longitude=end[1],
        launch_time=launch,
        landing_time=launch + timedelta(seconds=duration_s),
        max_altitude_km=max_altitude_km,
        craft_model="New Shepard",
    )


@pytest.fixture
def flight_under_iss(iss_position: GeodeticPosition, reference_time: datetime) -> FlightPlan:
    """Round trip over the ISS sub-point whose apex meets the ISS at ``reference_time``.

    The ISS is outside the envelope at launch, so screening needs
    ``at_time=reference_time``.
    """
    return make_flight(
        flight_id=7,
        start=(iss_position.latitude, iss_position.longitude),
        end=(iss_position.latitude, iss_position.longitude),
        launch=reference_time - timedelta(seconds=60),
        duration_s=120.0,
        max_altitude_km=iss_position.altitude / 1000.0,
        name="Apex rendezvous",
    )
