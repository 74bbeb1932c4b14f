"""Integration test: ingest → register → filter → analyse → conflicts end-to-end."""
from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import make_flight
from skyclear import (
    FlightRegistry,
    OverallStatus,
    SafetyService,
    Severity,
    assess_flight,
    detect_conflicts,
    load_catalog_text,
    propagate,
    sample_positions,
)

# Hardcoded real TLEs (no network calls)
CATALOG_TEXT = """\
ISS (ZARYA)
1 25544U 98067A   24045.54896019  .00016717  00000-0  30093-3 0  9993
2 25544  51.6412 207.4925 0004948 290.5508 178.9792 15.49583488439596
CSS (TIANHE)
1 48274U 21035A   24045.50261574  .00021540  00000-0  25163-3 0  9993
2 48274  41.4681 279.1498 0005372 149.8847 345.3740 15.62096269157018
HST
1 20580U 90037B   24045.55478014  .00001456  00000-0  73052-4 0  9994
2 20580  28.4701  41.0696 0002622 348.3544 140.2428 15.09435694872912
SES-1
1 36516U 10012A   24045.39583333  .00000112  00000-0  00000+0 0  9991
2 36516   0.0254 268.0254 0000567 142.5432 240.3076  1.00271953 50780
CORRUPTED
1 00000U garbage
2 00000 garbage
"""


@pytest.fixture
def catalog():
    return load_catalog_text(CATALOG_TEXT)


def test_catalog_ingestion_drops_corrupted(catalog):
    assert [c.name for c in catalog] == ["ISS (ZARYA)", "CSS (TIANHE)", "HST", "SES-1"]


def test_rendezvous_flight_reported(catalog):
    iss = catalog[0]
    t = iss.record.epoch + timedelta(hours=2)
    below = propagate(iss.record, t)

    flight = make_flight(
        flight_id=11,
        start=(below.latitude, below.longitude),
        end=(below.latitude, below.longitude),
        launch=t - timedelta(seconds=300),
        duration_s=600.0,
        max_altitude_km=below.altitude / 1000.0,
    )
    report = assess_flight(flight, catalog, at_time=t, sample_count=101)

    assert report.total_objects_checked >= 1
    assert report.warnings[0].object_name == "ISS (ZARYA)"
    assert report.warnings[0].severity is Severity.CRITICAL
    assert report.overall_status is OverallStatus.DANGER


def test_suborbital_hop_is_safe(catalog):
    """A 107 km hop sits far below everything in the catalog."""
    flight = make_flight(max_altitude_km=107.0, duration_s=660.0)
    report = assess_flight(flight, catalog)
    assert report.total_objects_checked == 0
    assert report.overall_status is OverallStatus.SAFE


def test_registry_to_conflicts(catalog):
    registry = FlightRegistry()
    a = registry.register(make_flight(max_altitude_km=107.0))
    b = registry.register(make_flight(max_altitude_km=99.0))
    registry.register(make_flight(start=(28.5, -80.6), end=(28.6, -80.0)))

    conflicts = detect_conflicts(registry.visible_flights())
    assert [(c.flight_id_a, c.flight_id_b) for c in conflicts] == [(a.id, b.id)]

    with SafetyService(registry, catalog) as service:
        assert service.conflicts() == conflicts
        assert service.assess(a.id).overall_status is OverallStatus.SAFE


def test_display_positions_share_analysis_geometry():
    positions = sample_positions(make_flight(max_altitude_km=107.0), 101)
    assert positions[50].altitude == pytest.approx(107_000.0)
