"""Tests for parametric flight trajectory sampling."""
from __future__ import annotations

import dataclasses
from datetime import timedelta

import pytest

from conftest import make_flight
from skyclear.core.errors import InvalidFlightGeometry
from skyclear.core.trajectory import sample, sample_positions, validate_geometry


@pytest.mark.parametrize("n", [2, 3, 10, 100, 101])
def test_sample_count(n: int):
    assert len(sample(make_flight(), n)) == n
    assert len(sample_positions(make_flight(), n)) == n


def test_endpoints_match_launch_and_landing():
    flight = make_flight(start=(28.5, -80.6), end=(30.0, -75.0))
    samples = sample(flight, 100)

    first, last = samples[0], samples[-1]
    assert first.timestamp == flight.launch_time
    assert last.timestamp == flight.landing_time
    assert (first.position.latitude, first.position.longitude) == (28.5, -80.6)
    assert last.position.latitude == pytest.approx(30.0)
    assert last.position.longitude == pytest.approx(-75.0)
    assert first.position.altitude == 0.0
    assert last.position.altitude == pytest.approx(0.0, abs=1e-6)


def test_suborbital_round_trip_peak():
    """Round trip from (31.42, -104.76) to 107 km over 660 s."""
    flight = make_flight(max_altitude_km=107.0, duration_s=660.0)

    exact = sample(flight, 101)
    assert exact[50].position.altitude == pytest.approx(107_000.0)
    assert exact[50].timestamp == flight.launch_time + timedelta(seconds=330)

    samples = sample(flight, 100)
    peak = max(samples, key=lambda s: s.position.altitude)
    assert peak.position.altitude == pytest.approx(107_000.0, rel=1e-3)
    assert samples[0].position.altitude == pytest.approx(0.0, abs=1e-6)
    assert samples[-1].position.altitude == pytest.approx(0.0, abs=1e-6)
    assert all(s.position.latitude == 31.42 and s.position.longitude == -104.76 for s in samples)


def test_altitude_profile_symmetric():
    samples = sample(make_flight(max_altitude_km=50.0), 11)
    altitudes = [s.position.altitude for s in samples]
    for i in range(11):
        assert altitudes[i] == pytest.approx(altitudes[10 - i], abs=1e-6)


def test_interpolation_is_linear_in_degrees():
    """Midpoint is the arithmetic mean of the endpoints, not a great-circle midpoint."""
    flight = make_flight(start=(10.0, 20.0), end=(50.0, 100.0))
    mid = sample(flight, 3)[1].position
    assert mid.latitude == pytest.approx(30.0)
    assert mid.longitude == pytest.approx(60.0)


def test_timestamps_strictly_increasing():
    samples = sample(make_flight(), 100)
    times = [s.timestamp for s in samples]
    assert all(a < b for a, b in zip(times, times[1:]))


def test_display_and_analysis_geometry_agree():
    flight = make_flight(start=(10.0, 20.0), end=(12.0, 25.0))
    assert sample_positions(flight, 50) == [s.position for s in sample(flight, 50)]


def test_deterministic():
    flight = make_flight()
    assert sample(flight, 100) == sample(flight, 100)


def test_sample_count_too_small():
    with pytest.raises(ValueError, match="at least 2"):
        sample(make_flight(), 1)


def test_landing_before_launch_rejected():
    flight = make_flight()
    bad = dataclasses.replace(flight, landing_time=flight.launch_time)
    with pytest.raises(InvalidFlightGeometry):
        sample(bad, 10)
    with pytest.raises(InvalidFlightGeometry):
        sample_positions(bad, 10)


def test_non_finite_coordinates_rejected():
    bad = make_flight(start=(float("nan"), 0.0))
    with pytest.raises(InvalidFlightGeometry, match="non-finite"):
        validate_geometry(bad)


@pytest.mark.parametrize("start,end", [
    ((95.0, 0.0), (0.0, 0.0)),
    ((0.0, 0.0), (-90.5, 0.0)),
    ((0.0, 181.0), (0.0, 0.0)),
    ((0.0, 0.0), (0.0, -200.0)),
])
def test_out_of_range_coordinates_rejected(start, end):
    with pytest.raises(InvalidFlightGeometry, match="outside"):
        validate_geometry(make_flight(start=start, end=end))


@pytest.mark.parametrize("apex", [0.0, -5.0])
def test_non_positive_apex_rejected(apex: float):
    flight = make_flight(max_altitude_km=apex)
    with pytest.raises(InvalidFlightGeometry, match="must be positive"):
        validate_geometry(flight)
    with pytest.raises(InvalidFlightGeometry):
        sample(flight, 10)


def test_boundary_coordinates_accepted():
    validate_geometry(make_flight(start=(-90.0, -180.0), end=(90.0, 180.0)))


def test_duration():
    assert make_flight(duration_s=660.0).duration_s == 660.0
