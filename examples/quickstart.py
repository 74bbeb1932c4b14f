"""SkyClear Quickstart — check a suborbital hop against the ISS."""

from datetime import timedelta

from skyclear import FlightPlan, assess_flight, load_catalog_text, propagate, sample_positions

# ISS (ZARYA) TLE
tle_text = """
ISS (ZARYA)
1 25544U 98067A   24045.54896019  .00016717  00000-0  30093-3 0  9993
2 25544  51.6412 207.4925 0004948 290.5508 178.9792 15.49583488439596
""".strip()

catalog = load_catalog_text(tle_text)
iss = catalog[0]

when = iss.record.epoch + timedelta(hours=1)
pos = propagate(iss.record, when)
print(f"Object:    {iss.name} (NORAD {iss.norad_id})")
print(f"Position:  {pos.latitude:.4f}°, {pos.longitude:.4f}°, {pos.altitude_km:.1f} km")

# A round trip under the ISS whose apex reaches the station's altitude
flight = FlightPlan(
    id=1,
    name="Apex test",
    start_latitude=pos.latitude,
    start_longitude=pos.longitude,
    end_latitude=pos.latitude,
    end_longitude=pos.longitude,
    launch_time=when - timedelta(minutes=5),
    landing_time=when + timedelta(minutes=5),
    max_altitude_km=pos.altitude_km,
    craft_model="Demo",
)

peak = max(sample_positions(flight, 101), key=lambda p: p.altitude)
print(f"Apex:      {peak.altitude_km:.1f} km")

# Screen the catalog at the apex instant rather than at launch
report = assess_flight(flight, catalog, at_time=when)
print(f"Status:    {report.overall_status.value} ({report.conflicts_found} warnings)")
for w in report.warnings:
    print(f"  {w.severity.value:8s} {w.object_name}: {w.closest_distance_km:.2f} km at {w.time_of_closest_approach}")
