"""SkyClear Batch Screening — assess every registered flight against a live catalog.

Fetches the CelesTrak ``active`` group, so this example needs network access.
"""

import logging
from datetime import datetime, timedelta, timezone

from skyclear import CatalogClient, FlightPlan, FlightRegistry, SafetyService

logging.basicConfig(level=logging.INFO)

catalog = CatalogClient().fetch_group("active")

launch = datetime.now(timezone.utc) + timedelta(hours=1)
registry = FlightRegistry()
for name, start, end, apex in [
    ("West Texas hop", (31.42, -104.76), (31.42, -104.76), 107.0),
    ("Cape transfer", (28.57, -80.65), (32.0, -70.0), 350.0),
    ("Texas chase", (31.42, -104.76), (31.5, -104.5), 100.0),
]:
    registry.register(FlightPlan(
        id=0,
        name=name,
        start_latitude=start[0],
        start_longitude=start[1],
        end_latitude=end[0],
        end_longitude=end[1],
        launch_time=launch,
        landing_time=launch + timedelta(minutes=11),
        max_altitude_km=apex,
        craft_model="Demo",
    ))

with SafetyService(registry, catalog) as service:
    futures = {f.id: service.submit(f.id) for f in registry.visible_flights()}
    for flight_id, future in futures.items():
        report = future.result()
        print(f"{report.flight_name}: {report.overall_status.value}, "
              f"{report.conflicts_found} warnings from {report.total_objects_checked} candidates")
        for w in report.warnings[:5]:
            print(f"  {w.severity.value:8s} {w.object_name}: {w.closest_distance_km:.2f} km")

    for conflict in service.conflicts():
        print(f"Flights {conflict.flight_id_a} and {conflict.flight_id_b}: "
              f"{len(conflict.conflict_points)} conflict points")
