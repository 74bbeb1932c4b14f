from __future__ import annotations

"""Physical constants and default thresholds for flight safety analysis.

Distances in km and altitudes in meters unless otherwise noted.
"""

# --- Earth parameters ---
EARTH_RADIUS_KM: float = 6378.137
"""WGS-84 equatorial radius of Earth in km."""

EARTH_FLATTENING: float = 1.0 / 298.257223563
"""WGS-84 flattening."""

EARTH_MEAN_RADIUS_KM: float = 6371.0
"""Mean spherical radius of Earth in km, used for haversine distances."""

# --- Trajectory sampling ---
DEFAULT_SAMPLE_COUNT: int = 100
"""Number of trajectory samples used for closest-approach and conflict analysis."""

# --- Proximity envelope ---
ENVELOPE_MARGIN_DEG: float = 2.0
"""Latitude/longitude margin added on each side of a flight's bounding box."""

ENVELOPE_ALTITUDE_MARGIN_KM: float = 200.0
"""Altitude margin added above a flight's maximum altitude in km."""

# --- Severity thresholds (applied to minimum separation) ---
CRITICAL_DISTANCE_KM: float = 1.0
"""Separations below this are critical."""

DANGER_DISTANCE_KM: float = 5.0
"""Separations below this are dangerous."""

WARNING_DISTANCE_KM: float = 100.0
"""Separations below this are reported as warnings."""

# --- Reports ---
MAX_REPORT_WARNINGS: int = 20
"""Maximum number of warnings kept in a safety report."""

# --- Flight-vs-flight conflicts ---
CONFLICT_TIME_TOLERANCE_S: float = 60.0
"""Maximum timestamp difference for two samples to be compared, in seconds."""

CONFLICT_SAFE_DISTANCE_KM: float = 10.0
"""Minimum safe separation between two flights in km."""
