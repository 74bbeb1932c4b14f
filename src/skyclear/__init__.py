"""
SkyClear — flight safety screening against tracked satellites.

Propagates satellite TLEs with SGP4, samples planned flight trajectories,
and reports close approaches to tracked objects and to other planned
flights.
"""

from __future__ import annotations

__version__ = "0.1.0-dev"

from skyclear.core.errors import (
    SkyClearError,
    InvalidElementSet,
    PropagationError,
    InvalidFlightGeometry,
)
from skyclear.core.tle import OrbitalRecord, parse_tle, to_orbital_record
from skyclear.core.propagation import GeodeticPosition, propagate, propagate_batch, propagate_track
from skyclear.core.trajectory import FlightPlan, TrajectorySample, sample, sample_positions
from skyclear.core.screening import ProximityEnvelope, filter_proximate
from skyclear.core.report import (
    CollisionWarning,
    OverallStatus,
    SafetyReport,
    Severity,
    build_report,
    classify_severity,
)
from skyclear.core.approach import analyze, assess_flight, closest_approach, separation_km
from skyclear.core.conflicts import ConflictPoint, FlightConflict, detect_conflicts
from skyclear.data.catalog import CatalogObject, load_catalog, load_catalog_text
from skyclear.data.celestrak import CatalogClient
from skyclear.data.flights import FlightRegistry, validate_flight_plan
from skyclear.api.service import SafetyService

__all__ = [
    "__version__",
    "SkyClearError",
    "InvalidElementSet",
    "PropagationError",
    "InvalidFlightGeometry",
    "OrbitalRecord",
    "parse_tle",
    "to_orbital_record",
    "GeodeticPosition",
    "propagate",
    "propagate_batch",
    "propagate_track",
    "FlightPlan",
    "TrajectorySample",
    "sample",
    "sample_positions",
    "ProximityEnvelope",
    "filter_proximate",
    "CollisionWarning",
    "OverallStatus",
    "SafetyReport",
    "Severity",
    "build_report",
    "classify_severity",
    "analyze",
    "assess_flight",
    "closest_approach",
    "separation_km",
    "ConflictPoint",
    "FlightConflict",
    "detect_conflicts",
    "CatalogObject",
    "load_catalog",
    "load_catalog_text",
    "CatalogClient",
    "FlightRegistry",
    "validate_flight_plan",
    "SafetyService",
]
