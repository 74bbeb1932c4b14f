"""Severity classification and safety report assembly.

Warnings are ranked by severity, then by closest distance, and a report keeps
at most ``MAX_REPORT_WARNINGS`` of them while counting all.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Sequence

from skyclear.core.propagation import GeodeticPosition
from skyclear.utils.constants import (
    CRITICAL_DISTANCE_KM,
    DANGER_DISTANCE_KM,
    MAX_REPORT_WARNINGS,
    WARNING_DISTANCE_KM,
)

logger = logging.getLogger(__name__)


class Severity(Enum):
    """Severity of a close approach, most urgent first."""

    CRITICAL = "critical"
    DANGER = "danger"
    WARNING = "warning"
    SAFE = "safe"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.CRITICAL: 0,
    Severity.DANGER: 1,
    Severity.WARNING: 2,
    Severity.SAFE: 3,
}


class OverallStatus(Enum):
    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"


@dataclass(frozen=True)
class CollisionWarning:
    object_name: str
    closest_distance_km: float
    time_of_closest_approach: datetime
    flight_position: GeodeticPosition
    object_position: GeodeticPosition
    severity: Severity


@dataclass(frozen=True)
class SafetyReport:
    flight_id: int
    flight_name: str
    total_objects_checked: int
    conflicts_found: int
    warnings: list[CollisionWarning] = field(default_factory=list)
    overall_status: OverallStatus = OverallStatus.SAFE


def classify_severity(
    distance_km: float,
    critical_km: float = CRITICAL_DISTANCE_KM,
    danger_km: float = DANGER_DISTANCE_KM,
    warning_km: float = WARNING_DISTANCE_KM,
) -> Severity:
    """Bucket a minimum separation into a severity level.

    <1 km = critical, <5 km = danger, <100 km = warning, otherwise safe.
    """
    if distance_km < critical_km:
        return Severity.CRITICAL
    elif distance_km < danger_km:
        return Severity.DANGER
    elif distance_km < warning_km:
        return Severity.WARNING
    else:
        return Severity.SAFE


def overall_status(warnings: Sequence[CollisionWarning]) -> OverallStatus:
    severities = {w.severity for w in warnings}
    if Severity.CRITICAL in severities or Severity.DANGER in severities:
        return OverallStatus.DANGER
    if Severity.WARNING in severities:
        return OverallStatus.WARNING
    return OverallStatus.SAFE


def build_report(
    flight_id: int,
    flight_name: str,
    candidate_count: int,
    warnings: Sequence[CollisionWarning],
    max_warnings: int = MAX_REPORT_WARNINGS,
) -> SafetyReport:
    """
    Assemble a ranked, capped safety report.

    Args:
        flight_id: Flight the report is for
        flight_name: Flight display name
        candidate_count: Number of objects that were analysed
        warnings: Collision warnings, in any order
        max_warnings: Cap on the number of warnings kept

    Returns:
        SafetyReport whose counts reflect all warnings and whose list holds
        the most urgent ones (severity, then distance)
    """
    ranked = sorted(warnings, key=lambda w: (w.severity.rank, w.closest_distance_km))
    status = overall_status(ranked)

    logger.debug(
        "Report for flight %s: %d warnings, status=%s", flight_id, len(ranked), status.value
    )
    return SafetyReport(
        flight_id=flight_id,
        flight_name=flight_name,
        total_objects_checked=candidate_count,
        conflicts_found=len(ranked),
        warnings=ranked[:max_warnings],
        overall_status=status,
    )
