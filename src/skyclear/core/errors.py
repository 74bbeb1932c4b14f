"""Error kinds raised by the analysis engine."""

from __future__ import annotations


class SkyClearError(Exception):
    """Base class for all engine errors."""


class InvalidElementSet(SkyClearError, ValueError):
    """A two-line element set is malformed and cannot seed the propagator."""


class PropagationError(SkyClearError, ValueError):
    """SGP4 could not produce a valid state for an object at an instant."""


class InvalidFlightGeometry(SkyClearError, ValueError):
    """A flight plan's geometry or timing makes its trajectory undefined."""
