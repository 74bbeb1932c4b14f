"""In-memory flight registrations.

Applies the registration rules a flight must satisfy before it reaches the
analysis engine, and tracks which flights are visible to analyses.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass, field

from skyclear.core.propagation import to_utc
from skyclear.core.trajectory import FlightPlan

logger = logging.getLogger(__name__)


def validate_flight_plan(flight: FlightPlan) -> dict[str, str]:
    """Check a flight against the registration rules.

    Returns:
        Mapping of field name to error message; empty if the flight is valid.
    """
    errors: dict[str, str] = {}

    if not flight.name.strip():
        errors["name"] = "Flight name is required"

    for name in ("start_latitude", "end_latitude"):
        value = getattr(flight, name)
        if not math.isfinite(value) or not -90 <= value <= 90:
            errors[name] = "Latitude must be between -90 and 90"

    for name in ("start_longitude", "end_longitude"):
        value = getattr(flight, name)
        if not math.isfinite(value) or not -180 <= value <= 180:
            errors[name] = "Longitude must be between -180 and 180"

    if to_utc(flight.landing_time) <= to_utc(flight.launch_time):
        errors["landing_time"] = "Landing must be after launch"

    if not math.isfinite(flight.max_altitude_km) or flight.max_altitude_km <= 0:
        errors["max_altitude_km"] = "Max altitude must be greater than 0"

    if not flight.craft_model.strip():
        errors["craft_model"] = "Spacecraft model is required"

    return errors


@dataclass
class FlightRegistry:
    """Registered flights keyed by id, with per-flight visibility.

    Flights are immutable; ``update`` replaces the stored plan. Hidden or
    deleted flights are excluded from ``visible_flights``.
    """

    _flights: dict[int, FlightPlan] = field(default_factory=dict, repr=False)
    _hidden: set[int] = field(default_factory=set, repr=False)
    _next_id: int = field(default=1, repr=False)

    def register(self, flight: FlightPlan) -> FlightPlan:
        """Validate a flight and store it under a newly assigned id.

        The incoming ``id`` is ignored.

        Raises:
            ValueError: If the flight fails validation.
        """
        stored = dataclasses.replace(flight, id=self._next_id)
        self._check(stored)
        self._flights[stored.id] = stored
        self._next_id += 1
        logger.info("Registered flight %d (%s)", stored.id, stored.name)
        return stored

    def update(self, flight: FlightPlan) -> FlightPlan:
        """Replace an existing flight.

        Raises:
            KeyError: If no flight has this id.
            ValueError: If the flight fails validation.
        """
        if flight.id not in self._flights:
            raise KeyError(f"No flight registered with id {flight.id}")
        self._check(flight)
        self._flights[flight.id] = flight
        logger.info("Updated flight %d", flight.id)
        return flight

    def delete(self, flight_id: int) -> None:
        """Remove a flight. Unknown ids are ignored."""
        if self._flights.pop(flight_id, None) is not None:
            logger.info("Deleted flight %d", flight_id)
        self._hidden.discard(flight_id)

    def get(self, flight_id: int) -> FlightPlan:
        try:
            return self._flights[flight_id]
        except KeyError:
            raise KeyError(f"No flight registered with id {flight_id}") from None

    def set_visible(self, flight_id: int, visible: bool) -> None:
        self.get(flight_id)
        if visible:
            self._hidden.discard(flight_id)
        else:
            self._hidden.add(flight_id)

    def all_flights(self) -> list[FlightPlan]:
        return list(self._flights.values())

    def visible_flights(self) -> list[FlightPlan]:
        """Snapshot of the flights analyses should consider."""
        return [f for fid, f in self._flights.items() if fid not in self._hidden]

    def __len__(self) -> int:
        return len(self._flights)

    def __contains__(self, flight_id: object) -> bool:
        return flight_id in self._flights

    def _check(self, flight: FlightPlan) -> None:
        errors = validate_flight_plan(flight)
        if errors:
            logger.warning("Rejected flight %r: %s", flight.name, errors)
            details = "; ".join(f"{k}: {v}" for k, v in errors.items())
            raise ValueError(f"Invalid flight registration: {details}")
