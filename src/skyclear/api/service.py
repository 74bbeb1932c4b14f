"""Background safety analysis over a catalog and a flight registry.

Analyses run on a thread pool. A new request for a flight supersedes the
one already queued or running for it: the queued future is cancelled, and a
running one finishes but its result is never stored over a newer one.

Registry changes made through the service (``update_flight``, ``set_visible``,
``delete_flight``) drop the results derived from the old flight set. Changes
made on the registry directly leave stored results in place until the next
submit.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from skyclear.core.approach import assess_flight
from skyclear.core.conflicts import FlightConflict, detect_conflicts
from skyclear.core.report import SafetyReport
from skyclear.core.trajectory import FlightPlan
from skyclear.data.catalog import CatalogObject
from skyclear.data.flights import FlightRegistry
from skyclear.utils.constants import DEFAULT_SAMPLE_COUNT

logger = logging.getLogger(__name__)

_CONFLICTS_KEY = "conflicts"


@dataclass
class SafetyService:
    """Runs flight safety analyses off the caller's thread.

    Args:
        registry: Registered flights.
        catalog: Snapshot of tracked objects; replace with ``set_catalog``.
        sample_count: Trajectory resolution for every analysis.
        max_workers: Thread pool size.

    Example::

        service = SafetyService(registry, catalog)
        future = service.submit(flight.id)
        report = future.result()
    """

    registry: FlightRegistry = field(default_factory=FlightRegistry)
    catalog: Sequence[CatalogObject] = field(default_factory=list)
    sample_count: int = DEFAULT_SAMPLE_COUNT
    max_workers: int = 4
    _executor: ThreadPoolExecutor = field(init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _generations: dict = field(default_factory=dict, init=False, repr=False)
    _pending: dict = field(default_factory=dict, init=False, repr=False)
    _reports: dict = field(default_factory=dict, init=False, repr=False)
    _conflicts: list = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="skyclear"
        )

    def set_catalog(self, catalog: Sequence[CatalogObject]) -> None:
        """Replace the catalog snapshot used by subsequent analyses."""
        self.catalog = list(catalog)
        logger.info("Catalog replaced: %d objects", len(self.catalog))

    def assess(self, flight_id: int, at_time: datetime | None = None) -> SafetyReport:
        """Analyse a flight synchronously and store the report.

        Raises:
            KeyError: If the flight is not registered.
            InvalidFlightGeometry: If the flight's trajectory is undefined.
        """
        return self.submit(flight_id, at_time).result()

    def submit(self, flight_id: int, at_time: datetime | None = None) -> Future:
        """Queue an analysis for a flight, superseding any pending one.

        Returns:
            Future resolving to the SafetyReport, or raising
            InvalidFlightGeometry for a flight whose trajectory is undefined.

        Raises:
            KeyError: If the flight is not registered.
        """
        flight = self.registry.get(flight_id)
        catalog = list(self.catalog)
        return self._schedule(
            flight_id,
            lambda: assess_flight(flight, catalog, at_time, sample_count=self.sample_count),
            self._store_report,
        )

    def latest_report(self, flight_id: int) -> SafetyReport | None:
        with self._lock:
            return self._reports.get(flight_id)

    def conflicts(self) -> list[FlightConflict]:
        """Detect conflicts among visible flights synchronously."""
        return self.submit_conflicts().result()

    def submit_conflicts(self) -> Future:
        """Queue conflict detection over the visible flights, superseding any pending run."""
        flights = self.registry.visible_flights()
        return self._schedule(
            _CONFLICTS_KEY,
            lambda: detect_conflicts(flights, sample_count=self.sample_count),
            self._store_conflicts,
        )

    def latest_conflicts(self) -> list[FlightConflict]:
        with self._lock:
            return list(self._conflicts)

    def update_flight(self, flight: FlightPlan) -> FlightPlan:
        """Replace a registered flight and drop every result derived from it.

        Raises:
            KeyError: If the flight is not registered.
            ValueError: If the new plan fails registration checks.
        """
        updated = self.registry.update(flight)
        with self._lock:
            self._invalidate(flight.id)
        return updated

    def set_visible(self, flight_id: int, visible: bool) -> None:
        """Show or hide a flight; conflicts involving it are dropped.

        Stored conflicts cover the previous visible set until
        ``submit_conflicts`` runs again.
        """
        self.registry.set_visible(flight_id, visible)
        with self._lock:
            self._bump(_CONFLICTS_KEY)
            self._drop_conflicts(flight_id)

    def delete_flight(self, flight_id: int) -> None:
        """Delete a flight and drop every result derived from it."""
        self.registry.delete(flight_id)
        with self._lock:
            self._invalidate(flight_id)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=True)

    def __enter__(self) -> SafetyService:
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()

    def _bump(self, key) -> int:
        generation = self._generations.get(key, 0) + 1
        self._generations[key] = generation
        previous = self._pending.pop(key, None)
        if previous is not None and previous.cancel():
            logger.debug("Cancelled superseded analysis for %s", key)
        return generation

    def _schedule(self, key, work, store) -> Future:
        with self._lock:
            generation = self._bump(key)
            future = self._executor.submit(self._run, key, generation, work, store)
            self._pending[key] = future
        return future

    def _run(self, key, generation: int, work, store):
        try:
            result = work()
        finally:
            with self._lock:
                if self._generations.get(key) == generation:
                    self._pending.pop(key, None)
        with self._lock:
            if self._generations.get(key) != generation:
                logger.debug("Discarding stale result for %s (generation %d)", key, generation)
                return result
            store(key, result)
        return result

    def _invalidate(self, flight_id: int) -> None:
        self._bump(flight_id)
        self._reports.pop(flight_id, None)
        self._bump(_CONFLICTS_KEY)
        self._drop_conflicts(flight_id)

    def _drop_conflicts(self, flight_id: int) -> None:
        self._conflicts = [
            c for c in self._conflicts
            if flight_id not in (c.flight_id_a, c.flight_id_b)
        ]

    def _store_report(self, flight_id: int, report: SafetyReport) -> None:
        if flight_id in self.registry:
            self._reports[flight_id] = report

    def _store_conflicts(self, _key: str, conflicts: list[FlightConflict]) -> None:
        self._conflicts = [
            c for c in conflicts
            if c.flight_id_a in self.registry and c.flight_id_b in self.registry
        ]
