"""Satellite catalog ingestion.

Turns raw ``{name, line1, line2}`` entries (or TLE text) into propagator-ready
catalog objects. A malformed entry drops only that entry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Tuple, Union

from skyclear.core.errors import InvalidElementSet
from skyclear.core.tle import OrbitalRecord, to_orbital_record

logger = logging.getLogger(__name__)

RawEntry = Union[Mapping[str, str], Tuple[str, str, str]]


@dataclass(frozen=True)
class CatalogObject:
    """A tracked object with its propagator state.

    Attributes:
        name: Display name of the object.
        record: Orbital record derived from the object's TLE.
    """

    name: str
    record: OrbitalRecord

    @property
    def norad_id(self) -> int:
        return self.record.norad_id


def _entry_fields(entry: RawEntry) -> tuple[str, str | None, str | None]:
    if isinstance(entry, Mapping):
        return (
            entry.get("name") or entry.get("OBJECT_NAME") or "",
            entry.get("line1") or entry.get("TLE_LINE_1"),
            entry.get("line2") or entry.get("TLE_LINE_2"),
        )
    name, line1, line2 = entry
    return name, line1, line2


def load_catalog(entries: Iterable[RawEntry]) -> list[CatalogObject]:
    """Build catalog objects from raw entries.

    Entries may be mappings with ``name``/``line1``/``line2`` keys (or the
    ``OBJECT_NAME``/``TLE_LINE_1``/``TLE_LINE_2`` keys of GP JSON feeds), or
    ``(name, line1, line2)`` tuples. Entries with missing or malformed
    elements are skipped.

    Args:
        entries: Raw catalog entries.

    Returns:
        Catalog objects in input order.
    """
    catalog: list[CatalogObject] = []
    skipped = 0

    for entry in entries:
        name, line1, line2 = _entry_fields(entry)
        if not line1 or not line2:
            logger.warning("Skipping catalog entry %r: missing element lines", name)
            skipped += 1
            continue
        try:
            record = to_orbital_record(line1, line2, name=name)
        except InvalidElementSet as exc:
            logger.warning("Skipping catalog entry %r: %s", name, exc)
            skipped += 1
            continue
        catalog.append(CatalogObject(name=record.name or str(record.norad_id), record=record))

    logger.info("Loaded %d catalog objects (%d skipped)", len(catalog), skipped)
    return catalog


def load_catalog_text(text: str) -> list[CatalogObject]:
    """Build catalog objects from raw 2-line or 3-line TLE text.

    Unlike ``parse_tle``, a malformed TLE pair is skipped rather than raised.
    """
    lines = [l.rstrip() for l in text.strip().splitlines() if l.strip()]
    entries: list[tuple[str, str, str]] = []
    i = 0

    while i < len(lines):
        if lines[i].startswith("1 ") and i + 1 < len(lines) and lines[i + 1].startswith("2 "):
            entries.append(("", lines[i], lines[i + 1]))
            i += 2
        elif (
            not lines[i].startswith(("1 ", "2 "))
            and i + 2 < len(lines)
            and lines[i + 1].startswith("1 ")
            and lines[i + 2].startswith("2 ")
        ):
            name = lines[i][2:] if lines[i].startswith("0 ") else lines[i]
            entries.append((name, lines[i + 1], lines[i + 2]))
            i += 3
        else:
            i += 1

    return load_catalog(entries)
