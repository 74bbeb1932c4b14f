"""TLE (Two-Line Element) parsing into propagator-ready orbital records.

This module wraps the sgp4 library's element-set parsing behind an
immutable ``OrbitalRecord`` that the rest of the engine propagates.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from functools import lru_cache

from sgp4.api import Satrec, WGS72

from skyclear.core.errors import InvalidElementSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrbitalRecord:
    """Propagator state derived once from a two-line element set.

    Attributes:
        name: Object name (line 0, if provided).
        line1: Raw TLE line 1.
        line2: Raw TLE line 2.
        norad_id: NORAD catalog number.
        epoch: Epoch as a UTC datetime.
        inclination_deg: Orbital inclination in degrees.
        raan_deg: Right ascension of ascending node in degrees.
        eccentricity: Orbital eccentricity (dimensionless).
        arg_perigee_deg: Argument of perigee in degrees.
        mean_anomaly_deg: Mean anomaly in degrees.
        mean_motion_rev_per_day: Mean motion in revolutions per day.
        bstar: BSTAR drag term.
        satrec: Underlying sgp4 Satrec object for propagation.
    """

    name: str
    line1: str
    line2: str
    norad_id: int
    epoch: datetime
    inclination_deg: float
    raan_deg: float
    eccentricity: float
    arg_perigee_deg: float
    mean_anomaly_deg: float
    mean_motion_rev_per_day: float
    bstar: float
    satrec: Satrec = field(repr=False, compare=False)

    @classmethod
    def from_lines(cls, line1: str, line2: str, name: str = "") -> OrbitalRecord:
        """Parse an orbital record from two (or three) lines.

        Args:
            line1: TLE line 1 (69 characters).
            line2: TLE line 2 (69 characters).
            name: Optional object name (line 0).

        Returns:
            A parsed OrbitalRecord.

        Raises:
            InvalidElementSet: If the TLE lines are malformed.
        """
        line1 = (line1 or "").strip()
        line2 = (line2 or "").strip()

        if len(line1) != 69 or not line1.startswith("1"):
            logger.error("Invalid TLE line 1: %r", line1)
            raise InvalidElementSet(f"Invalid TLE line 1: {line1!r}")
        if len(line2) != 69 or not line2.startswith("2"):
            logger.error("Invalid TLE line 2: %r", line2)
            raise InvalidElementSet(f"Invalid TLE line 2: {line2!r}")
        if line1[2:7] != line2[2:7]:
            logger.error("TLE catalog numbers differ: %r vs %r", line1[2:7], line2[2:7])
            raise InvalidElementSet(
                f"TLE catalog numbers differ: {line1[2:7]!r} vs {line2[2:7]!r}"
            )

        try:
            sat = Satrec.twoline2rv(line1, line2, WGS72)

            year = int(line1[18:20])
            year = year + 2000 if year < 57 else year + 1900
            day_of_year = float(line1[20:32])
            norad_id = int(line1[2:7].strip())
        except ValueError as exc:
            logger.error("Unparseable TLE fields: %s", exc)
            raise InvalidElementSet(f"Unparseable TLE fields: {exc}") from exc

        if sat.error != 0 or sat.no_kozai <= 0.0:
            logger.error("sgp4 rejected TLE for NORAD %d (error code %d)", norad_id, sat.error)
            raise InvalidElementSet(
                f"sgp4 rejected TLE for NORAD {norad_id}: error code {sat.error}"
            )

        epoch = datetime(year, 1, 1, tzinfo=timezone.utc) + timedelta(
            days=day_of_year - 1
        )

        logger.debug("Parsed TLE for NORAD %d (epoch %s)", norad_id, epoch.isoformat())

        return cls(
            name=(name or "").strip(),
            line1=line1,
            line2=line2,
            norad_id=norad_id,
            epoch=epoch,
            inclination_deg=sat.inclo * 180.0 / math.pi,
            raan_deg=sat.nodeo * 180.0 / math.pi,
            eccentricity=sat.ecco,
            arg_perigee_deg=sat.argpo * 180.0 / math.pi,
            mean_anomaly_deg=sat.mo * 180.0 / math.pi,
            mean_motion_rev_per_day=sat.no_kozai * 1440 / (2 * math.pi),
            bstar=sat.bstar,
            satrec=sat,
        )

    @property
    def period_minutes(self) -> float:
        return 1440.0 / self.mean_motion_rev_per_day

    def __str__(self) -> str:
        header = f"0 {self.name}\n" if self.name else ""
        return f"{header}{self.line1}\n{self.line2}"


@lru_cache(maxsize=16384)
def to_orbital_record(line1: str, line2: str, name: str = "") -> OrbitalRecord:
    """Memoized ``OrbitalRecord.from_lines``.

    Records are immutable, so repeated ingestion of the same catalog entry
    reuses the already-initialized propagator state.
    """
    return OrbitalRecord.from_lines(line1, line2, name=name)


def parse_tle(text: str) -> list[OrbitalRecord]:
    """Parse one or more TLEs from text.

    Handles both 2-line and 3-line (with name) formats.

    Args:
        text: Raw TLE text, one or more TLE sets separated by newlines.

    Returns:
        A list of parsed orbital records.

    Raises:
        InvalidElementSet: If a recognized TLE pair is malformed.
    """
    lines = [l.rstrip() for l in text.strip().splitlines() if l.strip()]
    records: list[OrbitalRecord] = []
    i = 0

    while i < len(lines):
        if lines[i].startswith("1 ") and i + 1 < len(lines) and lines[i + 1].startswith("2 "):
            records.append(to_orbital_record(lines[i], lines[i + 1]))
            i += 2
        elif (
            not lines[i].startswith("1 ")
            and not lines[i].startswith("2 ")
            and i + 2 < len(lines)
            and lines[i + 1].startswith("1 ")
            and lines[i + 2].startswith("2 ")
        ):
            name = lines[i][2:] if lines[i].startswith("0 ") else lines[i]
            records.append(to_orbital_record(lines[i + 1], lines[i + 2], name=name))
            i += 3
        else:
            i += 1  # skip unrecognized lines

    logger.debug("Parsed %d TLEs from text", len(records))
    return records
