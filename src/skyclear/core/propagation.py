"""Orbital propagation via SGP4, projected to geodetic coordinates."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Sequence

import numpy as np

logger = logging.getLogger(__name__)
from numpy.typing import NDArray
from sgp4.api import SatrecArray, jday
from skyclear.core.errors import PropagationError
from skyclear.core.tle import OrbitalRecord
from skyclear.utils.constants import EARTH_FLATTENING, EARTH_RADIUS_KM


@dataclass(frozen=True)
class GeodeticPosition:
    """A point referenced to the Earth's surface.

    Attributes:
        latitude: Geodetic latitude in degrees, [-90, 90].
        longitude: Longitude in degrees, [-180, 180].
        altitude: Height above the WGS-84 ellipsoid in meters.
    """

    latitude: float
    longitude: float
    altitude: float

    @property
    def altitude_km(self) -> float:
        return self.altitude / 1000.0


def to_utc(t: datetime) -> datetime:
    """Return ``t`` as an aware UTC datetime; naive values are taken as UTC."""
    if t.tzinfo is None:
        return t.replace(tzinfo=timezone.utc)
    return t.astimezone(timezone.utc)


def _julian(t: datetime) -> tuple[float, float]:
    t = to_utc(t)
    return jday(t.year, t.month, t.day, t.hour, t.minute, t.second + t.microsecond / 1e6)


def gmst(jd, fr):
    """Greenwich Mean Sidereal Time in radians (IAU 1982 model).

    Works on scalars or numpy arrays of Julian day / day fraction.
    """
    tut1 = (jd - 2451545.0 + fr) / 36525.0
    seconds = (
        -6.2e-6 * tut1 ** 3
        + 0.093104 * tut1 ** 2
        + (876600.0 * 3600.0 + 8640184.812866) * tut1
        + 67310.54841
    )
    return np.mod(seconds * (2.0 * np.pi / 86400.0), 2.0 * np.pi)


def teme_to_ecef(r_teme: NDArray[np.float64], theta) -> NDArray[np.float64]:
    """Rotate TEME position vector(s) of shape (..., 3) about Z by GMST."""
    cos_t = np.cos(theta)
    sin_t = np.sin(theta)
    x, y, z = r_teme[..., 0], r_teme[..., 1], r_teme[..., 2]
    return np.stack([x * cos_t + y * sin_t, -x * sin_t + y * cos_t, z], axis=-1)


def ecef_to_geodetic(r_ecef: NDArray[np.float64]) -> NDArray[np.float64]:
    """Convert ECEF km vector(s) to [lat_deg, lon_deg, alt_m] (WGS-84, Bowring)."""
    a = EARTH_RADIUS_KM
    f = EARTH_FLATTENING
    b = a * (1.0 - f)
    e2 = f * (2.0 - f)
    ep2 = (a ** 2 - b ** 2) / b ** 2

    x, y, z = r_ecef[..., 0], r_ecef[..., 1], r_ecef[..., 2]
    p = np.hypot(x, y)
    theta = np.arctan2(z * a, p * b)

    lon = np.arctan2(y, x)
    lat = np.arctan2(z + ep2 * b * np.sin(theta) ** 3, p - e2 * a * np.cos(theta) ** 3)

    sin_lat = np.sin(lat)
    n = a / np.sqrt(1.0 - e2 * sin_lat ** 2)
    # p / cos(lat) is unstable over the poles; use the z form there.
    alt = np.where(
        np.abs(np.cos(lat)) > 1e-10,
        p / np.cos(lat) - n,
        np.abs(z) - b,
    )
    return np.stack([np.degrees(lat), np.degrees(lon), alt * 1000.0], axis=-1)


def propagate(record: OrbitalRecord, timestamp: datetime) -> GeodeticPosition:
    """Propagate an orbital record to one instant.

    Args:
        record: A parsed orbital record.
        timestamp: UTC datetime to propagate to.

    Returns:
        The object's geodetic position.

    Raises:
        PropagationError: If SGP4 fails (error code != 0) or yields a non-finite state.
    """
    jd, fr = _julian(timestamp)
    error_code, pos, _vel = record.satrec.sgp4(jd, fr)

    if error_code != 0 or not np.all(np.isfinite(pos)):
        logger.warning(
            "SGP4 propagation failed for NORAD %d at %s: error code %d",
            record.norad_id, timestamp, error_code,
        )
        raise PropagationError(
            f"SGP4 propagation failed for NORAD {record.norad_id} at {timestamp}: error code {error_code}"
        )

    r_ecef = teme_to_ecef(np.array(pos, dtype=np.float64), gmst(jd, fr))
    lat, lon, alt = ecef_to_geodetic(r_ecef)
    return GeodeticPosition(latitude=float(lat), longitude=float(lon), altitude=float(alt))


def propagate_track(
    record: OrbitalRecord, times: Sequence[datetime]
) -> tuple[NDArray[np.float64], NDArray[np.bool_]]:
    """Propagate one record to many instants using vectorized SGP4.

    Args:
        record: A parsed orbital record.
        times: UTC datetimes to propagate to.

    Returns:
        Tuple of:
            - positions: Array of shape (n, 3) with [lat_deg, lon_deg, alt_m]
            - valid_mask: Boolean array of shape (n,) marking successful samples
    """
    if len(times) == 0:
        return np.empty((0, 3), dtype=np.float64), np.empty(0, dtype=np.bool_)

    julian = [_julian(t) for t in times]
    jd = np.array([j for j, _ in julian], dtype=np.float64)
    fr = np.array([f for _, f in julian], dtype=np.float64)

    errors, positions, _velocities = record.satrec.sgp4_array(jd, fr)
    positions = np.asarray(positions, dtype=np.float64)

    valid_mask = (np.asarray(errors) == 0) & np.all(np.isfinite(positions), axis=1)
    geodetic = ecef_to_geodetic(teme_to_ecef(positions, gmst(jd, fr)))

    if not np.all(valid_mask):
        logger.debug(
            "NORAD %d: %d/%d samples failed to propagate",
            record.norad_id, int(np.count_nonzero(~valid_mask)), len(times),
        )
    return geodetic, valid_mask


def propagate_batch(
    records: Sequence[OrbitalRecord], time: datetime
) -> tuple[NDArray[np.float64], NDArray[np.bool_]]:
    """Propagate many records to a single time using vectorized SGP4.

    Uses SatrecArray for C-level batch propagation (fast path for large catalogs).

    Args:
        records: Orbital records to propagate.
        time: Single UTC datetime to propagate all objects to.

    Returns:
        Tuple of:
            - positions: Array of shape (n, 3) with [lat_deg, lon_deg, alt_m]
            - valid_mask: Boolean array of shape (n,) indicating which propagations succeeded
    """
    if not records:
        return np.empty((0, 3), dtype=np.float64), np.empty(0, dtype=np.bool_)

    satrec_array = SatrecArray([record.satrec for record in records])

    jd, fr = _julian(time)
    # SatrecArray requires arrays, not scalars
    jd_array = np.array([jd], dtype=np.float64)
    fr_array = np.array([fr], dtype=np.float64)

    # Output shape: errors (n,1), positions (n,1,3), velocities (n,1,3)
    errors, positions, _velocities = satrec_array.sgp4(jd_array, fr_array)
    teme = np.asarray(positions[:, 0, :], dtype=np.float64)

    valid_mask = (errors[:, 0] == 0) & np.all(np.isfinite(teme), axis=1)
    geodetic = ecef_to_geodetic(teme_to_ecef(teme, gmst(jd, fr)))

    logger.debug("Batch propagated %d/%d records to %s", int(np.count_nonzero(valid_mask)), len(records), time)
    return geodetic, valid_mask
