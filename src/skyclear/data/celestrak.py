"""Catalog feed client.

Fetches TLE catalogs from CelesTrak and single objects from the KeepTrack
API, returning ready-to-screen catalog objects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import requests

logger = logging.getLogger(__name__)

from skyclear.data.catalog import CatalogObject, load_catalog, load_catalog_text


@dataclass
class CatalogClient:
    """Client for public TLE feeds.

    Attributes:
        celestrak_url: CelesTrak GP query endpoint.
        keeptrack_url: KeepTrack satellite endpoint.
        timeout_s: Per-request timeout in seconds.
    """

    celestrak_url: str = "https://celestrak.org/NORAD/elements/gp.php"
    keeptrack_url: str = "https://api.keeptrack.space/v2/sat"
    timeout_s: float = 30.0
    _session: requests.Session = field(default_factory=requests.Session, repr=False)

    def _request(self, url: str, params: dict | None = None) -> requests.Response:
        """GET a URL.

        Raises:
            requests.HTTPError: If the request fails.
        """
        response = self._session.get(url, params=params, timeout=self.timeout_s)
        if response.status_code == 429:
            logger.warning("Rate limited by %s", url)
        response.raise_for_status()
        return response

    def fetch_group(self, group: str = "active") -> list[CatalogObject]:
        """Fetch a CelesTrak group (e.g. ``active``, ``stations``, ``starlink``).

        Malformed entries in the feed are skipped.

        Args:
            group: CelesTrak group name.

        Returns:
            Catalog objects in feed order.

        Raises:
            requests.HTTPError: If the request fails.
        """
        response = self._request(self.celestrak_url, params={"GROUP": group, "FORMAT": "tle"})
        text = response.text

        if not text.strip():
            return []

        catalog = load_catalog_text(text)
        logger.info("Fetched %d objects from CelesTrak group %r", len(catalog), group)
        return catalog

    def fetch_object(self, norad_id: int) -> CatalogObject:
        """Fetch a single object (e.g. 25544 for the ISS) from KeepTrack.

        Args:
            norad_id: NORAD catalog number.

        Returns:
            The object's catalog entry.

        Raises:
            ValueError: If no valid TLE is returned for the object.
            requests.HTTPError: If the request fails.
        """
        response = self._request(f"{self.keeptrack_url}/{norad_id}")
        data = response.json()

        catalog = load_catalog([data]) if isinstance(data, dict) else []
        if not catalog:
            raise ValueError(f"No valid TLE found for NORAD ID {norad_id}")

        return catalog[0]
