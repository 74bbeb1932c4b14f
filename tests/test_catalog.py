"""Tests for catalog ingestion and the catalog feed client."""
from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from conftest import CSS_TLE_LINES, ISS_TLE_LINES
from skyclear.data.catalog import CatalogObject, load_catalog, load_catalog_text
from skyclear.data.celestrak import CatalogClient

ISS_TLE_TEXT = f"ISS (ZARYA)\n{ISS_TLE_LINES[0]}\n{ISS_TLE_LINES[1]}\n"
CSS_TLE_TEXT = f"CSS (TIANHE)\n{CSS_TLE_LINES[0]}\n{CSS_TLE_LINES[1]}\n"


class TestLoadCatalog:
    def test_mapping_entries(self):
        catalog = load_catalog([
            {"name": "ISS (ZARYA)", "line1": ISS_TLE_LINES[0], "line2": ISS_TLE_LINES[1]},
        ])
        assert len(catalog) == 1
        assert isinstance(catalog[0], CatalogObject)
        assert catalog[0].name == "ISS (ZARYA)"
        assert catalog[0].norad_id == 25544

    def test_gp_json_keys(self):
        catalog = load_catalog([
            {"OBJECT_NAME": "ISS (ZARYA)", "TLE_LINE_1": ISS_TLE_LINES[0], "TLE_LINE_2": ISS_TLE_LINES[1]},
        ])
        assert catalog[0].name == "ISS (ZARYA)"

    def test_tuple_entries(self):
        catalog = load_catalog([("CSS (TIANHE)", *CSS_TLE_LINES), ("ISS (ZARYA)", *ISS_TLE_LINES)])
        assert [c.norad_id for c in catalog] == [48274, 25544]

    def test_malformed_entries_skipped(self):
        catalog = load_catalog([
            ("BAD", "garbage", ISS_TLE_LINES[1]),
            {"name": "MISSING"},
            ("ISS (ZARYA)", *ISS_TLE_LINES),
            ("MIXED", ISS_TLE_LINES[0], CSS_TLE_LINES[1]),
        ])
        assert [c.name for c in catalog] == ["ISS (ZARYA)"]

    def test_unnamed_entry_uses_norad_id(self):
        catalog = load_catalog([("", *ISS_TLE_LINES)])
        assert catalog[0].name == "25544"

    def test_empty(self):
        assert load_catalog([]) == []


class TestLoadCatalogText:
    def test_three_line_text(self):
        catalog = load_catalog_text(ISS_TLE_TEXT + CSS_TLE_TEXT)
        assert [c.name for c in catalog] == ["ISS (ZARYA)", "CSS (TIANHE)"]

    def test_two_line_text(self):
        catalog = load_catalog_text("\n".join(ISS_TLE_LINES))
        assert catalog[0].norad_id == 25544

    def test_malformed_pair_skipped(self):
        bad = "BROKEN\n1 99999U short line\n2 99999 short line\n"
        catalog = load_catalog_text(bad + ISS_TLE_TEXT)
        assert [c.name for c in catalog] == ["ISS (ZARYA)"]


def _make_response(status_code: int = 200, text: str = "", json_data=None) -> MagicMock:
    """Create a mock response object."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    resp.json.return_value = json_data
    resp.raise_for_status = MagicMock()
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error")
    return resp


def test_fetch_group_success():
    client = CatalogClient()
    with patch.object(client._session, "get", return_value=_make_response(200, ISS_TLE_TEXT + CSS_TLE_TEXT)) as get:
        catalog = client.fetch_group("stations")

    assert [c.norad_id for c in catalog] == [25544, 48274]
    _, kwargs = get.call_args
    assert kwargs["params"] == {"GROUP": "stations", "FORMAT": "tle"}
    assert kwargs["timeout"] == client.timeout_s


def test_fetch_group_empty():
    client = CatalogClient()
    with patch.object(client._session, "get", return_value=_make_response(200, "")):
        assert client.fetch_group() == []


def test_fetch_group_http_error():
    client = CatalogClient()
    with patch.object(client._session, "get", return_value=_make_response(429, "Rate limited")):
        with pytest.raises(requests.HTTPError):
            client.fetch_group()


def test_fetch_object_success():
    client = CatalogClient()
    data = {
        "OBJECT_NAME": "ISS (ZARYA)",
        "NORAD_CAT_ID": 25544,
        "TLE_LINE_1": ISS_TLE_LINES[0],
        "TLE_LINE_2": ISS_TLE_LINES[1],
    }
    with patch.object(client._session, "get", return_value=_make_response(200, json_data=data)) as get:
        obj = client.fetch_object(25544)

    assert obj.name == "ISS (ZARYA)"
    assert obj.norad_id == 25544
    assert get.call_args[0][0] == "https://api.keeptrack.space/v2/sat/25544"


def test_fetch_object_without_tle():
    client = CatalogClient()
    with patch.object(client._session, "get", return_value=_make_response(200, json_data={"error": "not found"})):
        with pytest.raises(ValueError, match="No valid TLE"):
            client.fetch_object(99999)
