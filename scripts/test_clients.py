#!/usr/bin/env python3
"""Test script for the buoy and tide clients.

Uses canned NDBC / CO-OPS payloads, so no network access is needed.

Run from project root:
    python scripts/test_clients.py
"""

import sys
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd
import requests

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from surfcast.clients.buoy_client import BuoyClient, BuoyError
from surfcast.clients.noaa_tides_client import NOAATidesClient, NOAATidesError
from surfcast.core.models import SwellSlot

SPEC_TEXT = """\
#YY  MM DD hh mm WVHT  SwH  SwP  WWH  WWP SwD WWD  STEEPNESS  APD MWD
#yr  mo dy hr mn    m    m  sec    m  sec  -  degT     -      sec degT
2024 06 15 14 40  1.2  1.0 10.0  0.6  5.0 SSE   S    AVERAGE  6.2 160
2024 06 15 13 40  1.1  0.9 10.0  0.5  4.8 SSE   S    AVERAGE  6.0 158
"""

STANDARD_TEXT = """\
#YY  MM DD hh mm WDIR WSPD GST  WVHT   DPD   APD MWD   PRES  ATMP  WTMP  DEWP  VIS PTDY  TIDE
#yr  mo dy hr mn degT m/s  m/s     m   sec   sec degT   hPa  degC  degC  degC  nmi  hPa    ft
2024 06 15 14 40 200  5.0  6.0   1.2  11.0   6.2 160 1015.0  22.0  20.0  15.0   MM   MM    MM
2024 06 15 14 10 200  5.0  6.0    MM    MM    MM  MM 1015.0  22.0  20.0  15.0   MM   MM    MM
"""


class FakeResponse:
    def __init__(self, text="", payload=None):
        self.text = text
        self._payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self._payload


class FakeSession:
    """Stands in for requests.Session; routes by URL suffix."""

    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append(url)
        for suffix, response in self.responses.items():
            if url.endswith(suffix):
                if isinstance(response, Exception):
                    raise response
                return response
        raise requests.ConnectionError(f"no route for {url}")


def buoy_client(tmp, responses):
    client = BuoyClient(cache_path=Path(tmp) / "buoy.db")
    client.session = FakeSession(responses)
    return client


def test_parse_spectral():
    with tempfile.TemporaryDirectory() as tmp:
        client = BuoyClient(cache_path=Path(tmp) / "buoy.db")
        records = client._parse_ndbc_spectral(SPEC_TEXT)

    assert len(records) == 2
    latest = records[0]
    assert latest["time"] == "2024-06-15T14:40:00Z"
    assert latest["wave_height_m"] == 1.2
    assert latest["swell_period_s"] == 10.0
    assert latest["swell_direction"] == "SSE"
    assert latest["steepness"] == "AVERAGE"
    assert latest["mean_wave_direction"] == 160.0
    print(f"  ✓ Parsed {len(records)} spectral records")


def test_parse_standard_missing_markers():
    with tempfile.TemporaryDirectory() as tmp:
        client = BuoyClient(cache_path=Path(tmp) / "buoy.db")
        records = client._parse_ndbc_standard(STANDARD_TEXT)

    assert len(records) == 2
    assert records[0]["wave_height_m"] == 1.2
    assert records[0]["dominant_period_s"] == 11.0
    assert records[1]["wave_height_m"] is None
    assert records[1]["mean_wave_direction"] is None


def test_latest_reading():
    with tempfile.TemporaryDirectory() as tmp:
        client = buoy_client(tmp, {
            ".spec": FakeResponse(SPEC_TEXT),
            ".txt": FakeResponse(STANDARD_TEXT),
        })
        now = datetime(2024, 6, 15, 15, tzinfo=timezone.utc)
        reading = client.get_latest_reading("44065", now=now)

    assert reading is not None
    assert reading.station_id == "44065"
    assert reading.timestamp == datetime(2024, 6, 15, 14, 40, tzinfo=timezone.utc)
    assert reading.total_wave_height_ft == 3.9
    assert reading.swell_height_ft == 3.3
    assert reading.swell_direction_deg == 157.5
    assert reading.wind_wave_height_ft == 2.0
    assert reading.wind_wave_direction_deg == 180.0
    assert reading.dominant_period_s == 11.0
    assert reading.is_stale is False

    components = reading.components()
    assert [c.slot for c in components] == [SwellSlot.PRIMARY, SwellSlot.WIND]
    print(f"  ✓ {reading.total_wave_height_ft}ft total, swell {reading.swell_height_ft}ft @ {reading.swell_period_s}s")


def test_stale_reading():
    with tempfile.TemporaryDirectory() as tmp:
        client = BuoyClient(cache_path=Path(tmp) / "buoy.db")
        spectral = pd.DataFrame(client._parse_ndbc_spectral(SPEC_TEXT))
        reading = client.reading_from_records(
            "44065", spectral, now=datetime(2024, 6, 15, 17, tzinfo=timezone.utc)
        )
    assert reading.is_stale is True


def test_standard_only_fallback():
    with tempfile.TemporaryDirectory() as tmp:
        client = buoy_client(tmp, {
            ".spec": requests.ConnectionError("spectral down"),
            ".txt": FakeResponse(STANDARD_TEXT),
        })
        reading = client.get_latest_reading("44065", now=datetime(2024, 6, 15, 15, tzinfo=timezone.utc))

    assert reading.total_wave_height_ft == 3.9
    assert reading.dominant_period_s == 11.0
    assert reading.components() == []


def test_both_sources_down():
    with tempfile.TemporaryDirectory() as tmp:
        client = buoy_client(tmp, {})
        try:
            client.get_latest_reading("44065")
        except BuoyError as e:
            print(f"  ✓ BuoyError: {e}")
        else:
            raise AssertionError("Expected BuoyError when both feeds fail")


def test_buoy_cache():
    with tempfile.TemporaryDirectory() as tmp:
        client = buoy_client(tmp, {
            ".spec": FakeResponse(SPEC_TEXT),
            ".txt": FakeResponse(STANDARD_TEXT),
        })
        client.get_spectral_data("44065")
        client.get_spectral_data("44065")
        assert len(client.session.calls) == 1

        client.get_spectral_data("44065", use_cache=False)
        assert len(client.session.calls) == 2


def test_tide_hourly_heights():
    payload = {"predictions": [
        {"t": "2024-06-15 00:00", "v": "1.234"},
        {"t": "2024-06-15 01:00", "v": "1.500"},
        {"t": "2024-06-15 02:00", "v": ""},
    ]}
    with tempfile.TemporaryDirectory() as tmp:
        client = NOAATidesClient(cache_path=Path(tmp) / "tides.db")
        client.session = FakeSession({"datagetter": FakeResponse(payload=payload)})
        heights = client.get_hourly_heights(
            "8531680",
            start=datetime(2024, 6, 15, tzinfo=timezone.utc),
            end=datetime(2024, 6, 16, tzinfo=timezone.utc),
        )

    assert len(heights) == 2
    assert heights[pd.Timestamp("2024-06-15 01:00", tz="UTC")] == 1.5
    assert heights.get(pd.Timestamp("2024-06-15 02:00", tz="UTC")) is None
    print(f"  ✓ {len(heights)} hourly heights indexed by UTC")


def test_tide_api_error():
    with tempfile.TemporaryDirectory() as tmp:
        client = NOAATidesClient(cache_path=Path(tmp) / "tides.db")
        client.session = FakeSession({"datagetter": FakeResponse(payload={"error": {"message": "No data"}})})
        try:
            client.get_tide_predictions("0000000")
        except NOAATidesError as e:
            assert "No data" in str(e)
        else:
            raise AssertionError("Expected NOAATidesError")


def run_all_tests():
    """Run all tests and report results."""
    print("\n" + "=" * 60)
    print("CLIENT TEST SUITE")
    print("=" * 60)

    tests = [
        ("Parse Spectral", test_parse_spectral),
        ("Parse Standard Missing Markers", test_parse_standard_missing_markers),
        ("Latest Reading", test_latest_reading),
        ("Stale Reading", test_stale_reading),
        ("Standard-Only Fallback", test_standard_only_fallback),
        ("Both Sources Down", test_both_sources_down),
        ("Buoy Cache", test_buoy_cache),
        ("Tide Hourly Heights", test_tide_hourly_heights),
        ("Tide API Error", test_tide_api_error),
    ]

    passed = 0
    failed = 0

    for name, test_func in tests:
        try:
            test_func()
            passed += 1
        except AssertionError as e:
            failed += 1
            print(f"\n  ✗ FAILED: {name}")
            print(f"    Error: {e}")
        except Exception as e:
            failed += 1
            print(f"\n  ✗ ERROR: {name}")
            print(f"    Exception: {e}")

    print("\n" + "=" * 60)
    print("TEST RESULTS")
    print("=" * 60)
    print(f"  Passed: {passed}")
    print(f"  Failed: {failed}")
    print(f"  Total:  {len(tests)}")
    print("=" * 60)

    return failed == 0


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
