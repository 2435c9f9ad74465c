#!/usr/bin/env python3
"""Test script to verify timeline normalization.

Run from project root:
    python scripts/test_timeline.py
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from surfcast.core.models import ConfidenceBand, ScoringModel, SwellSlot, TidePhase, WindType
from surfcast.core.timeline import TimelineNormalizer, normalize, parse_timestamp, select_current_point


def utc(hour, minute=0, day=15):
    return datetime(2024, 6, day, hour, minute, tzinfo=timezone.utc)


def test_dedup_first_wins_and_sort():
    """Duplicates by minute keep the first occurrence; output is sorted."""
    raw = [
        {"forecastTimestamp": "2024-06-15T12:00:00Z", "quality_score": 55, "waveHeightFt": 3},
        {"forecastTimestamp": "2024-06-15T10:00:00Z", "quality_score": 40, "waveHeightFt": 2},
        {"forecastTimestamp": "2024-06-15T12:00:00Z", "quality_score": 90, "waveHeightFt": 6},
        {"forecastTimestamp": "2024-06-15T12:00:30Z", "quality_score": 95, "waveHeightFt": 7},
        {"forecastTimestamp": "2024-06-15T11:00:00Z", "quality_score": 45, "waveHeightFt": 2.5},
    ]
    points = normalize(raw)

    assert [p.timestamp for p in points] == [utc(10), utc(11), utc(12)]
    assert points[2].scores[ScoringModel.OPEN_METEO] == 55
    assert points[2].height_ft == 3
    print(f"  ✓ {len(raw)} raw points -> {len(points)} unique, sorted")


def test_idempotent():
    raw = [
        {"timestamp": "2024-06-15T13:00:00Z", "breakingWaveHeightFt": 3.2, "quality_score": 61},
        {"timestamp": "2024-06-15T12:00:00Z", "waveHeightFt": 2.0, "probabilityScore": 44},
        {"timestamp": "2024-06-15T12:00:00Z", "waveHeightFt": 9.0, "probabilityScore": 99},
    ]
    once = normalize(raw)
    twice = normalize(once)
    assert once == twice
    assert len(once) == 2
    print("  ✓ normalize(normalize(x)) == normalize(x)")


def test_height_precedence():
    """breaking -> dominant swell -> legacy wave height -> None."""
    base = {"timestamp": "2024-06-15T12:00:00Z"}

    full = normalize([{**base, "breakingWaveHeightFt": 4.0, "dominantSwellHeightFt": 3.0, "waveHeightFt": 2.0}])
    assert full[0].height_ft == 4.0

    no_breaking = normalize([{**base, "dominantSwellHeightFt": 3.0, "dominantSwellPeriodS": 11, "waveHeightFt": 2.0}])
    assert no_breaking[0].height_ft == 3.0
    assert no_breaking[0].period_s == 11

    legacy = normalize([{**base, "waveHeightFt": 2.0, "wavePeriodSec": 8, "waveDirectionDeg": 170}])
    assert legacy[0].height_ft == 2.0
    assert legacy[0].period_s == 8
    assert legacy[0].direction_deg == 170
    assert legacy[0].convention == "legacy"

    tenths = normalize([{**base, "waveHeightTenthsFt": 25}])
    assert tenths[0].height_ft == 2.5

    missing = normalize([{**base, "quality_score": 50}])
    assert missing[0].height_ft is None
    assert missing[0].convention == "current"
    print("  ✓ Height precedence chain resolves each convention")


def test_dominant_component_by_energy():
    """Without an explicit dominant swell, the highest H²T component wins."""
    points = normalize([{
        "timestamp": "2024-06-15T12:00:00Z",
        "waveHeightFt": 2.0,
        "wavePeriodSec": 8,
        "secondarySwellHeightFt": 3.0,
        "secondarySwellPeriodS": 6,
        "secondarySwellDirectionDeg": 90,
    }])
    point = points[0]
    # 2² × 8 = 32 vs 3² × 6 = 54
    assert point.dominant_slot == SwellSlot.SECONDARY
    assert point.height_ft == 3.0
    assert point.period_s == 6
    assert point.direction_deg == 90
    print("  ✓ Secondary swell with more energy becomes dominant")


def test_field_parsing():
    points = normalize([{
        "forecast_timestamp": "2024-06-15T12:00:00Z",
        "quality_score": "72",
        "ecmwfQualityScore": 120,
        "ecmwfWaveHeightFt": 3.5,
        "dominantSwellHeightFt": 3.0,
        "dominantSwellDirectionDeg": 370,
        "windSpeedMph": 12,
        "windDirectionDeg": 0,
        "windType": "cross-shore",
        "tideHeightFt": 2.4,
        "tidePhase": "Dropping",
        "confidenceBand": "High",
        "windWaveHeightFt": -1,
    }])
    point = points[0]
    assert point.scores[ScoringModel.OPEN_METEO] == 72
    assert point.scores[ScoringModel.EURO] == 100
    assert point.model_heights_ft[ScoringModel.EURO] == 3.5
    assert point.model_heights_ft[ScoringModel.OPEN_METEO] == 3.0
    assert point.direction_deg == 10
    assert point.wind_type == WindType.CROSS
    assert point.tide_phase == TidePhase.FALLING
    assert point.confidence_band == ConfidenceBand.HIGH
    assert point.wind_swell.height_ft is None
    print("  ✓ Aliases, clamping and enum parsing")


def test_unparseable_timestamp_skipped():
    points = normalize([
        {"timestamp": "not a time", "quality_score": 80},
        {"quality_score": 80},
        {"timestamp": "2024-06-15T12:00:00Z", "quality_score": 60},
    ])
    assert len(points) == 1
    assert points[0].timestamp == utc(12)


def test_naive_and_offset_timestamps():
    assert parse_timestamp("2024-06-15T12:00:00") == utc(12)
    assert parse_timestamp("2024-06-15T08:00:00-04:00") == utc(12)
    assert parse_timestamp(None) is None


def test_normalizer_accepts_injected_logger():
    import logging

    records = []

    class ListHandler(logging.Handler):
        def emit(self, record):
            records.append(record)

    test_logger = logging.getLogger("surfcast.tests.timeline")
    test_logger.addHandler(ListHandler())
    test_logger.setLevel(logging.DEBUG)

    TimelineNormalizer(logger=test_logger).normalize([{"timestamp": "garbage"}])
    assert any("unparseable" in r.getMessage() for r in records)


def test_select_current_point():
    points = normalize([
        {"timestamp": "2024-06-15T10:00:00Z", "quality_score": 40},
        {"timestamp": "2024-06-15T11:00:00Z", "quality_score": 50},
        {"timestamp": "2024-06-15T12:00:00Z", "quality_score": 60},
    ])

    assert select_current_point(points, utc(11, 30)).timestamp == utc(11)
    assert select_current_point(points, utc(12)).timestamp == utc(12)
    assert select_current_point(points, utc(9)) is None
    assert select_current_point(points, utc(14, 30)) is None
    assert select_current_point([], utc(12)) is None
    print("  ✓ Current point is the latest past point within an hour")


def run_all_tests():
    """Run all tests and report results."""
    print("\n" + "=" * 60)
    print("TIMELINE NORMALIZER TEST SUITE")
    print("=" * 60)

    tests = [
        ("Dedup and Sort", test_dedup_first_wins_and_sort),
        ("Idempotent", test_idempotent),
        ("Height Precedence", test_height_precedence),
        ("Dominant Component by Energy", test_dominant_component_by_energy),
        ("Field Parsing", test_field_parsing),
        ("Unparseable Timestamp Skipped", test_unparseable_timestamp_skipped),
        ("Naive and Offset Timestamps", test_naive_and_offset_timestamps),
        ("Injected Logger", test_normalizer_accepts_injected_logger),
        ("Select Current Point", test_select_current_point),
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
