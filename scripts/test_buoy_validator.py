#!/usr/bin/env python3
"""Test script to verify swell validation against buoy readings.

Run from project root:
    python scripts/test_buoy_validator.py
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from surfcast.core.buoy_validator import BuoyValidator, validate_swell
from surfcast.core.models import BuoyReading, SwellComponent, SwellSlot


def forecast(*heights):
    slots = [SwellSlot.PRIMARY, SwellSlot.SECONDARY, SwellSlot.WIND]
    return [SwellComponent(slot, h, 10.0, 180.0) for slot, h in zip(slots, heights)]


def reading(total, stale=False, swell=(2.5, 10.0), wind_wave=(1.5, 5.0)):
    return BuoyReading(
        station_id="44065",
        timestamp=datetime(2024, 6, 15, 14, 40, tzinfo=timezone.utc),
        total_wave_height_ft=total,
        dominant_period_s=10.0,
        swell_height_ft=swell[0],
        swell_period_s=swell[1],
        swell_direction_deg=157.5,
        wind_wave_height_ft=wind_wave[0],
        wind_wave_period_s=wind_wave[1],
        wind_wave_direction_deg=180.0,
        is_stale=stale,
    )


def test_rss_height():
    validator = BuoyValidator()
    assert validator.rss_height(forecast(3.0, 4.0)) == 5.0
    assert validator.rss_height(forecast(None, 0.0)) is None
    print("  ✓ sqrt(3² + 4²) = 5")


def test_validated_forecast_kept():
    result = validate_swell(forecast(3.0, 4.0), reading(5.0))
    assert result.is_valid is True
    assert result.source == "model"
    assert result.reason == "validated"
    assert result.ratio == 1.0
    assert [c.height_ft for c in result.components] == [3.0, 4.0]
    print("  ✓ 3ft + 4ft vs 5ft buoy is validated")


def test_ratio_bounds_inclusive():
    validator = BuoyValidator()
    assert validator.check_ratio(forecast(3.5), 5.0).is_valid is True
    assert validator.check_ratio(forecast(6.5), 5.0).is_valid is True
    assert validator.check_ratio(forecast(3.0), 5.0).is_valid is False
    assert validator.check_ratio(forecast(7.0), 5.0).is_valid is False


def test_divergent_forecast_uses_buoy():
    result = validate_swell(forecast(6.0), reading(3.0))
    assert result.is_valid is False
    assert result.source == "buoy"
    assert result.reason == "forecast_diverges"
    assert result.ratio == 2.0
    assert [c.slot for c in result.components] == [SwellSlot.PRIMARY, SwellSlot.WIND]
    assert result.components[0].height_ft == 2.5
    assert result.components[1].height_ft == 1.5
    print(f"  ✓ ratio {result.ratio} -> buoy components")


def test_buoy_replaces_whole_breakdown():
    """Model secondary swell is not mixed into buoy-sourced components."""
    result = validate_swell(forecast(6.0, 2.0), reading(3.0, wind_wave=(None, None)))
    assert result.source == "buoy"
    assert [c.slot for c in result.components] == [SwellSlot.PRIMARY]
    assert result.components[0].height_ft == 2.5

    stale = validate_swell(forecast(3.0, 4.0), reading(5.0, stale=True))
    assert [c.slot for c in stale.components] == [SwellSlot.PRIMARY, SwellSlot.WIND]
    print("  ✓ Buoy breakdown shown on its own")


def test_stale_buoy_not_validated():
    result = validate_swell(forecast(3.0, 4.0), reading(5.0, stale=True))
    assert result.is_valid is False
    assert result.source == "buoy"
    assert result.reason == "buoy_stale"


def test_no_buoy_keeps_model():
    result = validate_swell(forecast(3.0), None)
    assert result.is_valid is False
    assert result.source == "model"
    assert result.reason == "no_buoy_reading"
    assert result.ratio is None
    assert [c.height_ft for c in result.components] == [3.0]


def test_buoy_without_breakdown_keeps_model():
    result = validate_swell(forecast(6.0), reading(3.0, swell=(None, None), wind_wave=(None, None)))
    assert result.source == "model"
    assert result.reason == "forecast_diverges"
    assert [c.height_ft for c in result.components] == [6.0]


def test_zero_buoy_total_is_invalid():
    result = validate_swell(forecast(3.0), reading(0.0))
    assert result.is_valid is False
    assert result.ratio is None


def test_no_swell_data():
    result = validate_swell(forecast(None, None), None)
    assert result.has_data is False
    assert result.components == []
    assert result.reason == "no_swell_data"

    missing_total = validate_swell([], reading(None, swell=(None, None), wind_wave=(None, None)))
    assert missing_total.has_data is False
    assert missing_total.reason == "no_swell_data"


def run_all_tests():
    """Run all tests and report results."""
    print("\n" + "=" * 60)
    print("BUOY VALIDATOR TEST SUITE")
    print("=" * 60)

    tests = [
        ("RSS Height", test_rss_height),
        ("Validated Forecast Kept", test_validated_forecast_kept),
        ("Ratio Bounds Inclusive", test_ratio_bounds_inclusive),
        ("Divergent Forecast Uses Buoy", test_divergent_forecast_uses_buoy),
        ("Buoy Replaces Whole Breakdown", test_buoy_replaces_whole_breakdown),
        ("Stale Buoy Not Validated", test_stale_buoy_not_validated),
        ("No Buoy Keeps Model", test_no_buoy_keeps_model),
        ("Buoy Without Breakdown", test_buoy_without_breakdown_keeps_model),
        ("Zero Buoy Total", test_zero_buoy_total_is_invalid),
        ("No Swell Data", test_no_swell_data),
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
