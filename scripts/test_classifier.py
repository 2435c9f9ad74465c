#!/usr/bin/env python3
"""Test script to verify score classification works correctly.

Run from project root:
    python scripts/test_classifier.py
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from surfcast.core.classifier import ScoreClassifier, classify, classify_point
from surfcast.core.models import Rating, ScoringModel, TimelinePoint


def make_point(height_ft=3.0, scores=None):
    return TimelinePoint(
        timestamp=datetime(2024, 6, 15, 14, tzinfo=timezone.utc),
        height_ft=height_ft,
        scores=scores or {},
    )


def test_band_boundaries():
    """Each band boundary maps to the documented neighbor exactly."""
    print("\n" + "=" * 60)
    print("TEST: Band Boundaries")
    print("=" * 60)

    cases = [
        (0, "Don't Bother"),
        (39, "Don't Bother"),
        (40, "Worth a Look"),
        (59, "Worth a Look"),
        (60, "Go Surf"),
        (75, "Go Surf"),
        (76, "Firing"),
        (90, "Firing"),
        (91, "All-Time"),
        (100, "All-Time"),
    ]

    for score, expected in cases:
        label = classify(score)
        status = "✓" if label == expected else "✗"
        print(f"  {status} {score:3d} -> {label}")
        assert label == expected, f"{score}: expected {expected}, got {label}"


def test_rounding_half_up():
    """Scores are rounded to the nearest integer before banding."""
    classifier = ScoreClassifier()

    assert classifier.label(39.4) == "Don't Bother"
    assert classifier.label(39.5) == "Worth a Look"
    assert classifier.label(75.49) == "Go Surf"
    assert classifier.label(75.5) == "Firing"
    assert classifier.label(90.5) == "All-Time"
    print("  ✓ 39.5 rounds up to Worth a Look, 75.5 to Firing")


def test_missing_score():
    classifier = ScoreClassifier()
    assert classifier.rate(None) is None
    assert classifier.label(None) == "N/A"

    result = classifier.classify_point(make_point(scores={}))
    assert result.score is None
    assert result.label == "N/A"
    assert result.badge.bucket == "none"
    print("  ✓ Missing score yields N/A")


def test_flat_override():
    """A flat ocean is Don't Bother regardless of score."""
    classifier = ScoreClassifier()

    flat = classifier.classify_point(make_point(height_ft=0.7, scores={ScoringModel.OPEN_METEO: 85}))
    assert flat.flat is True
    assert flat.rating == Rating.DONT_BOTHER
    assert flat.label == "Don't Bother"
    assert flat.score == 85

    really_flat = classifier.classify_point(make_point(height_ft=0.2, scores={ScoringModel.OPEN_METEO: 70}))
    assert really_flat.label == "Don't Bother"

    surf = classifier.classify_point(make_point(height_ft=1.2, scores={ScoringModel.OPEN_METEO: 85}))
    assert surf.flat is False
    assert surf.label == "Firing"

    assert classifier.label(85, height_label="<1ft") == "Don't Bother"
    assert classifier.label(85, height_label="2-3ft") == "Firing"
    print("  ✓ <1ft and Flat force Don't Bother")


def test_effective_score_model_selection():
    """The selected model's score wins; the other model only fills gaps."""
    classifier = ScoreClassifier()
    both = make_point(scores={ScoringModel.OPEN_METEO: 70, ScoringModel.EURO: 50})
    open_meteo_only = make_point(scores={ScoringModel.OPEN_METEO: 70})
    euro_only = make_point(scores={ScoringModel.EURO: 55})

    assert classifier.effective_score(both, ScoringModel.OPEN_METEO) == 70
    assert classifier.effective_score(both, ScoringModel.EURO) == 50
    assert classifier.effective_score(open_meteo_only, ScoringModel.EURO) == 70
    assert classifier.effective_score(euro_only, ScoringModel.OPEN_METEO) == 55
    assert classifier.effective_score(make_point(), ScoringModel.EURO) is None

    euro = classify_point(both, ScoringModel.EURO)
    assert euro.score == 50
    assert euro.label == "Worth a Look"
    assert euro.model == ScoringModel.EURO
    print("  ✓ Euro selection uses Euro score, falls back to Open-Meteo")


def test_badge_colors():
    classifier = ScoreClassifier()

    cases = [
        (95, "#059669", "#ffffff"),
        (80, "#16a34a", "#ffffff"),
        (65, "#84cc16", "#000000"),
        (45, "#eab308", "#000000"),
        (20, "#ef4444", "#ffffff"),
    ]
    for score, background, text in cases:
        badge = classifier.badge_color(score)
        assert badge.background == background, f"{score}: {badge.background}"
        assert badge.text == text, f"{score}: {badge.text}"
    print("  ✓ Badge buckets and text contrast")


def test_rating_order():
    assert Rating.DONT_BOTHER.rank < Rating.WORTH_A_LOOK.rank < Rating.GO_SURF.rank
    assert Rating.GO_SURF.rank < Rating.FIRING.rank < Rating.ALL_TIME.rank


def test_model_name_parsing():
    assert ScoringModel.from_name("euro") == ScoringModel.EURO
    assert ScoringModel.from_name("ECMWF") == ScoringModel.EURO
    assert ScoringModel.from_name("open-meteo") == ScoringModel.OPEN_METEO
    assert ScoringModel.from_name(None) == ScoringModel.OPEN_METEO
    try:
        ScoringModel.from_name("gfs")
    except ValueError:
        pass
    else:
        raise AssertionError("Unknown model name should raise ValueError")


def run_all_tests():
    """Run all tests and report results."""
    print("\n" + "=" * 60)
    print("SCORE CLASSIFIER TEST SUITE")
    print("=" * 60)

    tests = [
        ("Band Boundaries", test_band_boundaries),
        ("Rounding Half Up", test_rounding_half_up),
        ("Missing Score", test_missing_score),
        ("Flat Override", test_flat_override),
        ("Effective Score Model Selection", test_effective_score_model_selection),
        ("Badge Colors", test_badge_colors),
        ("Rating Order", test_rating_order),
        ("Model Name Parsing", test_model_name_parsing),
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
