#!/usr/bin/env python3
"""Surf forecast runner.

Summarizes a raw forecast timeline for a configured spot.

Usage:
    # Print day verdicts to console (default)
    python scripts/run_forecast.py --spot lido_beach --timeline timeline.json

    # Output as JSON
    python scripts/run_forecast.py --spot lido_beach --timeline timeline.json --format json

    # Validate swell against the live buoy and fill tides from NOAA
    python scripts/run_forecast.py --spot lido_beach --timeline timeline.json --live-buoy --live-tides

    # Score with the Euro model
    python scripts/run_forecast.py --spot lido_beach --timeline timeline.json --model euro

The timeline file holds either a list of points or an object with a
"timeline" list and an optional "version" string.
"""

import argparse
import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from surfcast.clients.buoy_client import BuoyClient
from surfcast.clients.noaa_tides_client import NOAATidesClient
from surfcast.core.cache import SummaryCache
from surfcast.core.engine import ForecastEngine, SpotForecast
from surfcast.core.formatting import direction_to_compass, format_surf_height
from surfcast.core.models import ScoringModel
from surfcast.core.spot import SpotDatabase


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Quiet down noisy loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Summarize a surf forecast timeline into daily verdicts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--spot", "-s",
        type=str,
        required=True,
        help="Spot ID from config/spots.yaml",
    )

    parser.add_argument(
        "--timeline", "-t",
        type=str,
        required=True,
        help="Path to raw timeline JSON",
    )

    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    parser.add_argument(
        "--model",
        choices=["open_meteo", "euro", "ecmwf"],
        default=os.environ.get("SURFCAST_SCORING_MODEL", ScoringModel.OPEN_METEO.value),
        help="Scoring model (default: $SURFCAST_SCORING_MODEL or open_meteo)",
    )

    parser.add_argument(
        "--spots-file",
        type=str,
        help="Path to spots.yaml (default: config/spots.yaml)",
    )

    parser.add_argument(
        "--live-buoy",
        action="store_true",
        help="Validate current swell against the spot's NDBC buoy",
    )

    parser.add_argument(
        "--live-tides",
        action="store_true",
        help="Fill missing tide heights from NOAA predictions",
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        help="Write output to file instead of stdout",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args(argv)


def load_timeline(path: Path) -> tuple[list, Optional[str]]:
    """Load raw points and the timeline version from a JSON file."""
    with open(path) as f:
        data = json.load(f)

    if isinstance(data, list):
        return data, None
    if isinstance(data, dict) and isinstance(data.get("timeline"), list):
        return data["timeline"], data.get("version")
    raise ValueError(f"{path}: expected a list of points or an object with a 'timeline' list")


def format_text(forecast: SpotForecast) -> str:
    """Plain-text forecast summary."""
    lines = []
    lines.append("=" * 50)
    lines.append(f"{forecast.spot.name.upper()} SURF FORECAST")
    lines.append(f"Model: {forecast.model.value}")
    lines.append("=" * 50)

    if forecast.current_point is not None and forecast.current is not None:
        point = forecast.current_point
        lines.append("")
        lines.append(
            f"NOW: {forecast.current.label} ({forecast.current.score}) "
            f"{format_surf_height(point.height_ft)} @ {point.period_s or '?'}s "
            f"{direction_to_compass(point.direction_deg)}"
        )

    if forecast.swell is not None:
        if forecast.swell.has_data:
            parts = [
                f"{c.height_ft:.1f}ft @ {c.period_s or '?'}s {direction_to_compass(c.direction_deg)}"
                for c in forecast.swell.components
            ]
            lines.append(f"Swell ({forecast.swell.source}): " + ", ".join(parts))
        else:
            lines.append("Swell: no swell data")

    for day in forecast.days:
        lines.append("")
        header = f"{day.day_name} ({day.day_key}): {day.verdict_label.upper()}"
        if day.has_data:
            header += f" avg {day.avg_score}, best {day.best_score}"
        lines.append(header)
        lines.append(
            f"  {day.display_height}, confidence {day.confidence_band.value} ({day.confidence_percentage}%)"
        )
        if day.is_extended_forecast:
            lines.append("  Extended forecast, low model skill")
        if day.has_model_discrepancy:
            lines.append(f"  Models disagree by up to {day.max_model_diff_ft}ft")
        for window in day.best_windows:
            lines.append(
                f"  Best {window.time_range} {window.period_label} ({window.avg_score}): "
                f"{window.height_label}, {window.wind_description}, {window.tide_description}"
            )
        for window in day.avoid_windows:
            lines.append(f"  Avoid {window.time_range}: {window.reason}")

    return "\n".join(lines)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.verbose)

    print(f"Building forecast for {args.spot}...", file=sys.stderr)
    print(f"Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}", file=sys.stderr)

    spot_db = SpotDatabase(Path(args.spots_file)) if args.spots_file else None
    engine = ForecastEngine(
        spot_db=spot_db,
        buoy_client=BuoyClient() if args.live_buoy else None,
        tides_client=NOAATidesClient() if args.live_tides else None,
        model=ScoringModel.from_name(args.model),
        cache=SummaryCache(),
    )

    raw_points, version = load_timeline(Path(args.timeline))
    try:
        forecast = engine.build_forecast(args.spot, raw_points, timeline_version=version)
    except KeyError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    if forecast.errors:
        print("Warnings during forecast:", file=sys.stderr)
        for err in forecast.errors:
            print(f"  - {err}", file=sys.stderr)
        print(file=sys.stderr)

    if args.format == "json":
        output = json.dumps(forecast.to_dict(), indent=2)
    else:
        output = format_text(forecast)

    if args.output:
        output_path = Path(args.output)
        output_path.write_text(output)
        print(f"Output written to: {output_path}", file=sys.stderr)
    else:
        print(output)

    return 0 if forecast.days else 1


if __name__ == "__main__":
    sys.exit(main())
