"""Timeline normalization.

Raw forecast points arrive in one of two sourcing conventions:

- current: breaking height plus dominant/secondary/wind-wave swell fields
  and per-model quality scores
- legacy: a single primary wave height/period/direction and a probability
  score

Each raw point is parsed into strict CurrentFields/LegacyFields records and
resolved once into a canonical TimelinePoint, so downstream stages only ever
see one shape. The normalizer also drops provider-retry duplicates and sorts
the timeline.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Union

import pandas as pd

from surfcast.core.models import (
    ConfidenceBand,
    ScoringModel,
    SwellComponent,
    SwellSlot,
    TidePhase,
    TimelinePoint,
    WindType,
)


logger = logging.getLogger(__name__)

RawPoint = Union[dict, TimelinePoint]

# Canonical field -> accepted raw keys, first match wins
FIELD_ALIASES = {
    "timestamp": ("forecastTimestamp", "timestamp", "time", "forecast_timestamp"),
    # current convention
    "breaking_height_ft": ("breakingWaveHeightFt", "breaking_wave_height_ft", "breakingHeightFt"),
    "dominant_height_ft": ("dominantSwellHeightFt", "dominant_swell_height_ft"),
    "dominant_period_s": ("dominantSwellPeriodS", "dominant_swell_period_s"),
    "dominant_direction_deg": ("dominantSwellDirectionDeg", "dominant_swell_direction_deg"),
    "secondary_height_ft": ("secondarySwellHeightFt", "secondary_swell_height_ft"),
    "secondary_period_s": ("secondarySwellPeriodS", "secondary_swell_period_s"),
    "secondary_direction_deg": ("secondarySwellDirectionDeg", "secondary_swell_direction_deg"),
    "wind_wave_height_ft": ("windWaveHeightFt", "wind_wave_height_ft"),
    "wind_wave_period_s": ("windWavePeriodS", "wind_wave_period_s"),
    "wind_wave_direction_deg": ("windWaveDirectionDeg", "wind_wave_direction_deg"),
    "quality_score": ("quality_score", "qualityScore"),
    "euro_quality_score": ("ecmwfQualityScore", "ecmwf_quality_score", "euroQualityScore"),
    "euro_height_ft": ("ecmwfWaveHeightFt", "ecmwf_wave_height_ft"),
    "confidence_band": ("confidenceBand", "confidence_band"),
    # legacy convention
    "wave_height_ft": ("waveHeightFt", "wave_height_ft"),
    "wave_height_tenths_ft": ("waveHeightTenthsFt", "wave_height_tenths_ft"),
    "wave_period_s": ("wavePeriodSec", "wave_period_sec", "wave_period_s"),
    "wave_direction_deg": ("waveDirectionDeg", "wave_direction_deg"),
    "probability_score": ("probabilityScore", "probability_score"),
    # shared
    "wind_speed_mph": ("windSpeedMph", "wind_speed_mph"),
    "wind_gust_mph": ("windGustsMph", "windGustMph", "wind_gusts_mph", "wind_gust_mph"),
    "wind_direction_deg": ("windDirectionDeg", "wind_direction_deg"),
    "wind_type": ("windType", "wind_type"),
    "tide_height_ft": ("tideHeightFt", "tide_height_ft"),
    "tide_phase": ("tidePhase", "tide_phase"),
}

CURRENT_MARKERS = (
    "breaking_height_ft",
    "dominant_height_ft",
    "secondary_height_ft",
    "wind_wave_height_ft",
    "quality_score",
)


def _lookup(raw: dict, name: str):
    for key in FIELD_ALIASES[name]:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _safe_float(value) -> Optional[float]:
    """Convert to float, returning None for missing or non-numeric values."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def _height(value) -> Optional[float]:
    height = _safe_float(value)
    if height is None or height < 0:
        return None
    return height


def _period(value) -> Optional[float]:
    period = _safe_float(value)
    if period is None or period <= 0:
        return None
    return period


def _direction(value) -> Optional[float]:
    direction = _safe_float(value)
    if direction is None:
        return None
    return direction % 360


def _score(value) -> Optional[float]:
    score = _safe_float(value)
    if score is None:
        return None
    return min(100.0, max(0.0, score))


def _speed(value) -> Optional[float]:
    speed = _safe_float(value)
    if speed is None or speed < 0:
        return None
    return speed


def parse_timestamp(value) -> Optional[datetime]:
    """Parse a timestamp to an aware UTC datetime.

    Naive timestamps are taken as UTC. Returns None when unparseable.
    """
    if value is None:
        return None
    try:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            parsed = pd.to_datetime(value, unit="s", utc=True)
        else:
            parsed = pd.to_datetime(value, utc=True)
    except (TypeError, ValueError, OverflowError):
        return None
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


@dataclass
class CurrentFields:
    """Fields of the current sourcing convention."""
    breaking_height_ft: Optional[float] = None
    dominant: Optional[SwellComponent] = None
    secondary: SwellComponent = field(default_factory=lambda: SwellComponent(SwellSlot.SECONDARY))
    wind_wave: SwellComponent = field(default_factory=lambda: SwellComponent(SwellSlot.WIND))
    quality_score: Optional[float] = None
    euro_quality_score: Optional[float] = None
    euro_height_ft: Optional[float] = None

    @classmethod
    def from_raw(cls, raw: dict) -> "CurrentFields":
        dominant_height = _height(_lookup(raw, "dominant_height_ft"))
        dominant = None
        if dominant_height is not None:
            dominant = SwellComponent(
                SwellSlot.PRIMARY,
                dominant_height,
                _period(_lookup(raw, "dominant_period_s")),
                _direction(_lookup(raw, "dominant_direction_deg")),
            )
        return cls(
            breaking_height_ft=_height(_lookup(raw, "breaking_height_ft")),
            dominant=dominant,
            secondary=SwellComponent(
                SwellSlot.SECONDARY,
                _height(_lookup(raw, "secondary_height_ft")),
                _period(_lookup(raw, "secondary_period_s")),
                _direction(_lookup(raw, "secondary_direction_deg")),
            ),
            wind_wave=SwellComponent(
                SwellSlot.WIND,
                _height(_lookup(raw, "wind_wave_height_ft")),
                _period(_lookup(raw, "wind_wave_period_s")),
                _direction(_lookup(raw, "wind_wave_direction_deg")),
            ),
            quality_score=_score(_lookup(raw, "quality_score")),
            euro_quality_score=_score(_lookup(raw, "euro_quality_score")),
            euro_height_ft=_height(_lookup(raw, "euro_height_ft")),
        )


@dataclass
class LegacyFields:
    """Fields of the legacy sourcing convention."""
    wave_height_ft: Optional[float] = None
    wave_period_s: Optional[float] = None
    wave_direction_deg: Optional[float] = None
    probability_score: Optional[float] = None

    @classmethod
    def from_raw(cls, raw: dict) -> "LegacyFields":
        height = _height(_lookup(raw, "wave_height_ft"))
        if height is None:
            tenths = _height(_lookup(raw, "wave_height_tenths_ft"))
            if tenths is not None:
                height = tenths / 10
        return cls(
            wave_height_ft=height,
            wave_period_s=_period(_lookup(raw, "wave_period_s")),
            wave_direction_deg=_direction(_lookup(raw, "wave_direction_deg")),
            probability_score=_score(_lookup(raw, "probability_score")),
        )


def _dominant_component(components: list[SwellComponent]) -> Optional[SwellComponent]:
    """Component with the highest energy (height² × period)."""
    candidates = [c for c in components if c.has_height and c.energy is not None]
    if not candidates:
        candidates = [c for c in components if c.has_height]
        if not candidates:
            return None
        return max(candidates, key=lambda c: c.height_ft)
    return max(candidates, key=lambda c: c.energy)


class TimelineNormalizer:
    """Dedups, sorts and resolves raw forecast points."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """Initialize the normalizer.

        Args:
            logger: Logger for degraded-input events. Defaults to the module logger.
        """
        self.logger = logger or logging.getLogger(__name__)

    def to_point(self, raw: RawPoint) -> Optional[TimelinePoint]:
        """Resolve one raw point into canonical shape.

        Args:
            raw: Raw provider dict, or an already normalized point

        Returns:
            TimelinePoint, or None when the timestamp cannot be parsed
        """
        if isinstance(raw, TimelinePoint):
            return raw

        timestamp = parse_timestamp(_lookup(raw, "timestamp"))
        if timestamp is None:
            self.logger.warning(f"Skipping point with unparseable timestamp: {_lookup(raw, 'timestamp')!r}")
            return None

        current = CurrentFields.from_raw(raw)
        legacy = LegacyFields.from_raw(raw)
        is_current = any(_lookup(raw, name) is not None for name in CURRENT_MARKERS)

        primary = current.dominant or SwellComponent(
            SwellSlot.PRIMARY,
            legacy.wave_height_ft,
            legacy.wave_period_s,
            legacy.wave_direction_deg,
        )
        components = [primary, current.secondary, current.wind_wave]

        dominant = current.dominant or _dominant_component(components)

        # Height precedence: breaking -> dominant swell -> legacy primary
        height = current.breaking_height_ft
        if height is None and dominant is not None:
            height = dominant.height_ft
        if height is None:
            height = legacy.wave_height_ft

        period = dominant.period_s if dominant is not None else None
        if period is None:
            period = legacy.wave_period_s
        direction = dominant.direction_deg if dominant is not None else None
        if direction is None:
            direction = legacy.wave_direction_deg

        if height is None:
            self.logger.debug(f"No resolvable height at {timestamp.isoformat()}")

        scores = {}
        open_meteo_score = current.quality_score
        if open_meteo_score is None:
            open_meteo_score = legacy.probability_score
        if open_meteo_score is not None:
            scores[ScoringModel.OPEN_METEO] = open_meteo_score
        if current.euro_quality_score is not None:
            scores[ScoringModel.EURO] = current.euro_quality_score

        model_heights = {}
        if height is not None:
            model_heights[ScoringModel.OPEN_METEO] = height
        if current.euro_height_ft is not None:
            model_heights[ScoringModel.EURO] = current.euro_height_ft

        return TimelinePoint(
            timestamp=timestamp,
            primary=primary,
            secondary=current.secondary,
            wind_swell=current.wind_wave,
            breaking_height_ft=current.breaking_height_ft,
            height_ft=height,
            period_s=period,
            direction_deg=direction,
            dominant_slot=dominant.slot if dominant is not None else None,
            wind_speed_mph=_speed(_lookup(raw, "wind_speed_mph")),
            wind_gust_mph=_speed(_lookup(raw, "wind_gust_mph")),
            wind_direction_deg=_direction(_lookup(raw, "wind_direction_deg")),
            wind_type=WindType.from_raw(_lookup(raw, "wind_type")),
            tide_height_ft=_safe_float(_lookup(raw, "tide_height_ft")),
            tide_phase=TidePhase.from_raw(_lookup(raw, "tide_phase")),
            scores=scores,
            model_heights_ft=model_heights,
            confidence_band=ConfidenceBand.from_raw(_lookup(raw, "confidence_band")),
            convention="current" if is_current else "legacy",
        )

    def normalize(self, raw_points: Iterable[RawPoint]) -> list[TimelinePoint]:
        """Dedup by minute (first occurrence wins) and sort ascending.

        Args:
            raw_points: Raw provider dicts and/or normalized points

        Returns:
            New list of canonical points, unique per minute, oldest first
        """
        seen = set()
        points = []
        duplicates = 0

        for raw in raw_points:
            point = self.to_point(raw)
            if point is None:
                continue
            key = point.timestamp.replace(second=0, microsecond=0)
            if key in seen:
                duplicates += 1
                continue
            seen.add(key)
            points.append(point)

        if duplicates:
            self.logger.debug(f"Dropped {duplicates} duplicate timeline points")

        points.sort(key=lambda p: p.timestamp)
        return points


def normalize(raw_points: Iterable[RawPoint]) -> list[TimelinePoint]:
    """Normalize a raw timeline with the default normalizer."""
    return TimelineNormalizer().normalize(raw_points)


def select_current_point(
    points: list[TimelinePoint],
    now: Optional[datetime] = None,
) -> Optional[TimelinePoint]:
    """Most recent point at or before now, if it is at most an hour old.

    Args:
        points: Normalized timeline, oldest first
        now: Reference time. Defaults to the current UTC time.

    Returns:
        The current point, or None when the timeline has no recent past point
    """
    if now is None:
        now = datetime.now(timezone.utc)
    max_age = timedelta(hours=1)

    current = None
    for point in points:
        if point.timestamp > now:
            break
        current = point

    if current is None or now - current.timestamp > max_age:
        return None
    return current
