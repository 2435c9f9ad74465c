"""Display labels for heights, times, wind and tide.

These helpers turn resolved point values into the short strings shown next
to a forecast (e.g. "2-3ft", "6-8am", "onshore 18mph"). Every helper accepts
None and returns "N/A" or an equivalent neutral value instead of raising.
"""

import math
from typing import Optional

from surfcast.core.models import TidePhase, WindType


COMPASS_POINTS = [
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
]

# Labels that mean the ocean is effectively flat
FLAT_HEIGHT_LABELS = frozenset({"Flat", "<1ft"})

# (upper bound exclusive, label)
SURF_HEIGHT_LADDER = [
    (0.5, "Flat"),
    (1.0, "<1ft"),
    (2.0, "1-2ft"),
    (3.0, "2-3ft"),
    (4.0, "3-4ft"),
    (5.0, "4-5ft"),
    (6.0, "4-6ft"),
    (7.0, "4-6ft+"),
    (8.0, "5-7ft"),
    (10.0, "6-8ft"),
    (12.0, "6-10ft"),
    (15.0, "8-12ft"),
]

WAVE_HEIGHT_DESCRIPTIONS = [
    (1.5, "Shin to Knee"),
    (2.5, "Knee to Waist"),
    (3.5, "Waist to Chest"),
    (4.5, "Chest to Shoulder"),
    (5.5, "Head High"),
    (7.0, "Overhead"),
    (9.0, "Well Overhead"),
]

LIGHT_WIND_MPH = 10


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def format_surf_height(height_ft: Optional[float]) -> str:
    """Convert a surf height in feet to a display range.

    Args:
        height_ft: Resolved surf height in feet

    Returns:
        Range label such as "2-3ft", or "N/A" when unknown
    """
    if height_ft is None:
        return "N/A"
    for upper, label in SURF_HEIGHT_LADDER:
        if height_ft < upper:
            return label
    return "10-15ft"


def is_flat(height_label: str) -> bool:
    """Check whether a height label means there is no surf."""
    return height_label in FLAT_HEIGHT_LABELS


def describe_wave_height(height_ft: Optional[float]) -> str:
    """Body-relative description of a wave height."""
    if height_ft is None:
        return "N/A"
    if height_ft <= 0:
        return "Flat"
    for upper, label in WAVE_HEIGHT_DESCRIPTIONS:
        if height_ft < upper:
            return label
    return "Double Overhead +"


def swell_type_from_period(period_s: Optional[float]) -> str:
    """Classify a swell by its period."""
    if period_s is None:
        return "N/A"
    if period_s < 7:
        return "Wind Swell"
    if period_s <= 12:
        return "Swell"
    return "Groundswell"


def direction_to_compass(degrees: Optional[float]) -> str:
    """Convert degrees to compass direction.

    Args:
        degrees: Direction in degrees (0-360)

    Returns:
        Compass direction (N, NNE, NE, etc.)
    """
    if degrees is None:
        return "Unknown"
    idx = round(degrees / 22.5) % 16
    return COMPASS_POINTS[idx]


def compass_to_degrees(direction: Optional[str]) -> Optional[float]:
    """Convert a compass direction string (e.g. "SSE") to degrees."""
    if not isinstance(direction, str) or not direction:
        return None
    try:
        return COMPASS_POINTS.index(direction.strip().upper()) * 22.5
    except ValueError:
        return None


def format_hour(hour: int) -> str:
    """Hour of day on a 12-hour clock, without suffix."""
    display = hour % 12
    return str(12 if display == 0 else display)


def _meridiem(hour: int) -> str:
    return "am" if hour < 12 else "pm"


def format_time_range(start_hour: int, end_hour: int) -> str:
    """Compact time range label.

    Hours within the same half of the day share one suffix ("6-8am"),
    otherwise both carry their own ("11am-1pm").
    """
    start_suffix = _meridiem(start_hour)
    end_suffix = _meridiem(end_hour)
    if start_suffix == end_suffix:
        return f"{format_hour(start_hour)}-{format_hour(end_hour)}{end_suffix}"
    return f"{format_hour(start_hour)}{start_suffix}-{format_hour(end_hour)}{end_suffix}"


def window_period_label(hour: int) -> str:
    """Part-of-day label for a window's middle hour."""
    if 5 <= hour < 8:
        return "DAWN PATROL"
    if 8 <= hour < 12:
        return "MORNING"
    if 12 <= hour < 14:
        return "MIDDAY"
    if 14 <= hour < 18:
        return "AFTERNOON"
    return "EVENING"


def format_wind_description(wind_type: Optional[WindType], speed_mph: Optional[float]) -> str:
    """Short wind description such as "light offshore" or "onshore 18mph"."""
    if wind_type is None:
        return "N/A"
    if speed_mph is None:
        return wind_type.value

    if speed_mph < LIGHT_WIND_MPH:
        if wind_type is WindType.OFFSHORE:
            return "light offshore"
        if wind_type is WindType.ONSHORE:
            return "light onshore"
        if wind_type in (WindType.CROSS, WindType.SIDE_OFFSHORE):
            return "light cross-shore"
        return "light winds"

    return f"{wind_type.value} {round_half_up(speed_mph)}mph"


def format_tide_description(phase: Optional[TidePhase]) -> str:
    if phase is None:
        return "N/A"
    return f"{phase.value} tide"
