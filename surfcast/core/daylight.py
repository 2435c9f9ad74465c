"""Day/night classification from solar position.

Daylight runs from civil dawn to civil dusk (sun 6° below the horizon),
i.e. first light to last light. Solar events are computed with astral for
the local solar date of the timestamp, so dawn and dusk always bracket
local solar noon regardless of the spot's civil timezone.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from astral import Observer
from astral.sun import elevation, sun


logger = logging.getLogger(__name__)

CIVIL_TWILIGHT_DEPRESSION = 6.0


def _solar_timezone(lon: float) -> timezone:
    """Fixed-offset zone following local mean solar time (4 min per degree)."""
    return timezone(timedelta(minutes=round(lon * 4)))


class DaylightFilter:
    """Classifies instants as day or night for a location."""

    def __init__(self, depression: float = CIVIL_TWILIGHT_DEPRESSION):
        """Initialize the filter.

        Args:
            depression: Solar depression angle in degrees that bounds daylight
        """
        self.depression = depression
        self._daylight_bounds = lru_cache(maxsize=2048)(self._compute_bounds)

    def _compute_bounds(
        self,
        lat: float,
        lon: float,
        solar_date: date,
    ) -> Optional[tuple[datetime, datetime]]:
        observer = Observer(latitude=lat, longitude=lon)
        try:
            s = sun(
                observer,
                date=solar_date,
                tzinfo=_solar_timezone(lon),
                dawn_dusk_depression=self.depression,
            )
        except ValueError:
            # Sun never crosses the depression angle on this date
            return None
        return s["dawn"], s["dusk"]

    def daylight_bounds(
        self,
        timestamp: datetime,
        lat: float,
        lon: float,
    ) -> Optional[tuple[datetime, datetime]]:
        """First and last light around a timestamp.

        Returns:
            (dawn, dusk) as aware datetimes, or None during polar day/night
        """
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        solar_date = timestamp.astimezone(_solar_timezone(lon)).date()
        return self._daylight_bounds(round(lat, 2), round(lon, 2), solar_date)

    def is_night(self, timestamp: datetime, lat: float, lon: float) -> bool:
        """Check whether a timestamp falls outside first/last light.

        Args:
            timestamp: Instant to classify. Naive values are taken as UTC.
            lat: Latitude in degrees
            lon: Longitude in degrees

        Returns:
            True if it is dark at the location
        """
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)

        bounds = self.daylight_bounds(timestamp, lat, lon)
        if bounds is None:
            # Polar day or night: decide from the sun's current elevation
            sun_elevation = elevation(Observer(latitude=lat, longitude=lon), timestamp)
            logger.debug(f"No dawn/dusk at ({lat}, {lon}) on {timestamp.date()}, elevation {sun_elevation:.1f}")
            return sun_elevation < -self.depression

        dawn, dusk = bounds
        return not (dawn <= timestamp <= dusk)

    def is_daylight(self, timestamp: datetime, lat: float, lon: float) -> bool:
        return not self.is_night(timestamp, lat, lon)


_default_filter: Optional[DaylightFilter] = None


def get_daylight_filter() -> DaylightFilter:
    """Get the default daylight filter (singleton)."""
    global _default_filter
    if _default_filter is None:
        _default_filter = DaylightFilter()
    return _default_filter


def is_night(timestamp: datetime, lat: float, lon: float) -> bool:
    """Quick access to the default filter's is_night."""
    return get_daylight_filter().is_night(timestamp, lat, lon)
