"""NDBC buoy client for real-time wave observations.

Provides the latest significant wave height and its swell / wind-wave split
from NDBC realtime2 files. Readings older than two hours are flagged stale.
Default buoys for the New York Bight:
- 44065: New York Harbor Entrance
- 44025: Long Island, 30 NM south of Islip
- 44097: Block Island (CDIP 154)
"""

import hashlib
import json
import logging
import os
import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import pandas as pd
import requests

from surfcast.core.formatting import compass_to_degrees
from surfcast.core.models import BuoyReading


logger = logging.getLogger(__name__)

# NDBC data URLs
NDBC_SPEC_URL = "https://www.ndbc.noaa.gov/data/realtime2/{station}.spec"
NDBC_TXT_URL = "https://www.ndbc.noaa.gov/data/realtime2/{station}.txt"

CACHE_TTL_SECONDS = 900  # 15 minutes, NDBC posts roughly every 30-60
STALE_AFTER = timedelta(hours=2)
METERS_TO_FEET = 3.28084

# Values NDBC uses for missing measurements
MISSING_MARKERS = ("MM", "-", "--", "999", "999.0", "99.0", "99.00", "9999", "9999.0")


def default_cache_dir() -> Path:
    """Cache directory, $SURFCAST_CACHE_DIR or ~/.cache/surfcast."""
    env_dir = os.environ.get("SURFCAST_CACHE_DIR")
    return Path(env_dir) if env_dir else Path.home() / ".cache" / "surfcast"


class BuoyClient:
    """Client for fetching buoy data from NDBC."""

    def __init__(self, cache_path: Optional[Path] = None):
        """Initialize the Buoy client.

        Args:
            cache_path: Path to SQLite cache file. Defaults to <cache dir>/buoy.db
        """
        self.session = requests.Session()

        if cache_path is None:
            cache_dir = default_cache_dir()
            cache_dir.mkdir(parents=True, exist_ok=True)
            cache_path = cache_dir / "buoy.db"

        self.cache_path = cache_path
        self._init_cache()

    def _init_cache(self) -> None:
        """Initialize the SQLite cache table."""
        with sqlite3.connect(self.cache_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS buoy_cache (
                    cache_key TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.commit()

    def _make_cache_key(self, url: str) -> str:
        """Generate a cache key for the URL."""
        return hashlib.sha256(url.encode()).hexdigest()[:32]

    def _get_cached(self, cache_key: str) -> Optional[list]:
        """Retrieve data from cache if valid."""
        with sqlite3.connect(self.cache_path) as conn:
            cursor = conn.execute(
                "SELECT data, created_at FROM buoy_cache WHERE cache_key = ?",
                (cache_key,),
            )
            row = cursor.fetchone()

            if row is None:
                return None

            data_json, created_at_str = row
            created_at = datetime.fromisoformat(created_at_str)
            if created_at.tzinfo is None:
                created_at = created_at.replace(tzinfo=timezone.utc)

            if datetime.now(timezone.utc) - created_at > timedelta(seconds=CACHE_TTL_SECONDS):
                conn.execute("DELETE FROM buoy_cache WHERE cache_key = ?", (cache_key,))
                conn.commit()
                return None

            return json.loads(data_json)

    def _set_cached(self, cache_key: str, data: list) -> None:
        """Store data in cache."""
        with sqlite3.connect(self.cache_path) as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO buoy_cache (cache_key, data, created_at)
                VALUES (?, ?, ?)
                """,
                (cache_key, json.dumps(data), datetime.now(timezone.utc).isoformat()),
            )
            conn.commit()

    def _safe_float(self, value: str) -> Optional[float]:
        """Safely convert to float, returning None for missing values."""
        if value in MISSING_MARKERS:
            return None
        try:
            return float(value)
        except ValueError:
            return None

    def _parse_time(self, parts: list[str]) -> str:
        year = int(parts[0])
        if year < 100:
            year += 2000
        return f"{year}-{parts[1]}-{parts[2]}T{parts[3]}:{parts[4]}:00Z"

    def _parse_ndbc_spectral(self, text: str) -> list[dict]:
        """Parse NDBC spectral summary (.spec) text format."""
        lines = text.strip().split("\n")
        if len(lines) < 3:
            return []

        records = []
        for line in lines[2:]:  # Skip header lines
            parts = line.split()
            if len(parts) < 15:
                continue

            try:
                # YY MM DD hh mm WVHT SwH SwP WWH WWP SwD WWD STEEPNESS APD MWD
                record = {
                    "time": self._parse_time(parts),
                    "wave_height_m": self._safe_float(parts[5]),
                    "swell_height_m": self._safe_float(parts[6]),
                    "swell_period_s": self._safe_float(parts[7]),
                    "wind_wave_height_m": self._safe_float(parts[8]),
                    "wind_wave_period_s": self._safe_float(parts[9]),
                    "swell_direction": parts[10] if parts[10] not in MISSING_MARKERS else None,
                    "wind_wave_direction": parts[11] if parts[11] not in MISSING_MARKERS else None,
                    "steepness": parts[12] if parts[12] not in MISSING_MARKERS else None,
                    "average_period_s": self._safe_float(parts[13]),
                    "mean_wave_direction": self._safe_float(parts[14]),
                }
                records.append(record)
            except (ValueError, IndexError):
                continue

        return records

    def _parse_ndbc_standard(self, text: str) -> list[dict]:
        """Parse NDBC standard meteorological data text format."""
        lines = text.strip().split("\n")
        if len(lines) < 3:
            return []

        records = []
        for line in lines[2:]:  # Skip header lines
            parts = line.split()
            if len(parts) < 12:
                continue

            try:
                # YY MM DD hh mm WDIR WSPD GST WVHT DPD APD MWD ...
                record = {
                    "time": self._parse_time(parts),
                    "wave_height_m": self._safe_float(parts[8]),
                    "dominant_period_s": self._safe_float(parts[9]),
                    "average_period_s": self._safe_float(parts[10]),
                    "mean_wave_direction": self._safe_float(parts[11]),
                }
                records.append(record)
            except (ValueError, IndexError):
                continue

        return records

    def _fetch_records(self, url: str, parser, use_cache: bool) -> list[dict]:
        cache_key = self._make_cache_key(url)

        if use_cache:
            cached = self._get_cached(cache_key)
            if cached is not None:
                return cached

        try:
            response = self.session.get(url, timeout=15)
            response.raise_for_status()
            records = parser(response.text)
        except requests.RequestException as e:
            raise BuoyError(f"Failed to fetch {url}: {e}") from e

        if use_cache and records:
            self._set_cached(cache_key, records)

        return records

    def get_spectral_data(self, station_id: str, use_cache: bool = True) -> pd.DataFrame:
        """Get spectral wave summary (swell / wind-wave split) from a buoy.

        Args:
            station_id: NDBC station ID (e.g., "44065")
            use_cache: Whether to use cached data

        Returns:
            DataFrame with wave height, swell and wind-wave columns, newest first
        """
        url = NDBC_SPEC_URL.format(station=station_id)
        return pd.DataFrame(self._fetch_records(url, self._parse_ndbc_spectral, use_cache))

    def get_standard_data(self, station_id: str, use_cache: bool = True) -> pd.DataFrame:
        """Get standard meteorological data from a buoy.

        Args:
            station_id: NDBC station ID
            use_cache: Whether to use cached data

        Returns:
            DataFrame with wave height, dominant period and mean direction, newest first
        """
        url = NDBC_TXT_URL.format(station=station_id)
        return pd.DataFrame(self._fetch_records(url, self._parse_ndbc_standard, use_cache))

    def _to_feet(self, meters) -> Optional[float]:
        if meters is None or pd.isna(meters):
            return None
        return round(float(meters) * METERS_TO_FEET, 1)

    def _value(self, row: pd.Series, column: str) -> Optional[float]:
        value = row.get(column)
        if value is None or pd.isna(value):
            return None
        return float(value)

    def reading_from_records(
        self,
        station_id: str,
        spectral: pd.DataFrame,
        standard: Optional[pd.DataFrame] = None,
        now: Optional[datetime] = None,
    ) -> Optional[BuoyReading]:
        """Build a reading from the newest row with a wave height.

        Args:
            station_id: NDBC station ID
            spectral: Parsed .spec records
            standard: Parsed .txt records, used for dominant period and as a
                fallback when there is no spectral data
            now: Reference time for staleness. Defaults to the current UTC time.

        Returns:
            BuoyReading, or None when no row has a wave height
        """
        if now is None:
            now = datetime.now(timezone.utc)

        latest_std = None
        if standard is not None and not standard.empty:
            with_height = standard[standard["wave_height_m"].notna()]
            if not with_height.empty:
                latest_std = with_height.iloc[0]

        reading = None
        if not spectral.empty:
            with_height = spectral[spectral["wave_height_m"].notna()]
            if not with_height.empty:
                latest = with_height.iloc[0]
                reading = BuoyReading(
                    station_id=station_id,
                    timestamp=pd.to_datetime(latest["time"], utc=True).to_pydatetime(),
                    total_wave_height_ft=self._to_feet(latest["wave_height_m"]),
                    dominant_period_s=self._value(latest, "average_period_s"),
                    mean_direction_deg=self._value(latest, "mean_wave_direction"),
                    swell_height_ft=self._to_feet(latest.get("swell_height_m")),
                    swell_period_s=self._value(latest, "swell_period_s"),
                    swell_direction_deg=compass_to_degrees(latest.get("swell_direction")),
                    wind_wave_height_ft=self._to_feet(latest.get("wind_wave_height_m")),
                    wind_wave_period_s=self._value(latest, "wind_wave_period_s"),
                    wind_wave_direction_deg=compass_to_degrees(latest.get("wind_wave_direction")),
                    steepness=latest.get("steepness") if isinstance(latest.get("steepness"), str) else None,
                )
                if latest_std is not None and self._value(latest_std, "dominant_period_s") is not None:
                    reading.dominant_period_s = self._value(latest_std, "dominant_period_s")

        if reading is None and latest_std is not None:
            reading = BuoyReading(
                station_id=station_id,
                timestamp=pd.to_datetime(latest_std["time"], utc=True).to_pydatetime(),
                total_wave_height_ft=self._to_feet(latest_std["wave_height_m"]),
                dominant_period_s=self._value(latest_std, "dominant_period_s"),
                mean_direction_deg=self._value(latest_std, "mean_wave_direction"),
            )

        if reading is None:
            return None

        reading.is_stale = now - reading.timestamp > STALE_AFTER
        if reading.is_stale:
            logger.info(f"Buoy {station_id} reading from {reading.timestamp.isoformat()} is stale")
        return reading

    def get_latest_reading(
        self,
        station_id: str,
        use_cache: bool = True,
        now: Optional[datetime] = None,
    ) -> Optional[BuoyReading]:
        """Get the most recent reading from a buoy.

        Args:
            station_id: NDBC station ID
            use_cache: Whether to use cached data
            now: Reference time for staleness

        Returns:
            BuoyReading or None if the buoy reports no wave height

        Raises:
            BuoyError: If neither data file can be fetched
        """
        spectral = pd.DataFrame()
        standard = None
        errors = []

        try:
            spectral = self.get_spectral_data(station_id, use_cache=use_cache)
        except BuoyError as e:
            errors.append(e)
            logger.debug(f"Spectral data unavailable for {station_id}: {e}")

        try:
            standard = self.get_standard_data(station_id, use_cache=use_cache)
        except BuoyError as e:
            errors.append(e)
            logger.debug(f"Standard data unavailable for {station_id}: {e}")

        if len(errors) == 2:
            raise BuoyError(f"No data available for buoy {station_id}: {errors[0]}") from errors[0]

        return self.reading_from_records(station_id, spectral, standard, now=now)


class BuoyError(Exception):
    """Exception raised for Buoy client errors."""

    pass
