"""NOAA CO-OPS API client for tide predictions.

Provides hourly tide height predictions used to fill timeline points that
arrive without a tide height. Times are requested in GMT so they line up
with UTC timeline timestamps.
Stations: 8531680 (Sandy Hook), 8518750 (The Battery), 8510560 (Montauk)
"""

import hashlib
import json
import logging
import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Literal, Optional

import pandas as pd
import requests

from surfcast.clients.buoy_client import default_cache_dir


logger = logging.getLogger(__name__)

COOPS_BASE_URL = "https://api.tidesandcurrents.noaa.gov/api/prod/datagetter"
CACHE_TTL_SECONDS = 3600  # 1 hour


class NOAATidesClient:
    """Client for fetching tide data from NOAA CO-OPS API."""

    def __init__(self, cache_path: Optional[Path] = None):
        """Initialize the NOAA Tides client.

        Args:
            cache_path: Path to SQLite cache file. Defaults to <cache dir>/tides.db
        """
        self.session = requests.Session()

        if cache_path is None:
            cache_dir = default_cache_dir()
            cache_dir.mkdir(parents=True, exist_ok=True)
            cache_path = cache_dir / "tides.db"

        self.cache_path = cache_path
        self._init_cache()

    def _init_cache(self) -> None:
        """Initialize the SQLite cache table."""
        with sqlite3.connect(self.cache_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tides_cache (
                    cache_key TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.commit()

    def _make_cache_key(self, params: dict) -> str:
        """Generate a cache key for the request."""
        key_data = json.dumps(params, sort_keys=True)
        return hashlib.sha256(key_data.encode()).hexdigest()[:32]

    def _get_cached(self, cache_key: str) -> Optional[list]:
        """Retrieve data from cache if valid."""
        with sqlite3.connect(self.cache_path) as conn:
            cursor = conn.execute(
                "SELECT data, created_at FROM tides_cache WHERE cache_key = ?",
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
                conn.execute("DELETE FROM tides_cache WHERE cache_key = ?", (cache_key,))
                conn.commit()
                return None

            return json.loads(data_json)

    def _set_cached(self, cache_key: str, data: list) -> None:
        """Store data in cache."""
        with sqlite3.connect(self.cache_path) as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO tides_cache (cache_key, data, created_at)
                VALUES (?, ?, ?)
                """,
                (cache_key, json.dumps(data), datetime.now(timezone.utc).isoformat()),
            )
            conn.commit()

    def _fetch_data(self, params: dict) -> list:
        """Fetch data from CO-OPS API."""
        try:
            response = self.session.get(COOPS_BASE_URL, params=params, timeout=15)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise NOAATidesError(f"Failed to fetch tide data: {e}") from e

        if "error" in data:
            raise NOAATidesError(f"CO-OPS API error: {data['error'].get('message', 'Unknown error')}")

        return data.get("predictions", data.get("data", []))

    def get_tide_predictions(
        self,
        station_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        interval: Literal["h", "hilo"] = "h",
        use_cache: bool = True,
    ) -> pd.DataFrame:
        """Get tide predictions for a station.

        Args:
            station_id: NOAA station ID (e.g., "8531680" for Sandy Hook)
            start_date: Start date (UTC). Defaults to today.
            end_date: End date (UTC). Defaults to 7 days from start.
            interval: "h" for hourly, "hilo" for high/low only. Defaults to "h".
            use_cache: Whether to use cached data.

        Returns:
            DataFrame with columns: time (GMT string), water_level_ft, type (hilo only)
        """
        if start_date is None:
            start_date = datetime.now(timezone.utc)
        if end_date is None:
            end_date = start_date + timedelta(days=7)

        params = {
            "station": station_id,
            "begin_date": start_date.strftime("%Y%m%d"),
            "end_date": end_date.strftime("%Y%m%d"),
            "product": "predictions",
            "datum": "MLLW",
            "units": "english",
            "time_zone": "gmt",
            "format": "json",
            "interval": interval,
        }

        cache_key = self._make_cache_key(params)

        if use_cache:
            cached = self._get_cached(cache_key)
            if cached is not None:
                return pd.DataFrame(cached)

        predictions = self._fetch_data(params)

        records = []
        for pred in predictions:
            value = pred.get("v")
            try:
                level = float(value) if value not in (None, "") else None
            except ValueError:
                level = None
            record = {
                "time": pred.get("t"),
                "water_level_ft": level,
            }
            if interval == "hilo":
                record["type"] = pred.get("type")  # H or L
            records.append(record)

        if use_cache and records:
            self._set_cached(cache_key, records)

        return pd.DataFrame(records)

    def get_hourly_heights(
        self,
        station_id: str,
        start: datetime,
        end: datetime,
        use_cache: bool = True,
    ) -> pd.Series:
        """Hourly predicted tide heights indexed by UTC hour.

        Args:
            station_id: NOAA station ID
            start: First instant needed
            end: Last instant needed
            use_cache: Whether to use cached data

        Returns:
            Series of water level in feet, indexed by tz-aware UTC timestamps
        """
        df = self.get_tide_predictions(
            station_id,
            start_date=start,
            end_date=end,
            interval="h",
            use_cache=use_cache,
        )
        if df.empty:
            return pd.Series(dtype=float)

        df["time_parsed"] = pd.to_datetime(df["time"], utc=True)
        series = df.dropna(subset=["water_level_ft"]).set_index("time_parsed")["water_level_ft"]
        logger.debug(f"Loaded {len(series)} hourly tide heights for {station_id}")
        return series


class NOAATidesError(Exception):
    """Exception raised for NOAA Tides client errors."""

    pass
