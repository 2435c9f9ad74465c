"""Surf spot model and database loader.

Loads spot definitions from spots.yaml: coordinates and timezone for
daylight and day grouping, plus the buoy and tide station each spot uses.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from surfcast.core.summarizer import SpotGeo


DEFAULT_TIMEZONE = "America/New_York"


@dataclass
class Spot:
    """Surf spot definition."""
    id: str
    name: str
    lat: float
    lon: float
    timezone: str = DEFAULT_TIMEZONE
    region: str = ""
    nearest_buoy: Optional[str] = None
    tide_station: Optional[str] = None
    notes: str = ""

    @property
    def geo(self) -> SpotGeo:
        return SpotGeo(lat=self.lat, lon=self.lon, timezone=self.timezone)


class SpotDatabase:
    """Database of surf spots loaded from YAML."""

    def __init__(self, spots_path: Optional[Path] = None):
        """Initialize the spot database.

        Args:
            spots_path: Path to spots.yaml. Defaults to $SURFCAST_SPOTS_PATH,
                then config/spots.yaml.
        """
        if spots_path is None:
            env_path = os.environ.get("SURFCAST_SPOTS_PATH")
            possible_paths = [
                Path(env_path) if env_path else None,
                Path(__file__).parent.parent.parent / "config" / "spots.yaml",
                Path.cwd() / "config" / "spots.yaml",
            ]
            for path in possible_paths:
                if path is not None and path.exists():
                    spots_path = path
                    break

        if spots_path is None or not Path(spots_path).exists():
            raise FileNotFoundError("Could not find spots.yaml")

        self.spots_path = Path(spots_path)
        self._spots: dict[str, Spot] = {}
        self._buoys: dict[str, str] = {}
        self._tide_stations: dict[str, str] = {}
        self._load_spots()

    def _load_spots(self) -> None:
        """Load spots from YAML file."""
        with open(self.spots_path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Invalid spots file {self.spots_path}: expected a mapping")

        self._buoys = {str(k): str(v) for k, v in (data.get("buoys") or {}).items()}
        self._tide_stations = {str(k): str(v) for k, v in (data.get("tide_stations") or {}).items()}

        for spot_data in data.get("spots") or []:
            spot = self._parse_spot(spot_data)
            self._spots[spot.id] = spot

    def _parse_spot(self, data: dict) -> Spot:
        """Parse a spot dictionary into a Spot object."""
        try:
            spot_id = data["id"]
            lat = float(data["lat"])
            lon = float(data["lon"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid spot entry in {self.spots_path}: {data!r}") from e

        buoy = data.get("nearest_buoy")
        station = data.get("tide_station")
        return Spot(
            id=spot_id,
            name=data.get("name", spot_id),
            lat=lat,
            lon=lon,
            timezone=data.get("timezone", DEFAULT_TIMEZONE),
            region=data.get("region", ""),
            # Buoys and stations may be referenced by name or by ID
            nearest_buoy=self._buoys.get(buoy, buoy) if buoy else None,
            tide_station=self._tide_stations.get(station, station) if station else None,
            notes=data.get("notes", ""),
        )

    def get_spot(self, spot_id: str) -> Optional[Spot]:
        """Get a spot by ID.

        Args:
            spot_id: Spot identifier (e.g., "lido_beach")

        Returns:
            Spot or None if not found
        """
        return self._spots.get(spot_id)

    def get_spot_by_name(self, name: str) -> Optional[Spot]:
        """Get a spot by name (case-insensitive partial match)."""
        name_lower = name.lower()
        for spot in self._spots.values():
            if name_lower in spot.name.lower():
                return spot
        return None

    def get_all_spots(self) -> list[Spot]:
        return list(self._spots.values())

    def get_spots_by_buoy(self, buoy_id: str) -> list[Spot]:
        return [spot for spot in self._spots.values() if spot.nearest_buoy == buoy_id]

    @property
    def spot_count(self) -> int:
        return len(self._spots)


# Convenience function for quick access
_default_db: Optional[SpotDatabase] = None


def get_spot_database() -> SpotDatabase:
    """Get the default spot database (singleton)."""
    global _default_db
    if _default_db is None:
        _default_db = SpotDatabase()
    return _default_db


def get_spot(spot_id: str) -> Optional[Spot]:
    """Quick access to get a spot by ID."""
    return get_spot_database().get_spot(spot_id)
