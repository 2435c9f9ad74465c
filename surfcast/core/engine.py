"""Forecast engine.

Entry point for callers. Exposes the pipeline operations (normalize,
classify_point, resolve_tide_phase, validate_swell, summarize) and the
orchestration that ties them to live data:
- Spot database (spot.py)
- Buoy and tide clients (clients/)
- Summary cache (cache.py)

Client failures never abort a forecast. They are recorded on the result's
errors list and the forecast continues without that source.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional

import pandas as pd

from surfcast.clients.buoy_client import BuoyClient, BuoyError
from surfcast.clients.noaa_tides_client import NOAATidesClient, NOAATidesError
from surfcast.core.buoy_validator import BuoyValidator
from surfcast.core.cache import SummaryCache
from surfcast.core.classifier import PointClassification, ScoreClassifier
from surfcast.core.daylight import DaylightFilter, get_daylight_filter
from surfcast.core.models import (
    BuoyReading,
    DaySummary,
    ScoringModel,
    SwellComponent,
    SwellValidation,
    TimelinePoint,
)
from surfcast.core.spot import Spot, SpotDatabase, get_spot_database
from surfcast.core.summarizer import DaySummarizer, SpotGeo
from surfcast.core.tides import TidePhaseResolver
from surfcast.core.timeline import RawPoint, TimelineNormalizer, select_current_point


logger = logging.getLogger(__name__)


@dataclass
class SpotForecast:
    """Complete forecast for one spot."""
    spot: Spot
    model: ScoringModel
    days: list[DaySummary] = field(default_factory=list)
    current_point: Optional[TimelinePoint] = None
    current: Optional[PointClassification] = None
    swell: Optional[SwellValidation] = None
    buoy: Optional[BuoyReading] = None
    fetch_time: Optional[datetime] = None
    errors: list = field(default_factory=list)

    @property
    def today(self) -> Optional[DaySummary]:
        return next((d for d in self.days if d.day_index == 0), None)

    def to_dict(self) -> dict:
        return {
            "spotId": self.spot.id,
            "spotName": self.spot.name,
            "model": self.model.value,
            "fetchTime": self.fetch_time.isoformat() if self.fetch_time else None,
            "current": self.current.to_dict() if self.current else None,
            "currentPoint": self.current_point.to_dict() if self.current_point else None,
            "swell": self.swell.to_dict() if self.swell else None,
            "buoy": self.buoy.to_dict() if self.buoy else None,
            "days": [d.to_dict() for d in self.days],
            "errors": list(self.errors),
        }


class ForecastEngine:
    """Builds verdicts for spots from raw timelines and live observations."""

    def __init__(
        self,
        spot_db: Optional[SpotDatabase] = None,
        buoy_client: Optional[BuoyClient] = None,
        tides_client: Optional[NOAATidesClient] = None,
        model: ScoringModel = ScoringModel.OPEN_METEO,
        cache: Optional[SummaryCache] = None,
        daylight: Optional[DaylightFilter] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the engine with optional dependency injection.

        Args:
            spot_db: Spot database. Defaults to loading config/spots.yaml on first use.
            buoy_client: NDBC buoy client. Without one, swell is not validated.
            tides_client: NOAA tides client. Without one, tide heights come
                only from the timeline.
            model: Scoring model used for effective scores
            cache: Optional summary cache keyed by (spot_id, timeline_version)
            daylight: Day/night filter. Defaults to the shared filter.
            logger: Logger for pipeline events. Defaults to the module logger.
        """
        self._spot_db = spot_db
        self.buoy = buoy_client
        self.tides = tides_client
        self.model = model
        self.cache = cache
        self.logger = logger or logging.getLogger(__name__)

        daylight = daylight or get_daylight_filter()
        self.normalizer = TimelineNormalizer(logger=self.logger)
        self.tide_resolver = TidePhaseResolver()
        self.classifier = ScoreClassifier(model)
        self.validator = BuoyValidator(logger=self.logger)
        self.summarizer = DaySummarizer(
            model=model,
            daylight=daylight,
            classifier=self.classifier,
            logger=self.logger,
        )

    @property
    def spot_db(self) -> SpotDatabase:
        if self._spot_db is None:
            self._spot_db = get_spot_database()
        return self._spot_db

    def normalize(self, raw_points: Iterable[RawPoint]) -> list[TimelinePoint]:
        return self.normalizer.normalize(raw_points)

    def classify_point(
        self,
        point: TimelinePoint,
        model: Optional[ScoringModel] = None,
    ) -> PointClassification:
        return self.classifier.classify_point(point, model or self.model)

    def resolve_tide_phase(self, points: list[TimelinePoint]) -> list[TimelinePoint]:
        return self.tide_resolver.resolve(points)

    def validate_swell(
        self,
        forecast_components: Iterable[SwellComponent],
        buoy: Optional[BuoyReading],
    ) -> SwellValidation:
        return self.validator.validate_swell(forecast_components, buoy)

    def summarize(
        self,
        points: list[TimelinePoint],
        spot_geo: SpotGeo,
        today: Optional[date] = None,
    ) -> list[DaySummary]:
        """Day summaries for a timeline, grouped by local calendar day.

        Args:
            points: Raw or normalized points
            spot_geo: Spot coordinates and timezone
            today: Local date treated as day 0

        Returns:
            DaySummary per local day, in date order
        """
        prepared = self.resolve_tide_phase(self.normalize(points))
        return self.summarizer.summarize(prepared, spot_geo, today=today)

    def summarize_cached(
        self,
        spot_id: str,
        timeline_version: str,
        points: list[TimelinePoint],
        spot_geo: SpotGeo,
        today: Optional[date] = None,
    ) -> list[DaySummary]:
        """Summaries through the cache when one is configured."""
        if self.cache is None:
            return self.summarize(points, spot_geo, today=today)
        key = (spot_id, timeline_version, today.isoformat() if today else None, self.model.value)
        return self.cache.get_or_compute(key, lambda: self.summarize(points, spot_geo, today=today))

    def _attach_tides(
        self,
        spot: Spot,
        points: list[TimelinePoint],
        forecast: SpotForecast,
    ) -> list[TimelinePoint]:
        """Fill missing tide heights from hourly station predictions."""
        if self.tides is None or not spot.tide_station or not points:
            return points
        if all(p.tide_height_ft is not None for p in points):
            return points

        try:
            heights = self.tides.get_hourly_heights(
                spot.tide_station,
                start=points[0].timestamp,
                end=points[-1].timestamp + timedelta(days=1),
            )
        except NOAATidesError as e:
            forecast.errors.append(f"Tides error: {e}")
            self.logger.warning(f"Tides fetch failed for {spot.id}: {e}")
            return points

        filled = 0
        result = []
        for point in points:
            if point.tide_height_ft is None:
                hour = pd.Timestamp(point.timestamp).floor("h")
                value = heights.get(hour)
                if value is not None and not pd.isna(value):
                    point = replace(point, tide_height_ft=float(value))
                    filled += 1
            result.append(point)

        self.logger.debug(f"Filled {filled} tide heights for {spot.id} from station {spot.tide_station}")
        return result

    def _fetch_buoy(self, spot: Spot, forecast: SpotForecast, now: datetime) -> Optional[BuoyReading]:
        if self.buoy is None or not spot.nearest_buoy:
            return None
        try:
            return self.buoy.get_latest_reading(spot.nearest_buoy, now=now)
        except BuoyError as e:
            forecast.errors.append(f"Buoy error: {e}")
            self.logger.warning(f"Buoy fetch failed for {spot.id}: {e}")
            return None

    def build_forecast(
        self,
        spot_id: str,
        raw_points: Iterable[RawPoint],
        now: Optional[datetime] = None,
        timeline_version: Optional[str] = None,
    ) -> SpotForecast:
        """Build the full forecast for a spot.

        Args:
            spot_id: Spot identifier from spots.yaml
            raw_points: Raw timeline for the spot
            now: Reference time. Defaults to the current UTC time.
            timeline_version: Upstream timeline version; enables the summary cache

        Returns:
            SpotForecast with day summaries, current conditions and any source errors

        Raises:
            KeyError: If the spot is not configured
        """
        spot = self.spot_db.get_spot(spot_id)
        if spot is None:
            raise KeyError(f"Unknown spot: {spot_id}")

        if now is None:
            now = datetime.now(timezone.utc)
        today = now.astimezone(spot.geo.tz).date()

        forecast = SpotForecast(spot=spot, model=self.model, fetch_time=now)

        points = self.normalize(raw_points)
        points = self._attach_tides(spot, points, forecast)
        points = self.resolve_tide_phase(points)

        forecast.current_point = select_current_point(points, now)
        if forecast.current_point is not None:
            forecast.current = self.classify_point(forecast.current_point)

        forecast.buoy = self._fetch_buoy(spot, forecast, now)
        components = forecast.current_point.components if forecast.current_point else []
        forecast.swell = self.validate_swell(components, forecast.buoy)

        if timeline_version is not None and not forecast.errors:
            forecast.days = self.summarize_cached(spot.id, timeline_version, points, spot.geo, today=today)
        else:
            if timeline_version is not None:
                self.logger.debug(f"Skipping summary cache for {spot.id}: {len(forecast.errors)} source errors")
            forecast.days = self.summarizer.summarize(points, spot.geo, today=today)

        self.logger.info(
            f"Built forecast for {spot.id}: {len(points)} points, {len(forecast.days)} days, "
            f"{len(forecast.errors)} errors"
        )
        return forecast
