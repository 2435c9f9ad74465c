"""Day summaries from a normalized timeline.

Points are grouped by calendar day in the spot's timezone and each day is
reduced to an average and best score, a display height, a verdict, a
confidence level and its best/avoid windows.

Day average:
- mean of daylight scores when at least 2 daylight points are scored and
  at least half of them are surfable (>= 40)
- otherwise mean of all scores, day and night

Verdict overrides on top of the average's band:
- 5+ surfable daylight hours: raised to the best score's band when the best
  score clears 60, else to at least Worth a Look
- 2-4 surfable daylight hours: at least Worth a Look
- flat display height: Don't Bother
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from statistics import mean
from typing import Optional
from zoneinfo import ZoneInfo

from surfcast.core.classifier import ScoreClassifier
from surfcast.core.confidence import ConfidenceEstimator
from surfcast.core.daylight import DaylightFilter, get_daylight_filter
from surfcast.core.formatting import format_surf_height, is_flat, round_half_up
from surfcast.core.models import DaySummary, Rating, ScoringModel, TimelinePoint
from surfcast.core.tides import resolve_tide_phase
from surfcast.core.timeline import normalize
from surfcast.core.windows import WindowAnalyzer


logger = logging.getLogger(__name__)


@dataclass
class SpotGeo:
    """Where a spot is and which timezone its days follow."""
    lat: float
    lon: float
    timezone: str = "America/New_York"

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def group_by_local_day(points: list[TimelinePoint], tz) -> list[tuple[str, list[TimelinePoint]]]:
    """Group points by local calendar date.

    Args:
        points: Normalized points
        tz: Local timezone (tzinfo)

    Returns:
        (ISO date, points) pairs in date order, points oldest first
    """
    groups: dict[date, list[TimelinePoint]] = {}
    for point in sorted(points, key=lambda p: p.timestamp):
        local_date = point.timestamp.astimezone(tz).date()
        groups.setdefault(local_date, []).append(point)
    return [(day.isoformat(), groups[day]) for day in sorted(groups)]


def _max_rating(*ratings: Rating) -> Rating:
    return max(ratings, key=lambda r: r.rank)


class DaySummarizer:
    """Aggregates one day's points into a DaySummary."""

    SURFABLE_SCORE = 40
    DAYLIGHT_MIN_POINTS = 2
    DAYLIGHT_SURFABLE_SHARE = 0.5
    LONG_SURFABLE_HOURS = 5
    SHORT_SURFABLE_HOURS = 2
    BEST_SCORE_FULL_LABEL = 60

    def __init__(
        self,
        model: ScoringModel = ScoringModel.OPEN_METEO,
        daylight: Optional[DaylightFilter] = None,
        classifier: Optional[ScoreClassifier] = None,
        confidence: Optional[ConfidenceEstimator] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the summarizer.

        Args:
            model: Scoring model for effective scores
            daylight: Day/night filter. Defaults to the shared filter.
            classifier: Score classifier
            confidence: Confidence estimator
            logger: Logger for degraded-data events. Defaults to the module logger.
        """
        self.model = model
        self.daylight = daylight or get_daylight_filter()
        self.classifier = classifier or ScoreClassifier(model)
        self.confidence = confidence or ConfidenceEstimator()
        self.logger = logger or logging.getLogger(__name__)

    def day_average(self, all_scores: list[float], daylight_scores: list[float]) -> Optional[int]:
        """Average score for the day, preferring daylight when it is mostly surfable."""
        if not all_scores:
            return None
        if len(daylight_scores) >= self.DAYLIGHT_MIN_POINTS:
            surfable = sum(1 for s in daylight_scores if s >= self.SURFABLE_SCORE)
            if surfable / len(daylight_scores) >= self.DAYLIGHT_SURFABLE_SHARE:
                return round_half_up(mean(daylight_scores))
        return round_half_up(mean(all_scores))

    def verdict(
        self,
        avg_score: int,
        best_score: int,
        surfable_hours: int,
        display_height: str,
    ) -> Rating:
        """Day verdict after surfable-hour and flat overrides."""
        verdict = self.classifier.rate(avg_score)

        if surfable_hours >= self.LONG_SURFABLE_HOURS:
            if best_score >= self.BEST_SCORE_FULL_LABEL:
                verdict = _max_rating(verdict, self.classifier.rate(best_score))
            else:
                verdict = _max_rating(verdict, Rating.WORTH_A_LOOK)
        elif surfable_hours >= self.SHORT_SURFABLE_HOURS:
            verdict = _max_rating(verdict, Rating.WORTH_A_LOOK)

        if is_flat(display_height):
            verdict = Rating.DONT_BOTHER

        return verdict

    def summarize_day(
        self,
        day_key: str,
        points: list[TimelinePoint],
        day_index: int,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
        tz=None,
    ) -> DaySummary:
        """Summarize one local day.

        Args:
            day_key: ISO date of the day
            points: The day's points, oldest first
            day_index: Days from today (0 = today)
            lat: Spot latitude for daylight checks
            lon: Spot longitude for daylight checks
            tz: Local timezone for window labels

        Returns:
            DaySummary; a day without scores reports the no-data state
        """
        assessment = self.confidence.estimate(day_index, points)
        summary = DaySummary(
            day_key=day_key,
            day_index=day_index,
            day_name=self._day_name(day_key, day_index),
            point_count=len(points),
            confidence_band=assessment.band,
            confidence_percentage=assessment.percentage,
            is_extended_forecast=assessment.is_extended_forecast,
        )

        has_geo = lat is not None and lon is not None
        all_scores = []
        daylight_scores = []
        for point in points:
            score = self.classifier.effective_score(point, self.model)
            if score is None:
                continue
            all_scores.append(score)
            if not has_geo or not self.daylight.is_night(point.timestamp, lat, lon):
                daylight_scores.append(score)

        heights = [p.height_ft for p in points if p.height_ft is not None]
        summary.display_height = format_surf_height(mean(heights) if heights else None)

        agreement = self.confidence.agreement_summary(points)
        summary.model_agreement = agreement.value if agreement else None
        summary.max_model_diff_ft = self.confidence.max_height_difference(points)

        avg_score = self.day_average(all_scores, daylight_scores)
        if avg_score is None:
            self.logger.info(f"No scored points for {day_key}, reporting empty day")
            return summary

        best_score = round_half_up(max(all_scores))
        surfable_hours = sum(1 for s in daylight_scores if s >= self.SURFABLE_SCORE)
        verdict = self.verdict(avg_score, best_score, surfable_hours, summary.display_height)

        analyzer = WindowAnalyzer(
            model=self.model,
            tz=tz,
            daylight=self.daylight,
            classifier=self.classifier,
        )

        summary.avg_score = avg_score
        summary.best_score = best_score
        summary.surfable_daylight_hours = surfable_hours
        summary.verdict = verdict
        summary.verdict_label = verdict.value
        summary.best_windows = analyzer.best_windows(points, lat, lon)
        summary.avoid_windows = analyzer.avoid_windows(points)
        return summary

    def _day_name(self, day_key: str, day_index: int) -> str:
        if day_index == 0:
            return "Today"
        if day_index == 1:
            return "Tomorrow"
        return date.fromisoformat(day_key).strftime("%A")

    def summarize(
        self,
        points: list[TimelinePoint],
        spot_geo: SpotGeo,
        today: Optional[date] = None,
    ) -> list[DaySummary]:
        """Summarize a normalized timeline by local calendar day.

        Args:
            points: Normalized timeline
            spot_geo: Spot coordinates and timezone
            today: Local date treated as day 0. Defaults to today in the spot's timezone.

        Returns:
            DaySummary per local day, in date order
        """
        tz = spot_geo.tz
        if today is None:
            today = datetime.now(timezone.utc).astimezone(tz).date()

        summaries = []
        for day_key, day_points in group_by_local_day(points, tz):
            day_index = (date.fromisoformat(day_key) - today).days
            summaries.append(self.summarize_day(
                day_key,
                day_points,
                day_index,
                lat=spot_geo.lat,
                lon=spot_geo.lon,
                tz=tz,
            ))
        return summaries


def summarize(
    points: list,
    spot_geo: SpotGeo,
    today: Optional[date] = None,
    model: ScoringModel = ScoringModel.OPEN_METEO,
) -> list[DaySummary]:
    """Normalize, resolve tide phases and summarize a raw timeline.

    Args:
        points: Raw provider dicts and/or normalized points
        spot_geo: Spot coordinates and timezone
        today: Local date treated as day 0
        model: Scoring model for effective scores

    Returns:
        DaySummary per local day, in date order
    """
    prepared = resolve_tide_phase(normalize(points))
    return DaySummarizer(model=model).summarize(prepared, spot_geo, today=today)
