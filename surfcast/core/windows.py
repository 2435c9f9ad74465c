"""Best and avoid window detection.

Both scans walk a day's points in time order and merge consecutive
qualifying points into runs:

- a run continues while the next qualifying point is at most one hour after
  the previous one
- a non-qualifying point or a longer gap closes the run
- runs shorter than two points are dropped

Best windows only consider daylight points, qualify on score above 60 and
retry at 39 when nothing qualifies. Avoid windows flag blown-out hours:
low score with strong onshore wind.
"""

import logging
from datetime import timedelta, tzinfo
from statistics import mean
from typing import Callable, Optional

from surfcast.core.classifier import ScoreClassifier
from surfcast.core.daylight import DaylightFilter, get_daylight_filter
from surfcast.core.formatting import (
    format_surf_height,
    format_tide_description,
    format_time_range,
    format_wind_description,
    round_half_up,
    window_period_label,
)
from surfcast.core.models import ScoringModel, TimelinePoint, Window, WindType


logger = logging.getLogger(__name__)


class WindowAnalyzer:
    """Finds contiguous best and avoid windows within a day."""

    HIGH_QUALITY_THRESHOLD = 60
    FALLBACK_THRESHOLD = 39
    MAX_GAP = timedelta(hours=1)
    MIN_WINDOW_POINTS = 2
    MAX_BEST_WINDOWS = 3

    AVOID_SCORE_CEILING = 50
    AVOID_WIND_SPEED_MPH = 15

    def __init__(
        self,
        model: ScoringModel = ScoringModel.OPEN_METEO,
        tz: Optional[tzinfo] = None,
        daylight: Optional[DaylightFilter] = None,
        classifier: Optional[ScoreClassifier] = None,
    ):
        """Initialize the analyzer.

        Args:
            model: Scoring model used for effective scores
            tz: Local timezone for hour labels. Defaults to UTC labels.
            daylight: Day/night filter. Defaults to the shared filter.
            classifier: Score classifier. Defaults to one for `model`.
        """
        self.model = model
        self.tz = tz
        self.daylight = daylight or get_daylight_filter()
        self.classifier = classifier or ScoreClassifier(model)

    def _score(self, point: TimelinePoint) -> float:
        score = self.classifier.effective_score(point, self.model)
        return score if score is not None else 0.0

    def _local_hour(self, point: TimelinePoint) -> int:
        if self.tz is None:
            return point.timestamp.hour
        return point.timestamp.astimezone(self.tz).hour

    def _scan(
        self,
        points: list[TimelinePoint],
        qualifies: Callable[[TimelinePoint], bool],
    ) -> list[list[TimelinePoint]]:
        """Group qualifying points into runs of at least MIN_WINDOW_POINTS."""
        runs = []
        current: list[TimelinePoint] = []

        def flush():
            if len(current) >= self.MIN_WINDOW_POINTS:
                runs.append(list(current))
            current.clear()

        for point in points:
            if not qualifies(point):
                flush()
                continue
            if current and point.timestamp - current[-1].timestamp > self.MAX_GAP:
                flush()
            current.append(point)

        flush()
        return runs

    def _build_window(self, kind: str, run: list[TimelinePoint], reason: Optional[str] = None) -> Window:
        middle = run[len(run) // 2]
        start_hour = self._local_hour(run[0])
        end_hour = self._local_hour(run[-1])
        return Window(
            kind=kind,
            start_time=run[0].timestamp,
            end_time=run[-1].timestamp,
            avg_score=round_half_up(mean(self._score(p) for p in run)),
            time_range=format_time_range(start_hour, end_hour),
            period_label=window_period_label(self._local_hour(middle)),
            point_count=len(run),
            height_label=format_surf_height(middle.height_ft),
            wind_description=format_wind_description(middle.wind_type, middle.wind_speed_mph),
            tide_description=format_tide_description(middle.tide_phase),
            reason=reason,
        )

    def best_windows(
        self,
        points: list[TimelinePoint],
        lat: Optional[float] = None,
        lon: Optional[float] = None,
    ) -> list[Window]:
        """Find up to three best surf windows among daylight points.

        Args:
            points: One day's normalized points
            lat: Spot latitude. Without coordinates all points are considered.
            lon: Spot longitude

        Returns:
            Windows ranked by average score, highest first
        """
        if lat is not None and lon is not None:
            candidates = [p for p in points if not self.daylight.is_night(p.timestamp, lat, lon)]
        else:
            candidates = list(points)
        candidates.sort(key=lambda p: p.timestamp)

        runs = self._scan(candidates, lambda p: self._score(p) > self.HIGH_QUALITY_THRESHOLD)
        if not runs:
            runs = self._scan(candidates, lambda p: self._score(p) > self.FALLBACK_THRESHOLD)
            if runs:
                logger.debug(f"No windows above {self.HIGH_QUALITY_THRESHOLD}, using fallback threshold")

        windows = [self._build_window("best", run) for run in runs]
        windows.sort(key=lambda w: w.avg_score, reverse=True)
        return windows[:self.MAX_BEST_WINDOWS]

    def _is_blown_out(self, point: TimelinePoint) -> bool:
        return (
            self._score(point) < self.AVOID_SCORE_CEILING
            and point.wind_type is WindType.ONSHORE
            and point.wind_speed_mph is not None
            and point.wind_speed_mph > self.AVOID_WIND_SPEED_MPH
        )

    def avoid_windows(self, points: list[TimelinePoint]) -> list[Window]:
        """Find blown-out windows (low score, strong onshore wind).

        Args:
            points: One day's normalized points, day and night

        Returns:
            Windows in time order
        """
        ordered = sorted(points, key=lambda p: p.timestamp)
        windows = []
        for run in self._scan(ordered, self._is_blown_out):
            middle = run[len(run) // 2]
            reason = "blown out"
            if middle.wind_type is WindType.ONSHORE and middle.wind_speed_mph is not None:
                reason = f"blown out, onshore {round_half_up(middle.wind_speed_mph)}mph"
            windows.append(self._build_window("avoid", run, reason=reason))
        return windows
