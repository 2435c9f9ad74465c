"""Forecast confidence by horizon and model agreement.

Horizon rules, first match wins:

- today or tomorrow: High (95%)
- third day: Medium (75%)
- sixth and seventh days: extended forecast, fixed 25%
- otherwise: majority vote of the points' confidence bands, Medium on a tie

Model agreement compares the Open-Meteo and Euro wave heights at each point.
"""

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from surfcast.core.models import ConfidenceBand, ScoringModel, TimelinePoint


class AgreementLevel(Enum):
    """Agreement between two wave models at one point."""
    HIGH = "HIGH"
    MED = "MED"
    LOW = "LOW"


AGREEMENT_BADGE_TEXT = {
    AgreementLevel.HIGH: "High Confidence",
    AgreementLevel.MED: "Moderate Confidence",
    AgreementLevel.LOW: "Forecast Uncertain",
}


@dataclass
class ConfidenceAssessment:
    """Confidence for one forecast day."""
    band: ConfidenceBand
    percentage: int
    is_extended_forecast: bool = False


class ConfidenceEstimator:
    """Assigns per-day confidence."""

    MEDIUM_DAY_INDEX = 2
    EXTENDED_FIRST_INDEX = 5  # sixth forecast day
    EXTENDED_LAST_INDEX = 6  # seventh forecast day
    EXTENDED_PERCENTAGE = 25

    # Model agreement thresholds (feet of height difference)
    AGREEMENT_HIGH_FT = 0.5
    AGREEMENT_MED_FT = 1.5
    DISCREPANCY_FT = 1.0

    # Share of points needed for a summary level
    SUMMARY_HIGH_SHARE = 0.6
    SUMMARY_LOW_SHARE = 0.4

    def estimate(self, day_index: int, points: list[TimelinePoint]) -> ConfidenceAssessment:
        """Confidence for a day.

        Args:
            day_index: Days from today in the spot's timezone (0 = today)
            points: The day's points

        Returns:
            ConfidenceAssessment with band and display percentage
        """
        if day_index <= 1:
            band = ConfidenceBand.HIGH
            return ConfidenceAssessment(band, band.percentage)

        if day_index == self.MEDIUM_DAY_INDEX:
            band = ConfidenceBand.MEDIUM
            return ConfidenceAssessment(band, band.percentage)

        if self.EXTENDED_FIRST_INDEX <= day_index <= self.EXTENDED_LAST_INDEX:
            return ConfidenceAssessment(
                ConfidenceBand.LOW,
                self.EXTENDED_PERCENTAGE,
                is_extended_forecast=True,
            )

        band = self.majority_band(points)
        return ConfidenceAssessment(band, band.percentage)

    def majority_band(self, points: list[TimelinePoint]) -> ConfidenceBand:
        """Most common supplied band; Medium on a tie or when none are set."""
        counts = Counter(p.confidence_band for p in points if p.confidence_band is not None)
        if not counts:
            return ConfidenceBand.MEDIUM

        ranked = counts.most_common()
        if len(ranked) > 1 and ranked[0][1] == ranked[1][1]:
            return ConfidenceBand.MEDIUM
        return ranked[0][0]

    def height_difference(self, point: TimelinePoint) -> Optional[float]:
        open_meteo = point.model_heights_ft.get(ScoringModel.OPEN_METEO)
        euro = point.model_heights_ft.get(ScoringModel.EURO)
        if open_meteo is None or euro is None:
            return None
        return abs(open_meteo - euro)

    def model_agreement(self, point: TimelinePoint) -> Optional[AgreementLevel]:
        """Agreement level between the two models' wave heights."""
        diff = self.height_difference(point)
        if diff is None:
            return None
        if diff < self.AGREEMENT_HIGH_FT:
            return AgreementLevel.HIGH
        if diff < self.AGREEMENT_MED_FT:
            return AgreementLevel.MED
        return AgreementLevel.LOW

    def agreement_summary(self, points: list[TimelinePoint]) -> Optional[AgreementLevel]:
        """Overall agreement across points that have both model heights."""
        levels = [level for level in (self.model_agreement(p) for p in points) if level is not None]
        if not levels:
            return None

        total = len(levels)
        if levels.count(AgreementLevel.HIGH) / total >= self.SUMMARY_HIGH_SHARE:
            return AgreementLevel.HIGH
        if levels.count(AgreementLevel.LOW) / total >= self.SUMMARY_LOW_SHARE:
            return AgreementLevel.LOW
        return AgreementLevel.MED

    def max_height_difference(self, points: list[TimelinePoint]) -> Optional[float]:
        """Largest model height difference for the day, rounded to 0.1 ft."""
        diffs = [d for d in (self.height_difference(p) for p in points) if d is not None]
        if not diffs:
            return None
        return round(max(diffs), 1)


def estimate_confidence(day_index: int, points: list[TimelinePoint]) -> ConfidenceAssessment:
    """Quick confidence estimate with default rules."""
    return ConfidenceEstimator().estimate(day_index, points)
