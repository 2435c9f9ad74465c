"""Score classification into rating bands and badge colors.

Scores are 0-100 quality ratings computed upstream. Classification rounds
the score half-up and maps it onto fixed bands:

- 0-39: Don't Bother
- 40-59: Worth a Look
- 60-75: Go Surf
- 76-90: Firing
- 91-100: All-Time

A flat ocean ("Flat" or "<1ft") is always Don't Bother, whatever the score.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from surfcast.core.formatting import format_surf_height, is_flat, round_half_up
from surfcast.core.models import Rating, ScoringModel, TimelinePoint


logger = logging.getLogger(__name__)


@dataclass
class BadgeColor:
    """Background/text color pair for a score badge."""
    bucket: str
    background: str
    text: str


@dataclass
class PointClassification:
    """Classification of a single timeline point."""
    score: Optional[int]
    rating: Optional[Rating]
    label: str
    badge: BadgeColor
    model: ScoringModel
    flat: bool = False

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "label": self.label,
            "badge": {
                "bucket": self.badge.bucket,
                "background": self.badge.background,
                "text": self.badge.text,
            },
            "model": self.model.value,
            "flat": self.flat,
        }


NO_SCORE_BADGE = BadgeColor("none", "#9ca3af", "#ffffff")


class ScoreClassifier:
    """Maps quality scores onto rating bands and badge colors."""

    # Lowest rounded score for each band
    WORTH_A_LOOK_MIN = 40
    GO_SURF_MIN = 60
    FIRING_MIN = 76
    ALL_TIME_MIN = 91

    BLACK = "#000000"
    WHITE = "#ffffff"

    def __init__(self, model: ScoringModel = ScoringModel.OPEN_METEO):
        """Initialize the classifier.

        Args:
            model: Scoring model preferred by effective_score
        """
        self.model = model

    def rate(self, score: Optional[float]) -> Optional[Rating]:
        """Rating band for a raw score, or None when there is no score."""
        if score is None:
            return None
        s = round_half_up(score)
        if s >= self.ALL_TIME_MIN:
            return Rating.ALL_TIME
        if s >= self.FIRING_MIN:
            return Rating.FIRING
        if s >= self.GO_SURF_MIN:
            return Rating.GO_SURF
        if s >= self.WORTH_A_LOOK_MIN:
            return Rating.WORTH_A_LOOK
        return Rating.DONT_BOTHER

    def label(self, score: Optional[float], height_label: Optional[str] = None) -> str:
        """Display label for a score, applying the flat-ocean rule.

        Args:
            score: Raw 0-100 score
            height_label: Display height label (e.g. "<1ft")

        Returns:
            Rating label, or "N/A" when there is no score
        """
        if height_label is not None and is_flat(height_label):
            return Rating.DONT_BOTHER.value
        rating = self.rate(score)
        return rating.value if rating else "N/A"

    def badge_color(self, score: Optional[float]) -> BadgeColor:
        """Badge colors for a score bucket."""
        if score is None:
            return NO_SCORE_BADGE
        s = round_half_up(score)
        if s >= self.ALL_TIME_MIN:
            return BadgeColor("all-time", "#059669", self.WHITE)
        if s >= self.FIRING_MIN:
            return BadgeColor("firing", "#16a34a", self.WHITE)
        if s >= self.GO_SURF_MIN:
            return BadgeColor("go-surf", "#84cc16", self.BLACK)
        if s >= self.WORTH_A_LOOK_MIN:
            return BadgeColor("worth-a-look", "#eab308", self.BLACK)
        return BadgeColor("dont-bother", "#ef4444", self.WHITE)

    def effective_score(
        self,
        point: TimelinePoint,
        model: Optional[ScoringModel] = None,
    ) -> Optional[float]:
        """Score from the selected model, else from the other model.

        Args:
            point: Normalized timeline point
            model: Preferred model. Defaults to the classifier's model.

        Returns:
            A single model's score, or None if neither model scored the point
        """
        model = model or self.model
        score = point.scores.get(model)
        if score is None:
            score = point.scores.get(model.fallback)
        return score

    def classify_point(
        self,
        point: TimelinePoint,
        model: Optional[ScoringModel] = None,
    ) -> PointClassification:
        """Classify a timeline point.

        Args:
            point: Normalized timeline point
            model: Preferred scoring model

        Returns:
            PointClassification with rounded score, label and badge
        """
        model = model or self.model
        score = self.effective_score(point, model)
        height_label = format_surf_height(point.height_ft)
        flat = is_flat(height_label)

        if flat:
            rating = Rating.DONT_BOTHER
        else:
            rating = self.rate(score)

        if flat and score is not None and round_half_up(score) >= self.WORTH_A_LOOK_MIN:
            logger.debug(f"Flat override at {point.timestamp.isoformat()}: score {score} -> {rating.value}")

        return PointClassification(
            score=round_half_up(score) if score is not None else None,
            rating=rating,
            label=rating.value if rating else "N/A",
            badge=self.badge_color(score),
            model=model,
            flat=flat,
        )


def classify(score: Optional[float]) -> str:
    """Quick label lookup for a raw score."""
    return ScoreClassifier().label(score)


def classify_point(
    point: TimelinePoint,
    model: ScoringModel = ScoringModel.OPEN_METEO,
) -> PointClassification:
    """Classify a point with the default classifier."""
    return ScoreClassifier(model).classify_point(point)
