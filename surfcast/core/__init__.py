"""Core forecast pipeline: normalization, classification, windows and day summaries."""

from surfcast.core.buoy_validator import BuoyValidator, validate_swell
from surfcast.core.cache import SummaryCache
from surfcast.core.classifier import (
    BadgeColor,
    PointClassification,
    ScoreClassifier,
    classify,
    classify_point,
)
from surfcast.core.confidence import (
    AgreementLevel,
    ConfidenceAssessment,
    ConfidenceEstimator,
    estimate_confidence,
)
from surfcast.core.daylight import DaylightFilter, is_night
from surfcast.core.models import (
    BuoyReading,
    ConfidenceBand,
    DaySummary,
    Rating,
    ScoringModel,
    SwellComponent,
    SwellSlot,
    SwellValidation,
    TidePhase,
    TimelinePoint,
    Window,
    WindType,
)
from surfcast.core.spot import Spot, SpotDatabase, get_spot, get_spot_database
from surfcast.core.summarizer import DaySummarizer, SpotGeo, group_by_local_day, summarize
from surfcast.core.tides import TidePhaseResolver, resolve_tide_phase
from surfcast.core.timeline import TimelineNormalizer, normalize, select_current_point
from surfcast.core.windows import WindowAnalyzer

# ForecastEngine is imported from surfcast.core.engine; it depends on the clients,
# which import from this package.

__all__ = [
    # Models
    "BuoyReading",
    "ConfidenceBand",
    "DaySummary",
    "Rating",
    "ScoringModel",
    "SwellComponent",
    "SwellSlot",
    "SwellValidation",
    "TidePhase",
    "TimelinePoint",
    "Window",
    "WindType",
    # Timeline
    "TimelineNormalizer",
    "normalize",
    "select_current_point",
    # Daylight
    "DaylightFilter",
    "is_night",
    # Buoy validation
    "BuoyValidator",
    "validate_swell",
    # Tides
    "TidePhaseResolver",
    "resolve_tide_phase",
    # Classifier
    "BadgeColor",
    "PointClassification",
    "ScoreClassifier",
    "classify",
    "classify_point",
    # Windows
    "WindowAnalyzer",
    # Summaries
    "DaySummarizer",
    "SpotGeo",
    "group_by_local_day",
    "summarize",
    # Confidence
    "AgreementLevel",
    "ConfidenceAssessment",
    "ConfidenceEstimator",
    "estimate_confidence",
    # Spots
    "Spot",
    "SpotDatabase",
    "get_spot",
    "get_spot_database",
    # Cache
    "SummaryCache",
]
