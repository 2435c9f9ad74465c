"""Data model shared by the forecast pipeline.

All pipeline stages consume and produce these records. Derived records
(windows, day summaries, swell validations) are rebuilt from timeline
points and buoy readings on every call and never mutated afterwards.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class SwellSlot(Enum):
    """Named swell component slot."""
    PRIMARY = "primary"
    SECONDARY = "secondary"
    WIND = "wind"


class WindType(Enum):
    """Wind direction relative to the beach."""
    OFFSHORE = "offshore"
    ONSHORE = "onshore"
    CROSS = "cross"
    SIDE_OFFSHORE = "side-offshore"
    UNKNOWN = "unknown"

    @classmethod
    def from_raw(cls, value: Optional[str]) -> "WindType":
        """Parse a provider wind type string, defaulting to UNKNOWN."""
        if not value:
            return cls.UNKNOWN
        key = str(value).strip().lower().replace("_", "-")
        aliases = {
            "offshore": cls.OFFSHORE,
            "onshore": cls.ONSHORE,
            "cross": cls.CROSS,
            "cross-shore": cls.CROSS,
            "crossshore": cls.CROSS,
            "side-offshore": cls.SIDE_OFFSHORE,
            "sideoffshore": cls.SIDE_OFFSHORE,
            "cross-offshore": cls.SIDE_OFFSHORE,
        }
        return aliases.get(key, cls.UNKNOWN)


class TidePhase(Enum):
    """Tide state at a point in time."""
    RISING = "rising"
    FALLING = "falling"
    HIGH = "high"
    LOW = "low"

    @classmethod
    def from_raw(cls, value: Optional[str]) -> Optional["TidePhase"]:
        if not value:
            return None
        key = str(value).strip().lower()
        if key in ("dropping", "ebb"):
            return cls.FALLING
        if key == "flood":
            return cls.RISING
        try:
            return cls(key)
        except ValueError:
            return None


class ConfidenceBand(Enum):
    """Qualitative trust level in a forecast."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def from_raw(cls, value: Optional[str]) -> Optional["ConfidenceBand"]:
        if not value:
            return None
        key = str(value).strip().lower()
        for band in cls:
            if band.value.lower() == key:
                return band
        if key == "med":
            return cls.MEDIUM
        return None

    @property
    def percentage(self) -> int:
        """Display percentage for the band."""
        return {
            ConfidenceBand.HIGH: 95,
            ConfidenceBand.MEDIUM: 75,
            ConfidenceBand.LOW: 50,
        }[self]


class Rating(Enum):
    """Qualitative rating band, ordered worst to best."""
    DONT_BOTHER = "Don't Bother"
    WORTH_A_LOOK = "Worth a Look"
    GO_SURF = "Go Surf"
    FIRING = "Firing"
    ALL_TIME = "All-Time"

    @property
    def rank(self) -> int:
        return list(Rating).index(self)


class ScoringModel(Enum):
    """Upstream model whose quality score is used."""
    OPEN_METEO = "open_meteo"
    EURO = "euro"

    @property
    def fallback(self) -> "ScoringModel":
        """The other model, used when this one has no score."""
        if self is ScoringModel.OPEN_METEO:
            return ScoringModel.EURO
        return ScoringModel.OPEN_METEO

    @classmethod
    def from_name(cls, name: Optional[str]) -> "ScoringModel":
        """Parse a model name such as "euro" or "open_meteo"."""
        if not name:
            return cls.OPEN_METEO
        key = name.strip().lower().replace("-", "_")
        if key in ("euro", "ecmwf"):
            return cls.EURO
        if key in ("open_meteo", "openmeteo"):
            return cls.OPEN_METEO
        raise ValueError(f"Unknown scoring model: {name}")


@dataclass
class SwellComponent:
    """One directional wave train."""
    slot: SwellSlot
    height_ft: Optional[float] = None
    period_s: Optional[float] = None
    direction_deg: Optional[float] = None

    @property
    def has_height(self) -> bool:
        return self.height_ft is not None and self.height_ft > 0

    @property
    def energy(self) -> Optional[float]:
        """Relative wave energy, height² × period."""
        if self.height_ft is None or self.period_s is None:
            return None
        return self.height_ft ** 2 * self.period_s

    def to_dict(self) -> dict:
        return {
            "slot": self.slot.value,
            "heightFt": self.height_ft,
            "periodS": self.period_s,
            "directionDeg": self.direction_deg,
        }


@dataclass
class TimelinePoint:
    """One hour of forecast data for one spot, in canonical shape."""
    timestamp: datetime  # UTC, timezone-aware

    # Swell components
    primary: SwellComponent = field(default_factory=lambda: SwellComponent(SwellSlot.PRIMARY))
    secondary: SwellComponent = field(default_factory=lambda: SwellComponent(SwellSlot.SECONDARY))
    wind_swell: SwellComponent = field(default_factory=lambda: SwellComponent(SwellSlot.WIND))
    breaking_height_ft: Optional[float] = None

    # Resolved display values
    height_ft: Optional[float] = None
    period_s: Optional[float] = None
    direction_deg: Optional[float] = None
    dominant_slot: Optional[SwellSlot] = None

    # Wind
    wind_speed_mph: Optional[float] = None
    wind_gust_mph: Optional[float] = None
    wind_direction_deg: Optional[float] = None
    wind_type: WindType = WindType.UNKNOWN

    # Tide
    tide_height_ft: Optional[float] = None
    tide_phase: Optional[TidePhase] = None

    # Quality
    scores: dict = field(default_factory=dict)  # ScoringModel -> float
    model_heights_ft: dict = field(default_factory=dict)  # ScoringModel -> float
    confidence_band: Optional[ConfidenceBand] = None

    convention: str = "current"  # "current" or "legacy"

    @property
    def components(self) -> list[SwellComponent]:
        return [self.primary, self.secondary, self.wind_swell]

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "heightFt": self.height_ft,
            "periodS": self.period_s,
            "directionDeg": self.direction_deg,
            "breakingHeightFt": self.breaking_height_ft,
            "dominantSlot": self.dominant_slot.value if self.dominant_slot else None,
            "swell": [c.to_dict() for c in self.components if c.height_ft is not None],
            "windSpeedMph": self.wind_speed_mph,
            "windGustMph": self.wind_gust_mph,
            "windDirectionDeg": self.wind_direction_deg,
            "windType": self.wind_type.value,
            "tideHeightFt": self.tide_height_ft,
            "tidePhase": self.tide_phase.value if self.tide_phase else None,
            "scores": {model.value: score for model, score in self.scores.items()},
            "confidenceBand": self.confidence_band.value if self.confidence_band else None,
        }


@dataclass
class BuoyReading:
    """Most recent physical observation from a buoy."""
    station_id: str
    timestamp: Optional[datetime] = None
    total_wave_height_ft: Optional[float] = None
    dominant_period_s: Optional[float] = None
    mean_direction_deg: Optional[float] = None

    swell_height_ft: Optional[float] = None
    swell_period_s: Optional[float] = None
    swell_direction_deg: Optional[float] = None

    wind_wave_height_ft: Optional[float] = None
    wind_wave_period_s: Optional[float] = None
    wind_wave_direction_deg: Optional[float] = None

    steepness: Optional[str] = None
    is_stale: bool = False

    def components(self) -> list[SwellComponent]:
        """Observed swell components with both height and period."""
        observed = []
        if self.swell_height_ft is not None and self.swell_period_s is not None:
            observed.append(SwellComponent(
                SwellSlot.PRIMARY,
                self.swell_height_ft,
                self.swell_period_s,
                self.swell_direction_deg,
            ))
        if self.wind_wave_height_ft is not None and self.wind_wave_period_s is not None:
            observed.append(SwellComponent(
                SwellSlot.WIND,
                self.wind_wave_height_ft,
                self.wind_wave_period_s,
                self.wind_wave_direction_deg,
            ))
        return observed

    def to_dict(self) -> dict:
        return {
            "stationId": self.station_id,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "totalWaveHeightFt": self.total_wave_height_ft,
            "dominantPeriodS": self.dominant_period_s,
            "meanDirectionDeg": self.mean_direction_deg,
            "swellHeightFt": self.swell_height_ft,
            "swellPeriodS": self.swell_period_s,
            "swellDirectionDeg": self.swell_direction_deg,
            "windWaveHeightFt": self.wind_wave_height_ft,
            "windWavePeriodS": self.wind_wave_period_s,
            "windWaveDirectionDeg": self.wind_wave_direction_deg,
            "steepness": self.steepness,
            "isStale": self.is_stale,
        }


@dataclass
class SwellValidation:
    """Which swell breakdown to display, and why."""
    components: list[SwellComponent]
    source: str  # "model" or "buoy"
    is_valid: bool = False
    ratio: Optional[float] = None
    forecast_total_ft: Optional[float] = None
    buoy_total_ft: Optional[float] = None
    reason: str = ""

    @property
    def has_data(self) -> bool:
        return bool(self.components)

    def to_dict(self) -> dict:
        return {
            "components": [c.to_dict() for c in self.components],
            "source": self.source,
            "isValid": self.is_valid,
            "ratio": self.ratio,
            "forecastTotalFt": self.forecast_total_ft,
            "buoyTotalFt": self.buoy_total_ft,
            "reason": self.reason,
        }


@dataclass
class Window:
    """A contiguous block of hours recommended for or against surfing."""
    kind: str  # "best" or "avoid"
    start_time: datetime
    end_time: datetime
    avg_score: int
    time_range: str
    period_label: str
    point_count: int
    height_label: str = "N/A"
    wind_description: str = "N/A"
    tide_description: str = "N/A"
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        result = {
            "kind": self.kind,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "avgScore": self.avg_score,
            "timeRange": self.time_range,
            "periodLabel": self.period_label,
            "pointCount": self.point_count,
        }
        if self.kind == "avoid":
            result["reason"] = self.reason
        else:
            result["heightLabel"] = self.height_label
            result["windDescription"] = self.wind_description
            result["tideDescription"] = self.tide_description
        return result


@dataclass
class DaySummary:
    """Aggregated verdict for one local calendar day."""
    day_key: str  # ISO date
    day_index: int
    day_name: str
    point_count: int
    avg_score: Optional[int] = None
    best_score: Optional[int] = None
    verdict: Optional[Rating] = None
    verdict_label: str = "No Data"
    confidence_band: ConfidenceBand = ConfidenceBand.MEDIUM
    confidence_percentage: int = 75
    is_extended_forecast: bool = False
    display_height: str = "N/A"
    surfable_daylight_hours: int = 0
    best_windows: list[Window] = field(default_factory=list)
    avoid_windows: list[Window] = field(default_factory=list)
    model_agreement: Optional[str] = None
    max_model_diff_ft: Optional[float] = None

    @property
    def has_data(self) -> bool:
        return self.avg_score is not None

    @property
    def has_model_discrepancy(self) -> bool:
        return self.max_model_diff_ft is not None and self.max_model_diff_ft >= 1.0

    def to_dict(self) -> dict:
        return {
            "dayKey": self.day_key,
            "dayIndex": self.day_index,
            "dayName": self.day_name,
            "pointCount": self.point_count,
            "avgScore": self.avg_score,
            "bestScore": self.best_score,
            "verdictLabel": self.verdict_label,
            "confidenceBand": self.confidence_band.value,
            "confidencePercentage": self.confidence_percentage,
            "isExtendedForecast": self.is_extended_forecast,
            "displayHeight": self.display_height,
            "surfableDaylightHours": self.surfable_daylight_hours,
            "bestWindows": [w.to_dict() for w in self.best_windows],
            "avoidWindows": [w.to_dict() for w in self.avoid_windows],
            "modelAgreement": self.model_agreement,
            "maxModelDiffFt": self.max_model_diff_ft,
            "hasModelDiscrepancy": self.has_model_discrepancy,
        }
