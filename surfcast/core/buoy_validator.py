"""Cross-check of forecast swell against a live buoy reading.

Wave energy scales with height squared, so component heights combine in
quadrature: forecast total = sqrt(Σ h²). The forecast breakdown is trusted
when that total is within ±30% of the buoy's significant wave height.
Otherwise only the observed buoy components are shown, when the buoy has any.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional

from surfcast.core.models import BuoyReading, SwellComponent, SwellSlot, SwellValidation


logger = logging.getLogger(__name__)


@dataclass
class RatioCheck:
    """Result of comparing a forecast total against a buoy total."""
    is_valid: bool
    ratio: float
    forecast_total_ft: Optional[float] = None


def _with_height(components: Iterable[SwellComponent]) -> list[SwellComponent]:
    return [c for c in components if c.has_height]


class BuoyValidator:
    """Decides whether to show the model swell breakdown or buoy data."""

    VALID_RATIO_MIN = 0.7
    VALID_RATIO_MAX = 1.3

    def __init__(self, logger: Optional[logging.Logger] = None):
        """Initialize the validator.

        Args:
            logger: Logger for fallback events. Defaults to the module logger.
        """
        self.logger = logger or logging.getLogger(__name__)

    def rss_height(self, components: Iterable[SwellComponent]) -> Optional[float]:
        """Root-sum-square of component heights, or None without heights."""
        heights = [c.height_ft for c in _with_height(components)]
        if not heights:
            return None
        return math.sqrt(sum(h ** 2 for h in heights))

    def check_ratio(
        self,
        components: Iterable[SwellComponent],
        buoy_total_ft: Optional[float],
    ) -> RatioCheck:
        """Compare the forecast RSS total against the buoy total.

        Args:
            components: Forecast swell components for one instant
            buoy_total_ft: Buoy significant wave height in feet

        Returns:
            RatioCheck; invalid with ratio 0 when either side is missing
        """
        forecast_total = self.rss_height(components)
        if buoy_total_ft is None or buoy_total_ft <= 0 or forecast_total is None:
            return RatioCheck(is_valid=False, ratio=0.0, forecast_total_ft=forecast_total)

        ratio = forecast_total / buoy_total_ft
        is_valid = self.VALID_RATIO_MIN <= ratio <= self.VALID_RATIO_MAX
        return RatioCheck(is_valid=is_valid, ratio=ratio, forecast_total_ft=forecast_total)

    def _fallback_components(
        self,
        model: list[SwellComponent],
        observed: list[SwellComponent],
    ) -> tuple[list[SwellComponent], bool]:
        """Buoy-only components when the buoy has a breakdown, else the model's."""
        if observed:
            order = [SwellSlot.PRIMARY, SwellSlot.SECONDARY, SwellSlot.WIND]
            return sorted(observed, key=lambda c: order.index(c.slot)), True
        return model, False

    def validate_swell(
        self,
        forecast_components: Iterable[SwellComponent],
        buoy: Optional[BuoyReading],
    ) -> SwellValidation:
        """Choose the swell breakdown to display for one instant.

        Args:
            forecast_components: Model swell components
            buoy: Latest buoy reading, or None when unavailable

        Returns:
            SwellValidation naming the components shown and their source
        """
        model = _with_height(forecast_components)
        buoy_total = buoy.total_wave_height_ft if buoy is not None else None
        check = self.check_ratio(model, buoy_total)

        if check.is_valid and not buoy.is_stale:
            self.logger.debug(f"Forecast swell validated against buoy {buoy.station_id} (ratio {check.ratio:.2f})")
            return SwellValidation(
                components=model,
                source="model",
                is_valid=True,
                ratio=check.ratio,
                forecast_total_ft=check.forecast_total_ft,
                buoy_total_ft=buoy_total,
                reason="validated",
            )

        if buoy is None:
            reason = "no_buoy_reading"
        elif buoy.is_stale:
            reason = "buoy_stale"
        elif buoy_total is None:
            reason = "no_buoy_total"
        else:
            reason = "forecast_diverges"

        observed = buoy.components() if buoy is not None else []
        components, used_buoy = self._fallback_components(model, observed)

        if not components:
            reason = "no_swell_data"
            self.logger.info("No swell data from forecast or buoy")
        elif used_buoy:
            self.logger.info(
                f"Using buoy {buoy.station_id} swell components ({reason}, ratio {check.ratio:.2f})"
            )
        else:
            self.logger.info(f"Keeping model swell components ({reason})")

        return SwellValidation(
            components=components,
            source="buoy" if used_buoy else "model",
            is_valid=False,
            ratio=check.ratio if buoy_total else None,
            forecast_total_ft=check.forecast_total_ft,
            buoy_total_ft=buoy_total,
            reason=reason,
        )


def validate_swell(
    forecast_components: Iterable[SwellComponent],
    buoy: Optional[BuoyReading],
) -> SwellValidation:
    """Validate forecast swell with the default validator."""
    return BuoyValidator().validate_swell(forecast_components, buoy)
