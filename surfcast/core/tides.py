"""Tide phase resolution from neighboring tide heights."""

import logging
from dataclasses import replace
from typing import Optional

from surfcast.core.models import TidePhase, TimelinePoint


logger = logging.getLogger(__name__)


def tide_phase_at(
    height: Optional[float],
    prev_height: Optional[float],
    next_height: Optional[float],
    fallback: Optional[TidePhase] = None,
) -> Optional[TidePhase]:
    """Classify the tide at one point from its neighbors.

    Args:
        height: Tide height at the point
        prev_height: Tide height at the previous point, if any
        next_height: Tide height at the next point, if any
        fallback: Phase supplied upstream, used when neighbors are inconclusive

    Returns:
        TidePhase, or None when the point has no tide height
    """
    if height is None:
        return None

    if prev_height is not None and next_height is not None:
        if height > prev_height and height > next_height:
            return TidePhase.HIGH
        if height < prev_height and height < next_height:
            return TidePhase.LOW

    if prev_height is not None:
        if height > prev_height:
            return TidePhase.RISING
        if height < prev_height:
            return TidePhase.FALLING

    # No previous neighbor, or a plateau behind us
    if next_height is not None:
        if height < next_height:
            return TidePhase.RISING
        if height > next_height:
            return TidePhase.FALLING

    return fallback


class TidePhaseResolver:
    """Populates tide phases across a timeline."""

    def resolve(self, points: list[TimelinePoint]) -> list[TimelinePoint]:
        """Return new points with tide_phase populated.

        Args:
            points: Normalized timeline, oldest first

        Returns:
            New list of points; inputs are not modified
        """
        resolved = []
        overridden = 0

        for i, point in enumerate(points):
            prev_height = points[i - 1].tide_height_ft if i > 0 else None
            next_height = points[i + 1].tide_height_ft if i + 1 < len(points) else None
            phase = tide_phase_at(point.tide_height_ft, prev_height, next_height, point.tide_phase)
            if point.tide_phase is not None and phase != point.tide_phase:
                overridden += 1
            resolved.append(replace(point, tide_phase=phase))

        if overridden:
            logger.debug(f"Overrode {overridden} upstream tide phases")

        return resolved


def resolve_tide_phase(points: list[TimelinePoint]) -> list[TimelinePoint]:
    """Resolve tide phases with the default resolver."""
    return TidePhaseResolver().resolve(points)
