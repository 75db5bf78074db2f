from __future__ import annotations

import logging
from datetime import datetime
from typing import NamedTuple, Optional

from .schemas import CourseLayout, GeoPoint, distance_yards

logger = logging.getLogger(__name__)

# Distances are yards to a tee.
FIRST_LOCK_RADIUS = 50.0
TRANSITION_RADIUS = 30.0
FIRST_LOCK_CONFIDENCE = 0.85
UNLOCKED_CONFIDENCE = 0.5
TRANSITION_CONFIDENCE = 0.9
STAY_CONFIDENCE = 0.8


class HoleResolution(NamedTuple):
    hole: int
    confidence: float


class HoleResolver:
    """Nearest-tee hole lookup with hysteresis against GPS flicker.

    One resolver tracks one round. Call :meth:`reset` (or :meth:`set_course`)
    before reusing it for another round.
    """

    def __init__(self, layout: CourseLayout | None = None) -> None:
        self._layout = layout
        self.current_hole: Optional[int] = None

    def set_course(self, layout: CourseLayout) -> None:
        self._layout = layout
        self.current_hole = None

    def reset(self) -> None:
        self.current_hole = None

    def _nearest_tee(self, position: GeoPoint) -> tuple[int, float] | None:
        if self._layout is None or not self._layout.holes:
            return None
        distances = [
            (hole.number, distance_yards(hole.tee, position))
            for hole in self._layout.holes
        ]
        return min(distances, key=lambda item: item[1])

    def resolve_hole(
        self, lat: float, lon: float, timestamp: datetime | None = None
    ) -> Optional[HoleResolution]:
        nearest = self._nearest_tee(GeoPoint(lat=lat, lon=lon))
        if nearest is None:
            return None
        hole, tee_distance = nearest

        if self.current_hole is not None:
            if hole != self.current_hole and tee_distance < TRANSITION_RADIUS:
                logger.debug(
                    "hole transition %s -> %s at %s (%.1f yd from tee)",
                    self.current_hole,
                    hole,
                    timestamp,
                    tee_distance,
                )
                self.current_hole = hole
                return HoleResolution(hole, TRANSITION_CONFIDENCE)
            return HoleResolution(self.current_hole, STAY_CONFIDENCE)

        if tee_distance < FIRST_LOCK_RADIUS:
            self.current_hole = hole
            return HoleResolution(hole, FIRST_LOCK_CONFIDENCE)

        return HoleResolution(hole, UNLOCKED_CONFIDENCE)


__all__ = [
    "FIRST_LOCK_RADIUS",
    "HoleResolution",
    "HoleResolver",
    "TRANSITION_RADIUS",
]
