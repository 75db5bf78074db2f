"""Rule-based lie inference from position, shot context and motion hints."""

from __future__ import annotations

from typing import List, NamedTuple, Optional

from golfsg.sg.schemas import Lie, ShotType

from .schemas import CourseLayout

FRINGE_MARGIN_YARDS = 5.0
STABLE_PUTTING_MOTION = 0.2
VERY_CLOSE_DISTANCE = 3.0
SHORT_DISTANCE = 30.0


class LieInference(NamedTuple):
    lie: Lie
    confidence: float
    reasons: List[str]


class LieClassifier:
    """Infers the lie for a position; rules are checked in a fixed order."""

    def __init__(self, layout: CourseLayout | None = None) -> None:
        self._layout = layout

    def set_course(self, layout: CourseLayout) -> None:
        self._layout = layout

    def infer_lie(
        self,
        lat: Optional[float],
        lon: Optional[float],
        *,
        hole_number: Optional[int],
        shot_number: int,
        shot_type: Optional[ShotType] = None,
        distance_to_pin: Optional[float] = None,
        motion_stability: Optional[float] = None,
    ) -> LieInference:
        if shot_type == ShotType.PUTT:
            return LieInference(Lie.GREEN, 0.9, ["shot_type_putt"])
        if shot_type == ShotType.DRIVE and shot_number == 1:
            return LieInference(Lie.TEE, 0.95, ["first_shot_drive"])
        if shot_type == ShotType.BUNKER_SHOT:
            return LieInference(Lie.BUNKER, 0.85, ["shot_type_bunker"])

        if shot_number == 1:
            return LieInference(Lie.TEE, 0.9, ["first_shot_of_hole"])

        hole = (
            self._layout.hole(hole_number)
            if self._layout is not None and hole_number is not None
            else None
        )
        if hole is not None and lat is not None and lon is not None:
            if hole.is_on_green(lat, lon):
                if motion_stability is not None and motion_stability < STABLE_PUTTING_MOTION:
                    return LieInference(
                        Lie.GREEN,
                        0.92,
                        ["within_green_radius", "stable_putting_motion"],
                    )
                return LieInference(Lie.GREEN, 0.85, ["within_green_radius"])

            if hole.distance_to_pin(lat, lon) <= hole.green_radius + FRINGE_MARGIN_YARDS:
                return LieInference(Lie.FRINGE, 0.7, ["near_green_edge"])

        if distance_to_pin is not None:
            if distance_to_pin <= VERY_CLOSE_DISTANCE:
                return LieInference(Lie.GREEN, 0.75, ["very_close_to_pin"])
            if distance_to_pin <= SHORT_DISTANCE and shot_number > 1:
                return LieInference(Lie.FRINGE, 0.5, ["short_distance_to_pin"])

        return LieInference(Lie.FAIRWAY, 0.4, ["default_fairway_assumption"])


__all__ = ["LieClassifier", "LieInference"]
