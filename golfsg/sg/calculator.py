"""Pure strokes-gained computation for derived shots."""

from __future__ import annotations

from typing import Optional

from .curves import ExpectedStrokesProvider, TableExpectedStrokesProvider
from .schemas import DerivedShot, Lie, SGCategory, ShotState

SHORT_GAME_MAX_YARDS = 30.0
OFF_THE_TEE_MIN_YARDS = 200.0


def _state_expectation(
    state: ShotState, provider: ExpectedStrokesProvider
) -> Optional[float]:
    lie = state.lie.value
    if lie is None:
        return None
    is_putt = lie == Lie.GREEN
    distance = state.distance_in("feet" if is_putt else "yards")
    if distance is None:
        return None
    return provider.expected_strokes(distance, lie, is_putt)


class StrokesGainedCalculator:
    def __init__(self, provider: ExpectedStrokesProvider | None = None) -> None:
        self.provider = provider or TableExpectedStrokesProvider()

    def calculate(self, shot: DerivedShot) -> Optional[float]:
        """SG = expected(start) - expected(end) - (1 + penalty strokes).

        Returns None, never 0, when a start or end distance or lie is missing.
        """

        start, end = shot.start_state, shot.end_state
        if not (
            start.distance_to_pin.has_value
            and end.distance_to_pin.has_value
            and start.lie.has_value
            and end.lie.has_value
        ):
            return None

        start_expected = _state_expectation(start, self.provider)
        end_expected = 0.0 if shot.is_holed else _state_expectation(end, self.provider)
        if start_expected is None or end_expected is None:
            return None

        strokes_taken = 1.0 + shot.penalty_strokes
        return start_expected - end_expected - strokes_taken

    def category(self, shot: DerivedShot) -> SGCategory:
        lie = shot.start_state.lie.value
        distance = shot.start_state.distance_in("yards")
        if lie is None or distance is None:
            return SGCategory.APPROACH

        if lie == Lie.GREEN:
            return SGCategory.PUTTING
        if distance <= SHORT_GAME_MAX_YARDS and lie != Lie.TEE:
            return SGCategory.SHORT_GAME
        if lie == Lie.TEE and shot.hole_shot_number == 1 and distance > OFF_THE_TEE_MIN_YARDS:
            return SGCategory.OFF_THE_TEE
        return SGCategory.APPROACH

    def update_expected_strokes(self, shot: DerivedShot) -> None:
        shot.start_state.expected_strokes = _state_expectation(
            shot.start_state, self.provider
        )
        if shot.is_holed:
            shot.end_state.expected_strokes = 0.0
        else:
            shot.end_state.expected_strokes = _state_expectation(
                shot.end_state, self.provider
            )

    def apply(self, shot: DerivedShot) -> DerivedShot:
        """Fill strokes gained, category and expected strokes on ``shot``."""

        shot.strokes_gained = self.calculate(shot)
        shot.category = self.category(shot)
        self.update_expected_strokes(shot)
        return shot


__all__ = ["StrokesGainedCalculator"]
