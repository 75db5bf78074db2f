from __future__ import annotations

import pytest

from golfsg.sg.calculator import StrokesGainedCalculator
from golfsg.sg.curves import expected_strokes
from golfsg.sg.schemas import (
    DerivedShot,
    Lie,
    ProvenanceValue,
    SGCategory,
    ShotState,
)


def _state(distance: float | None, lie: Lie | None, unit: str = "yards") -> ShotState:
    return ShotState(
        distance_to_pin=ProvenanceValue[float](value=distance, confidence=0.9),
        distance_unit=unit,
        lie=ProvenanceValue[Lie](value=lie, confidence=0.9),
    )


def _shot(start: ShotState, end: ShotState, **kwargs) -> DerivedShot:
    return DerivedShot(start_state=start, end_state=end, **kwargs)


def test_holed_three_foot_putt() -> None:
    shot = _shot(
        _state(3.0, Lie.GREEN, "feet"), _state(0.0, Lie.GREEN, "feet"), is_holed=True
    )
    sg = StrokesGainedCalculator().calculate(shot)
    assert sg == pytest.approx(expected_strokes(3, Lie.GREEN, True) - 1)
    assert sg == pytest.approx(0.04)


def test_drive_to_fairway() -> None:
    shot = _shot(_state(400.0, Lie.TEE), _state(150.0, Lie.FAIRWAY))
    sg = StrokesGainedCalculator().calculate(shot)
    assert sg == pytest.approx(4.08 - 3.08 - 1)


def test_penalty_strokes_are_charged() -> None:
    clean = _shot(_state(400.0, Lie.TEE), _state(150.0, Lie.FAIRWAY))
    penalised = _shot(
        _state(400.0, Lie.TEE), _state(150.0, Lie.FAIRWAY), penalty_strokes=1
    )
    calc = StrokesGainedCalculator()
    assert calc.calculate(penalised) == pytest.approx(calc.calculate(clean) - 1)


def test_green_lie_in_yards_is_converted_to_feet() -> None:
    shot = _shot(_state(10.0, Lie.FAIRWAY), _state(4.0, Lie.GREEN, "yards"))
    sg = StrokesGainedCalculator().calculate(shot)
    assert sg == pytest.approx(2.40 - expected_strokes(12.0, Lie.GREEN) - 1)


@pytest.mark.parametrize(
    "start, end",
    [
        (_state(None, Lie.TEE), _state(150.0, Lie.FAIRWAY)),
        (_state(400.0, None), _state(150.0, Lie.FAIRWAY)),
        (_state(400.0, Lie.TEE), _state(None, Lie.FAIRWAY)),
        (_state(400.0, Lie.TEE), _state(150.0, None)),
    ],
)
def test_missing_data_yields_none_not_zero(start: ShotState, end: ShotState) -> None:
    assert StrokesGainedCalculator().calculate(_shot(start, end)) is None


@pytest.mark.parametrize(
    "distance, lie, unit, hole_shot_number, expected",
    [
        (20.0, Lie.GREEN, "feet", 3, SGCategory.PUTTING),
        (25.0, Lie.FAIRWAY, "yards", 3, SGCategory.SHORT_GAME),
        (30.0, Lie.BUNKER, "yards", 2, SGCategory.SHORT_GAME),
        (380.0, Lie.TEE, "yards", 1, SGCategory.OFF_THE_TEE),
        (180.0, Lie.TEE, "yards", 1, SGCategory.APPROACH),
        (380.0, Lie.TEE, "yards", 2, SGCategory.APPROACH),
        (25.0, Lie.TEE, "yards", 1, SGCategory.APPROACH),
        (150.0, Lie.ROUGH, "yards", 2, SGCategory.APPROACH),
    ],
)
def test_category(distance, lie, unit, hole_shot_number, expected) -> None:
    shot = _shot(
        _state(distance, lie, unit),
        _state(None, None),
        hole_shot_number=hole_shot_number,
    )
    assert StrokesGainedCalculator().category(shot) is expected


def test_category_defaults_to_approach_without_data() -> None:
    shot = _shot(_state(None, None), _state(None, None))
    assert StrokesGainedCalculator().category(shot) is SGCategory.APPROACH


def test_apply_fills_expected_strokes() -> None:
    shot = _shot(
        _state(3.0, Lie.GREEN, "feet"), _state(0.0, Lie.GREEN, "feet"), is_holed=True
    )
    StrokesGainedCalculator().apply(shot)
    assert shot.start_state.expected_strokes == pytest.approx(1.04)
    assert shot.end_state.expected_strokes == 0.0
    assert shot.category is SGCategory.PUTTING
    assert shot.strokes_gained == pytest.approx(0.04)


class _FlatProvider:
    def expected_strokes(self, distance, lie, is_putt):
        return 2.0


def test_custom_provider() -> None:
    shot = _shot(_state(100.0, Lie.FAIRWAY), _state(10.0, Lie.FAIRWAY))
    assert StrokesGainedCalculator(_FlatProvider()).calculate(shot) == pytest.approx(-1.0)
