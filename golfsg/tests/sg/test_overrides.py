from __future__ import annotations

import pytest

from golfsg.sg.curves import expected_strokes
from golfsg.sg.overrides import OVERRIDE_FIELDS, apply_override
from golfsg.sg.schemas import (
    DerivedShot,
    EndStateSource,
    Lie,
    ProvenanceValue,
    SGCategory,
    ShotState,
    ShotType,
    ValueSource,
)


def _approach() -> DerivedShot:
    return DerivedShot(
        hole_shot_number=2,
        hole_number=ProvenanceValue[int](value=1, confidence=0.8),
        start_state=ShotState(
            distance_to_pin=ProvenanceValue[float](value=150.0, confidence=0.8),
            lie=ProvenanceValue[Lie](value=Lie.FAIRWAY, confidence=0.4),
        ),
        end_state=ShotState(
            distance_to_pin=ProvenanceValue[float](value=30.0, confidence=0.8),
            distance_unit="feet",
            lie=ProvenanceValue[Lie](value=Lie.GREEN, confidence=0.85),
        ),
    )


def test_lie_override_is_audited_and_rescored() -> None:
    shot = _approach()
    apply_override(shot, "lie_start", "rough")

    lie = shot.start_state.lie
    assert lie.value is Lie.ROUGH
    assert lie.source is ValueSource.MANUAL
    assert lie.confidence == 1.0
    assert lie.reasons[-1] == "user_override"
    assert shot.confidence.lie == 1.0

    audit = shot.audit_events[-1]
    assert (audit.field, audit.old_value, audit.new_value, audit.source) == (
        "lie_start",
        "fairway",
        "rough",
        "user_override",
    )
    assert shot.strokes_gained == pytest.approx(
        expected_strokes(150, Lie.ROUGH) - expected_strokes(30, Lie.GREEN) - 1
    )


def test_distance_override_reclassifies_shot() -> None:
    shot = _approach()
    apply_override(shot, "distance_start", 25)

    assert shot.start_state.distance_to_pin.value == 25.0
    assert shot.confidence.distance == 1.0
    assert shot.shot_type.value is ShotType.PITCH
    assert shot.category is SGCategory.SHORT_GAME


def test_end_override_marks_state_manual() -> None:
    shot = _approach()
    apply_override(shot, "distance_end", 12)

    assert shot.end_state.end_state_source is EndStateSource.MANUAL
    assert shot.confidence.end_location == 1.0
    assert shot.end_state.expected_strokes == pytest.approx(
        expected_strokes(12, Lie.GREEN)
    )


def test_penalty_strokes_reduce_sg() -> None:
    shot = _approach()
    apply_override(shot, "penalty_strokes", 0)
    before = shot.strokes_gained
    apply_override(shot, "penalty_strokes", 2)

    assert shot.penalty_strokes == 2
    assert shot.strokes_gained == pytest.approx(before - 2)
    assert [a.new_value for a in shot.audit_events] == ["0", "2"]


def test_holed_override_zeroes_end_state() -> None:
    shot = DerivedShot(
        start_state=ShotState(
            distance_to_pin=ProvenanceValue[float](value=8.0, confidence=0.8),
            distance_unit="feet",
            lie=ProvenanceValue[Lie](value=Lie.GREEN, confidence=0.85),
        )
    )
    apply_override(shot, "is_holed", True)

    assert shot.is_holed
    assert shot.holed_confidence == 1.0
    assert shot.end_state.distance_to_pin.value == 0.0
    assert shot.end_state.lie.value is Lie.GREEN
    assert shot.strokes_gained == pytest.approx(1.50 - 1)
    assert shot.audit_events[-1].old_value == "False"


def test_hole_override() -> None:
    shot = _approach()
    apply_override(shot, "hole", 4)

    assert shot.hole_number.value == 4
    assert shot.hole_number.source is ValueSource.MANUAL
    assert shot.confidence.hole == 1.0


def test_unknown_field_is_rejected() -> None:
    shot = _approach()
    with pytest.raises(ValueError, match="unknown override field"):
        apply_override(shot, "club", "7i")
    assert shot.audit_events == []


@pytest.mark.parametrize(
    "field, value",
    [
        ("lie_start", "lava"),
        ("distance_end", -3),
        ("penalty_strokes", -1),
        ("hole", 0),
    ],
)
def test_invalid_values_leave_shot_untouched(field: str, value) -> None:
    shot = _approach()
    before = shot.model_dump()
    with pytest.raises(ValueError):
        apply_override(shot, field, value)
    assert shot.model_dump() == before


def test_all_fields_are_registered() -> None:
    assert set(OVERRIDE_FIELDS) == {
        "lie_start",
        "lie_end",
        "distance_start",
        "distance_end",
        "hole",
        "penalty_strokes",
        "is_holed",
    }
