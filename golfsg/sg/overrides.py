"""Manual corrections to derived shots, with an audit trail."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict

from pydantic import NonNegativeInt, TypeAdapter

from .calculator import StrokesGainedCalculator
from .derive import classify_shot_type
from .schemas import (
    AuditEvent,
    DerivedShot,
    EndStateSource,
    Lie,
    ProvenanceValue,
    ShotState,
    ShotType,
    ValueSource,
)

logger = logging.getLogger(__name__)

OVERRIDE_SOURCE = "user_override"

_LIE = TypeAdapter(Lie)
_DISTANCE = TypeAdapter(float)
_HOLE = TypeAdapter(int)
_PENALTY = TypeAdapter(NonNegativeInt)
_FLAG = TypeAdapter(bool)


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _override_lie(state: ShotState, raw: Any) -> tuple[Any, Any]:
    lie = _LIE.validate_python(raw)
    old = state.lie.value
    state.lie = state.lie.with_override(lie)
    return old, lie


def _override_distance(state: ShotState, raw: Any) -> tuple[Any, Any]:
    distance = _DISTANCE.validate_python(raw)
    if distance < 0:
        raise ValueError("distance must be non-negative")
    old = state.distance_to_pin.value
    state.distance_to_pin = state.distance_to_pin.with_override(distance)
    return old, distance


def _lie_start(shot: DerivedShot, raw: Any) -> tuple[Any, Any]:
    change = _override_lie(shot.start_state, raw)
    shot.confidence.lie = 1.0
    return change


def _lie_end(shot: DerivedShot, raw: Any) -> tuple[Any, Any]:
    change = _override_lie(shot.end_state, raw)
    shot.end_state.end_state_source = EndStateSource.MANUAL
    shot.confidence.end_location = 1.0
    return change


def _distance_start(shot: DerivedShot, raw: Any) -> tuple[Any, Any]:
    change = _override_distance(shot.start_state, raw)
    shot.confidence.distance = 1.0
    return change


def _distance_end(shot: DerivedShot, raw: Any) -> tuple[Any, Any]:
    change = _override_distance(shot.end_state, raw)
    shot.end_state.end_state_source = EndStateSource.MANUAL
    shot.confidence.end_location = 1.0
    return change


def _hole(shot: DerivedShot, raw: Any) -> tuple[Any, Any]:
    hole = _HOLE.validate_python(raw)
    if hole < 1:
        raise ValueError("hole must be positive")
    old = shot.hole_number.value
    shot.hole_number = shot.hole_number.with_override(hole)
    shot.confidence.hole = 1.0
    return old, hole


def _penalty_strokes(shot: DerivedShot, raw: Any) -> tuple[Any, Any]:
    strokes = _PENALTY.validate_python(raw)
    old = shot.penalty_strokes
    shot.penalty_strokes = strokes
    return old, strokes


def _is_holed(shot: DerivedShot, raw: Any) -> tuple[Any, Any]:
    holed = _FLAG.validate_python(raw)
    old = shot.is_holed
    shot.is_holed = holed
    shot.holed_confidence = 1.0
    shot.confidence.end_location = 1.0
    shot.end_state.end_state_source = EndStateSource.MANUAL
    if holed:
        # A holed ball sits in the cup.
        end = shot.end_state
        end.distance_to_pin = end.distance_to_pin.with_override(0.0)
        end.distance_unit = "feet"
        end.lie = end.lie.with_override(Lie.GREEN)
    return old, holed


OVERRIDE_FIELDS: Dict[str, Callable[[DerivedShot, Any], tuple[Any, Any]]] = {
    "lie_start": _lie_start,
    "lie_end": _lie_end,
    "distance_start": _distance_start,
    "distance_end": _distance_end,
    "hole": _hole,
    "penalty_strokes": _penalty_strokes,
    "is_holed": _is_holed,
}


def apply_override(
    shot: DerivedShot,
    field: str,
    value: Any,
    calculator: StrokesGainedCalculator | None = None,
) -> DerivedShot:
    """Apply a manual ``value`` to ``field`` of ``shot`` and recompute its SG.

    Raises ``ValueError`` for an unknown field or a value that does not fit it
    (pydantic's ``ValidationError`` is a ``ValueError``).
    """

    handler = OVERRIDE_FIELDS.get(field)
    if handler is None:
        raise ValueError(f"unknown override field: {field}")

    old, new = handler(shot, value)
    shot.audit_events.append(
        AuditEvent(
            field=field,
            old_value=_text(old),
            new_value=_text(new),
            source=OVERRIDE_SOURCE,
        )
    )

    if shot.shot_type.source != ValueSource.MANUAL:
        shot_type, confidence, reasons = classify_shot_type(shot.start_state)
        shot.shot_type = ProvenanceValue[ShotType](
            value=shot_type,
            confidence=confidence,
            source=ValueSource.DERIVED,
            reasons=reasons,
        )
        shot.confidence.shot_type = confidence

    (calculator or StrokesGainedCalculator()).apply(shot)
    logger.info("override %s on shot %s: %s -> %s", field, shot.id, old, new)
    return shot


__all__ = ["OVERRIDE_FIELDS", "apply_override"]
