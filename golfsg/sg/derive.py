"""Derive start and end states for every shot of a round.

The end of shot N is the start of shot N+1: the ball is wherever the golfer
next swings from. The derivation runs in two explicit passes. The first builds
each shot from the event stream; the second looks at neighbouring shots and
flags likely penalties.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from golfsg.courses.hole_detect import HoleResolution, HoleResolver
from golfsg.courses.lie import LieClassifier
from golfsg.courses.schemas import CourseLayout, HoleLocation
from golfsg.providers.pose import NullPoseProvider, PoseProvider
from golfsg.tracking.smoothing import LocationSmoother

from .calculator import StrokesGainedCalculator
from .schemas import (
    AuditEvent,
    DerivedShot,
    DistanceUnit,
    EndStateSource,
    Lie,
    LocationSample,
    ProvenanceValue,
    ShotEvent,
    ShotState,
    ShotType,
    SmoothedLocation,
    ValueSource,
    YARDS_TO_FEET,
    as_utc,
)

logger = logging.getLogger(__name__)

FALLBACK_END_OFFSET_S = 10.0
FALLBACK_CONFIDENCE_FACTOR = 0.7
NO_LOCATION_END_CONFIDENCE = 0.2
HOLED_CONFIDENCE = 0.7
FALLBACK_CUP_RADIUS_FT = 3.0
FALLBACK_HOLED_CONFIDENCE = 0.5
STABILITY_WINDOW_S = 1.0
PENALTY_REGRESSION_YARDS = 30.0

CHIP_MAX_FRINGE = 10.0
CHIP_MAX_YARDS = 20.0
PITCH_MAX_YARDS = 50.0


@dataclass(frozen=True)
class VideoSessionTimebase:
    """Maps video-relative seconds onto wall-clock time for a session."""

    session_start: datetime
    video_start_offset: float = 0.0

    def absolute_time(self, seconds_from_video_start: float) -> datetime:
        return as_utc(self.session_start) + timedelta(
            seconds=self.video_start_offset + seconds_from_video_start
        )

    def standardize(self, event: ShotEvent) -> ShotEvent:
        if event.recorded_at is not None:
            timestamp = event.recorded_at
        elif event.seconds_from_video_start is not None:
            timestamp = self.absolute_time(event.seconds_from_video_start)
        elif event.impact_seconds is not None:
            timestamp = self.absolute_time(event.impact_seconds)
        else:
            return event
        return event.model_copy(update={"event_timestamp": timestamp})


@dataclass(frozen=True)
class _Position:
    sample: LocationSample
    smoothed: SmoothedLocation
    hole: Optional[HoleResolution]


def _provenance(
    kind: type, value, confidence: float, source: ValueSource, reasons: List[str]
) -> ProvenanceValue:
    return ProvenanceValue[kind](
        value=value,
        confidence=max(0.0, min(1.0, confidence)),
        source=source,
        reasons=reasons,
    )


def classify_shot_type(state: ShotState) -> Tuple[ShotType, float, List[str]]:
    """Shot type from the start lie alone."""

    lie = state.lie.value
    distance = state.distance_to_pin.value
    if lie is None or lie == Lie.UNKNOWN:
        return ShotType.UNKNOWN, 0.2, []
    if lie == Lie.TEE:
        return ShotType.DRIVE, 0.95, ["from_tee"]
    if lie == Lie.GREEN:
        return ShotType.PUTT, 0.95, ["on_green"]
    if lie == Lie.BUNKER:
        return ShotType.BUNKER_SHOT, 0.9, ["from_bunker"]
    if lie == Lie.FRINGE:
        if distance is not None and distance < CHIP_MAX_FRINGE:
            return ShotType.CHIP, 0.7, ["short_fringe_shot"]
        return ShotType.PITCH, 0.7, ["fringe_pitch"]
    if lie == Lie.RECOVERY:
        return ShotType.APPROACH, 0.5, ["recovery_lie"]

    # fairway, rough and deep rough
    if distance is None:
        return ShotType.APPROACH, 0.5, ["default_approach"]
    if distance <= CHIP_MAX_YARDS:
        return ShotType.CHIP, 0.7, ["short_distance"]
    if distance <= PITCH_MAX_YARDS:
        return ShotType.PITCH, 0.7, ["medium_distance"]
    return ShotType.APPROACH, 0.7, ["full_swing_distance"]


def _flag_penalty(shot: DerivedShot, rule: str) -> None:
    shot.is_penalty_likely = True
    shot.audit_events.append(
        AuditEvent(field="penalty", old_value=None, new_value="likely", source=rule)
    )


def detect_penalties(shots: Sequence[DerivedShot]) -> None:
    """Second pass: flag shots whose neighbours do not line up.

    Only ``is_penalty_likely`` and the audit trail change; strokes, holed state
    and strokes gained are left alone.
    """

    for previous, current in zip(shots, shots[1:]):
        same_hole = previous.hole_number.value == current.hole_number.value

        # Same hole only: the first tee shot of a new hole always starts farther
        # out than the holed putt before it ended.
        previous_end = previous.end_state.distance_in("yards")
        current_start = current.start_state.distance_in("yards")
        if (
            same_hole
            and previous_end is not None
            and current_start is not None
            and current_start > previous_end + PENALTY_REGRESSION_YARDS
        ):
            _flag_penalty(current, "distance_regression_detection")

        if not same_hole and not previous.is_holed:
            _flag_penalty(previous, "hole_discontinuity")


class ShotStateDeriver:
    def __init__(
        self,
        smoother: LocationSmoother,
        *,
        layout: CourseLayout | None = None,
        hole_resolver: HoleResolver | None = None,
        lie_classifier: LieClassifier | None = None,
        calculator: StrokesGainedCalculator | None = None,
        pose_provider: PoseProvider | None = None,
    ) -> None:
        self.smoother = smoother
        self.layout = layout
        self.hole_resolver = hole_resolver or HoleResolver(layout)
        self.lie_classifier = lie_classifier or LieClassifier(layout)
        self.calculator = calculator or StrokesGainedCalculator()
        self.pose_provider: PoseProvider = pose_provider or NullPoseProvider()

    def set_course(self, layout: CourseLayout) -> None:
        self.layout = layout
        self.hole_resolver.set_course(layout)
        self.lie_classifier.set_course(layout)

    def set_pose_provider(self, provider: PoseProvider) -> None:
        self.pose_provider = provider

    # Event ordering
    @staticmethod
    def order_events(
        events: Iterable[ShotEvent], timebase: VideoSessionTimebase | None = None
    ) -> List[ShotEvent]:
        standardized = [timebase.standardize(e) if timebase else e for e in events]
        timed = [e for e in standardized if e.event_timestamp is not None]
        dropped = len(standardized) - len(timed)
        if dropped:
            logger.warning("dropping %d shot events without a timestamp", dropped)
        return sorted(timed, key=lambda e: e.event_timestamp)

    def derive_shots(
        self,
        events: Iterable[ShotEvent],
        timebase: VideoSessionTimebase | None = None,
    ) -> List[DerivedShot]:
        self.hole_resolver.reset()
        ordered = self.order_events(events, timebase)
        if not ordered:
            return []

        positions: Dict[int, Optional[_Position]] = {}
        shots: List[DerivedShot] = []

        # Pass 1: per-shot states.
        for index, event in enumerate(ordered):
            position = self._position(index, ordered, positions)
            shot = DerivedShot(
                event_id=event.id,
                shot_number=index + 1,
                clip_start_seconds=event.clip_start_seconds,
                impact_seconds=event.impact_seconds,
                clip_end_seconds=event.clip_end_seconds,
            )
            shot.hole_shot_number = self._hole_shot_number(
                shots[-1] if shots else None, position
            )
            self._derive_start_state(shot, event, position)

            if index + 1 < len(ordered):
                next_position = self._position(index + 1, ordered, positions)
                if next_position is not None:
                    self._derive_end_from_next(shot, next_position)
                else:
                    self._derive_end_fallback(shot, event)
            else:
                self._derive_end_fallback(shot, event)

            self._classify(shot)
            self.calculator.apply(shot)
            logger.debug(
                "shot %d hole=%s lie=%s->%s sg=%s",
                shot.shot_number,
                shot.hole_number.value,
                shot.start_state.lie.value,
                shot.end_state.lie.value,
                shot.strokes_gained,
            )
            shots.append(shot)

        # Pass 2: penalties and hole discontinuities.
        detect_penalties(shots)
        return shots

    # Positions
    def _position(
        self,
        index: int,
        ordered: Sequence[ShotEvent],
        cache: Dict[int, Optional[_Position]],
    ) -> Optional[_Position]:
        """Smooth and hole-resolve each event position exactly once, in order."""

        if index in cache:
            return cache[index]

        event = ordered[index]
        timestamp = event.event_timestamp
        smoothed = self.smoother.smoothed_location(timestamp)
        position = None
        if smoothed is not None:
            sample = LocationSample(
                id=f"smoothed-{event.id}",
                timestamp=timestamp,
                latitude=smoothed.latitude,
                longitude=smoothed.longitude,
                horizontal_accuracy_m=smoothed.avg_accuracy,
                altitude=smoothed.altitude,
            )
            hole = self.hole_resolver.resolve_hole(
                smoothed.latitude, smoothed.longitude, timestamp
            )
            position = _Position(sample=sample, smoothed=smoothed, hole=hole)
        cache[index] = position
        return position

    @staticmethod
    def _hole_shot_number(
        previous: Optional[DerivedShot], position: Optional[_Position]
    ) -> int:
        if previous is None:
            return 1
        hole = position.hole.hole if position and position.hole else None
        if previous.is_holed or (
            hole is not None
            and previous.hole_number.value is not None
            and hole != previous.hole_number.value
        ):
            return 1
        return previous.hole_shot_number + 1

    def _hole_geometry(self, hole_number: Optional[int]) -> Optional[HoleLocation]:
        if self.layout is None or hole_number is None:
            return None
        return self.layout.hole(hole_number)

    @staticmethod
    def _distance(
        hole: HoleLocation, sample: LocationSample
    ) -> Tuple[float, DistanceUnit, str]:
        yards = hole.distance_to_pin(sample.latitude, sample.longitude)
        if hole.is_on_green(sample.latitude, sample.longitude):
            return yards * YARDS_TO_FEET, "feet", "on_green_distance_in_feet"
        return yards, "yards", "distance_in_yards"

    # Start state
    def _derive_start_state(
        self, shot: DerivedShot, event: ShotEvent, position: Optional[_Position]
    ) -> None:
        state = shot.start_state
        sample = position.sample if position else None

        if position is not None:
            confidence = position.smoothed.confidence
            state.location = _provenance(
                LocationSample,
                sample,
                confidence,
                ValueSource.GPS,
                list(position.smoothed.flags),
            )
            shot.confidence.start_location = confidence

            if position.hole is not None:
                shot.hole_number = _provenance(
                    int,
                    position.hole.hole,
                    position.hole.confidence,
                    ValueSource.DERIVED,
                    ["gps_hole_resolution"],
                )
                shot.confidence.hole = position.hole.confidence

            hole = self._hole_geometry(shot.hole_number.value)
            if hole is not None:
                distance, unit, unit_reason = self._distance(hole, sample)
                state.distance_to_pin = _provenance(
                    float,
                    distance,
                    confidence,
                    ValueSource.DERIVED,
                    ["calculated_from_gps_and_pin", unit_reason],
                )
                state.distance_unit = unit
                shot.confidence.distance = confidence

        timestamp = event.event_timestamp
        window = timedelta(seconds=STABILITY_WINDOW_S)
        stability = self.pose_provider.motion_stability(
            timestamp - window, timestamp + window
        )
        if stability is None:
            stability = event.motion_stability

        inference = self.lie_classifier.infer_lie(
            sample.latitude if sample else None,
            sample.longitude if sample else None,
            hole_number=shot.hole_number.value,
            shot_number=shot.hole_shot_number,
            shot_type=event.shot_type_hint,
            distance_to_pin=state.distance_to_pin.value,
            motion_stability=stability,
        )
        state.lie = _provenance(
            Lie,
            inference.lie,
            inference.confidence,
            ValueSource.DERIVED,
            inference.reasons,
        )
        shot.confidence.lie = inference.confidence

    # End state
    def _fill_end_geometry(
        self,
        shot: DerivedShot,
        sample: LocationSample,
        confidence: float,
        *,
        factor: float = 1.0,
        reasons: Sequence[str] = (),
    ) -> None:
        """Distance and lie at the end position.

        ``confidence`` is already scaled; ``factor`` scales the lie inference
        and ``reasons`` are prepended to both values.
        """

        hole = self._hole_geometry(shot.hole_number.value)
        if hole is None:
            return
        state = shot.end_state
        distance, unit, unit_reason = self._distance(hole, sample)
        state.distance_to_pin = _provenance(
            float, distance, confidence, ValueSource.DERIVED, [*reasons, unit_reason]
        )
        state.distance_unit = unit

        inference = self.lie_classifier.infer_lie(
            sample.latitude,
            sample.longitude,
            hole_number=hole.number,
            shot_number=shot.hole_shot_number + 1,
            distance_to_pin=distance,
        )
        state.lie = _provenance(
            Lie,
            inference.lie,
            inference.confidence * factor,
            ValueSource.DERIVED,
            [*reasons, *inference.reasons],
        )

    def _derive_end_from_next(self, shot: DerivedShot, next_position: _Position) -> None:
        current_hole = shot.hole_number.value
        next_hole = next_position.hole.hole if next_position.hole else None

        if current_hole is not None and next_hole is not None and next_hole != current_hole:
            # Next swing is on another hole, so this one finished the hole.
            shot.is_holed = True
            shot.holed_confidence = HOLED_CONFIDENCE
            state = shot.end_state
            reasons = ["hole_transition_detected"]
            state.distance_to_pin = _provenance(
                float, 0.0, HOLED_CONFIDENCE, ValueSource.DERIVED, reasons
            )
            state.distance_unit = "feet"
            state.lie = _provenance(
                Lie, Lie.GREEN, HOLED_CONFIDENCE, ValueSource.DERIVED, list(reasons)
            )
            state.end_state_source = EndStateSource.NEXT_SHOT_START_USED
            shot.confidence.end_location = HOLED_CONFIDENCE
            return

        confidence = next_position.smoothed.confidence
        shot.end_state.location = _provenance(
            LocationSample,
            next_position.sample,
            confidence,
            ValueSource.GPS,
            ["next_shot_start_position"],
        )
        shot.end_state.end_state_source = EndStateSource.NEXT_SHOT_START_USED
        shot.confidence.end_location = confidence
        self._fill_end_geometry(shot, next_position.sample, confidence)

    def _derive_end_fallback(self, shot: DerivedShot, event: ShotEvent) -> None:
        if event.clip_end_seconds is not None:
            offset = event.clip_end_seconds - (event.impact_seconds or 0.0)
        else:
            offset = FALLBACK_END_OFFSET_S
        fallback_time = event.event_timestamp + timedelta(seconds=offset)

        shot.end_state.end_state_source = EndStateSource.FALLBACK_USED
        smoothed = self.smoother.smoothed_location(fallback_time)
        if smoothed is None:
            shot.confidence.end_location = NO_LOCATION_END_CONFIDENCE
            return

        confidence = smoothed.confidence * FALLBACK_CONFIDENCE_FACTOR
        sample = LocationSample(
            id=f"fallback-{event.id}",
            timestamp=fallback_time,
            latitude=smoothed.latitude,
            longitude=smoothed.longitude,
            horizontal_accuracy_m=smoothed.avg_accuracy,
            altitude=smoothed.altitude,
        )
        shot.end_state.location = _provenance(
            LocationSample,
            sample,
            confidence,
            ValueSource.GPS,
            ["fallback_timing", *smoothed.flags],
        )
        shot.confidence.end_location = confidence
        self._fill_end_geometry(
            shot,
            sample,
            confidence,
            factor=FALLBACK_CONFIDENCE_FACTOR,
            reasons=["fallback_timing"],
        )
        self._mark_holed_at_cup(shot)

    @staticmethod
    def _mark_holed_at_cup(shot: DerivedShot) -> None:
        # Standing at the cup after a swing means the ball went in.
        state = shot.end_state
        if (
            state.lie.value != Lie.GREEN
            or state.distance_in("feet") is None
            or state.distance_in("feet") > FALLBACK_CUP_RADIUS_FT
        ):
            return
        shot.is_holed = True
        shot.holed_confidence = FALLBACK_HOLED_CONFIDENCE
        state.distance_to_pin = state.distance_to_pin.model_copy(
            update={
                "value": 0.0,
                "reasons": [*state.distance_to_pin.reasons, "fallback_at_cup"],
            }
        )
        state.distance_unit = "feet"

    # Classification
    def _classify(self, shot: DerivedShot) -> None:
        shot_type, confidence, reasons = classify_shot_type(shot.start_state)
        shot.shot_type = _provenance(
            ShotType, shot_type, confidence, ValueSource.DERIVED, reasons
        )
        shot.confidence.shot_type = confidence


__all__ = [
    "ShotStateDeriver",
    "VideoSessionTimebase",
    "classify_shot_type",
    "detect_penalties",
]
