"""One call from raw capture data to a summarised round."""

from __future__ import annotations

import logging
import time
from collections import Counter
from typing import Iterable

from golfsg.config import Settings, get_settings
from golfsg.courses.hole_detect import HoleResolver
from golfsg.courses.lie import LieClassifier
from golfsg.courses.schemas import CourseLayout
from golfsg.metrics import DERIVE_SECONDS, PENALTY_FLAGS, ROUNDS_PROCESSED, SHOTS_DERIVED
from golfsg.providers.pose import PoseProvider
from golfsg.sg.calculator import StrokesGainedCalculator
from golfsg.sg.derive import ShotStateDeriver, VideoSessionTimebase
from golfsg.sg.schemas import DerivedShot, LocationSample, ShotEvent
from golfsg.tracking.smoothing import LocationSmoother

from .models import RoundSession, RoundSummary
from .summary import InsightGenerator, RoundAggregator

logger = logging.getLogger(__name__)

PENALTY_RULES = ("distance_regression_detection", "hole_discontinuity")


def summarize(
    shots: list[DerivedShot], round_id: str, course_name: str | None = None
) -> RoundSummary:
    summary = RoundAggregator().build(shots, round_id, course_name)
    summary.focus_points = InsightGenerator().focus_points(summary)
    return summary


def _record_metrics(shots: list[DerivedShot], elapsed: float) -> None:
    DERIVE_SECONDS.observe(elapsed)
    SHOTS_DERIVED.inc(len(shots))
    ROUNDS_PROCESSED.inc()
    fired = Counter(
        audit.source
        for shot in shots
        for audit in shot.audit_events
        if audit.source in PENALTY_RULES
    )
    for rule, count in fired.items():
        PENALTY_FLAGS.labels(rule=rule).inc(count)


def process_round(
    round_id: str,
    events: Iterable[ShotEvent],
    samples: Iterable[LocationSample],
    layout: CourseLayout | None,
    *,
    pose_provider: PoseProvider | None = None,
    timebase: VideoSessionTimebase | None = None,
    course_name: str | None = None,
    settings: Settings | None = None,
) -> RoundSession:
    """Derive every shot of a round and summarise it.

    Every call builds its own smoother, resolver and classifier, so rounds
    never share hole-tracking state.
    """

    settings = settings or get_settings()
    events = list(events)

    smoother = LocationSmoother.from_raw(samples, window=settings.smoothing_window_s)
    deriver = ShotStateDeriver(
        smoother,
        layout=layout,
        hole_resolver=HoleResolver(layout),
        lie_classifier=LieClassifier(layout),
        calculator=StrokesGainedCalculator(),
        pose_provider=pose_provider,
    )

    started = time.perf_counter()
    shots = deriver.derive_shots(events, timebase)
    _record_metrics(shots, time.perf_counter() - started)

    if course_name is None and layout is not None:
        course_name = layout.course_name
    summary = summarize(shots, round_id, course_name)

    logger.info(
        "processed round %s: %d events, %d shots, %d flagged",
        round_id,
        len(events),
        len(shots),
        sum(1 for shot in shots if shot.is_penalty_likely),
    )
    return RoundSession(
        id=round_id,
        course_id=layout.course_id if layout is not None else None,
        course_name=course_name,
        events=events,
        shots=shots,
        summary=summary,
    )


__all__ = ["process_round", "summarize"]
