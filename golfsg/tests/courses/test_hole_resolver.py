from __future__ import annotations

import pytest

from golfsg.courses.hole_detect import HoleResolution, HoleResolver
from golfsg.courses.schemas import GeoPoint, distance_yards
from golfsg.tests.course_data import FAIRWAY_1, ON_GREEN_1, TEE_1, TEE_2

# About 40 yards from the hole 2 tee, closer to it than to any other tee.
NEAR_TEE_2 = (TEE_2[0], TEE_2[1] + 0.000329)
# Roughly 100 yards from every tee.
FAR_FROM_TEES = (-0.0008, 0.0)


def test_first_lock_near_tee(layout) -> None:
    resolver = HoleResolver(layout)
    assert resolver.resolve_hole(*TEE_1) == HoleResolution(1, 0.85)
    assert resolver.current_hole == 1


def test_unlocked_guess_does_not_lock(layout) -> None:
    resolver = HoleResolver(layout)
    result = resolver.resolve_hole(*FAR_FROM_TEES)
    assert result == HoleResolution(1, 0.5)
    assert resolver.current_hole is None


def test_locked_hole_survives_positions_away_from_tees(layout) -> None:
    resolver = HoleResolver(layout)
    resolver.resolve_hole(*TEE_1)

    assert resolver.resolve_hole(*FAIRWAY_1) == HoleResolution(1, 0.8)
    # The hole 2 tee is the nearest tee from the green, but too far to switch.
    assert resolver.resolve_hole(*ON_GREEN_1) == HoleResolution(1, 0.8)

    near = GeoPoint(lat=NEAR_TEE_2[0], lon=NEAR_TEE_2[1])
    assert distance_yards(near, layout.hole(2).tee) == pytest.approx(40, abs=1)
    assert resolver.resolve_hole(*NEAR_TEE_2) == HoleResolution(1, 0.8)


def test_transition_within_thirty_yards_of_new_tee(layout) -> None:
    resolver = HoleResolver(layout)
    resolver.resolve_hole(*TEE_1)

    assert resolver.resolve_hole(*TEE_2) == HoleResolution(2, 0.9)
    assert resolver.current_hole == 2
    assert resolver.resolve_hole(*TEE_2) == HoleResolution(2, 0.8)


def test_reset_and_set_course_clear_lock(layout) -> None:
    resolver = HoleResolver(layout)
    resolver.resolve_hole(*TEE_2)
    resolver.reset()
    assert resolver.current_hole is None

    resolver.resolve_hole(*TEE_2)
    resolver.set_course(layout)
    assert resolver.current_hole is None


def test_without_layout_returns_none() -> None:
    assert HoleResolver().resolve_hole(*TEE_1) is None
