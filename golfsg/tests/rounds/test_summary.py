from __future__ import annotations

import pytest

from golfsg.rounds.models import RoundSummary
from golfsg.rounds.summary import InsightGenerator, RoundAggregator, TrendsCalculator
from golfsg.sg.schemas import (
    ConfidenceScore,
    DerivedShot,
    DistanceBand,
    ProvenanceValue,
    PuttingBand,
    SGCategory,
    ShotState,
)


def _shot(
    category: SGCategory | None,
    sg: float | None,
    *,
    hole: int | None = 1,
    hole_shot: int = 1,
    distance: float = 150.0,
    unit: str = "yards",
    confidence: float = 0.9,
    penalty: int = 0,
) -> DerivedShot:
    return DerivedShot(
        hole_shot_number=hole_shot,
        hole_number=ProvenanceValue[int](value=hole, confidence=0.8),
        start_state=ShotState(
            distance_to_pin=ProvenanceValue[float](value=distance, confidence=0.8),
            distance_unit=unit,
        ),
        category=category,
        strokes_gained=sg,
        penalty_strokes=penalty,
        confidence=ConfidenceScore(
            hole=confidence,
            start_location=confidence,
            end_location=confidence,
            distance=confidence,
            lie=confidence,
            shot_type=confidence,
        ),
    )


@pytest.fixture
def round_shots() -> list[DerivedShot]:
    return [
        _shot(SGCategory.OFF_THE_TEE, 0.5, hole_shot=1, distance=400),
        _shot(SGCategory.APPROACH, -0.8, hole_shot=2, distance=150),
        _shot(
            SGCategory.PUTTING,
            -0.3,
            hole_shot=3,
            distance=6,
            unit="feet",
            confidence=0.6,
        ),
        _shot(
            SGCategory.SHORT_GAME,
            0.2,
            hole=2,
            hole_shot=1,
            distance=20,
            confidence=0.4,
            penalty=1,
        ),
        _shot(None, None, hole=2, hole_shot=2),
    ]


def test_round_totals(round_shots) -> None:
    summary = RoundAggregator().build(round_shots, "r1", "Test Course")

    assert summary.round_id == "r1"
    assert summary.course_name == "Test Course"
    assert summary.total_sg == pytest.approx(-0.4)
    assert summary.formatted_total_sg() == "-0.40"
    assert summary.total_strokes == 6
    assert list(summary.sg_by_category) == [
        SGCategory.OFF_THE_TEE,
        SGCategory.APPROACH,
        SGCategory.SHORT_GAME,
        SGCategory.PUTTING,
    ]
    assert summary.shots_by_category[SGCategory.APPROACH] == 1
    assert summary.sg_by_hole == pytest.approx({1: -0.6, 2: 0.2})
    assert summary.biggest_leak is SGCategory.APPROACH
    assert summary.biggest_strength is SGCategory.OFF_THE_TEE
    assert summary.formatted_sg(SGCategory.OFF_THE_TEE) == "+0.50"


def test_distance_and_putting_bands(round_shots) -> None:
    summary = RoundAggregator().build(round_shots, "r1")

    assert summary.sg_by_distance_band == pytest.approx(
        {
            DistanceBand.BAND_0_30: 0.2,
            DistanceBand.BAND_125_175: -0.8,
            DistanceBand.BAND_225_PLUS: 0.5,
        }
    )
    assert summary.sg_by_putting_band == pytest.approx({PuttingBand.BAND_4_8: -0.3})
    assert summary.shots_by_putting_band == {PuttingBand.BAND_4_8: 1}


def test_confidence_stats_and_adjusted_totals(round_shots) -> None:
    summary = RoundAggregator().build(round_shots, "r1")
    stats = summary.confidence_stats

    assert (
        stats.total_shots,
        stats.high_confidence_shots,
        stats.needs_review_shots,
        stats.excluded_shots,
    ) == (4, 2, 1, 1)
    assert stats.auto_confirmed_label == "50% auto-confirmed"
    assert summary.adjusted_total_sg == pytest.approx(-0.3)
    assert summary.adjusted_sg_by_category == pytest.approx(
        {SGCategory.OFF_THE_TEE: 0.5, SGCategory.APPROACH: -0.8}
    )


def test_wins_and_leaks(round_shots) -> None:
    summary = RoundAggregator().build(round_shots, "r1")

    assert [card.title for card in summary.top_wins] == [
        "Great Drive",
        "Clutch Short Game",
        "Key Putt Made",
    ]
    assert summary.top_wins[0].description == "Hole 1, Shot 1: Gained 0.50 strokes"
    assert summary.top_wins[0].shot_ids == [round_shots[0].id]

    leak = summary.top_leaks[0]
    assert leak.title == "Missed Approach"
    assert leak.description == "Hole 1, Shot 2: Lost 0.80 strokes"
    assert leak.value == pytest.approx(-0.8)
    assert len(summary.top_leaks) == 3


def test_ties_keep_shot_order() -> None:
    first = _shot(SGCategory.APPROACH, 0.3, hole=None)
    second = _shot(SGCategory.OFF_THE_TEE, 0.3, hole=None)
    summary = RoundAggregator().build([first, second], "r1")

    assert [card.shot_ids[0] for card in summary.top_wins] == [first.id, second.id]
    assert [card.shot_ids[0] for card in summary.top_leaks] == [first.id, second.id]
    assert summary.top_wins[0].description == "Gained 0.30 strokes"


def test_empty_round() -> None:
    summary = RoundAggregator().build([], "empty")

    assert summary.total_sg == 0.0
    assert summary.top_wins == []
    assert summary.biggest_leak is None
    assert summary.confidence_stats.auto_confirmed_label == "0% auto-confirmed"
    assert InsightGenerator().focus_points(summary) == []


def test_focus_points(round_shots) -> None:
    summary = RoundAggregator().build(round_shots, "r1")
    tips = InsightGenerator().focus_points(summary)

    assert [tip.title for tip in tips] == [
        "Sharpen Approach Game",
        "Distance Control: 125-175 yards",
        "Putting: 4-8 ft",
    ]
    assert tips[1].category is SGCategory.APPROACH
    assert tips[2].category is SGCategory.PUTTING


def test_focus_thresholds_are_strict() -> None:
    summary = RoundSummary(
        round_id="r1",
        sg_by_category={SGCategory.APPROACH: -0.5},
        sg_by_distance_band={DistanceBand.BAND_75_125: -0.3},
        sg_by_putting_band={PuttingBand.BAND_3_4: -0.2},
    )
    assert InsightGenerator().focus_points(summary) == []


def _summaries(*totals: float) -> list[RoundSummary]:
    return [
        RoundSummary(
            round_id=f"r{i}",
            total_sg=total,
            sg_by_category={SGCategory.OFF_THE_TEE: total},
        )
        for i, total in enumerate(totals)
    ]


@pytest.mark.parametrize(
    "count, periods",
    [
        (0, []),
        (1, ["Last Round"]),
        (2, ["Last Round", "Season"]),
        (3, ["Last Round", "Last 3 Rounds", "Season"]),
        (10, ["Last Round", "Last 3 Rounds", "Last 10 Rounds", "Season"]),
    ],
)
def test_trend_periods(count: int, periods: list[str]) -> None:
    trends = TrendsCalculator().calculate(_summaries(*([1.0] * count)))
    assert [trend.period for trend in trends] == periods


def test_trend_values() -> None:
    trends = TrendsCalculator().calculate(_summaries(1.0, 2.0, 3.0, -2.0))
    by_period = {trend.period: trend for trend in trends}

    assert by_period["Last Round"].total_sg == 1.0
    last_three = by_period["Last 3 Rounds"]
    assert last_three.round_count == 3
    assert last_three.total_sg == pytest.approx(6.0)
    assert last_three.average_sg_per_round == pytest.approx(2.0)
    assert last_three.sg_by_category[SGCategory.OFF_THE_TEE] == pytest.approx(2.0)
    assert by_period["Season"].average_sg_per_round == pytest.approx(1.0)
