"""Round-level strokes gained aggregation, insights and trends."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from golfsg.sg.schemas import DerivedShot, DistanceBand, PuttingBand, SGCategory

from .models import ConfidenceStats, InsightCard, InsightType, RoundSummary, TrendData

logger = logging.getLogger(__name__)

TOP_INSIGHTS = 3
MAX_FOCUS_POINTS = 3
CATEGORY_FOCUS_THRESHOLD = -0.5
DISTANCE_BAND_FOCUS_THRESHOLD = -0.3
PUTTING_BAND_FOCUS_THRESHOLD = -0.2

K = TypeVar("K")

WIN_TITLES: Dict[SGCategory, str] = {
    SGCategory.OFF_THE_TEE: "Great Drive",
    SGCategory.APPROACH: "Excellent Approach",
    SGCategory.SHORT_GAME: "Clutch Short Game",
    SGCategory.PUTTING: "Key Putt Made",
}

LEAK_TITLES: Dict[SGCategory, str] = {
    SGCategory.OFF_THE_TEE: "Tee Shot Trouble",
    SGCategory.APPROACH: "Missed Approach",
    SGCategory.SHORT_GAME: "Short Game Miss",
    SGCategory.PUTTING: "Putting Struggle",
}

CATEGORY_TIPS: Dict[SGCategory, Tuple[str, str]] = {
    SGCategory.OFF_THE_TEE: (
        "Improve Driving Accuracy",
        "Focus on finding more fairways. Consider a more conservative club "
        "off the tee on tight holes.",
    ),
    SGCategory.APPROACH: (
        "Sharpen Approach Game",
        "Work on distance control with your irons. Practice hitting to "
        "specific yardages, not just at the flag.",
    ),
    SGCategory.SHORT_GAME: (
        "Upgrade Short Game",
        "Spend time on chipping and pitching. Getting up-and-down more often "
        "will lower your scores quickly.",
    ),
    SGCategory.PUTTING: (
        "Putt with Purpose",
        "Focus on lag putting to eliminate 3-putts, and dial in your reads "
        "from 4-8 feet.",
    ),
}


def _ordered(values: Dict[K, float], order: Iterable[K]) -> Dict[K, float]:
    return {key: values[key] for key in order if key in values}


def _worst(values: Dict[K, float]) -> Optional[Tuple[K, float]]:
    # min() keeps the first key on ties, so dict order decides.
    if not values:
        return None
    key = min(values, key=values.__getitem__)
    return key, values[key]


class RoundAggregator:
    def build(
        self,
        shots: Sequence[DerivedShot],
        round_id: str,
        course_name: str | None = None,
    ) -> RoundSummary:
        sg_by_category: Dict[SGCategory, float] = defaultdict(float)
        shots_by_category: Dict[SGCategory, int] = defaultdict(int)
        sg_by_band: Dict[DistanceBand, float] = defaultdict(float)
        shots_by_band: Dict[DistanceBand, int] = defaultdict(int)
        sg_by_putt_band: Dict[PuttingBand, float] = defaultdict(float)
        shots_by_putt_band: Dict[PuttingBand, int] = defaultdict(int)
        sg_by_hole: Dict[int, float] = defaultdict(float)
        adjusted_by_category: Dict[SGCategory, float] = defaultdict(float)

        stats = ConfidenceStats()
        adjusted_total = 0.0
        scored: List[Tuple[DerivedShot, float]] = []

        for shot in shots:
            sg = shot.strokes_gained
            category = shot.category
            if sg is None or category is None:
                stats.excluded_shots += 1
                continue

            stats.total_shots += 1
            sg_by_category[category] += sg
            shots_by_category[category] += 1

            hole = shot.hole_number.value
            if hole is not None:
                sg_by_hole[hole] += sg

            if category == SGCategory.PUTTING:
                feet = shot.start_state.distance_in("feet")
                if feet is not None:
                    putt_band = PuttingBand.for_distance(feet)
                    sg_by_putt_band[putt_band] += sg
                    shots_by_putt_band[putt_band] += 1
            else:
                yards = shot.start_state.distance_in("yards")
                if yards is not None:
                    band = DistanceBand.for_distance(yards)
                    sg_by_band[band] += sg
                    shots_by_band[band] += 1

            if shot.confidence.is_high_confidence:
                stats.high_confidence_shots += 1
                adjusted_total += sg
                adjusted_by_category[category] += sg
            if shot.confidence.needs_review:
                stats.needs_review_shots += 1

            scored.append((shot, sg))

        summary = RoundSummary(
            round_id=round_id,
            course_name=course_name,
            total_strokes=len(shots) + sum(s.penalty_strokes for s in shots),
            total_sg=sum(sg_by_category.values()),
            sg_by_category=_ordered(sg_by_category, SGCategory),
            shots_by_category=_ordered(shots_by_category, SGCategory),
            sg_by_distance_band=_ordered(sg_by_band, DistanceBand),
            shots_by_distance_band=_ordered(shots_by_band, DistanceBand),
            sg_by_putting_band=_ordered(sg_by_putt_band, PuttingBand),
            shots_by_putting_band=_ordered(shots_by_putt_band, PuttingBand),
            sg_by_hole=dict(sorted(sg_by_hole.items())),
            confidence_stats=stats,
            adjusted_total_sg=adjusted_total,
            adjusted_sg_by_category=_ordered(adjusted_by_category, SGCategory),
        )
        summary.top_wins = self.top_wins(scored)
        summary.top_leaks = self.top_leaks(scored)

        logger.info(
            "round %s summarised: %d scored, %d excluded, total SG %s",
            round_id,
            stats.total_shots,
            stats.excluded_shots,
            summary.formatted_total_sg(),
        )
        return summary

    @staticmethod
    def _location(shot: DerivedShot) -> str:
        hole = shot.hole_number.value
        if hole is None:
            return ""
        return f"Hole {hole}, Shot {shot.hole_shot_number}: "

    def top_wins(self, scored: Sequence[Tuple[DerivedShot, float]]) -> List[InsightCard]:
        ranked = sorted(scored, key=lambda item: item[1], reverse=True)
        return [
            InsightCard(
                type=InsightType.WIN,
                title=WIN_TITLES[shot.category],
                description=f"{self._location(shot)}Gained {sg:.2f} strokes",
                value=sg,
                category=shot.category,
                shot_ids=[shot.id],
            )
            for shot, sg in ranked[:TOP_INSIGHTS]
        ]

    def top_leaks(self, scored: Sequence[Tuple[DerivedShot, float]]) -> List[InsightCard]:
        ranked = sorted(scored, key=lambda item: item[1])
        return [
            InsightCard(
                type=InsightType.LEAK,
                title=LEAK_TITLES[shot.category],
                description=f"{self._location(shot)}Lost {abs(sg):.2f} strokes",
                value=sg,
                category=shot.category,
                shot_ids=[shot.id],
            )
            for shot, sg in ranked[:TOP_INSIGHTS]
        ]


class InsightGenerator:
    def focus_points(self, summary: RoundSummary) -> List[InsightCard]:
        """Practice tips for the weakest category, distance band and putting band."""

        insights: List[InsightCard] = []

        weakest = _worst(summary.sg_by_category)
        if weakest is not None and weakest[1] < CATEGORY_FOCUS_THRESHOLD:
            category, sg = weakest
            title, description = CATEGORY_TIPS[category]
            insights.append(
                InsightCard(
                    type=InsightType.TIP,
                    title=title,
                    description=description,
                    value=sg,
                    category=category,
                )
            )

        worst_band = _worst(summary.sg_by_distance_band)
        if worst_band is not None and worst_band[1] < DISTANCE_BAND_FOCUS_THRESHOLD:
            band, sg = worst_band
            insights.append(
                InsightCard(
                    type=InsightType.TIP,
                    title=f"Distance Control: {band.value} yards",
                    description=(
                        f"You're losing strokes from {band.value} yards. "
                        "Focus on this range during practice."
                    ),
                    value=sg,
                    category=SGCategory.APPROACH,
                )
            )

        worst_putt = _worst(summary.sg_by_putting_band)
        if worst_putt is not None and worst_putt[1] < PUTTING_BAND_FOCUS_THRESHOLD:
            band, sg = worst_putt
            insights.append(
                InsightCard(
                    type=InsightType.TIP,
                    title=f"Putting: {band.value}",
                    description=(
                        f"Practice putts from {band.value}. "
                        "This is where you can save strokes."
                    ),
                    value=sg,
                    category=SGCategory.PUTTING,
                )
            )

        return insights[:MAX_FOCUS_POINTS]


class TrendsCalculator:
    def calculate(self, summaries: Sequence[RoundSummary]) -> List[TrendData]:
        """Trends over ``summaries``, which must be ordered newest first."""

        if not summaries:
            return []

        latest = summaries[0]
        trends = [
            TrendData(
                period="Last Round",
                round_count=1,
                total_sg=latest.total_sg,
                sg_by_category=dict(latest.sg_by_category),
                average_sg_per_round=latest.total_sg,
            )
        ]
        if len(summaries) >= 3:
            trends.append(self._aggregate(summaries[:3], "Last 3 Rounds"))
        if len(summaries) >= 10:
            trends.append(self._aggregate(summaries[:10], "Last 10 Rounds"))
        if len(summaries) > 1:
            trends.append(self._aggregate(summaries, "Season"))
        return trends

    @staticmethod
    def _aggregate(summaries: Sequence[RoundSummary], period: str) -> TrendData:
        total = 0.0
        by_category: Dict[SGCategory, float] = defaultdict(float)
        for summary in summaries:
            total += summary.total_sg
            for category, sg in summary.sg_by_category.items():
                by_category[category] += sg

        count = len(summaries)
        # Category values are per-round averages; total_sg stays a sum.
        return TrendData(
            period=period,
            round_count=count,
            total_sg=total,
            sg_by_category={
                category: by_category[category] / count
                for category in SGCategory
                if category in by_category
            },
            average_sg_per_round=total / count,
        )


__all__ = [
    "InsightGenerator",
    "LEAK_TITLES",
    "RoundAggregator",
    "TrendsCalculator",
    "WIN_TITLES",
]
