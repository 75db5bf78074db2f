from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from golfsg.sg.schemas import (
    DerivedShot,
    DistanceBand,
    PuttingBand,
    SGCategory,
    ShotEvent,
)


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def format_sg(value: float) -> str:
    """Signed two-decimal rendering, e.g. ``+1.25`` or ``-0.40``."""

    if value >= 0:
        return f"+{value:.2f}"
    return f"{value:.2f}"


class InsightType(str, Enum):
    WIN = "win"
    LEAK = "leak"
    TREND = "trend"
    TIP = "tip"


class InsightCard(BaseModel):
    id: str = Field(default_factory=_new_id)
    type: InsightType
    title: str
    description: str
    value: Optional[float] = None
    category: Optional[SGCategory] = None
    shot_ids: List[str] = Field(default_factory=list)


class ConfidenceStats(BaseModel):
    total_shots: int = 0
    high_confidence_shots: int = 0
    needs_review_shots: int = 0
    excluded_shots: int = 0

    @property
    def high_confidence_percent(self) -> float:
        if self.total_shots <= 0:
            return 0.0
        return self.high_confidence_shots / self.total_shots * 100

    @property
    def auto_confirmed_label(self) -> str:
        return f"{self.high_confidence_percent:.0f}% auto-confirmed"


class RoundSummary(BaseModel):
    id: str = Field(default_factory=_new_id)
    round_id: str
    course_name: Optional[str] = None
    date: datetime = Field(default_factory=_now)
    total_strokes: int = 0
    total_sg: float = 0.0
    sg_by_category: Dict[SGCategory, float] = Field(default_factory=dict)
    sg_by_distance_band: Dict[DistanceBand, float] = Field(default_factory=dict)
    sg_by_putting_band: Dict[PuttingBand, float] = Field(default_factory=dict)
    sg_by_hole: Dict[int, float] = Field(default_factory=dict)
    shots_by_category: Dict[SGCategory, int] = Field(default_factory=dict)
    shots_by_distance_band: Dict[DistanceBand, int] = Field(default_factory=dict)
    shots_by_putting_band: Dict[PuttingBand, int] = Field(default_factory=dict)
    top_wins: List[InsightCard] = Field(default_factory=list)
    top_leaks: List[InsightCard] = Field(default_factory=list)
    focus_points: List[InsightCard] = Field(default_factory=list)
    confidence_stats: ConfidenceStats = Field(default_factory=ConfidenceStats)
    adjusted_total_sg: float = 0.0
    adjusted_sg_by_category: Dict[SGCategory, float] = Field(default_factory=dict)

    def sg_for(self, category: SGCategory) -> float:
        return self.sg_by_category.get(category, 0.0)

    def formatted_total_sg(self) -> str:
        return format_sg(self.total_sg)

    def formatted_sg(self, category: SGCategory) -> str:
        return format_sg(self.sg_for(category))

    @property
    def biggest_leak(self) -> Optional[SGCategory]:
        if not self.sg_by_category:
            return None
        return min(self.sg_by_category, key=self.sg_by_category.__getitem__)

    @property
    def biggest_strength(self) -> Optional[SGCategory]:
        if not self.sg_by_category:
            return None
        return max(self.sg_by_category, key=self.sg_by_category.__getitem__)


class RoundSession(BaseModel):
    """Everything stored for one round: raw events, derived shots and summary."""

    id: str = Field(default_factory=_new_id)
    course_id: Optional[str] = None
    course_name: Optional[str] = None
    date: datetime = Field(default_factory=_now)
    events: List[ShotEvent] = Field(default_factory=list)
    shots: List[DerivedShot] = Field(default_factory=list)
    summary: Optional[RoundSummary] = None

    def shot(self, shot_id: str) -> Optional[DerivedShot]:
        for shot in self.shots:
            if shot.id == shot_id:
                return shot
        return None


class TrendData(BaseModel):
    period: str
    round_count: int
    total_sg: float
    sg_by_category: Dict[SGCategory, float] = Field(default_factory=dict)
    average_sg_per_round: float


__all__ = [
    "ConfidenceStats",
    "InsightCard",
    "InsightType",
    "RoundSession",
    "RoundSummary",
    "TrendData",
    "format_sg",
]
