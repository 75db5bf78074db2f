"""Pydantic models for derived shots, their states and provenance."""

from __future__ import annotations

import math
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")

YARDS_TO_FEET = 3.0

HIGH_CONFIDENCE_THRESHOLD = 0.7
NEEDS_REVIEW_THRESHOLD = 0.5


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC so event and sample times always compare."""

    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class Lie(str, Enum):
    TEE = "tee"
    FAIRWAY = "fairway"
    ROUGH = "rough"
    DEEP_ROUGH = "deepRough"
    BUNKER = "bunker"
    GREEN = "green"
    FRINGE = "fringe"
    RECOVERY = "recovery"
    UNKNOWN = "unknown"


class ShotType(str, Enum):
    DRIVE = "drive"
    APPROACH = "approach"
    CHIP = "chip"
    PITCH = "pitch"
    BUNKER_SHOT = "bunkerShot"
    PUTT = "putt"
    PENALTY = "penalty"
    UNKNOWN = "unknown"


class SGCategory(str, Enum):
    OFF_THE_TEE = "OTT"
    APPROACH = "APP"
    SHORT_GAME = "ARG"
    PUTTING = "PUTT"

    @property
    def display_name(self) -> str:
        return _CATEGORY_NAMES[self]


_CATEGORY_NAMES = {
    SGCategory.OFF_THE_TEE: "Off the Tee",
    SGCategory.APPROACH: "Approach",
    SGCategory.SHORT_GAME: "Short Game",
    SGCategory.PUTTING: "Putting",
}


class ValueSource(str, Enum):
    GPS = "gps"
    DERIVED = "derived"
    MANUAL = "manual"


class EndStateSource(str, Enum):
    NEXT_SHOT_START_USED = "nextShotStartUsed"
    FALLBACK_USED = "fallbackUsed"
    MANUAL = "manual"


DistanceUnit = Literal["yards", "feet"]


class _BandMixin:
    """Closed-range bands; the first band containing the distance wins."""

    @classmethod
    def _ranges(cls) -> dict:
        raise NotImplementedError

    @classmethod
    def for_distance(cls, distance: float):
        for band, (low, high) in cls._ranges().items():
            if low <= distance <= high:
                return band
        return list(cls._ranges())[-1]


class DistanceBand(_BandMixin, str, Enum):
    """Distance bands for full and short shots, in yards."""

    BAND_0_30 = "0-30"
    BAND_30_75 = "30-75"
    BAND_75_125 = "75-125"
    BAND_125_175 = "125-175"
    BAND_175_225 = "175-225"
    BAND_225_PLUS = "225+"

    @classmethod
    def _ranges(cls) -> dict:
        return _DISTANCE_BAND_RANGES


class PuttingBand(_BandMixin, str, Enum):
    """Putting distance bands, in feet."""

    BAND_0_3 = "0-3 ft"
    BAND_3_4 = "3-4 ft"
    BAND_4_8 = "4-8 ft"
    BAND_8_10 = "8-10 ft"
    BAND_10_15 = "10-15 ft"
    BAND_15_20 = "15-20 ft"
    BAND_20_25 = "20-25 ft"
    BAND_25_PLUS = "25+ ft"

    @classmethod
    def _ranges(cls) -> dict:
        return _PUTTING_BAND_RANGES


_DISTANCE_BAND_RANGES = {
    DistanceBand.BAND_0_30: (0.0, 30.0),
    DistanceBand.BAND_30_75: (30.0, 75.0),
    DistanceBand.BAND_75_125: (75.0, 125.0),
    DistanceBand.BAND_125_175: (125.0, 175.0),
    DistanceBand.BAND_175_225: (175.0, 225.0),
    DistanceBand.BAND_225_PLUS: (225.0, 1000.0),
}

_PUTTING_BAND_RANGES = {
    PuttingBand.BAND_0_3: (0.0, 3.0),
    PuttingBand.BAND_3_4: (3.0, 4.0),
    PuttingBand.BAND_4_8: (4.0, 8.0),
    PuttingBand.BAND_8_10: (8.0, 10.0),
    PuttingBand.BAND_10_15: (10.0, 15.0),
    PuttingBand.BAND_15_20: (15.0, 20.0),
    PuttingBand.BAND_20_25: (20.0, 25.0),
    PuttingBand.BAND_25_PLUS: (25.0, 200.0),
}


class ProvenanceValue(BaseModel, Generic[T]):
    """A value together with how it was obtained and how sure we are of it."""

    value: Optional[T] = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    source: ValueSource = ValueSource.DERIVED
    reasons: List[str] = Field(default_factory=list)

    @property
    def has_value(self) -> bool:
        return self.value is not None

    def with_override(self, value: T) -> "ProvenanceValue[T]":
        """Return a manual copy of this value; the raised confidence is explained."""

        return self.model_copy(
            update={
                "value": value,
                "confidence": 1.0,
                "source": ValueSource.MANUAL,
                "reasons": [*self.reasons, "user_override"],
            }
        )


class LocationSample(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime
    latitude: float
    longitude: float
    horizontal_accuracy_m: float
    altitude: Optional[float] = None

    model_config = ConfigDict(frozen=True)

    _utc_timestamp = field_validator("timestamp")(as_utc)


class SmoothedLocation(BaseModel):
    latitude: float
    longitude: float
    altitude: Optional[float] = None
    confidence: float
    sample_count: int
    avg_accuracy: float
    flags: List[str] = Field(default_factory=list)

    @property
    def is_high_confidence(self) -> bool:
        return self.confidence >= 0.7 and self.avg_accuracy <= 10.0


class ShotEvent(BaseModel):
    """A swing marker captured by the recording client."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    event_timestamp: Optional[datetime] = None
    clip_start_seconds: Optional[float] = None
    impact_seconds: Optional[float] = None
    clip_end_seconds: Optional[float] = None
    seconds_from_video_start: Optional[float] = None
    recorded_at: Optional[datetime] = None
    motion_stability: Optional[float] = None
    shot_type_hint: Optional[ShotType] = None

    _utc_times = field_validator("event_timestamp", "recorded_at")(as_utc)


class AuditEvent(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    field: str
    old_value: Optional[str] = None
    new_value: str
    source: str


class ShotState(BaseModel):
    location: ProvenanceValue[LocationSample] = Field(
        default_factory=ProvenanceValue[LocationSample]
    )
    distance_to_pin: ProvenanceValue[float] = Field(
        default_factory=ProvenanceValue[float]
    )
    distance_unit: DistanceUnit = "yards"
    lie: ProvenanceValue[Lie] = Field(default_factory=ProvenanceValue[Lie])
    expected_strokes: Optional[float] = None
    end_state_source: Optional[EndStateSource] = None

    def distance_in(self, unit: DistanceUnit) -> Optional[float]:
        """Distance to pin converted to ``unit`` (yards x 3 = feet)."""

        distance = self.distance_to_pin.value
        if distance is None or unit == self.distance_unit:
            return distance
        if unit == "feet":
            return distance * YARDS_TO_FEET
        return distance / YARDS_TO_FEET


class ConfidenceScore(BaseModel):
    hole: float = 0.0
    start_location: float = 0.0
    end_location: float = 0.0
    distance: float = 0.0
    lie: float = 0.0
    shot_type: float = 0.0

    @property
    def overall(self) -> float:
        values = [
            self.hole,
            self.start_location,
            self.end_location,
            self.distance,
            self.lie,
            self.shot_type,
        ]
        # Rounded so that boundary values like 0.7 compare exactly.
        return round(math.fsum(values) / len(values), 9)

    @property
    def is_high_confidence(self) -> bool:
        return self.overall >= HIGH_CONFIDENCE_THRESHOLD

    @property
    def needs_review(self) -> bool:
        return self.overall < NEEDS_REVIEW_THRESHOLD


class DerivedShot(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    event_id: Optional[str] = None
    shot_number: int = 1
    hole_shot_number: int = 1
    hole_number: ProvenanceValue[int] = Field(default_factory=ProvenanceValue[int])
    start_state: ShotState = Field(default_factory=ShotState)
    end_state: ShotState = Field(default_factory=ShotState)
    shot_type: ProvenanceValue[ShotType] = Field(
        default_factory=ProvenanceValue[ShotType]
    )
    category: Optional[SGCategory] = None
    strokes_gained: Optional[float] = None
    penalty_strokes: int = 0
    is_holed: bool = False
    holed_confidence: float = 0.0
    is_penalty_likely: bool = False
    confidence: ConfidenceScore = Field(default_factory=ConfidenceScore)
    clip_start_seconds: Optional[float] = None
    impact_seconds: Optional[float] = None
    clip_end_seconds: Optional[float] = None
    audit_events: List[AuditEvent] = Field(default_factory=list)


__all__ = [
    "AuditEvent",
    "ConfidenceScore",
    "DerivedShot",
    "DistanceBand",
    "DistanceUnit",
    "EndStateSource",
    "HIGH_CONFIDENCE_THRESHOLD",
    "Lie",
    "LocationSample",
    "NEEDS_REVIEW_THRESHOLD",
    "ProvenanceValue",
    "PuttingBand",
    "SGCategory",
    "ShotEvent",
    "ShotState",
    "ShotType",
    "SmoothedLocation",
    "ValueSource",
    "YARDS_TO_FEET",
    "as_utc",
]
