"""Strokes gained core package."""

from .calculator import StrokesGainedCalculator  # noqa: F401
from .curves import CURVES, TableExpectedStrokesProvider, expected_strokes  # noqa: F401
from .schemas import (  # noqa: F401
    ConfidenceScore,
    DerivedShot,
    Lie,
    LocationSample,
    ProvenanceValue,
    SGCategory,
    ShotEvent,
    ShotState,
    ShotType,
)
