"""Accuracy and time weighted smoothing of GPS samples."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

import numpy as np

from golfsg.config import get_settings
from golfsg.sg.schemas import LocationSample, SmoothedLocation

logger = logging.getLogger(__name__)

MIN_ACCURACY_M = 1.0
FULL_SAMPLE_COUNT = 5
ACCURACY_SCALE_M = 30.0
LOW_SAMPLE_COUNT = 3
MODERATE_ACCURACY_M = 15.0
POOR_ACCURACY_M = 30.0
# Raw samples worse than this are rejected at recording time.
MAX_RAW_ACCURACY_M = 50.0


def _delta_s(sample: LocationSample, timestamp: datetime) -> float:
    return abs((sample.timestamp - timestamp).total_seconds())


def smoothed_location(
    samples: Sequence[LocationSample], timestamp: datetime, window: float
) -> Optional[SmoothedLocation]:
    """Blend the samples within ``window`` seconds centred on ``timestamp``."""

    half_window = window / 2.0
    in_window = [s for s in samples if _delta_s(s, timestamp) <= half_window]
    if not in_window or half_window <= 0:
        return None

    accuracy = np.array([s.horizontal_accuracy_m for s in in_window], dtype=float)
    deltas = np.array([_delta_s(s, timestamp) for s in in_window], dtype=float)
    weights = (1.0 / np.maximum(accuracy, MIN_ACCURACY_M)) * (1.0 - deltas / half_window)

    total_weight = float(weights.sum())
    if total_weight <= 0:
        return None

    lat = float(np.average([s.latitude for s in in_window], weights=weights))
    lon = float(np.average([s.longitude for s in in_window], weights=weights))

    altitude = None
    with_altitude = [
        (s.altitude, w) for s, w in zip(in_window, weights) if s.altitude is not None
    ]
    if with_altitude:
        alt_weights = [w for _, w in with_altitude]
        if sum(alt_weights) > 0:
            altitude = float(
                np.average([a for a, _ in with_altitude], weights=alt_weights)
            )

    count = len(in_window)
    avg_accuracy = float(accuracy.mean())
    count_factor = min(count / FULL_SAMPLE_COUNT, 1.0)
    accuracy_factor = max(0.0, 1.0 - avg_accuracy / ACCURACY_SCALE_M)
    confidence = count_factor * 0.4 + accuracy_factor * 0.6

    flags: List[str] = []
    if count < LOW_SAMPLE_COUNT:
        flags.append("low_sample_count")
    if avg_accuracy > MODERATE_ACCURACY_M:
        flags.append("moderate_accuracy")
    if avg_accuracy > POOR_ACCURACY_M:
        flags.append("poor_accuracy")

    return SmoothedLocation(
        latitude=lat,
        longitude=lon,
        altitude=altitude,
        confidence=confidence,
        sample_count=count,
        avg_accuracy=avg_accuracy,
        flags=flags,
    )


class LocationSmoother:
    """Holds one round's samples and answers position queries for any time."""

    def __init__(
        self, samples: Iterable[LocationSample] = (), window: float | None = None
    ) -> None:
        self.samples: List[LocationSample] = sorted(samples, key=lambda s: s.timestamp)
        self.window = window if window is not None else get_settings().smoothing_window_s

    @classmethod
    def from_raw(
        cls, samples: Iterable[LocationSample], window: float | None = None
    ) -> "LocationSmoother":
        """Build from unfiltered samples, dropping invalid or very poor fixes."""

        raw = list(samples)
        kept = [s for s in raw if 0 < s.horizontal_accuracy_m <= MAX_RAW_ACCURACY_M]
        if len(kept) != len(raw):
            logger.info("dropped %d of %d location samples", len(raw) - len(kept), len(raw))
        return cls(kept, window=window)

    def smoothed_location(
        self, timestamp: datetime, window: float | None = None
    ) -> Optional[SmoothedLocation]:
        return smoothed_location(
            self.samples, timestamp, window if window is not None else self.window
        )

    def nearest_sample(self, timestamp: datetime) -> Optional[LocationSample]:
        if not self.samples:
            return None
        return min(self.samples, key=lambda s: _delta_s(s, timestamp))

    def samples_between(self, start: datetime, end: datetime) -> List[LocationSample]:
        return [s for s in self.samples if start <= s.timestamp <= end]


__all__ = ["LocationSmoother", "smoothed_location"]
