from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional, Protocol

from golfsg.sg.schemas import as_utc


class PoseProvider(Protocol):
    """Supplies a motion-stability score in [0, 1]; lower means steadier."""

    def motion_stability(self, start: datetime, end: datetime) -> Optional[float]:
        ...


class NullPoseProvider:
    """Used when no pose data was recorded."""

    def motion_stability(self, start: datetime, end: datetime) -> Optional[float]:
        return None


class StaticPoseProvider:
    """Stability scores keyed by timestamp, e.g. precomputed by the capture client."""

    def __init__(self, scores: Dict[datetime, float]) -> None:
        self._scores = {as_utc(ts): score for ts, score in scores.items()}

    def motion_stability(self, start: datetime, end: datetime) -> Optional[float]:
        window = [score for ts, score in self._scores.items() if start <= ts <= end]
        if not window:
            return None
        return max(0.0, min(1.0, sum(window) / len(window)))


__all__ = ["NullPoseProvider", "PoseProvider", "StaticPoseProvider"]
