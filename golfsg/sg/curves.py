"""Expected strokes lookup tables and interpolation for every lie."""

from __future__ import annotations

from typing import Dict, Iterable, List, Protocol, Tuple

import numpy as np

from .schemas import Lie

# Putting is in feet, every other table in yards. Breakpoints are
# (max distance, expected strokes to hole out) and follow tour ShotLink averages.
PUTTING_TABLE: List[Tuple[float, float]] = [
    (1, 1.001),
    (2, 1.009),
    (3, 1.04),
    (4, 1.13),
    (5, 1.23),
    (6, 1.33),
    (7, 1.42),
    (8, 1.50),
    (9, 1.56),
    (10, 1.61),
    (12, 1.70),
    (15, 1.78),
    (18, 1.84),
    (20, 1.87),
    (25, 1.92),
    (30, 1.96),
    (35, 1.98),
    (40, 2.00),
    (50, 2.04),
    (60, 2.08),
    (80, 2.14),
    (100, 2.20),
]

CURVES: Dict[str, List[Tuple[float, float]]] = {
    "putting": PUTTING_TABLE,
    "tee": [
        (150, 2.92),  # par 3
        (175, 2.99),
        (200, 3.05),
        (225, 3.17),
        (250, 3.25),
        (275, 3.45),
        (300, 3.65),
        (325, 3.75),
        (350, 3.85),
        (375, 3.92),
        (400, 4.08),  # par 4
        (425, 4.17),
        (450, 4.32),
        (475, 4.45),
        (500, 4.55),
        (525, 4.65),
        (550, 4.75),
        (575, 4.85),
        (600, 4.95),
        (650, 5.10),  # long par 5
    ],
    "fairway": [
        (20, 2.40),
        (30, 2.45),
        (40, 2.52),
        (50, 2.60),
        (60, 2.68),
        (70, 2.75),
        (80, 2.82),
        (90, 2.88),
        (100, 2.92),
        (110, 2.96),
        (120, 2.99),
        (130, 3.02),
        (140, 3.05),
        (150, 3.08),
        (160, 3.12),
        (170, 3.17),
        (180, 3.22),
        (190, 3.28),
        (200, 3.35),
        (210, 3.42),
        (220, 3.50),
        (230, 3.58),
        (240, 3.68),
        (250, 3.78),
        (260, 3.88),
        (280, 4.00),
        (300, 4.15),
    ],
    "rough": [
        (20, 2.55),
        (30, 2.62),
        (40, 2.70),
        (50, 2.78),
        (60, 2.85),
        (70, 2.92),
        (80, 2.98),
        (90, 3.05),
        (100, 3.10),
        (110, 3.15),
        (120, 3.20),
        (130, 3.25),
        (140, 3.30),
        (150, 3.36),
        (160, 3.42),
        (170, 3.50),
        (180, 3.58),
        (190, 3.67),
        (200, 3.75),
        (220, 3.92),
        (240, 4.10),
        (260, 4.28),
        (280, 4.45),
    ],
    "bunker": [
        (10, 2.43),  # greenside
        (20, 2.55),
        (30, 2.70),
        (40, 2.85),
        (50, 3.00),
        (60, 3.15),
        (70, 3.30),
        (80, 3.45),
        (100, 3.65),
        (120, 3.85),
        (150, 4.10),  # fairway bunker
    ],
    "fringe": [
        (3, 2.10),
        (5, 2.20),
        (10, 2.35),
        (15, 2.45),
        (20, 2.55),
        (25, 2.62),
        (30, 2.70),
    ],
    # Recovery sits above fairway values at the same distance; kept as recorded.
    "recovery": [
        (50, 3.20),
        (100, 3.50),
        (150, 3.80),
        (200, 4.10),
        (250, 4.40),
    ],
}

EMPTY_TABLE_DEFAULT = 3.5

_LIE_TABLES: Dict[Lie, str] = {
    Lie.TEE: "tee",
    Lie.FAIRWAY: "fairway",
    Lie.ROUGH: "rough",
    Lie.DEEP_ROUGH: "rough",
    Lie.BUNKER: "bunker",
    Lie.FRINGE: "fringe",
    Lie.RECOVERY: "recovery",
    Lie.GREEN: "putting",
    # No baseline for unknown lies; fairway is the middle ground.
    Lie.UNKNOWN: "fairway",
}


def _validate_curve_points(points: Iterable[Tuple[float, float]]) -> None:
    """Ensure points are strictly increasing in distance."""

    last_distance = None
    for distance, _ in points:
        if last_distance is not None and distance <= last_distance:
            raise ValueError("Curve distances must be strictly increasing")
        last_distance = distance


for lie_name, pts in CURVES.items():
    _validate_curve_points(pts)


def interpolate(points: List[Tuple[float, float]], distance: float) -> float:
    """Piecewise-linear lookup with a linear tail past the last breakpoint."""

    if not points:
        return EMPTY_TABLE_DEFAULT

    distance = float(distance)
    first_distance, first_value = points[0]
    if distance <= first_distance:
        return float(first_value)

    last_distance, last_value = points[-1]
    if distance >= last_distance:
        if len(points) < 2:
            return float(last_value)
        prev_distance, prev_value = points[-2]
        slope = (last_value - prev_value) / (last_distance - prev_distance)
        return float(last_value + slope * (distance - last_distance))

    xs = np.array([p[0] for p in points], dtype=float)
    ys = np.array([p[1] for p in points], dtype=float)
    return float(np.interp(distance, xs, ys))


def table_for(lie: Lie, is_putt: bool = False) -> List[Tuple[float, float]]:
    if is_putt:
        return CURVES["putting"]
    return CURVES[_LIE_TABLES.get(lie, "fairway")]


def expected_strokes(distance: float, lie: Lie, is_putt: bool = False) -> float:
    """Expected strokes to hole out; feet when putting or on the green, else yards."""

    return interpolate(table_for(Lie(lie), is_putt or Lie(lie) == Lie.GREEN), distance)


class ExpectedStrokesProvider(Protocol):
    def expected_strokes(self, distance: float, lie: Lie, is_putt: bool) -> float:
        ...


class TableExpectedStrokesProvider:
    """Default provider backed by :data:`CURVES`."""

    def expected_strokes(self, distance: float, lie: Lie, is_putt: bool) -> float:
        return expected_strokes(distance, lie, is_putt)


__all__ = [
    "CURVES",
    "EMPTY_TABLE_DEFAULT",
    "ExpectedStrokesProvider",
    "PUTTING_TABLE",
    "TableExpectedStrokesProvider",
    "expected_strokes",
    "interpolate",
    "table_for",
]
