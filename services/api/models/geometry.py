# services/api/models/geometry.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence


def round_half_away(value: float, places: int = 0) -> float:
    """
    Round to `places` decimals with halves going away from zero
    (1.0625 -> 1.063, 12.5 -> 13, -2.5 -> -3), unlike the built-in round.
    """
    factor = 10 ** places
    scaled = abs(float(value)) * factor
    whole = math.floor(scaled)
    if scaled - whole >= 0.5:
        whole += 1
    return math.copysign(whole / factor, value)


def round_to(value: float, places: int = 3) -> float:
    """Round a coordinate to a fixed number of decimal places."""
    return round_half_away(value, places)


@dataclass(frozen=True)
class Point:
    """A point in PDF points (1/72 inch)."""
    x: float
    y: float

    def rounded(self, places: int = 3) -> "Point":
        return Point(round_to(self.x, places), round_to(self.y, places))

    def to_list(self) -> List[float]:
        return [self.x, self.y]


@dataclass(frozen=True)
class Rect:
    """
    Axis-aligned rectangle with origin at its minimum corner.

    Width and height are never negative; use `from_corners` when the
    corner order is not known.
    """
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_corners(cls, x1: float, y1: float, x2: float, y2: float) -> "Rect":
        min_x, max_x = min(x1, x2), max(x1, x2)
        min_y, max_y = min(y1, y2), max(y1, y2)
        return cls(min_x, min_y, max_x - min_x, max_y - min_y)

    @property
    def min_x(self) -> float:
        return self.x

    @property
    def min_y(self) -> float:
        return self.y

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    @property
    def origin(self) -> Point:
        return Point(self.x, self.y)

    def rounded(self, places: int = 3) -> "Rect":
        return Rect(
            round_to(self.x, places),
            round_to(self.y, places),
            round_to(self.width, places),
            round_to(self.height, places),
        )

    def intersects(self, other: "Rect") -> bool:
        return not (
            other.min_x > self.max_x
            or other.max_x < self.min_x
            or other.min_y > self.max_y
            or other.max_y < self.min_y
        )

    def union(self, other: "Rect") -> "Rect":
        return Rect.from_corners(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def inset(self, dx: float, dy: float) -> "Rect":
        return Rect(self.x + dx, self.y + dy, self.width - 2 * dx, self.height - 2 * dy)

    def to_corners(self) -> List[float]:
        """[x1, y1, x2, y2] as stored in annotation position JSON."""
        return [self.min_x, self.min_y, self.max_x, self.max_y]


def union_rects(rects: Iterable[Rect]) -> Optional[Rect]:
    """Smallest rect containing all given rects, or None for an empty input."""
    result: Optional[Rect] = None
    for rect in rects:
        result = rect if result is None else result.union(rect)
    return result


def bounding_rect_of_points(points: Sequence[Point]) -> Optional[Rect]:
    if not points:
        return None
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return Rect.from_corners(min(xs), min(ys), max(xs), max(ys))
