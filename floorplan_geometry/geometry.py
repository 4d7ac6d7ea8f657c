"""
Small geometric helpers shared by the raster, contour and wall modules.

Points are pixel-space (x, y) pairs with y growing downward, matching
numpy's [row, column] image layout.
"""

import math
from typing import List, NamedTuple, Sequence, Tuple


class Point(NamedTuple):
    """A 2D point in pixel space."""
    x: float
    y: float

    def to_dict(self) -> dict:
        return {"x": float(self.x), "y": float(self.y)}


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 always rounding up (4.5 -> 5)."""
    return int(math.floor(value + 0.5))


def units_to_pixels(value: float, pixels_per_unit: float) -> int:
    """Convert a length in real-world units to a whole number of pixels."""
    return round_half_up(value * pixels_per_unit)


def median(values: Sequence[float]) -> float:
    """
    Median of a non-empty sequence.

    Even-length inputs return the mean of the two middle values.
    """
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 1:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) / 2


def vertex_centroid(points: Sequence[Point]) -> Point:
    """Average of the polygon vertices (not the area centroid)."""
    n = len(points)
    return Point(
        sum(p.x for p in points) / n,
        sum(p.y for p in points) / n,
    )


def bounding_box(points: Sequence[Point]) -> Tuple[float, float, float, float]:
    """Return (min_x, min_y, max_x, max_y) of a point sequence."""
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return min(xs), min(ys), max(xs), max(ys)


def polygon_area(points: Sequence[Point]) -> float:
    """
    Calculate the area of a polygon using the Shoelace formula.

    Returns:
        Area in square pixels (always positive)
    """
    n = len(points)
    if n < 3:
        return 0.0

    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += points[i].x * points[j].y
        area -= points[j].x * points[i].y

    return abs(area) / 2.0


def line_intersection(
    ax: float, ay: float, adx: float, ady: float,
    bx: float, by: float, bdx: float, bdy: float,
):
    """
    Intersect two lines given as (point, direction).

    Returns:
        Intersection Point, or None when the lines are parallel
    """
    denom = adx * bdy - ady * bdx
    if abs(denom) < 1e-10:
        return None
    t = ((bx - ax) * bdy - (by - ay) * bdx) / denom
    return Point(ax + adx * t, ay + ady * t)


def as_points(vertices) -> List[Point]:
    """Coerce (x, y) tuples, dicts or Points into a list of Points."""
    points = []
    for v in vertices:
        if isinstance(v, dict):
            points.append(Point(v["x"], v["y"]))
        else:
            points.append(Point(v[0], v[1]))
    return points
