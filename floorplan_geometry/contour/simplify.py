"""
Polyline simplification and standard-angle edge snapping.
"""

import math
from typing import List, Optional, Sequence

from ..geometry import Point, line_intersection

DEFAULT_STANDARD_ANGLES_DEG = (0, 45, 90, 135, 180, 225, 270, 315)

# Snapped directions closer than this (mod pi) are treated as collinear
COLLINEAR_EPSILON = 0.01


def _chord_distance(p: Point, first: Point, last: Point, dx: float, dy: float, length: float) -> float:
    if length == 0:
        return math.hypot(p.x - first.x, p.y - first.y)
    return abs(dy * p.x - dx * p.y + last.x * first.y - last.y * first.x) / length


def douglas_peucker(points: Sequence[Point], epsilon: float) -> List[Point]:
    """
    Ramer-Douglas-Peucker simplification.

    Uses an explicit worklist instead of recursion so very long contours
    cannot exhaust the stack. The kept points are the same as the
    recursive formulation: a span keeps its farthest point (first one on
    ties) when that distance is strictly greater than epsilon.

    Args:
        points: Open polyline
        epsilon: Maximum allowed perpendicular deviation in pixels

    Returns:
        Simplified polyline that always includes both endpoints
    """
    n = len(points)
    if n <= 2:
        return list(points)

    keep = [False] * n
    keep[0] = keep[n - 1] = True
    stack = [(0, n - 1)]

    while stack:
        start, end = stack.pop()
        if end - start < 2:
            continue

        first, last = points[start], points[end]
        dx = last.x - first.x
        dy = last.y - first.y
        length = math.hypot(dx, dy)

        max_dist = 0.0
        max_idx = start
        for i in range(start + 1, end):
            dist = _chord_distance(points[i], first, last, dx, dy, length)
            if dist > max_dist:
                max_dist = dist
                max_idx = i

        if max_dist > epsilon:
            keep[max_idx] = True
            stack.append((start, max_idx))
            stack.append((max_idx, end))

    return [p for p, k in zip(points, keep) if k]


def _nearest_standard_angle(angle: float, standard_rad: Sequence[float]):
    best = angle
    best_diff = math.inf
    for std in standard_rad:
        for candidate in (std, std - 2 * math.pi, std + 2 * math.pi):
            diff = abs(angle - candidate)
            if diff < best_diff:
                best_diff = diff
                best = candidate
    return best, best_diff


def snap_polygon_edges(
    vertices: Sequence[Point],
    tolerance_deg: float = 5.0,
    standard_angles_deg: Optional[Sequence[float]] = None,
) -> List[Point]:
    """
    Snap each edge to the nearest standard direction and re-intersect.

    Every edge within tolerance_deg of a standard angle is rotated onto
    it about its midpoint. Each vertex becomes the intersection of its two
    neighbouring edge lines (unchanged when they are parallel). Vertices
    whose edges end up sharing a direction modulo pi are dropped, unless
    that would leave fewer than 3 vertices.

    Args:
        vertices: Closed polygon (last vertex connects to first)
        tolerance_deg: Maximum deviation that still snaps
        standard_angles_deg: Allowed directions; defaults to 45 degree multiples

    Returns:
        Snapped polygon vertices
    """
    n = len(vertices)
    if n < 3:
        return list(vertices)

    if standard_angles_deg is None:
        standard_angles_deg = DEFAULT_STANDARD_ANGLES_DEG
    standard_rad = [math.radians(a) for a in standard_angles_deg]
    tolerance = math.radians(tolerance_deg)

    edges = []
    for i in range(n):
        a, b = vertices[i], vertices[(i + 1) % n]
        angle = math.atan2(b.y - a.y, b.x - a.x)
        snapped, diff = _nearest_standard_angle(angle, standard_rad)
        if diff > tolerance:
            snapped = angle
        edges.append((
            (a.x + b.x) / 2,
            (a.y + b.y) / 2,
            math.cos(snapped),
            math.sin(snapped),
            snapped,
        ))

    intersected = []
    for i in range(n):
        pmx, pmy, pdx, pdy, _ = edges[i - 1]
        cmx, cmy, cdx, cdy, _ = edges[i]
        pt = line_intersection(pmx, pmy, pdx, pdy, cmx, cmy, cdx, cdy)
        intersected.append(pt if pt is not None else Point(vertices[i].x, vertices[i].y))

    result = []
    for i in range(n):
        diff = abs(edges[i - 1][4] - edges[i][4]) % math.pi
        if diff > COLLINEAR_EPSILON and abs(diff - math.pi) > COLLINEAR_EPSILON:
            result.append(intersected[i])

    return result if len(result) >= 3 else intersected
