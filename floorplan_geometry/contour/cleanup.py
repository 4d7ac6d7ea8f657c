"""
Polygon cleanup passes run after angle snapping.

Both passes work on rectified (mostly axis-aligned) polygons and never
return fewer than 3 vertices.
"""

import logging
import math
from typing import List, Optional, Sequence

from ..geometry import Point

logger = logging.getLogger(__name__)

AXIS_TOLERANCE = 0.5
MIN_OUTER_LENGTH = 0.1
COLLINEAR_TOLERANCE = 1.0


def merge_axis_collinear(vertices: Sequence[Point], tolerance: float = COLLINEAR_TOLERANCE) -> List[Point]:
    """
    Drop vertices lying on a straight horizontal or vertical run.

    A vertex is dropped when both its neighbours share its y (or its x)
    within tolerance. Stops at 3 vertices.
    """
    pts = list(vertices)
    changed = True
    while changed:
        changed = False
        n = len(pts)
        for i in range(n):
            if len(pts) <= 3:
                break
            a, b, c = pts[i - 1], pts[i], pts[(i + 1) % n]
            horizontal = abs(a.y - b.y) < tolerance and abs(b.y - c.y) < tolerance
            vertical = abs(a.x - b.x) < tolerance and abs(b.x - c.x) < tolerance
            if horizontal or vertical:
                del pts[i]
                changed = True
                break
    return pts


def _find_bump(pts: List[Point], max_bump_depth: float) -> Optional[int]:
    """Index B of the first U-shaped notch A-B-C-D, or None."""
    n = len(pts)
    for i in range(n):
        a, b, c, d = pts[i - 1], pts[i], pts[(i + 1) % n], pts[(i + 2) % n]

        outer = math.hypot(c.x - b.x, c.y - b.y)
        if outer >= max_bump_depth or outer < MIN_OUTER_LENGTH:
            continue

        leg1_h = abs(a.y - b.y) < AXIS_TOLERANCE
        leg1_v = abs(a.x - b.x) < AXIS_TOLERANCE
        leg2_h = abs(c.y - d.y) < AXIS_TOLERANCE
        leg2_v = abs(c.x - d.x) < AXIS_TOLERANCE

        if leg1_h and leg2_h:
            if abs(b.x - c.x) >= AXIS_TOLERANCE:
                continue
            if (b.x - a.x) * (d.x - c.x) >= 0:
                continue
        elif leg1_v and leg2_v:
            if abs(b.y - c.y) >= AXIS_TOLERANCE:
                continue
            if (b.y - a.y) * (d.y - c.y) >= 0:
                continue
        else:
            continue
        return i
    return None


def remove_micro_bumps(vertices: Sequence[Point], max_bump_depth: float = 50.0) -> List[Point]:
    """
    Collapse small rectangular notches in a rectified polygon.

    A notch is three edges A->B->C->D whose flanking legs A->B and C->D
    are parallel to the same axis and run in opposite directions, joined
    by a short outer edge B->C (shorter than max_bump_depth). B and C
    are removed and D is moved onto A's wall line. Afterwards vertices on
    straight runs are merged.

    Args:
        vertices: Polygon vertices, at least 5 for a notch to exist
        max_bump_depth: Longest outer edge that still counts as a notch

    Returns:
        Cleaned polygon vertices
    """
    if len(vertices) < 5:
        return list(vertices)

    pts = [Point(p.x, p.y) for p in vertices]
    removed = 0
    while len(pts) >= 5:
        i = _find_bump(pts, max_bump_depth)
        if i is None:
            break

        n = len(pts)
        a = pts[i - 1]
        d_idx = (i + 2) % n
        d = pts[d_idx]
        if abs(a.y - pts[i].y) < AXIS_TOLERANCE:
            pts[d_idx] = Point(a.x, d.y)
        else:
            pts[d_idx] = Point(d.x, a.y)

        c_idx = (i + 1) % n
        for idx in sorted((i, c_idx), reverse=True):
            del pts[idx]
        removed += 1

    if removed:
        logger.debug(f"Removed {removed} micro-bumps")
    return merge_axis_collinear(pts)


def _direction(a: Point, b: Point):
    length = math.hypot(b.x - a.x, b.y - a.y)
    if length == 0:
        return None
    return (b.x - a.x) / length, (b.y - a.y) / length, length


def _project(p: Point, origin: Point, ux: float, uy: float) -> Point:
    t = (p.x - origin.x) * ux + (p.y - origin.y) * uy
    return Point(origin.x + ux * t, origin.y + uy * t)


def _perpendicular_distance(p: Point, origin: Point, ux: float, uy: float) -> float:
    return abs((p.x - origin.x) * uy - (p.y - origin.y) * ux)


def _overlap(a: Point, b: Point, c: Point, d: Point, ux: float, uy: float) -> float:
    """Length of the overlap of segments AB and CD projected on AB's axis."""
    ta0, ta1 = 0.0, (b.x - a.x) * ux + (b.y - a.y) * uy
    tc0 = (c.x - a.x) * ux + (c.y - a.y) * uy
    tc1 = (d.x - a.x) * ux + (d.y - a.y) * uy
    lo = max(min(ta0, ta1), min(tc0, tc1))
    hi = min(max(ta0, ta1), max(tc0, tc1))
    return hi - lo


def _remove_spike(pts: List[Point], cos_limit: float) -> bool:
    """Drop the tip of one zero-width spike (edge folding back on itself)."""
    n = len(pts)
    for i in range(n):
        a, b, c = pts[i - 1], pts[i], pts[(i + 1) % n]
        ab = _direction(a, b)
        bc = _direction(b, c)
        if ab is None or bc is None:
            del pts[i]
            return True
        if ab[0] * bc[0] + ab[1] * bc[1] <= -cos_limit and _perpendicular_distance(c, a, ab[0], ab[1]) < AXIS_TOLERANCE:
            del pts[i]
            return True
    return False


def _collapse_stacked_pair(pts: List[Point], max_distance: float, cos_limit: float) -> bool:
    """Collapse one A->B, B->C, C->D pair where AB and CD are two faces of one wall."""
    n = len(pts)
    for i in range(n):
        a_idx, b_idx, c_idx, d_idx = (i - 1) % n, i, (i + 1) % n, (i + 2) % n
        a, b, c, d = pts[a_idx], pts[b_idx], pts[c_idx], pts[d_idx]

        ab = _direction(a, b)
        cd = _direction(c, d)
        if ab is None or cd is None:
            continue
        if math.hypot(c.x - b.x, c.y - b.y) > max_distance:
            continue
        if ab[0] * cd[0] + ab[1] * cd[1] > -cos_limit:
            continue

        separation = _perpendicular_distance(c, a, ab[0], ab[1])
        if separation > max_distance:
            continue
        overlap = _overlap(a, b, c, d, ab[0], ab[1])
        if overlap <= separation:
            continue

        if cd[2] <= ab[2]:
            pts[d_idx] = _project(d, a, ab[0], ab[1])
        else:
            pts[a_idx] = _project(a, c, cd[0], cd[1])
        for idx in sorted((b_idx, c_idx), reverse=True):
            del pts[idx]
        return True
    return False


def remove_stacked_walls(
    vertices: Sequence[Point],
    max_distance: float = 50.0,
    angle_tolerance_deg: float = 5.0,
) -> List[Point]:
    """
    Remove duplicate parallel edges that trace both faces of one wall.

    Two kinds of artifact are collapsed until none remain:
    zero-width spikes (an edge immediately folding back on itself), and
    antiparallel edges A->B and C->D joined by a short connector B->C
    whose perpendicular separation is at most max_distance and whose
    overlap along the wall is longer than that separation. The longer
    face is kept and the shorter one is projected onto it.

    Args:
        vertices: Polygon vertices
        max_distance: Largest face separation treated as one wall, in
            the same units as the vertices
        angle_tolerance_deg: Allowed deviation from exactly antiparallel

    Returns:
        Cleaned polygon vertices (never fewer than 3)
    """
    pts = [Point(p.x, p.y) for p in vertices]
    if len(pts) < 4:
        return pts

    cos_limit = math.cos(math.radians(angle_tolerance_deg))
    collapsed = 0
    while len(pts) > 3:
        snapshot = list(pts)
        if _remove_spike(pts, cos_limit) or (len(pts) >= 5 and _collapse_stacked_pair(pts, max_distance, cos_limit)):
            if len(pts) < 3:
                pts = snapshot
                break
            collapsed += 1
            continue
        break

    if collapsed:
        logger.debug(f"Collapsed {collapsed} stacked wall artifacts")
    return pts
