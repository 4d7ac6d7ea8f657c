"""
Door gap (opening) detection.

Two independent methods:

- detect_door_gaps: pixels that are open in a wall mask but sealed by
  morphological closing are grouped into 8-connected runs.
- detect_door_gaps_along_edges: each polygon edge is walked step by step,
  looking for stretches with no wall pixel on either side.
"""

import logging
import math
from typing import List, Optional, Sequence

import cv2
import numpy as np

from ..geometry import Point, round_half_up
from ..raster.morphology import dilate
from .models import DoorGap

logger = logging.getLogger(__name__)


def detect_door_gaps(
    original_mask: np.ndarray,
    closed_mask: np.ndarray,
    room_mask: Optional[np.ndarray] = None,
) -> List[DoorGap]:
    """
    Find openings sealed by closing.

    Args:
        original_mask: Wall mask before closing
        closed_mask: Same mask after morphological close
        room_mask: Optional room fill; when given only gap pixels touching
            the room (8-neighbourhood) are kept

    Returns:
        One DoorGap per 8-connected run, with the rounded centroid as
        midpoint and the bounding box size as span
    """
    gap = ((original_mask == 0) & (closed_mask == 1)).astype(np.uint8)
    if room_mask is not None:
        gap &= dilate(room_mask, 1)
    if not gap.any():
        return []

    count, _, stats, centroids = cv2.connectedComponentsWithStats(gap, connectivity=8)
    gaps = []
    for label in range(1, count):
        cx, cy = centroids[label]
        gaps.append(DoorGap(
            midpoint=Point(round_half_up(cx), round_half_up(cy)),
            span=(int(stats[label, cv2.CC_STAT_WIDTH]), int(stats[label, cv2.CC_STAT_HEIGHT])),
        ))

    logger.debug(f"Mask-difference door gaps: {len(gaps)}")
    return gaps


def _edge_open_runs(mask: np.ndarray, a: Point, tx: float, ty: float, steps: int, search_depth_px: int):
    """[start, end) step ranges along an edge with no wall within search depth."""
    height, width = mask.shape
    nx, ny = -ty, tx
    runs = []
    gap_start = None

    for s in range(steps + 1):
        has_wall = s == steps
        if not has_wall:
            cx = a.x + tx * s
            cy = a.y + ty * s
            for d in range(-search_depth_px, search_depth_px + 1):
                sx = round_half_up(cx + nx * d)
                sy = round_half_up(cy + ny * d)
                if 0 <= sx < width and 0 <= sy < height and mask[sy, sx]:
                    has_wall = True
                    break

        if not has_wall and gap_start is None:
            gap_start = s
        elif has_wall and gap_start is not None:
            runs.append([gap_start, s])
            gap_start = None

    return runs


def detect_door_gaps_along_edges(
    mask: np.ndarray,
    polygon: Sequence[Point],
    min_gap_px: int = 40,
    max_gap_px: int = 300,
    search_depth_px: int = 10,
    max_dash_px: int = 0,
) -> List[DoorGap]:
    """
    Scan polygon edges for stretches without wall pixels.

    At each whole-pixel step along an edge, pixels up to search_depth_px
    away on both perpendicular sides are checked. Open runs separated by
    wall dashes of at most max_dash_px are merged (dashed door symbols),
    then kept if their length is within [min_gap_px, max_gap_px].

    Args:
        mask: Wall mask to scan (1 = wall)
        polygon: Room polygon in pixel space
        min_gap_px: Shortest opening reported
        max_gap_px: Longest opening reported
        search_depth_px: Perpendicular search distance on each side
        max_dash_px: Longest wall dash merged into an opening (0 disables)

    Returns:
        DoorGap list with span (length, length)
    """
    gaps = []
    n = len(polygon)
    for i in range(n):
        a, b = polygon[i], polygon[(i + 1) % n]
        length = math.hypot(b.x - a.x, b.y - a.y)
        if length < 2:
            continue
        tx, ty = (b.x - a.x) / length, (b.y - a.y) / length

        merged = []
        for run in _edge_open_runs(mask, a, tx, ty, math.ceil(length), search_depth_px):
            if merged and max_dash_px > 0 and run[0] - merged[-1][1] <= max_dash_px:
                merged[-1][1] = run[1]
            else:
                merged.append(run)

        for start, end in merged:
            gap_len = end - start
            if min_gap_px <= gap_len <= max_gap_px:
                mid = (start + end - 1) / 2
                gaps.append(DoorGap(
                    midpoint=Point(round_half_up(a.x + tx * mid), round_half_up(a.y + ty * mid)),
                    span=(gap_len, gap_len),
                ))

    logger.debug(f"Edge-scan door gaps: {len(gaps)}")
    return gaps
