"""
Wall thickness probing along polygon edges.

Probes walk perpendicular to an edge through the image, classifying each
pixel as wall edge line, wall fill or background. When a wall is drawn
as two parallel edge lines the thickness is the distance between their
centers; otherwise it is the width of the whole wall band.
"""

import logging
import math
from typing import Optional, Sequence

from ..config.detection_config import FloorPlanRules
from ..geometry import Point, median, round_half_up, vertex_centroid
from ..raster.mask_builders import PixelClass, classify_pixel
from ..raster.models import RasterBuffer
from .models import EdgeThickness, WallThicknessSummary

logger = logging.getLogger(__name__)

# Background pixels tolerated inside a wall band (anti-aliasing)
MAX_BAND_GAP = 2
SAMPLES_PER_EDGE = 7
MIN_SAMPLE_PX = 2
MIN_VALID_SAMPLES = 2
PROBE_MARGIN_UNITS = 10


def probe_wall_thickness(
    buffer: RasterBuffer,
    start_x: float,
    start_y: float,
    perp_x: float,
    perp_y: float,
    max_probe: int,
) -> float:
    """
    Measure the wall band crossed by a ray.

    Steps d = 1..max_probe sample the pixel at round(start + perp * d).
    The band starts at the first edge/fill pixel and ends once more than
    2 consecutive background pixels follow it.

    Returns:
        Center distance between the first and last edge-line runs when
        there are at least two, else the band width; 0 if no band was hit
    """
    pixels = buffer.pixels
    width, height = buffer.width, buffer.height

    wall_start = -1
    wall_end = -1
    edge_runs = []
    edge_start = -1
    bg_gap = 0

    for d in range(1, max_probe + 1):
        px = round_half_up(start_x + perp_x * d)
        py = round_half_up(start_y + perp_y * d)
        if px < 0 or px >= width or py < 0 or py >= height:
            break

        r, g, b = pixels[py, px, 0], pixels[py, px, 1], pixels[py, px, 2]
        cls = classify_pixel(int(r), int(g), int(b))

        if cls is PixelClass.BACKGROUND:
            if edge_start >= 0:
                edge_runs.append((edge_start, d - 1))
                edge_start = -1
            if wall_start >= 0:
                bg_gap += 1
                if bg_gap > MAX_BAND_GAP:
                    break
            continue

        if wall_start < 0:
            wall_start = d
        wall_end = d
        bg_gap = 0
        if cls is PixelClass.EDGE:
            if edge_start < 0:
                edge_start = d
        elif edge_start >= 0:
            edge_runs.append((edge_start, d - 1))
            edge_start = -1

    if edge_start >= 0:
        edge_runs.append((edge_start, wall_end))

    if wall_start < 0:
        return 0

    if len(edge_runs) >= 2:
        first, last = edge_runs[0], edge_runs[-1]
        return (last[0] + last[1]) / 2 - (first[0] + first[1]) / 2

    return wall_end - wall_start + 1


def detect_wall_thickness(
    buffer: RasterBuffer,
    polygon: Sequence[Point],
    pixels_per_unit: float = 1.0,
    rules: Optional[FloorPlanRules] = None,
    max_probe: int = 200,
    probe_inward: bool = False,
) -> WallThicknessSummary:
    """
    Measure wall thickness behind every edge of a polygon.

    Each edge of at least 2 px is probed at 7 evenly spaced points, away
    from the vertex centroid (room polygons) or toward it
    (probe_inward=True, for envelope polygons). Samples outside the
    rules' thickness bounds are discarded; an edge needs 2 valid samples.

    Args:
        buffer: Source image
        polygon: Polygon vertices in pixel space
        pixels_per_unit: Pixel scale used to convert the rules' bounds
        rules: Thickness bounds; FloorPlanRules defaults when omitted
        max_probe: Hard cap on probe length in pixels
        probe_inward: Probe toward the centroid instead of away from it

    Returns:
        WallThicknessSummary; empty when no edge produced a measurement
    """
    n = len(polygon)
    if n < 3:
        return WallThicknessSummary.empty()

    rules = rules or FloorPlanRules()
    centroid = vertex_centroid(polygon)

    probe_limit = min(
        max_probe,
        round_half_up((rules.max_wall_thickness + PROBE_MARGIN_UNITS) * pixels_per_unit),
    )
    min_px = max(MIN_SAMPLE_PX, round_half_up(rules.min_wall_thickness * pixels_per_unit))
    max_px = round_half_up(rules.max_wall_thickness * pixels_per_unit)

    edges = []
    for i in range(n):
        a, b = polygon[i], polygon[(i + 1) % n]
        dx, dy = b.x - a.x, b.y - a.y
        length = math.hypot(dx, dy)
        if length < 2:
            continue

        tx, ty = dx / length, dy / length
        perp_x, perp_y = -ty, tx
        to_centroid = perp_x * (centroid.x - (a.x + b.x) / 2) + perp_y * (centroid.y - (a.y + b.y) / 2)
        if (probe_inward and to_centroid < 0) or (not probe_inward and to_centroid > 0):
            perp_x, perp_y = -perp_x, -perp_y

        raw = []
        for si in range(1, SAMPLES_PER_EDGE + 1):
            frac = si / (SAMPLES_PER_EDGE + 1)
            thickness = probe_wall_thickness(
                buffer,
                a.x + tx * length * frac,
                a.y + ty * length * frac,
                perp_x,
                perp_y,
                probe_limit,
            )
            if thickness >= MIN_SAMPLE_PX:
                raw.append(thickness)

        if len(raw) < MIN_VALID_SAMPLES:
            continue

        valid = [t for t in raw if min_px <= t <= max_px]
        if len(valid) < MIN_VALID_SAMPLES:
            continue

        thickness_px = median(valid)
        edges.append(EdgeThickness(i, thickness_px, thickness_px / pixels_per_unit))

    if not edges:
        logger.debug("No edge produced a valid wall thickness")
        return WallThicknessSummary.empty()

    median_px = median([e.thickness_px for e in edges])
    logger.debug(f"Wall thickness: {len(edges)}/{n} edges measured, median {median_px:.1f} px")
    return WallThicknessSummary(edges, median_px, median_px / pixels_per_unit)
