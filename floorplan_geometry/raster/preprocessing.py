"""
Opt-in, in-place annotation removal ahead of room detection.

This is the only code in the package that writes to a RasterBuffer.
Without envelope data it removes thin colored annotations. With an
envelope (and optionally its spanning walls) it keeps only dark pixels
that look like axis-aligned wall runs or lie on the known envelope
walls, bleaching everything else to white. Either way the image ends up
as contrast-normalized gray.
"""

import logging
import math
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from ..config.detection_config import FloorPlanRules
from ..geometry import Point, round_half_up, vertex_centroid
from .mask_builders import auto_detect_wall_range, colored_wall_mask
from .models import RasterBuffer
from .morphology import morphological_open, morphological_open_rect

logger = logging.getLogger(__name__)

# BT.709 luma weights for the final grayscale conversion
BT709 = (0.2126, 0.7152, 0.0722)
DEFAULT_ENVELOPE_THICKNESS = 30


def _stamp(mask: np.ndarray, xs: np.ndarray, ys: np.ndarray) -> None:
    """Set mask at rounded (x, y) positions that fall inside the image."""
    height, width = mask.shape
    px = np.floor(xs + 0.5).astype(np.int64).ravel()
    py = np.floor(ys + 0.5).astype(np.int64).ravel()
    inside = (px >= 0) & (px < width) & (py >= 0) & (py < height)
    mask[py[inside], px[inside]] = 1


def build_wall_protection_mask(
    shape: Tuple[int, int],
    envelope_polygon: Sequence[Point],
    pixels_per_unit: float = 1.0,
    edge_thicknesses: Optional[Dict[int, float]] = None,
    median_thickness_px: Optional[float] = None,
    spanning_walls: Sequence = (),
) -> np.ndarray:
    """
    Mask of pixels that annotation removal must not touch.

    Each envelope edge protects a band reaching inward (toward the vertex
    centroid) by its wall thickness plus a 2-unit margin. Each spanning
    wall protects half its thickness plus the margin on both sides.

    Args:
        shape: (height, width) of the image
        envelope_polygon: Envelope vertices in pixel space
        pixels_per_unit: Pixel scale
        edge_thicknesses: Measured thickness in px keyed by edge index
        median_thickness_px: Fallback thickness for unmeasured edges
        spanning_walls: SpanningWall records

    Returns:
        uint8 mask, 1 = protected
    """
    mask = np.zeros(shape, dtype=np.uint8)
    n = len(envelope_polygon)
    if n < 3:
        return mask

    margin = math.ceil(2 * pixels_per_unit)
    fallback = median_thickness_px or round_half_up(DEFAULT_ENVELOPE_THICKNESS * pixels_per_unit)
    edge_thicknesses = edge_thicknesses or {}
    centroid = vertex_centroid(envelope_polygon)

    for i in range(n):
        a, b = envelope_polygon[i], envelope_polygon[(i + 1) % n]
        dx, dy = b.x - a.x, b.y - a.y
        length = math.hypot(dx, dy)
        if length < 1:
            continue
        ux, uy = dx / length, dy / length
        to_cx = centroid.x - (a.x + b.x) / 2
        to_cy = centroid.y - (a.y + b.y) / 2
        if (-uy) * to_cx + ux * to_cy >= uy * to_cx + (-ux) * to_cy:
            nx, ny = -uy, ux
        else:
            nx, ny = uy, -ux

        depth = int(edge_thicknesses.get(i) or fallback) + margin
        steps = math.ceil(length)
        t = np.arange(steps + 1)[:, None] / steps
        d = np.arange(depth + 1)[None, :]
        _stamp(mask, a.x + dx * t + nx * d, a.y + dy * t + ny * d)

    for wall in spanning_walls:
        dx, dy = wall.end.x - wall.start.x, wall.end.y - wall.start.y
        length = math.hypot(dx, dy)
        if length < 1:
            continue
        ux, uy = dx / length, dy / length
        half = round_half_up(wall.thickness_px / 2) + margin
        steps = math.ceil(length)
        t = np.arange(steps + 1)[:, None] / steps
        d = np.arange(-half, half + 1)[None, :]
        _stamp(mask, wall.start.x + dx * t - uy * d, wall.start.y + dy * t + ux * d)

    return mask


def _bleach(buffer: RasterBuffer, mask: np.ndarray) -> int:
    buffer.pixels[mask.astype(bool)] = 255
    return int(np.count_nonzero(mask))


def _normalize_gray(buffer: RasterBuffer) -> None:
    """Flatten alpha onto white, convert to BT.709 gray and stretch to 0-255."""
    pixels = buffer.pixels
    rgb = pixels[:, :, :3].astype(np.float64)
    alpha = pixels[:, :, 3:4].astype(np.float64) / 255.0
    flat = rgb * alpha + 255.0 * (1.0 - alpha)
    gray = np.floor(flat @ np.array(BT709) + 0.5)

    g_min, g_max = gray.min(), gray.max()
    if g_max > g_min:
        gray = np.floor(255.0 * (gray - g_min) / (g_max - g_min) + 0.5)

    pixels[:, :, :3] = gray.astype(np.uint8)[:, :, None]
    pixels[:, :, 3] = 255


def preprocess_for_room_detection(
    buffer: RasterBuffer,
    pixels_per_unit: float = 1.0,
    rules: Optional[FloorPlanRules] = None,
    envelope_polygon: Optional[Sequence[Point]] = None,
    envelope_thicknesses=None,
    spanning_walls: Sequence = (),
) -> Optional[Tuple[np.ndarray, np.ndarray]]:
    """
    Remove annotation noise from a floor plan, modifying buffer in place.

    Args:
        buffer: Image to clean (mutated)
        pixels_per_unit: Pixel scale
        rules: Wall thickness bounds; defaults to FloorPlanRules()
        envelope_polygon: Envelope outline from envelope detection
        envelope_thicknesses: WallThicknessSummary of the envelope
        spanning_walls: Spanning walls to protect

    Returns:
        (horizontal, vertical) wall-feature masks when envelope data was
        used, else None
    """
    rules = rules or FloorPlanRules()
    result = None

    if not envelope_polygon or len(envelope_polygon) < 3:
        colored = colored_wall_mask(buffer)
        if colored.any():
            radius = max(2, round_half_up(rules.min_wall_thickness / 3 * pixels_per_unit))
            thick = morphological_open(colored, radius)
            removed = _bleach(buffer, (colored == 1) & (thick == 0))
            logger.debug(f"Removed {removed} thin colored annotation px (open r={radius})")
    else:
        wall_range = auto_detect_wall_range(buffer)
        high = wall_range.high if wall_range is not None else 200
        dark = (buffer.luminance() < high).astype(np.uint8)

        thick_r = max(1, round_half_up(1.5 * pixels_per_unit))
        long_r = max(2, round_half_up(3 * pixels_per_unit))
        h_walls = morphological_open_rect(dark, long_r, thick_r)
        v_walls = morphological_open_rect(dark, thick_r, long_r)
        features = h_walls | v_walls

        colored_dark = dark & (buffer.saturation() > 0.3).astype(np.uint8)
        if colored_dark.any():
            features |= morphological_open_rect(colored_dark, long_r, 1)
            features |= morphological_open_rect(colored_dark, 1, long_r)

        edge_thicknesses = None
        median_px = None
        if envelope_thicknesses is not None:
            edge_thicknesses = {e.edge_index: e.thickness_px for e in envelope_thicknesses.edges}
            median_px = envelope_thicknesses.median_px or None
        protected = build_wall_protection_mask(
            buffer.shape,
            envelope_polygon,
            pixels_per_unit,
            edge_thicknesses,
            median_px,
            spanning_walls,
        )

        noise = (dark == 1) & (features == 0) & (protected == 0)
        removed = _bleach(buffer, noise)
        logger.debug(
            f"Removed {removed} non-wall dark px (thick r={thick_r}, long r={long_r})"
        )
        result = (h_walls, v_walls)

    _normalize_gray(buffer)
    return result
