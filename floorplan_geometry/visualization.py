"""
Debug overlays for detection results, plus image encode/decode helpers.
"""

import base64
import io
from typing import Optional

import cv2
import numpy as np
from PIL import Image

from .detection.models import DetectionResult, EnvelopeResult
from .raster.models import RasterBuffer
from .walls.models import Orientation

ROOM_COLOR = (0, 200, 0)         # Green
ENVELOPE_COLOR = (255, 128, 0)   # Blue-ish
DOOR_COLOR = (0, 0, 255)         # Red
SPANNING_COLORS = {
    Orientation.HORIZONTAL: (255, 0, 255),  # Magenta
    Orientation.VERTICAL: (0, 255, 255),    # Yellow
}


def _polygon_array(polygon) -> np.ndarray:
    return np.array([[int(round(p.x)), int(round(p.y))] for p in polygon], dtype=np.int32)


def _fill_translucent(vis: np.ndarray, pts: np.ndarray, color, alpha: float) -> np.ndarray:
    overlay = vis.copy()
    cv2.fillPoly(overlay, [pts], color)
    return cv2.addWeighted(overlay, alpha, vis, 1 - alpha, 0)


def draw_detection_overlay(
    buffer: RasterBuffer,
    result: DetectionResult,
    seed: Optional[tuple] = None,
    alpha: float = 0.25,
) -> np.ndarray:
    """
    Draw a detected room on top of the floor plan.

    Args:
        buffer: Source image
        result: Room detection result
        seed: Optional (x, y) seed pixel to mark
        alpha: Transparency of the room fill

    Returns:
        BGR image ready for cv2.imwrite
    """
    vis = buffer.to_bgr()
    pts = _polygon_array(result.polygon)

    vis = _fill_translucent(vis, pts, ROOM_COLOR, alpha)
    cv2.polylines(vis, [pts], True, ROOM_COLOR, 2)
    for x, y in pts:
        cv2.circle(vis, (int(x), int(y)), 3, ROOM_COLOR, -1)

    for gap in result.door_gaps:
        center = (int(gap.midpoint.x), int(gap.midpoint.y))
        radius = max(3, int(max(gap.span) / 2))
        cv2.circle(vis, center, radius, DOOR_COLOR, 2)

    if seed is not None:
        cv2.drawMarker(vis, (int(seed[0]), int(seed[1])), DOOR_COLOR, cv2.MARKER_CROSS, 10, 2)

    thickness = result.wall_thicknesses
    if not thickness.is_empty and len(pts) > 0:
        x, y = pts[0]
        cv2.putText(
            vis,
            f"wall {thickness.median_units:.1f}",
            (int(x), max(12, int(y) - 5)),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.4,
            ROOM_COLOR,
            1,
        )
    return vis


def draw_envelope_overlay(buffer: RasterBuffer, result: EnvelopeResult, alpha: float = 0.15) -> np.ndarray:
    """
    Draw a building envelope and its spanning walls.

    Returns:
        BGR image ready for cv2.imwrite
    """
    vis = buffer.to_bgr()
    pts = _polygon_array(result.polygon)

    vis = _fill_translucent(vis, pts, ENVELOPE_COLOR, alpha)
    cv2.polylines(vis, [pts], True, ENVELOPE_COLOR, 2)

    for wall in result.spanning_walls:
        color = SPANNING_COLORS[wall.orientation]
        start = (int(round(wall.start.x)), int(round(wall.start.y)))
        end = (int(round(wall.end.x)), int(round(wall.end.y)))
        cv2.line(vis, start, end, color, max(1, int(wall.thickness_px)))
        cv2.putText(
            vis,
            f"{wall.thickness_units(result.pixels_per_unit):.0f}",
            start,
            cv2.FONT_HERSHEY_SIMPLEX,
            0.4,
            color,
            1,
        )
    return vis


def save_overlay(image: np.ndarray, output_path: str) -> str:
    """Write an overlay to disk and return its path."""
    cv2.imwrite(output_path, image)
    return output_path


def image_from_base64(base64_string: str) -> Optional[RasterBuffer]:
    """
    Decode a base64 image (optionally a data URL) to a RasterBuffer.

    Returns:
        RasterBuffer, or None if the payload is not a decodable image
    """
    if "," in base64_string:
        base64_string = base64_string.split(",")[1]
    try:
        img_bytes = base64.b64decode(base64_string)
    except ValueError:
        return None

    img_array = np.frombuffer(img_bytes, dtype=np.uint8)
    if img_array.size == 0:
        return None
    image = cv2.imdecode(img_array, cv2.IMREAD_COLOR)
    if image is None:
        return None
    return RasterBuffer.from_bgr(image)


def numpy_to_base64(image: np.ndarray, format: str = "png") -> str:
    """Encode a BGR image to a base64 string"""
    if len(image.shape) == 3:
        image_rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    else:
        image_rgb = image

    pil_image = Image.fromarray(image_rgb)
    out = io.BytesIO()
    pil_image.save(out, format=format.upper())
    return base64.b64encode(out.getvalue()).decode("utf-8")
