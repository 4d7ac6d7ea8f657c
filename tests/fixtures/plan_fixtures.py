"""
Programmatic synthetic floor plan generation for geometry tests.

All builders return (H, W, 4) uint8 RGBA arrays with a white background.
"""

import numpy as np

from floorplan_geometry.raster.models import RasterBuffer

BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)
GRAY_FILL = (160, 160, 160, 255)


def blank(width: int, height: int, color=WHITE) -> np.ndarray:
    """White (or solid color) RGBA canvas."""
    image = np.zeros((height, width, 4), dtype=np.uint8)
    image[:, :] = color
    return image


def draw_ring(image: np.ndarray, x0: int, y0: int, x1: int, y1: int, thickness: int, color=BLACK) -> np.ndarray:
    """
    Draw a rectangular wall ring with outer corners (x0, y0)-(x1, y1) inclusive.
    """
    t = thickness
    image[y0:y0 + t, x0:x1 + 1] = color
    image[y1 - t + 1:y1 + 1, x0:x1 + 1] = color
    image[y0:y1 + 1, x0:x0 + t] = color
    image[y0:y1 + 1, x1 - t + 1:x1 + 1] = color
    return image


def create_room_with_door(width: int = 80, height: int = 80) -> RasterBuffer:
    """
    80x80 plan with a 3 px black wall ring between (5,5) and (75,75)
    and a 5 px gap at x in [37, 41] on the top wall.
    """
    image = blank(width, height)
    draw_ring(image, 5, 5, 75, 75, 3)
    image[5:8, 37:42] = WHITE
    return RasterBuffer.from_rgba(image)


def create_closed_room(size: int = 60, inset: int = 10, thickness: int = 3) -> RasterBuffer:
    """Square black ring without openings."""
    image = blank(size, size)
    draw_ring(image, inset, inset, size - inset - 1, size - inset - 1, thickness)
    return RasterBuffer.from_rgba(image)


def create_gray_wall_plan() -> RasterBuffer:
    """
    120x120 plan with a 10 px gray-filled wall ring (black edge lines
    on both faces) between (10,10) and (109,109).
    """
    image = blank(120, 120)
    draw_ring(image, 10, 10, 109, 109, 10, GRAY_FILL)
    draw_ring(image, 10, 10, 109, 109, 1, BLACK)
    draw_ring(image, 19, 19, 100, 100, 1, BLACK)
    return RasterBuffer.from_rgba(image)


def create_building(
    size: int = 200,
    start: int = 40,
    end: int = 160,
    thickness: int = 4,
) -> RasterBuffer:
    """Single building outline drawn as a black ring."""
    image = blank(size, size)
    draw_ring(image, start, start, end, end, thickness)
    return RasterBuffer.from_rgba(image)


def create_spanning_wall_plan():
    """
    300x300 building (rows/cols 20..279) with 24 px black outer walls and
    one full-width horizontal interior wall on rows 140..163.

    Returns:
        Tuple of (buffer, wall_mask, building_mask)
    """
    image = blank(300, 300)
    draw_ring(image, 20, 20, 279, 279, 24)
    image[140:164, 20:280] = BLACK
    buffer = RasterBuffer.from_rgba(image)

    wall_mask = (image[:, :, 0] == 0).astype(np.uint8)
    building_mask = np.zeros((300, 300), dtype=np.uint8)
    building_mask[20:280, 20:280] = 1
    return buffer, wall_mask, building_mask


def filled_rect_mask(height: int, width: int, x0: int, y0: int, x1: int, y1: int) -> np.ndarray:
    """0/1 mask with an inclusive filled rectangle."""
    mask = np.zeros((height, width), dtype=np.uint8)
    mask[y0:y1 + 1, x0:x1 + 1] = 1
    return mask
