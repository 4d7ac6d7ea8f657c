"""
Moore-neighbor boundary tracing with Jacob's stopping criterion.
"""

import logging
from typing import List

import numpy as np

from ..geometry import Point

logger = logging.getLogger(__name__)

# Clockwise in image coordinates (y down), starting east
MOORE_OFFSETS = [(1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1)]


def _sign(v: int) -> int:
    return (v > 0) - (v < 0)


def trace_contour(mask: np.ndarray) -> List[Point]:
    """
    Trace the outer boundary of the first foreground region.

    Tracing starts at the topmost-leftmost set pixel and walks clockwise.
    It stops when the (pixel, backtrack) pair of the start repeats, or
    after width * height + 4 steps.

    Args:
        mask: uint8 mask with the region set to 1

    Returns:
        Ordered boundary pixels; empty if the mask has no foreground
    """
    height, width = mask.shape
    flat = np.flatnonzero(mask)
    if flat.size == 0:
        return []

    start_y, start_x = divmod(int(flat[0]), width)
    # Pixel to the west is background (or outside) by scan order
    if start_x > 0:
        back_x, back_y = start_x - 1, start_y
    else:
        back_x, back_y = start_x, start_y - 1

    def is_set(x: int, y: int) -> bool:
        return 0 <= x < width and 0 <= y < height and mask[y, x] != 0

    contour: List[Point] = []
    px, py = start_x, start_y
    bx, by = back_x, back_y
    max_steps = width * height + 4

    # Start backtrack outside the image: stop on the start pixel alone
    back_inside = 0 <= back_x < width and 0 <= back_y < height

    for step in range(max_steps):
        if step > 0 and px == start_x and py == start_y:
            if not back_inside or (bx == back_x and by == back_y):
                break
        contour.append(Point(px, py))

        offset = (_sign(bx - px), _sign(by - py))
        first_dir = MOORE_OFFSETS.index(offset) if offset in MOORE_OFFSETS else 4

        next_pixel = None
        new_bx, new_by = bx, by
        for i in range(8):
            dx, dy = MOORE_OFFSETS[(first_dir + i) % 8]
            nx, ny = px + dx, py + dy
            if is_set(nx, ny):
                next_pixel = (nx, ny)
                break
            new_bx, new_by = nx, ny

        if next_pixel is None:
            break
        bx, by = new_bx, new_by
        px, py = next_pixel

    logger.debug(f"Traced contour of {len(contour)} points")
    return contour
