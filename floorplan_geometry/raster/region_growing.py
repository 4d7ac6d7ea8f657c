"""
Region growing: budgeted seed flood fill, border reachability and hole filling.
"""

from collections import deque
from dataclasses import dataclass

import cv2
import numpy as np


@dataclass
class FloodFillResult:
    """
    Outcome of a seeded flood fill.

    Attributes:
        filled: uint8 mask of reached pixels (partial when aborted)
        pixel_count: Number of pixels marked before stopping
        max_pixels: Budget the fill ran under
    """
    filled: np.ndarray
    pixel_count: int
    max_pixels: int

    @property
    def exceeded_budget(self) -> bool:
        return self.pixel_count > self.max_pixels

    @property
    def succeeded(self) -> bool:
        """Non-empty and within budget."""
        return 0 < self.pixel_count <= self.max_pixels


def flood_fill(mask: np.ndarray, seed_x: int, seed_y: int, max_pixels: int) -> FloodFillResult:
    """
    4-connected fill over open (0) pixels starting at the seed.

    Stops as soon as more than max_pixels pixels have been reached, so a
    seed that leaks into the exterior through an unsealed gap costs at
    most the budget.

    Returns:
        FloodFillResult; pixel_count is 0 when the seed is outside the
        mask or on a wall pixel
    """
    height, width = mask.shape
    filled = np.zeros((height, width), dtype=np.uint8)
    if not (0 <= seed_x < width and 0 <= seed_y < height) or mask[seed_y, seed_x]:
        return FloodFillResult(filled, 0, max_pixels)

    walls = mask.astype(np.uint8).tobytes()
    seen = bytearray(width * height)
    start = seed_y * width + seed_x
    seen[start] = 1
    queue = deque([start])
    count = 1

    while queue:
        idx = queue.popleft()
        x = idx % width
        neighbors = []
        if x > 0:
            neighbors.append(idx - 1)
        if x < width - 1:
            neighbors.append(idx + 1)
        if idx >= width:
            neighbors.append(idx - width)
        if idx + width < width * height:
            neighbors.append(idx + width)

        for n in neighbors:
            if seen[n] or walls[n]:
                continue
            seen[n] = 1
            count += 1
            if count > max_pixels:
                return FloodFillResult(_as_mask(seen, height, width), count, max_pixels)
            queue.append(n)

    return FloodFillResult(_as_mask(seen, height, width), count, max_pixels)


def _as_mask(seen: bytearray, height: int, width: int) -> np.ndarray:
    return np.frombuffer(bytes(seen), dtype=np.uint8).reshape(height, width).copy()


def flood_fill_from_border(mask: np.ndarray) -> np.ndarray:
    """
    Mark every open (0) pixel 4-connected to an open border pixel.

    Returns:
        uint8 mask of the exterior region
    """
    open_space = (mask == 0).astype(np.uint8)
    _, labels = cv2.connectedComponents(open_space, connectivity=4)

    border = np.concatenate([labels[0, :], labels[-1, :], labels[:, 0], labels[:, -1]])
    border_labels = np.unique(border)
    border_labels = border_labels[border_labels > 0]
    if border_labels.size == 0:
        return np.zeros_like(open_space)
    return np.isin(labels, border_labels).astype(np.uint8)


def fill_interior_holes(filled: np.ndarray) -> int:
    """
    Fill background pockets fully enclosed by the foreground, in place.

    Returns:
        Number of pixels flipped to foreground
    """
    exterior = flood_fill_from_border(filled)
    holes = (filled == 0) & (exterior == 0)
    filled[holes] = 1
    return int(holes.sum())
