"""
Connected-component labeling and small-component pruning.
"""

import logging
from typing import Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def label_components(mask: np.ndarray, connectivity: int = 4) -> Tuple[np.ndarray, np.ndarray]:
    """
    Label connected foreground components.

    Args:
        mask: uint8 0/1 mask
        connectivity: 4 or 8

    Returns:
        Tuple of (labels int32 grid with 0 = background, per-label pixel areas)
    """
    _, labels, stats, _ = cv2.connectedComponentsWithStats(
        mask.astype(np.uint8), connectivity=connectivity
    )
    return labels, stats[:, cv2.CC_STAT_AREA]


def filter_small_components(mask: np.ndarray, min_area: int) -> np.ndarray:
    """
    Zero every 4-connected wall component smaller than min_area pixels.

    Removes text glyphs and other annotation specks while keeping wall
    segments. Returns a new mask.
    """
    result = mask.astype(np.uint8, copy=True)
    if min_area <= 1 or not result.any():
        return result

    labels, areas = label_components(result, connectivity=4)
    small = areas < min_area
    small[0] = False
    removed = small[labels]
    result[removed] = 0

    logger.debug(
        f"Component filter: removed {int(small.sum())} components "
        f"({int(removed.sum())} px) below {min_area} px"
    )
    return result
