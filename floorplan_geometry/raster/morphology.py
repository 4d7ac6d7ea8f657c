"""
Binary morphology on 0/1 uint8 masks.

Dilation is a separable sliding-window "any set" filter built on prefix
sums, so each pass costs O(pixels) whatever the radius. Pixels outside
the image count as open for dilation, which makes erosion (computed as
the complement of a dilated complement) treat them as wall.
"""

import numpy as np


def _window_any(mask: np.ndarray, radius: int, axis: int) -> np.ndarray:
    """1 where any pixel within +-radius along axis is set."""
    if radius <= 0:
        return mask.astype(np.uint8, copy=True)

    n = mask.shape[axis]
    counts = np.cumsum(mask, axis=axis, dtype=np.int32)
    pad_shape = list(mask.shape)
    pad_shape[axis] = 1
    counts = np.concatenate([np.zeros(pad_shape, dtype=np.int32), counts], axis=axis)

    idx = np.arange(n)
    hi = np.minimum(idx + radius + 1, n)
    lo = np.maximum(idx - radius, 0)
    sums = np.take(counts, hi, axis=axis) - np.take(counts, lo, axis=axis)
    return (sums > 0).astype(np.uint8)


def negate(mask: np.ndarray) -> np.ndarray:
    return (mask == 0).astype(np.uint8)


def dilate_rect(mask: np.ndarray, radius_x: int, radius_y: int) -> np.ndarray:
    """Dilate with a (2*radius_x+1) x (2*radius_y+1) box."""
    horizontal = _window_any(mask, radius_x, axis=1)
    return _window_any(horizontal, radius_y, axis=0)


def erode_rect(mask: np.ndarray, radius_x: int, radius_y: int) -> np.ndarray:
    return negate(dilate_rect(negate(mask), radius_x, radius_y))


def dilate(mask: np.ndarray, radius: int) -> np.ndarray:
    """Dilate with a square (2r+1) box."""
    return dilate_rect(mask, radius, radius)


def erode(mask: np.ndarray, radius: int) -> np.ndarray:
    return erode_rect(mask, radius, radius)


def morphological_open(mask: np.ndarray, radius: int) -> np.ndarray:
    """Erode then dilate: removes features thinner than 2r+1."""
    return dilate(erode(mask, radius), radius)


def morphological_close(mask: np.ndarray, radius: int) -> np.ndarray:
    """Dilate then erode: seals gaps up to about 2r pixels wide."""
    return erode(dilate(mask, radius), radius)


def morphological_open_rect(mask: np.ndarray, radius_x: int, radius_y: int) -> np.ndarray:
    """
    Open with a rectangular box.

    A long radius on one axis and a short one on the other keeps only
    features that are long in that axis (e.g. horizontal wall runs).
    """
    return dilate_rect(erode_rect(mask, radius_x, radius_y), radius_x, radius_y)


def morphological_close_rect(mask: np.ndarray, radius_x: int, radius_y: int) -> np.ndarray:
    return erode_rect(dilate_rect(mask, radius_x, radius_y), radius_x, radius_y)
