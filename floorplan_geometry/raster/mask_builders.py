"""
Pixel classification and binary wall-mask builders.

Every mask returned here is a fresh (H, W) uint8 array of 0/1 values
where 1 marks a pixel believed to be wall.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

import numpy as np

from .models import RasterBuffer, LUMA_R, LUMA_G, LUMA_B

logger = logging.getLogger(__name__)

# Saturated dark pixels count as colored wall fill
COLORED_MIN_GRAY = 10
COLORED_MIN_SATURATION = 0.3
COLORED_MIN_CHANNEL = 40


class PixelClass(str, Enum):
    """Three-state classification used by the thickness prober."""
    EDGE = "edge"
    FILL = "fill"
    BACKGROUND = "background"


@dataclass(frozen=True)
class WallRange:
    """Inclusive luminance window treated as gray wall fill."""
    low: int
    high: int

    def __post_init__(self):
        if self.low > self.high:
            raise ValueError(f"low must be <= high, got {self.low} > {self.high}")

    def to_dict(self) -> Dict[str, int]:
        return {"low": int(self.low), "high": int(self.high)}


def threshold_mask(buffer: RasterBuffer, threshold: float) -> np.ndarray:
    """
    Mark pixels darker than a luminance threshold as wall.

    The comparison runs on the exact integer luminance sum, so a pixel
    whose luminance equals the threshold is open.

    Args:
        buffer: Source image
        threshold: Luminance cutoff (0-255)

    Returns:
        uint8 mask, 1 where luminance < threshold
    """
    weighted = buffer.weighted_luminance()
    return (weighted < threshold * 1000).astype(np.uint8)


def gray_fill_mask(buffer: RasterBuffer, low: float, high: float) -> np.ndarray:
    """
    Mark pixels whose luminance falls in [low, high] as wall.

    Saturated dark pixels below the window (colored wall fills) are also
    marked, provided they are not near-black noise.
    """
    gray = buffer.luminance()
    in_range = (gray >= low) & (gray <= high)
    colored = (
        (gray >= COLORED_MIN_GRAY)
        & (gray < low)
        & (buffer.saturation() > COLORED_MIN_SATURATION)
        & (buffer.channel_max() > COLORED_MIN_CHANNEL)
    )
    return (in_range | colored).astype(np.uint8)


def luminance_histogram(buffer: RasterBuffer) -> np.ndarray:
    """256-bin histogram of rounded luminance values."""
    rounded = np.floor(buffer.luminance() + 0.5).astype(np.int64)
    return np.bincount(rounded.ravel(), minlength=256)[:256]


def auto_detect_wall_range(buffer: RasterBuffer) -> Optional[WallRange]:
    """
    Find the luminance window of a gray wall fill from the histogram.

    The white level is the lowest luminance that, together with everything
    brighter, holds the top 20% of pixels. The tallest histogram peak in
    [10, white_level - 20) is taken as the wall fill color.

    Returns:
        WallRange centered on the peak (+-80, clamped), or None if the
        peak holds less than 0.3% of the pixels
    """
    hist = luminance_histogram(buffer)
    total = int(hist.sum())

    white_level = 255
    cumulative = 0
    for g in range(255, -1, -1):
        cumulative += int(hist[g])
        if cumulative > total * 0.2:
            white_level = g + 1
            break

    search_end = max(11, white_level - 20)
    window = hist[10:search_end]
    if window.size == 0 or int(window.max()) == 0:
        logger.debug("No gray fill peak found")
        return None

    peak = 10 + int(np.argmax(window))
    peak_count = int(hist[peak])
    if peak_count < total * 0.003:
        logger.debug(f"Gray peak at {peak} too small ({peak_count}/{total} px)")
        return None

    wall_range = WallRange(low=max(5, peak - 80), high=min(white_level - 15, peak + 80))
    logger.debug(f"Auto-detected wall range {wall_range.low}-{wall_range.high} (peak {peak})")
    return wall_range


def pixel_saturation(r: int, g: int, b: int) -> float:
    cmax = max(r, g, b)
    if cmax == 0:
        return 0.0
    return (cmax - min(r, g, b)) / cmax


def classify_pixel(r: int, g: int, b: int) -> PixelClass:
    """
    Classify one pixel as wall edge line, wall fill or background.

    Edge lines are dark and near-neutral; fill may be colored.
    """
    gray = (LUMA_R * r + LUMA_G * g + LUMA_B * b) / 1000.0
    sat = pixel_saturation(r, g, b)

    if gray < 80:
        return PixelClass.EDGE
    if gray < 120:
        return PixelClass.EDGE if sat < 0.3 else PixelClass.FILL
    if gray < 200:
        max_sat = 0.65 - (gray - 120) / 80 * 0.30
        return PixelClass.FILL if sat <= max_sat else PixelClass.BACKGROUND
    if gray < 220 and sat < 0.2:
        return PixelClass.FILL
    return PixelClass.BACKGROUND


def colored_wall_mask(buffer: RasterBuffer, max_gray: float = 200) -> np.ndarray:
    """
    Mark saturated, non-black pixels darker than max_gray.

    Used to find colored annotations and colored wall fills.
    """
    gray = buffer.luminance()
    mask = (
        (gray >= COLORED_MIN_GRAY)
        & (gray < max_gray)
        & (buffer.saturation() > COLORED_MIN_SATURATION)
        & (buffer.channel_max() > COLORED_MIN_CHANNEL)
    )
    return mask.astype(np.uint8)
