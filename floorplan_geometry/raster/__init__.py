"""
Raster primitives: buffers, wall masks, morphology, components and region growing.
"""

from .models import RasterBuffer
from .mask_builders import (
    PixelClass,
    WallRange,
    auto_detect_wall_range,
    classify_pixel,
    gray_fill_mask,
    threshold_mask,
)
from .morphology import (
    dilate,
    dilate_rect,
    erode,
    morphological_close,
    morphological_open,
    morphological_open_rect,
)
from .components import filter_small_components
from .region_growing import FloodFillResult, fill_interior_holes, flood_fill, flood_fill_from_border

__all__ = [
    "FloodFillResult",
    "PixelClass",
    "RasterBuffer",
    "WallRange",
    "auto_detect_wall_range",
    "classify_pixel",
    "dilate",
    "dilate_rect",
    "erode",
    "fill_interior_holes",
    "filter_small_components",
    "flood_fill",
    "flood_fill_from_border",
    "gray_fill_mask",
    "morphological_close",
    "morphological_open",
    "morphological_open_rect",
    "threshold_mask",
]
