"""
Contour extraction, simplification, angle snapping and polygon cleanup.
"""

from .tracing import trace_contour
from .simplify import douglas_peucker, snap_polygon_edges
from .cleanup import remove_micro_bumps, remove_stacked_walls

__all__ = [
    "douglas_peucker",
    "remove_micro_bumps",
    "remove_stacked_walls",
    "snap_polygon_edges",
    "trace_contour",
]
