"""
Wall analysis: thickness probing, door gaps and spanning walls.
"""

from .models import (
    BandRejection,
    DoorGap,
    EdgeThickness,
    Orientation,
    SpanningWall,
    WallThicknessSummary,
)

__all__ = [
    "BandRejection",
    "DoorGap",
    "EdgeThickness",
    "Orientation",
    "SpanningWall",
    "WallThicknessSummary",
]
