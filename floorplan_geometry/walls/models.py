"""
Data structures for wall measurements, openings and spanning walls.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple

from ..geometry import Point


@dataclass
class EdgeThickness:
    """
    Validated wall thickness measured from one polygon edge.

    Attributes:
        edge_index: Index i of the edge vertices[i] -> vertices[i + 1]
        thickness_px: Median of the in-bounds probe samples
        thickness_units: thickness_px converted with the pixel scale
    """
    edge_index: int
    thickness_px: float
    thickness_units: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "edge_index": int(self.edge_index),
            "thickness_px": round(float(self.thickness_px), 3),
            "thickness_units": round(float(self.thickness_units), 3),
        }


@dataclass
class WallThicknessSummary:
    """Per-edge thickness records plus the median of their values."""
    edges: List[EdgeThickness] = field(default_factory=list)
    median_px: float = 0.0
    median_units: float = 0.0

    @classmethod
    def empty(cls) -> "WallThicknessSummary":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.edges

    def to_dict(self) -> Dict[str, Any]:
        return {
            "edges": [e.to_dict() for e in self.edges],
            "median_px": round(float(self.median_px), 3),
            "median_units": round(float(self.median_units), 3),
        }


@dataclass
class DoorGap:
    """
    A break in a wall line, likely a doorway.

    Attributes:
        midpoint: Center of the opening in pixel space
        span: (width, height) extent of the opening in pixels
    """
    midpoint: Point
    span: Tuple[float, float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "midpoint": self.midpoint.to_dict(),
            "span": {"width": float(self.span[0]), "height": float(self.span[1])},
        }


class Orientation(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass
class SpanningWall:
    """
    A structural wall running across the full building width or height.

    Attributes:
        orientation: Direction the wall runs in
        start: Endpoint at the near building edge
        end: Endpoint at the far building edge
        thickness_px: Thickness from perpendicular probes (band height fallback)
    """
    orientation: Orientation
    start: Point
    end: Point
    thickness_px: float

    def thickness_units(self, pixels_per_unit: float) -> float:
        return self.thickness_px / pixels_per_unit

    @property
    def length_px(self) -> float:
        return abs(self.end.x - self.start.x) + abs(self.end.y - self.start.y)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "orientation": self.orientation.value,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "thickness_px": round(float(self.thickness_px), 3),
        }


@dataclass
class BandRejection:
    """
    Diagnostic record for a candidate band that failed validation.

    Attributes:
        orientation: Scan axis of the band
        band: (first, last) scan line of the band
        reason: Name of the failed check (e.g. "boundary_proximity")
        details: Measured values behind the decision
    """
    orientation: Orientation
    band: Tuple[int, int]
    reason: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "orientation": self.orientation.value,
            "band": {"start": int(self.band[0]), "end": int(self.band[1])},
            "reason": self.reason,
            "details": {k: (float(v) if isinstance(v, (int, float)) else v) for k, v in self.details.items()},
        }
