"""
Result types for room and envelope detection, plus the Attempt record
used internally by the retry logic of both detectors.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

import numpy as np

from ..geometry import Point, polygon_area
from ..walls.models import DoorGap, SpanningWall, WallThicknessSummary

T = TypeVar("T")


class AttemptStatus(str, Enum):
    SUCCESS = "success"
    REJECTED = "rejected"
    EXHAUSTED = "exhausted"


@dataclass
class Attempt(Generic[T]):
    """
    Outcome of trying one candidate (a mask, a radius, ...).

    Attributes:
        status: SUCCESS carries a payload; REJECTED means the candidate was
            unusable up front; EXHAUSTED means every variant was tried
        reason: Short machine-readable explanation for non-success
        payload: Value produced on success
        label: Name of the candidate that produced this attempt
    """
    status: AttemptStatus
    reason: str = ""
    payload: Optional[T] = None
    label: str = ""

    @classmethod
    def success(cls, payload: T, label: str = "") -> "Attempt[T]":
        return cls(AttemptStatus.SUCCESS, payload=payload, label=label)

    @classmethod
    def rejected(cls, reason: str, label: str = "") -> "Attempt[T]":
        return cls(AttemptStatus.REJECTED, reason=reason, label=label)

    @classmethod
    def exhausted(cls, reason: str, label: str = "") -> "Attempt[T]":
        return cls(AttemptStatus.EXHAUSTED, reason=reason, label=label)

    @property
    def ok(self) -> bool:
        return self.status is AttemptStatus.SUCCESS

    def unwrap_or_none(self) -> Optional[T]:
        return self.payload if self.ok else None


def _polygon_to_list(polygon: List[Point]) -> List[Dict[str, float]]:
    return [{"x": round(float(p.x), 3), "y": round(float(p.y), 3)} for p in polygon]


@dataclass
class DetectionResult:
    """
    A room detected from a seed pixel.

    Attributes:
        polygon: Room outline in pixel space (>= 3 vertices)
        door_gaps: Openings found along the outline
        pixels_per_unit: Scale the detection ran at
        wall_thicknesses: Thickness measured behind the outline
        method: Wall mask that produced the room ("gray" or "threshold-<n>")
        close_radius_px: Close radius that sealed the room
    """
    polygon: List[Point]
    door_gaps: List[DoorGap]
    pixels_per_unit: float
    wall_thicknesses: WallThicknessSummary
    method: str = ""
    close_radius_px: int = 0

    @property
    def area_px(self) -> float:
        return polygon_area(self.polygon)

    @property
    def area_units(self) -> float:
        return self.area_px / (self.pixels_per_unit ** 2)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "found": True,
            "polygon": _polygon_to_list(self.polygon),
            "vertex_count": len(self.polygon),
            "door_gaps": [g.to_dict() for g in self.door_gaps],
            "pixels_per_unit": float(self.pixels_per_unit),
            "wall_thicknesses": self.wall_thicknesses.to_dict(),
            "area_units": round(float(self.area_units), 3),
            "method": self.method,
            "close_radius_px": int(self.close_radius_px),
        }


@dataclass
class EnvelopeResult:
    """
    The outer boundary of a building.

    The wall and building masks are kept so a second pass (spanning walls,
    interior rooms) can reuse them.
    """
    polygon: List[Point]
    wall_thicknesses: WallThicknessSummary
    wall_mask: np.ndarray
    building_mask: np.ndarray
    spanning_walls: List[SpanningWall] = field(default_factory=list)
    pixels_per_unit: float = 1.0

    @property
    def building_fraction(self) -> float:
        return float(self.building_mask.mean())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary (masks summarized by pixel count)."""
        return {
            "found": True,
            "polygon": _polygon_to_list(self.polygon),
            "vertex_count": len(self.polygon),
            "wall_thicknesses": self.wall_thicknesses.to_dict(),
            "spanning_walls": [
                dict(w.to_dict(), thickness_units=round(w.thickness_units(self.pixels_per_unit), 3))
                for w in self.spanning_walls
            ],
            "pixels_per_unit": float(self.pixels_per_unit),
            "wall_pixels": int(np.count_nonzero(self.wall_mask)),
            "building_pixels": int(np.count_nonzero(self.building_mask)),
        }
