"""Detection configuration dataclasses."""

from .detection_config import (
    DetectionConfig,
    EnvelopeSettings,
    FloorPlanRules,
    RoomDetectionSettings,
    SpanningWallSettings,
)

__all__ = [
    "DetectionConfig",
    "EnvelopeSettings",
    "FloorPlanRules",
    "RoomDetectionSettings",
    "SpanningWallSettings",
]
