"""
Floor plan geometry extraction.

Turns a raster floor plan into room outlines, wall thickness, door gaps,
the building envelope and structural spanning walls using local pixel
analysis only.
"""

from .config.detection_config import DetectionConfig, FloorPlanRules
from .detection.envelope_detector import EnvelopeDetector, detect_envelope
from .detection.models import DetectionResult, EnvelopeResult
from .detection.room_detector import RoomDetector, detect_room_at_pixel
from .geometry import Point
from .raster.models import RasterBuffer
from .walls.spanning import detect_spanning_walls

__version__ = "1.0.0"

__all__ = [
    "DetectionConfig",
    "DetectionResult",
    "EnvelopeDetector",
    "EnvelopeResult",
    "FloorPlanRules",
    "Point",
    "RasterBuffer",
    "RoomDetector",
    "detect_envelope",
    "detect_room_at_pixel",
    "detect_spanning_walls",
]
