"""
Building envelope detection.

Builds a whole-image wall mask, closes it with a radius large enough to
seal the widest exterior opening, and takes the building as everything
not reachable from the image border.
"""

import logging
from typing import List, Optional, Tuple

import numpy as np

from ..config.detection_config import DetectionConfig
from ..raster.components import filter_small_components
from ..raster.mask_builders import auto_detect_wall_range, gray_fill_mask, threshold_mask
from ..raster.models import RasterBuffer
from ..raster.morphology import morphological_close, morphological_open
from ..raster.region_growing import fill_interior_holes, flood_fill_from_border
from ..walls.spanning import detect_spanning_walls
from ..walls.thickness import detect_wall_thickness
from .models import Attempt, EnvelopeResult
from .room_detector import polygon_from_fill

logger = logging.getLogger(__name__)

BoundingBox = Tuple[int, int, int, int]


class EnvelopeDetector:
    """
    Detects the outer boundary of the building on a floor plan.

    Example:
        >>> detector = EnvelopeDetector()
        >>> envelope = detector.detect(buffer, pixels_per_unit=0.5, detect_spanning=True)
        >>> if envelope:
        ...     print(len(envelope.polygon), len(envelope.spanning_walls))
    """

    def __init__(self, config: Optional[DetectionConfig] = None):
        """
        Initialize the envelope detector.

        Args:
            config: Detection configuration. If None, uses defaults.
        """
        self.config = config or DetectionConfig.default()

    def build_wall_mask(self, buffer: RasterBuffer, pixels_per_unit: float) -> Attempt[np.ndarray]:
        """
        Whole-image wall mask with small components removed.

        Uses the auto-detected gray range (plus noise open) when present,
        otherwise the first threshold-sweep mask whose wall share is
        plausible.
        """
        room = self.config.room
        envelope = self.config.envelope
        min_area = room.min_component_area_px(pixels_per_unit)
        total = buffer.width * buffer.height

        wall_range = auto_detect_wall_range(buffer)
        if wall_range is not None:
            mask = filter_small_components(gray_fill_mask(buffer, wall_range.low, wall_range.high), min_area)
            open_radius = room.open_radius_px(pixels_per_unit)
            if open_radius > 0:
                mask = morphological_open(mask, open_radius)
            return Attempt.success(mask, "gray")

        for threshold in room.threshold_sweep:
            candidate = threshold_mask(buffer, threshold)
            count = int(np.count_nonzero(candidate))
            if total * envelope.min_wall_fraction < count < total * envelope.max_wall_fraction:
                return Attempt.success(filter_small_components(candidate, min_area), f"threshold-{threshold}")
            logger.debug(f"threshold-{threshold}: wall share {count / total:.4f} out of range")

        return Attempt.exhausted("no_plausible_wall_mask")

    def detect(
        self,
        buffer: RasterBuffer,
        pixels_per_unit: float = 1.0,
        envelope_bbox: Optional[BoundingBox] = None,
        detect_spanning: bool = False,
    ) -> Optional[EnvelopeResult]:
        """
        Detect the building envelope.

        Args:
            buffer: Floor plan image
            pixels_per_unit: Pixel scale
            envelope_bbox: Rough envelope from an earlier pass; when given a
                stricter open removes annotation debris before closing
            detect_spanning: Also run spanning-wall detection on the result

        Returns:
            EnvelopeResult, or None when no plausible building was found

        Raises:
            ValueError: If pixels_per_unit is not positive
        """
        if pixels_per_unit <= 0:
            raise ValueError(f"pixels_per_unit must be > 0, got {pixels_per_unit}")

        settings = self.config.envelope
        rules = self.config.rules

        attempt = self.build_wall_mask(buffer, pixels_per_unit)
        wall_mask = attempt.unwrap_or_none()
        if wall_mask is None:
            logger.debug(f"Envelope: {attempt.reason}")
            return None

        if envelope_bbox is not None:
            strict_radius = settings.strict_open_radius_px(pixels_per_unit)
            wall_mask = morphological_open(wall_mask, strict_radius)
            logger.debug(f"Strict open r={strict_radius}: {int(wall_mask.sum())} wall px")

        close_radius = settings.close_radius_px(pixels_per_unit)
        closed = morphological_close(wall_mask, close_radius)
        exterior = flood_fill_from_border(closed)
        building = (exterior == 0).astype(np.uint8)
        fill_interior_holes(building)

        total = buffer.width * buffer.height
        building_area = int(building.sum())
        logger.debug(
            f"Envelope via {attempt.label}: close r={close_radius}, "
            f"building {building_area}/{total} px"
        )
        if building_area < total * settings.min_building_fraction or building_area > total * settings.max_building_fraction:
            return None

        polygon = polygon_from_fill(
            building,
            self.config.room.simplify_epsilon_px(pixels_per_unit),
            rules.angle_tolerance_deg,
            rules.standard_angles_deg,
        )
        if polygon is None:
            return None

        thicknesses = detect_wall_thickness(
            buffer, polygon, pixels_per_unit, rules, probe_inward=True
        )

        spanning: List = []
        if detect_spanning:
            spanning = detect_spanning_walls(
                buffer,
                wall_mask,
                building,
                pixels_per_unit,
                settings=self.config.spanning,
                rules=rules,
            )

        logger.info(
            f"Envelope: {len(polygon)} vertices, building {building_area / total:.1%} of image"
        )
        return EnvelopeResult(
            polygon=polygon,
            wall_thicknesses=thicknesses,
            wall_mask=wall_mask,
            building_mask=building,
            spanning_walls=spanning,
            pixels_per_unit=pixels_per_unit,
        )


def detect_envelope(
    buffer: RasterBuffer,
    pixels_per_unit: float = 1.0,
    envelope_bbox: Optional[BoundingBox] = None,
    detect_spanning: bool = False,
    config: Optional[DetectionConfig] = None,
) -> Optional[EnvelopeResult]:
    """Convenience wrapper around EnvelopeDetector.detect."""
    return EnvelopeDetector(config).detect(buffer, pixels_per_unit, envelope_bbox, detect_spanning)
