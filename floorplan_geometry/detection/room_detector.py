"""
Single-room detection from a seed pixel.

Candidate wall masks are tried in priority order. For each one the mask
is cleaned, then closed with increasing radii until a budgeted flood fill
from the seed stays inside the room. The fill is then turned into a
snapped polygon with wall thickness and door gap metadata.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

import numpy as np

from ..config.detection_config import DetectionConfig
from ..contour.simplify import douglas_peucker, snap_polygon_edges
from ..contour.tracing import trace_contour
from ..geometry import Point, round_half_up
from ..raster.components import filter_small_components
from ..raster.mask_builders import auto_detect_wall_range, gray_fill_mask, threshold_mask
from ..raster.models import RasterBuffer
from ..raster.morphology import morphological_close, morphological_open
from ..raster.region_growing import FloodFillResult, fill_interior_holes, flood_fill
from ..walls.openings import detect_door_gaps_along_edges
from ..walls.thickness import detect_wall_thickness
from .models import Attempt, DetectionResult

logger = logging.getLogger(__name__)


@dataclass
class MaskCandidate:
    """
    A lazily built wall mask to try.

    Attributes:
        label: Name reported in the result ("gray", "threshold-180", ...)
        build: Produces the raw wall mask
        apply_open: Whether to run the noise-removal open before closing
    """
    label: str
    build: Callable[[], np.ndarray]
    apply_open: bool = False


@dataclass
class RoomFill:
    """Successful fill: the cleaned mask it came from and the radius used."""
    processed_mask: np.ndarray
    fill: FloodFillResult
    close_radius_px: int


def polygon_from_fill(
    filled: np.ndarray,
    epsilon_px: float,
    tolerance_deg: float = 5.0,
    standard_angles_deg: Optional[Sequence[float]] = None,
) -> Optional[List[Point]]:
    """
    Trace, simplify and angle-snap a filled region.

    Returns:
        Polygon with at least 3 vertices, or None
    """
    contour = trace_contour(filled)
    if len(contour) < 3:
        return None
    simplified = douglas_peucker(contour, epsilon_px)
    if len(simplified) < 3:
        return None
    polygon = snap_polygon_edges(simplified, tolerance_deg, standard_angles_deg)
    if len(polygon) < 3:
        return None
    logger.debug(f"Polygon: {len(contour)} contour pts -> {len(simplified)} -> {len(polygon)} vertices")
    return polygon


class RoomDetector:
    """
    Detects the room containing a seed pixel.

    Example:
        >>> detector = RoomDetector()
        >>> result = detector.detect(buffer, 120, 80, pixels_per_unit=0.5)
        >>> if result:
        ...     print(len(result.polygon), result.wall_thicknesses.median_units)
    """

    def __init__(self, config: Optional[DetectionConfig] = None):
        """
        Initialize the room detector.

        Args:
            config: Detection configuration. If None, uses defaults.
        """
        self.config = config or DetectionConfig.default()

    def candidate_groups(self, buffer: RasterBuffer) -> List[List[MaskCandidate]]:
        """
        Candidate masks in priority order.

        The first group is the auto-detected gray fill range (with noise
        open); the second is the fixed threshold sweep (no open). A later
        group is only tried when every earlier group failed.
        """
        groups = []
        wall_range = auto_detect_wall_range(buffer)
        if wall_range is not None:
            groups.append([MaskCandidate(
                "gray",
                lambda: gray_fill_mask(buffer, wall_range.low, wall_range.high),
                apply_open=True,
            )])
        groups.append([
            MaskCandidate(f"threshold-{t}", lambda t=t: threshold_mask(buffer, t))
            for t in self.config.room.threshold_sweep
        ])
        return groups

    def try_mask(
        self,
        candidate: MaskCandidate,
        seed_x: int,
        seed_y: int,
        max_pixels: int,
        pixels_per_unit: float,
    ) -> Attempt[RoomFill]:
        """
        Clean one candidate mask and search for a sealing close radius.

        Radii are tried smallest first; the first radius whose fill is
        non-empty and within budget wins.
        """
        settings = self.config.room
        processed = filter_small_components(
            candidate.build(), settings.min_component_area_px(pixels_per_unit)
        )
        open_radius = settings.open_radius_px(pixels_per_unit)
        if candidate.apply_open and open_radius > 0:
            processed = morphological_open(processed, open_radius)

        # Closing only adds wall, so a seed on wall can never fill
        if processed[seed_y, seed_x]:
            return Attempt.rejected("seed_on_wall", candidate.label)

        for radius in settings.close_radii_px(pixels_per_unit):
            closed = morphological_close(processed, radius)
            fill = flood_fill(closed, seed_x, seed_y, max_pixels)
            logger.debug(
                f"{candidate.label} r={radius}: {fill.pixel_count} px (budget {max_pixels})"
            )
            if fill.succeeded:
                return Attempt.success(RoomFill(processed, fill, radius), candidate.label)

        return Attempt.exhausted("no_radius_sealed_room", candidate.label)

    def find_room_fill(
        self,
        buffer: RasterBuffer,
        seed_x: int,
        seed_y: int,
        max_pixels: int,
        pixels_per_unit: float,
    ) -> Attempt[RoomFill]:
        """
        Try candidates in priority order and return the first success.

        Returns:
            The successful Attempt, else the last failed one
        """
        last: Attempt[RoomFill] = Attempt.exhausted("no_candidates")
        for group in self.candidate_groups(buffer):
            for candidate in group:
                last = self.try_mask(candidate, seed_x, seed_y, max_pixels, pixels_per_unit)
                if last.ok:
                    return last
        return last

    def detect(
        self,
        buffer: RasterBuffer,
        seed_x: int,
        seed_y: int,
        pixels_per_unit: float = 1.0,
        max_area: Optional[float] = None,
    ) -> Optional[DetectionResult]:
        """
        Detect the room around a seed pixel.

        Args:
            buffer: Floor plan image
            seed_x: Seed column
            seed_y: Seed row
            pixels_per_unit: Pixel scale (e.g. pixels per cm)
            max_area: Largest room area in square units; config default if None

        Returns:
            DetectionResult, or None when no room could be isolated

        Raises:
            ValueError: If pixels_per_unit is not positive
        """
        if pixels_per_unit <= 0:
            raise ValueError(f"pixels_per_unit must be > 0, got {pixels_per_unit}")

        settings = self.config.room
        rules = self.config.rules
        if max_area is None:
            max_area = settings.max_area

        max_pixels = round_half_up(max_area * pixels_per_unit * pixels_per_unit)
        if max_pixels < 1:
            logger.debug(f"Pixel budget {max_pixels} below 1 for max_area={max_area}")
            return None
        if not buffer.contains(seed_x, seed_y):
            logger.debug(f"Seed ({seed_x}, {seed_y}) outside {buffer.width}x{buffer.height} image")
            return None

        attempt = self.find_room_fill(buffer, seed_x, seed_y, max_pixels, pixels_per_unit)
        room = attempt.unwrap_or_none()
        if room is None:
            logger.debug(f"No room at ({seed_x}, {seed_y}): {attempt.label} {attempt.reason}")
            return None

        filled = room.fill.filled
        holes = fill_interior_holes(filled)
        logger.debug(f"Filled {holes} hole pixels")

        polygon = polygon_from_fill(
            filled,
            settings.simplify_epsilon_px(pixels_per_unit),
            rules.angle_tolerance_deg,
            rules.standard_angles_deg,
        )
        if polygon is None:
            return None

        thicknesses = detect_wall_thickness(buffer, polygon, pixels_per_unit, rules)
        door_gaps = detect_door_gaps_along_edges(
            room.processed_mask, polygon, **settings.door_gap_params_px(pixels_per_unit)
        )

        logger.info(
            f"Room at ({seed_x}, {seed_y}): {len(polygon)} vertices, "
            f"{len(door_gaps)} door gaps via {attempt.label} (r={room.close_radius_px})"
        )
        return DetectionResult(
            polygon=polygon,
            door_gaps=door_gaps,
            pixels_per_unit=pixels_per_unit,
            wall_thicknesses=thicknesses,
            method=attempt.label,
            close_radius_px=room.close_radius_px,
        )


def detect_room_at_pixel(
    buffer: RasterBuffer,
    seed_x: int,
    seed_y: int,
    pixels_per_unit: float = 1.0,
    max_area: Optional[float] = None,
    config: Optional[DetectionConfig] = None,
) -> Optional[DetectionResult]:
    """Convenience wrapper around RoomDetector.detect."""
    return RoomDetector(config).detect(buffer, seed_x, seed_y, pixels_per_unit, max_area)
