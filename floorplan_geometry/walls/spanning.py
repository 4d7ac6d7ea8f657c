"""
Structural spanning-wall detection.

A spanning wall shows up as a band of consecutive scan lines (rows for
horizontal walls, columns for vertical ones) in which wall pixels cover
most of the building width. Candidate bands then pass through a chain of
named checks; the first failing check rejects the band and, when the
caller passes a list, records a BandRejection for debugging.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import numpy as np

from ..config.detection_config import FloorPlanRules, SpanningWallSettings
from ..geometry import Point, round_half_up
from ..raster.models import RasterBuffer, validate_mask
from .models import BandRejection, Orientation, SpanningWall
from .thickness import probe_wall_thickness

logger = logging.getLogger(__name__)


@dataclass
class ScanProfile:
    """
    Per-scan-line statistics, one entry per row (or column).

    Lines narrower than the minimum building width have zero density,
    span fraction and width.
    """
    density: np.ndarray
    span_fraction: np.ndarray
    building_first: np.ndarray
    building_last: np.ndarray
    building_width: np.ndarray


@dataclass
class Band:
    """Consecutive qualifying scan lines [start, end] with average building extent."""
    start: int
    end: int
    avg_first: int = 0
    avg_last: int = 0
    avg_width: float = 0.0

    @property
    def height(self) -> int:
        return self.end - self.start + 1

    @property
    def mid(self) -> float:
        return (self.start + self.end) / 2


@dataclass
class BandCheckContext:
    """
    State shared by the validation checks of one band.

    wall and building are oriented so that axis 0 is the scan axis.
    """
    band: Band
    orientation: Orientation
    wall: np.ndarray
    building: np.ndarray
    buffer: RasterBuffer
    pixels_per_unit: float
    min_thickness: float
    max_thickness: float
    settings: SpanningWallSettings
    wall_first: int = -1
    wall_last: int = -1
    thickness_px: float = 0.0


CheckResult = Optional[Tuple[str, dict]]


def _first_last(mask: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Per-row first/last set column and whether the row has any."""
    present = mask.any(axis=1)
    first = np.argmax(mask, axis=1)
    last = mask.shape[1] - 1 - np.argmax(mask[:, ::-1], axis=1)
    return first, last, present


def profile_scan_lines(wall: np.ndarray, building: np.ndarray, min_width_px: int) -> ScanProfile:
    """
    Wall density and span fraction inside the building, per scan line.

    Args:
        wall: Wall mask with scan lines along axis 0
        building: Building mask, same orientation
        min_width_px: Scan lines with a narrower building are zeroed
    """
    wall = wall.astype(bool)
    building = building.astype(bool)
    b_first, b_last, b_present = _first_last(building)
    width = np.where(b_present, b_last - b_first + 1, 0)
    valid = width >= min_width_px

    cols = np.arange(wall.shape[1])
    inside = (cols[None, :] >= b_first[:, None]) & (cols[None, :] <= b_last[:, None])
    wall_inside = wall & inside & valid[:, None]

    count = wall_inside.sum(axis=1)
    w_first, w_last, w_present = _first_last(wall_inside)
    span = np.where(w_present, w_last - w_first + 1, 0)

    safe_width = np.where(valid, width, 1)
    return ScanProfile(
        density=np.where(valid, count / safe_width, 0.0),
        span_fraction=np.where(valid, span / safe_width, 0.0),
        building_first=np.where(valid, b_first, 0),
        building_last=np.where(valid, b_last, 0),
        building_width=np.where(valid, width, 0),
    )


def find_bands(profile: ScanProfile, settings: SpanningWallSettings, gap_merge_px: int) -> List[Band]:
    """Group qualifying scan lines into bands, merging bands split by small gaps."""
    qualifies = (profile.density >= settings.density_threshold) & (
        profile.span_fraction >= settings.span_threshold
    )

    bands: List[Band] = []
    start = None
    for s, ok in enumerate(qualifies):
        if ok and start is None:
            start = s
        elif not ok and start is not None:
            bands.append(Band(start, s - 1))
            start = None
    if start is not None:
        bands.append(Band(start, len(qualifies) - 1))

    merged: List[Band] = []
    for band in bands:
        if merged and band.start - merged[-1].end <= gap_merge_px + 1:
            merged[-1].end = band.end
        else:
            merged.append(band)

    for band in merged:
        rows = slice(band.start, band.end + 1)
        widths = profile.building_width[rows]
        used = widths > 0
        if used.any():
            band.avg_first = round_half_up(float(profile.building_first[rows][used].mean()))
            band.avg_last = round_half_up(float(profile.building_last[rows][used].mean()))
            band.avg_width = float(widths[used].mean())
    return merged


def _sample_positions(band: Band, count: int) -> List[int]:
    span = band.avg_last - band.avg_first
    return [round_half_up(band.avg_first + (i + 0.5) / count * span) for i in range(count)]


def distance_to_building_boundary(ctx: BandCheckContext, samples: int = 5) -> float:
    """
    Median distance from the band to the building edge along the scan axis.

    Sampled at several cross positions so notched buildings are handled
    locally. Infinite when no sample hits the building.
    """
    distances = []
    for cross in _sample_positions(ctx.band, samples):
        if not 0 <= cross < ctx.building.shape[1]:
            continue
        column = np.flatnonzero(ctx.building[:, cross])
        if column.size == 0:
            continue
        distances.append(min(ctx.band.start - int(column[0]), int(column[-1]) - ctx.band.end))

    if not distances:
        return math.inf
    distances.sort()
    return distances[len(distances) // 2]


def measure_continuity(ctx: BandCheckContext) -> Tuple[int, int, int]:
    """
    Largest run of cross positions without wall inside the band.

    Returns:
        (max_gap, wall_first, wall_last); first/last are -1 with no wall
    """
    band = ctx.band
    lo = max(0, band.avg_first)
    hi = min(ctx.wall.shape[1] - 1, band.avg_last)
    if hi < lo:
        return 0, -1, -1

    has_wall = ctx.wall[band.start:band.end + 1, lo:hi + 1].any(axis=0)
    max_gap = 0
    current = 0
    for covered in has_wall:
        if covered:
            max_gap = max(max_gap, current)
            current = 0
        else:
            current += 1
    max_gap = max(max_gap, current)

    hits = np.flatnonzero(has_wall)
    if hits.size == 0:
        return max_gap, -1, -1
    return max_gap, lo + int(hits[0]), lo + int(hits[-1])


def measure_band_thickness(ctx: BandCheckContext) -> Tuple[float, int]:
    """
    Probe across the band at evenly spaced positions.

    Returns:
        (thickness_px, valid_count); thickness is the upper median of the
        in-bounds probes, or the band height when none were valid
    """
    band = ctx.band
    settings = ctx.settings
    max_probe = band.height + settings.probe_margin_px
    probe_start = band.start - 2

    measurements = []
    for cross in _sample_positions(band, settings.num_samples):
        if ctx.orientation is Orientation.HORIZONTAL:
            thickness = probe_wall_thickness(ctx.buffer, cross, probe_start, 0, 1, max_probe)
        else:
            thickness = probe_wall_thickness(ctx.buffer, probe_start, cross, 1, 0, max_probe)
        if thickness > 0 and ctx.min_thickness <= thickness / ctx.pixels_per_unit <= ctx.max_thickness:
            measurements.append(thickness)

    if not measurements:
        return float(band.height), 0
    measurements.sort()
    return float(measurements[len(measurements) // 2]), len(measurements)


def check_thickness(ctx: BandCheckContext) -> CheckResult:
    band_units = ctx.band.height / ctx.pixels_per_unit
    if band_units < ctx.min_thickness or band_units > ctx.max_thickness:
        return "thickness", {
            "band_units": band_units,
            "min_thickness": ctx.min_thickness,
            "max_thickness": ctx.max_thickness,
        }
    return None


def check_building_width(ctx: BandCheckContext) -> CheckResult:
    min_width_px = ctx.settings.min_building_width * ctx.pixels_per_unit
    if ctx.band.avg_width < min_width_px:
        return "building_width", {
            "avg_width_units": ctx.band.avg_width / ctx.pixels_per_unit,
            "min_width_units": ctx.settings.min_building_width,
        }
    return None


def check_boundary_proximity(ctx: BandCheckContext) -> CheckResult:
    """Reject bands hugging the building edge (inner faces of outer walls)."""
    distance = distance_to_building_boundary(ctx)
    if distance < ctx.band.height:
        return "boundary_proximity", {"distance": distance, "band_height": ctx.band.height}
    return None


def check_continuity(ctx: BandCheckContext) -> CheckResult:
    """Reject aligned partitions separated by room-sized gaps."""
    max_allowed = max(
        ctx.band.height * 2,
        round_half_up(ctx.band.avg_width * ctx.settings.continuity_fraction),
    )
    max_gap, ctx.wall_first, ctx.wall_last = measure_continuity(ctx)
    if max_gap > max_allowed:
        return "continuity", {
            "max_gap": max_gap,
            "max_allowed_gap": max_allowed,
            "max_gap_units": max_gap / ctx.pixels_per_unit,
        }
    return None


def check_edge_touch(ctx: BandCheckContext) -> CheckResult:
    margin = ctx.band.height * 2
    touches_start = ctx.wall_first >= 0 and ctx.wall_first <= ctx.band.avg_first + margin
    touches_end = ctx.wall_last >= 0 and ctx.wall_last >= ctx.band.avg_last - margin
    if not (touches_start and touches_end):
        return "edge_touch", {
            "touches_start": touches_start,
            "touches_end": touches_end,
            "wall_first": ctx.wall_first,
            "wall_last": ctx.wall_last,
            "margin": margin,
        }
    return None


def check_span_length(ctx: BandCheckContext) -> CheckResult:
    span_px = ctx.wall_last - ctx.wall_first
    if span_px < ctx.settings.min_span_length * ctx.pixels_per_unit:
        return "span_length", {
            "span_units": span_px / ctx.pixels_per_unit,
            "min_span_units": ctx.settings.min_span_length,
        }
    return None


def check_thickness_consistency(ctx: BandCheckContext) -> CheckResult:
    required = math.ceil(ctx.settings.num_samples * ctx.settings.consistency_ratio)
    ctx.thickness_px, valid = measure_band_thickness(ctx)
    if valid < required:
        return "thickness_consistency", {
            "valid_count": valid,
            "required": required,
            "num_samples": ctx.settings.num_samples,
        }
    return None


BAND_CHECKS: List[Callable[[BandCheckContext], CheckResult]] = [
    check_thickness,
    check_building_width,
    check_boundary_proximity,
    check_continuity,
    check_edge_touch,
    check_span_length,
    check_thickness_consistency,
]


def validate_band(ctx: BandCheckContext, rejections: Optional[List[BandRejection]] = None) -> Optional[SpanningWall]:
    """
    Run the band through every check; build the wall if all pass.
    """
    for check in BAND_CHECKS:
        failure = check(ctx)
        if failure is not None:
            reason, details = failure
            logger.debug(
                f"Rejected {ctx.orientation.value} band {ctx.band.start}-{ctx.band.end}: {reason}"
            )
            if rejections is not None:
                rejections.append(BandRejection(
                    ctx.orientation, (ctx.band.start, ctx.band.end), reason, details
                ))
            return None

    band = ctx.band
    if ctx.orientation is Orientation.HORIZONTAL:
        start = Point(band.avg_first, band.mid)
        end = Point(band.avg_last, band.mid)
    else:
        start = Point(band.mid, band.avg_first)
        end = Point(band.mid, band.avg_last)
    return SpanningWall(ctx.orientation, start, end, ctx.thickness_px)


def detect_spanning_walls(
    buffer: RasterBuffer,
    wall_mask: np.ndarray,
    building_mask: np.ndarray,
    pixels_per_unit: float = 1.0,
    min_thickness: Optional[float] = None,
    max_thickness: Optional[float] = None,
    settings: Optional[SpanningWallSettings] = None,
    rules: Optional[FloorPlanRules] = None,
    rejections: Optional[List[BandRejection]] = None,
) -> List[SpanningWall]:
    """
    Find walls that run across the whole building interior.

    Args:
        buffer: Source image, used for perpendicular thickness probes
        wall_mask: Cleaned wall mask (1 = wall)
        building_mask: Building interior mask (1 = inside)
        pixels_per_unit: Pixel scale
        min_thickness: Thinnest accepted wall; defaults to the rules
        max_thickness: Thickest accepted wall; defaults to the rules
        settings: Detector constants
        rules: Source of thickness defaults
        rejections: If given, a BandRejection is appended per rejected band

    Returns:
        Horizontal walls followed by vertical walls

    Raises:
        ValueError: If a mask does not match the buffer size or the scale
            is not positive
    """
    if pixels_per_unit <= 0:
        raise ValueError(f"pixels_per_unit must be > 0, got {pixels_per_unit}")
    validate_mask(wall_mask, buffer.shape, "wall_mask")
    validate_mask(building_mask, buffer.shape, "building_mask")

    rules = rules or FloorPlanRules()
    settings = settings or SpanningWallSettings()
    min_thickness = rules.min_wall_thickness if min_thickness is None else min_thickness
    max_thickness = rules.max_wall_thickness if max_thickness is None else max_thickness

    if not building_mask.any():
        return []

    gap_merge_px = max(1, math.ceil(settings.gap_merge * pixels_per_unit))
    walls: List[SpanningWall] = []

    for orientation, wall, building in (
        (Orientation.HORIZONTAL, wall_mask, building_mask),
        (Orientation.VERTICAL, wall_mask.T, building_mask.T),
    ):
        profile = profile_scan_lines(wall, building, settings.min_building_width_px)
        bands = find_bands(profile, settings, gap_merge_px)
        logger.debug(f"{orientation.value}: {len(bands)} candidate bands")

        for band in bands:
            ctx = BandCheckContext(
                band=band,
                orientation=orientation,
                wall=wall,
                building=building,
                buffer=buffer,
                pixels_per_unit=pixels_per_unit,
                min_thickness=min_thickness,
                max_thickness=max_thickness,
                settings=settings,
            )
            found = validate_band(ctx, rejections)
            if found is not None:
                walls.append(found)

    if walls:
        logger.info(f"Found {len(walls)} spanning walls")
    return walls
