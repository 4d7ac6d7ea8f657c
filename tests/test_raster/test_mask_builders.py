"""
Tests for luminance thresholding, gray-fill detection and pixel classification.
"""

import numpy as np
import pytest

from floorplan_geometry.raster.models import RasterBuffer
from floorplan_geometry.raster.mask_builders import (
    PixelClass,
    WallRange,
    auto_detect_wall_range,
    classify_pixel,
    colored_wall_mask,
    gray_fill_mask,
    luminance_histogram,
    pixel_saturation,
    threshold_mask,
)
from tests.fixtures.plan_fixtures import blank


class TestThresholdMask:
    """Tests for threshold_mask."""

    def test_dark_pixels_are_wall(self):
        """Test that black pixels are marked and white pixels are not."""
        image = blank(10, 10)
        image[2:4, 2:8] = (0, 0, 0, 255)
        mask = threshold_mask(RasterBuffer.from_rgba(image), 128)

        assert mask.dtype == np.uint8
        assert mask.sum() == 12
        assert mask[2, 2] == 1
        assert mask[0, 0] == 0

    def test_luminance_equal_to_threshold_is_open(self):
        """Test that the comparison is strict."""
        buffer = RasterBuffer.from_rgba(blank(3, 3, (128, 128, 128, 255)))
        assert threshold_mask(buffer, 128).sum() == 0

    def test_just_below_threshold_is_wall(self):
        buffer = RasterBuffer.from_rgba(blank(3, 3, (127, 127, 127, 255)))
        assert threshold_mask(buffer, 128).sum() == 9


class TestGrayFillMask:
    """Tests for gray_fill_mask."""

    def test_gray_in_range(self):
        """Test that gray fill inside the window is marked."""
        image = blank(10, 10)
        image[:5] = (160, 160, 160, 255)
        mask = gray_fill_mask(RasterBuffer.from_rgba(image), 80, 240)
        assert mask[:5].all()
        assert not mask[5:].any()

    def test_colored_dark_fill_included(self):
        """Test that saturated pixels below the window count as wall."""
        image = blank(4, 4)
        image[0, 0] = (200, 20, 20, 255)
        mask = gray_fill_mask(RasterBuffer.from_rgba(image), 80, 240)
        assert mask[0, 0] == 1

    def test_black_excluded(self):
        """Test that near-black pixels below the window are not fill."""
        image = blank(4, 4)
        image[0, 0] = (0, 0, 0, 255)
        mask = gray_fill_mask(RasterBuffer.from_rgba(image), 80, 240)
        assert mask[0, 0] == 0


class TestAutoDetectWallRange:
    """Tests for histogram-based wall range detection."""

    def test_detects_gray_peak(self):
        """Test that a dominant gray fill yields a window around it."""
        image = blank(100, 100)
        image[:30] = (160, 160, 160, 255)
        wall_range = auto_detect_wall_range(RasterBuffer.from_rgba(image))

        assert wall_range is not None
        assert wall_range.low == 80
        assert wall_range.high == 240

    def test_all_white_has_no_range(self):
        """Test that a blank page has no gray fill."""
        assert auto_detect_wall_range(RasterBuffer.from_rgba(blank(50, 50))) is None

    def test_tiny_peak_is_ignored(self):
        """Test that a peak under 0.3% of the pixels is rejected."""
        image = blank(100, 100)
        image[0, :20] = (160, 160, 160, 255)  # 0.2%
        assert auto_detect_wall_range(RasterBuffer.from_rgba(image)) is None

    def test_histogram_counts_every_pixel(self):
        buffer = RasterBuffer.from_rgba(blank(7, 9))
        hist = luminance_histogram(buffer)
        assert hist.shape == (256,)
        assert hist.sum() == 63
        assert hist[255] == 63


class TestWallRange:
    """Tests for the WallRange value type."""

    def test_inverted_range_raises(self):
        with pytest.raises(ValueError):
            WallRange(low=200, high=100)

    def test_to_dict(self):
        assert WallRange(10, 20).to_dict() == {"low": 10, "high": 20}


class TestClassifyPixel:
    """Tests for three-state pixel classification."""

    def test_black_is_edge(self):
        assert classify_pixel(0, 0, 0) == PixelClass.EDGE

    def test_mid_gray_is_fill(self):
        assert classify_pixel(160, 160, 160) == PixelClass.FILL

    def test_light_gray_is_fill(self):
        """Test that near-neutral light gray below 220 is fill."""
        assert classify_pixel(210, 210, 210) == PixelClass.FILL

    def test_white_is_background(self):
        assert classify_pixel(255, 255, 255) == PixelClass.BACKGROUND

    def test_saturated_mid_tone_is_fill(self):
        """Test that a saturated pixel at luminance 80-120 is fill, not edge."""
        assert classify_pixel(0, 160, 0) == PixelClass.FILL

    def test_saturated_light_tone_is_background(self):
        """Test that a bright saturated color is treated as annotation."""
        assert classify_pixel(255, 200, 0) == PixelClass.BACKGROUND

    def test_pixel_saturation(self):
        assert pixel_saturation(0, 0, 0) == 0.0
        assert pixel_saturation(100, 50, 0) == pytest.approx(1.0)
        assert pixel_saturation(100, 100, 50) == pytest.approx(0.5)


class TestColoredWallMask:
    """Tests for colored_wall_mask."""

    def test_marks_only_saturated_pixels(self):
        image = blank(4, 4)
        image[0, 0] = (200, 20, 20, 255)
        image[0, 1] = (0, 0, 0, 255)
        image[0, 2] = (128, 128, 128, 255)
        mask = colored_wall_mask(RasterBuffer.from_rgba(image))

        assert mask[0, 0] == 1
        assert mask[0, 1] == 0
        assert mask[0, 2] == 0
        assert mask.sum() == 1
