"""
Tests for RasterBuffer construction and per-pixel readers.
"""

import numpy as np
import pytest
import cv2

from floorplan_geometry.raster.models import RasterBuffer, validate_mask
from tests.fixtures.plan_fixtures import blank


class TestRasterBufferValidation:
    """Tests for buffer shape and dtype validation."""

    def test_valid_buffer(self):
        """Test that a (H, W, 4) uint8 array is accepted."""
        buffer = RasterBuffer(np.zeros((10, 20, 4), dtype=np.uint8))
        assert buffer.width == 20
        assert buffer.height == 10
        assert buffer.shape == (10, 20)

    def test_rejects_rgb_array(self):
        """Test that a 3-channel array is rejected."""
        with pytest.raises(ValueError, match="shape"):
            RasterBuffer(np.zeros((10, 10, 3), dtype=np.uint8))

    def test_rejects_wrong_dtype(self):
        """Test that non-uint8 arrays are rejected."""
        with pytest.raises(ValueError, match="uint8"):
            RasterBuffer(np.zeros((10, 10, 4), dtype=np.float32))

    def test_rejects_empty_image(self):
        """Test that a zero-sized image is rejected."""
        with pytest.raises(ValueError):
            RasterBuffer(np.zeros((0, 10, 4), dtype=np.uint8))

    def test_rejects_non_array(self):
        """Test that plain lists are rejected."""
        with pytest.raises(ValueError, match="numpy"):
            RasterBuffer([[0, 0, 0, 0]])


class TestRasterBufferConstructors:
    """Tests for alternate constructors."""

    def test_from_bytes(self):
        """Test building a buffer from raw RGBA bytes."""
        data = bytes([10, 20, 30, 255] * 6)
        buffer = RasterBuffer.from_bytes(3, 2, data)
        assert buffer.shape == (2, 3)
        assert buffer.rgb_at(2, 1) == (10, 20, 30)

    def test_from_bytes_length_mismatch(self):
        """Test that a short byte string raises ValueError."""
        with pytest.raises(ValueError, match="bytes"):
            RasterBuffer.from_bytes(3, 2, bytes(10))

    def test_from_bgr_swaps_channels(self):
        """Test that BGR input is converted to RGBA."""
        image = np.zeros((4, 4, 3), dtype=np.uint8)
        image[:, :] = (255, 0, 0)  # Blue in BGR
        buffer = RasterBuffer.from_bgr(image)
        assert buffer.rgb_at(0, 0) == (0, 0, 255)
        assert buffer.pixels[0, 0, 3] == 255

    def test_from_gray(self):
        """Test that a grayscale image is expanded to RGBA."""
        image = np.full((5, 5), 77, dtype=np.uint8)
        buffer = RasterBuffer.from_bgr(image)
        assert buffer.rgb_at(3, 3) == (77, 77, 77)

    def test_load_round_trip(self, tmp_path):
        """Test loading a PNG written with OpenCV."""
        image = np.full((8, 12, 3), 200, dtype=np.uint8)
        path = tmp_path / "plan.png"
        cv2.imwrite(str(path), image)

        buffer = RasterBuffer.load(str(path))
        assert buffer.shape == (8, 12)
        assert buffer.rgb_at(0, 0) == (200, 200, 200)

    def test_load_missing_file(self, tmp_path):
        """Test that a missing file raises ValueError."""
        with pytest.raises(ValueError, match="Could not load image"):
            RasterBuffer.load(str(tmp_path / "missing.png"))


class TestRasterBufferReaders:
    """Tests for luminance and saturation readers."""

    def test_luminance_weights(self):
        """Test the 0.299/0.587/0.114 luminance formula."""
        image = blank(3, 1)
        image[0, 0] = (255, 0, 0, 255)
        image[0, 1] = (0, 255, 0, 255)
        image[0, 2] = (0, 0, 255, 255)
        lum = RasterBuffer.from_rgba(image).luminance()
        assert lum[0, 0] == pytest.approx(76.245)
        assert lum[0, 1] == pytest.approx(149.685)
        assert lum[0, 2] == pytest.approx(29.07)

    def test_saturation_of_gray_is_zero(self):
        """Test that neutral pixels have zero saturation."""
        buffer = RasterBuffer.from_rgba(blank(4, 4, (128, 128, 128, 255)))
        assert np.all(buffer.saturation() == 0)

    def test_saturation_of_black_is_zero(self):
        """Test that black pixels do not divide by zero."""
        buffer = RasterBuffer.from_rgba(blank(4, 4, (0, 0, 0, 255)))
        assert np.all(buffer.saturation() == 0)

    def test_saturation_of_pure_color(self):
        """Test that a pure primary is fully saturated."""
        buffer = RasterBuffer.from_rgba(blank(2, 2, (200, 0, 0, 255)))
        assert buffer.saturation()[0, 0] == pytest.approx(1.0)

    def test_contains(self):
        """Test bounds checks."""
        buffer = RasterBuffer.from_rgba(blank(5, 3))
        assert buffer.contains(0, 0)
        assert buffer.contains(4, 2)
        assert not buffer.contains(5, 0)
        assert not buffer.contains(0, -1)

    def test_copy_is_independent(self):
        """Test that copy() does not share pixel memory."""
        buffer = RasterBuffer.from_rgba(blank(4, 4))
        clone = buffer.copy()
        clone.pixels[0, 0] = (0, 0, 0, 255)
        assert buffer.rgb_at(0, 0) == (255, 255, 255)


class TestValidateMask:
    """Tests for mask shape validation."""

    def test_matching_shape_passes(self):
        validate_mask(np.zeros((4, 5), dtype=np.uint8), (4, 5))

    def test_mismatched_shape_raises(self):
        with pytest.raises(ValueError, match="does not match"):
            validate_mask(np.zeros((4, 5), dtype=np.uint8), (5, 4), "wall_mask")

    def test_3d_mask_raises(self):
        with pytest.raises(ValueError, match="2D"):
            validate_mask(np.zeros((4, 5, 1), dtype=np.uint8), (4, 5))
