"""
Tests for Moore-neighbor contour tracing.
"""

import numpy as np

from floorplan_geometry.contour.tracing import trace_contour
from floorplan_geometry.geometry import Point


class TestTraceContour:
    """Tests for trace_contour."""

    def test_empty_mask(self):
        assert trace_contour(np.zeros((5, 5), dtype=np.uint8)) == []

    def test_single_pixel(self):
        mask = np.zeros((7, 7), dtype=np.uint8)
        mask[3, 3] = 1
        assert trace_contour(mask) == [Point(3, 3)]

    def test_square_block_clockwise(self):
        """Test that a 3x3 block yields its 8 border pixels clockwise."""
        mask = np.zeros((7, 7), dtype=np.uint8)
        mask[2:5, 2:5] = 1
        contour = trace_contour(mask)

        assert contour == [
            Point(2, 2), Point(3, 2), Point(4, 2), Point(4, 3),
            Point(4, 4), Point(3, 4), Point(2, 4), Point(2, 3),
        ]

    def test_region_touching_image_corner(self):
        """Test that tracing terminates when the start pixel is on the image edge."""
        mask = np.zeros((5, 5), dtype=np.uint8)
        mask[0:3, 0:3] = 1
        contour = trace_contour(mask)

        assert len(contour) == 8
        assert contour[0] == Point(0, 0)
        assert len(set(contour)) == 8

    def test_step_limit(self):
        """Test that the contour never exceeds width * height + 4 points."""
        mask = np.ones((6, 9), dtype=np.uint8)
        contour = trace_contour(mask)
        assert 0 < len(contour) <= 6 * 9 + 4

    def test_traces_first_region_only(self):
        mask = np.zeros((10, 20), dtype=np.uint8)
        mask[1:4, 1:4] = 1
        mask[5:9, 10:18] = 1
        contour = trace_contour(mask)
        assert all(p.x < 5 for p in contour)
