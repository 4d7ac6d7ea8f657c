"""
Tests for micro-bump and stacked-wall polygon cleanup.
"""

from floorplan_geometry.contour.cleanup import (
    merge_axis_collinear,
    remove_micro_bumps,
    remove_stacked_walls,
)
from floorplan_geometry.geometry import Point, as_points, polygon_area


class TestMergeAxisCollinear:
    """Tests for merge_axis_collinear."""

    def test_drops_midpoint_of_straight_run(self):
        polygon = as_points([(0, 0), (50, 0), (100, 0), (100, 100), (0, 100)])
        assert merge_axis_collinear(polygon) == as_points([(0, 0), (100, 0), (100, 100), (0, 100)])

    def test_keeps_triangle(self):
        polygon = as_points([(0, 0), (10, 0), (5, 0.5)])
        assert len(merge_axis_collinear(polygon)) == 3


class TestRemoveMicroBumps:
    """Tests for remove_micro_bumps."""

    def test_removes_rectangular_notch(self):
        """Test that a 20 px wide, 10 px deep notch is flattened."""
        polygon = as_points([
            (0, 0), (40, 0), (40, -10), (60, -10), (60, 0),
            (100, 0), (100, 100), (0, 100),
        ])
        result = remove_micro_bumps(polygon, max_bump_depth=30)
        assert result == as_points([(0, 0), (100, 0), (100, 100), (0, 100)])

    def test_keeps_notch_wider_than_threshold(self):
        polygon = as_points([
            (0, 0), (20, 0), (20, -10), (80, -10), (80, 0),
            (100, 0), (100, 100), (0, 100),
        ])
        result = remove_micro_bumps(polygon, max_bump_depth=30)
        assert Point(20, -10) in result
        assert Point(80, -10) in result

    def test_keeps_step_with_same_direction_legs(self):
        """Test that an L-shaped step (not a U) is not removed."""
        polygon = as_points([(0, 0), (50, 0), (50, 10), (100, 10), (100, 100), (0, 100)])
        result = remove_micro_bumps(polygon, max_bump_depth=30)
        assert len(result) == 6

    def test_fewer_than_five_vertices_unchanged(self):
        polygon = as_points([(0, 0), (100, 0), (100, 100), (0, 100)])
        assert remove_micro_bumps(polygon) == polygon


class TestRemoveStackedWalls:
    """Tests for remove_stacked_walls."""

    def test_rectangle_unchanged(self):
        polygon = as_points([(0, 0), (100, 0), (100, 100), (0, 100)])
        assert remove_stacked_walls(polygon) == polygon

    def test_collapses_double_traced_wall(self):
        """Test that a thin slot tracing both faces of a wall is collapsed."""
        polygon = as_points([
            (0, 0), (100, 0), (100, 100), (50, 100),
            (50, 20), (46, 20), (46, 100), (0, 100),
        ])
        result = remove_stacked_walls(polygon, max_distance=10)

        assert Point(50, 20) not in result
        assert Point(46, 20) not in result
        assert len(result) <= 5
        assert polygon_area(result) == 10000

    def test_removes_zero_width_spike(self):
        polygon = as_points([(0, 0), (10, 0), (10, 10), (10, 5), (0, 10)])
        result = remove_stacked_walls(polygon)
        assert Point(10, 10) not in result
        assert len(result) == 4

    def test_never_below_three_vertices(self):
        polygon = as_points([(0, 0), (10, 0), (10, 1), (0, 1)])
        assert len(remove_stacked_walls(polygon)) >= 3
