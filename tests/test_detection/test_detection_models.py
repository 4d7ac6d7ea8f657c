"""
Tests for detection result types and the Attempt record.
"""

import json

import numpy as np
import pytest

from floorplan_geometry.detection.models import Attempt, AttemptStatus, DetectionResult, EnvelopeResult
from floorplan_geometry.geometry import Point, as_points
from floorplan_geometry.walls.models import (
    DoorGap,
    EdgeThickness,
    Orientation,
    SpanningWall,
    WallThicknessSummary,
)


class TestAttempt:
    """Tests for Attempt."""

    def test_success(self):
        attempt = Attempt.success(42, "gray")
        assert attempt.ok
        assert attempt.status is AttemptStatus.SUCCESS
        assert attempt.unwrap_or_none() == 42
        assert attempt.label == "gray"

    def test_rejected(self):
        attempt = Attempt.rejected("seed_on_wall", "threshold-180")
        assert not attempt.ok
        assert attempt.status is AttemptStatus.REJECTED
        assert attempt.unwrap_or_none() is None

    def test_exhausted(self):
        attempt = Attempt.exhausted("no_radius_sealed_room")
        assert attempt.status is AttemptStatus.EXHAUSTED
        assert attempt.reason == "no_radius_sealed_room"


class TestDetectionResult:
    """Tests for DetectionResult."""

    def _result(self):
        summary = WallThicknessSummary([EdgeThickness(0, 6.0, 12.0)], 6.0, 12.0)
        return DetectionResult(
            polygon=as_points([(0, 0), (100, 0), (100, 50), (0, 50)]),
            door_gaps=[DoorGap(Point(50, 0), (20, 20))],
            pixels_per_unit=0.5,
            wall_thicknesses=summary,
            method="threshold-180",
            close_radius_px=10,
        )

    def test_area(self):
        result = self._result()
        assert result.area_px == 5000
        assert result.area_units == pytest.approx(20000)

    def test_to_dict_is_json_serializable(self):
        data = self._result().to_dict()
        json.dumps(data)

        assert data["found"] is True
        assert data["vertex_count"] == 4
        assert data["polygon"][2] == {"x": 100.0, "y": 50.0}
        assert data["door_gaps"][0]["span"] == {"width": 20.0, "height": 20.0}
        assert data["wall_thicknesses"]["edges"][0]["thickness_units"] == 12.0
        assert data["method"] == "threshold-180"


class TestEnvelopeResult:
    """Tests for EnvelopeResult."""

    def test_to_dict_summarizes_masks(self):
        wall = np.zeros((10, 10), dtype=np.uint8)
        wall[0, :] = 1
        building = np.ones((10, 10), dtype=np.uint8)
        spanning = SpanningWall(Orientation.HORIZONTAL, Point(0, 5), Point(9, 5), 4.0)
        result = EnvelopeResult(
            polygon=as_points([(0, 0), (9, 0), (9, 9), (0, 9)]),
            wall_thicknesses=WallThicknessSummary.empty(),
            wall_mask=wall,
            building_mask=building,
            spanning_walls=[spanning],
            pixels_per_unit=2.0,
        )
        data = result.to_dict()
        json.dumps(data)

        assert data["wall_pixels"] == 10
        assert data["building_pixels"] == 100
        assert data["spanning_walls"][0]["thickness_units"] == 2.0
        assert data["spanning_walls"][0]["orientation"] == "horizontal"
        assert result.building_fraction == 1.0


class TestWallModels:
    """Tests for wall measurement records."""

    def test_empty_summary(self):
        summary = WallThicknessSummary.empty()
        assert summary.is_empty
        assert summary.to_dict() == {"edges": [], "median_px": 0.0, "median_units": 0.0}

    def test_spanning_wall_length(self):
        wall = SpanningWall(Orientation.VERTICAL, Point(5, 0), Point(5, 80), 6.0)
        assert wall.length_px == 80
        assert wall.to_dict()["start"] == {"x": 5.0, "y": 0.0}
