"""
Tests for detection configuration.
"""

import pytest
import yaml

from floorplan_geometry.config.detection_config import (
    DetectionConfig,
    EnvelopeSettings,
    FloorPlanRules,
    RoomDetectionSettings,
    SpanningWallSettings,
)


class TestFloorPlanRules:
    """Tests for FloorPlanRules."""

    def test_defaults(self):
        rules = FloorPlanRules()
        assert rules.standard_angles_deg == (0, 45, 90, 135, 180, 225, 270, 315)
        assert rules.angle_tolerance_deg == 5.0
        assert rules.min_wall_thickness == 5.0
        assert rules.max_wall_thickness == 50.0

    def test_invalid_thickness_bounds(self):
        with pytest.raises(ValueError, match="max_wall_thickness"):
            FloorPlanRules(min_wall_thickness=20, max_wall_thickness=10)

    def test_invalid_tolerance(self):
        with pytest.raises(ValueError, match="angle_tolerance_deg"):
            FloorPlanRules(angle_tolerance_deg=0)

    def test_empty_angles(self):
        with pytest.raises(ValueError, match="standard_angles_deg"):
            FloorPlanRules(standard_angles_deg=())


class TestRoomDetectionSettings:
    """Tests for unit-to-pixel conversion of room settings."""

    def test_close_radii_clamped(self):
        settings = RoomDetectionSettings()
        assert settings.close_radii_px(0.1) == [3, 4, 7]
        assert settings.close_radii_px(10) == [200, 300, 300]

    def test_open_radius_clamped(self):
        settings = RoomDetectionSettings()
        assert settings.open_radius_px(0.5) == 2
        assert settings.open_radius_px(5) == 5

    def test_min_component_area_floor(self):
        settings = RoomDetectionSettings()
        assert settings.min_component_area_px(0.1) == 16
        assert settings.min_component_area_px(1) == 64

    def test_simplify_epsilon_at_least_one(self):
        assert RoomDetectionSettings().simplify_epsilon_px(0.1) == 1

    def test_door_gap_params(self):
        params = RoomDetectionSettings().door_gap_params_px(1.0)
        assert params == {"min_gap_px": 45, "max_gap_px": 250, "search_depth_px": 15, "max_dash_px": 10}

    def test_invalid_gap_bounds(self):
        with pytest.raises(ValueError, match="gap bounds"):
            RoomDetectionSettings(min_gap=100, max_gap=50)

    def test_invalid_threshold(self):
        with pytest.raises(ValueError, match="threshold_sweep"):
            RoomDetectionSettings(threshold_sweep=(0,))


class TestEnvelopeAndSpanningSettings:
    """Tests for envelope and spanning-wall settings."""

    def test_envelope_radii(self):
        settings = EnvelopeSettings()
        assert settings.close_radius_px(0.1) == 8
        assert settings.close_radius_px(10) == 300
        assert settings.strict_open_radius_px(0.1) == 3

    def test_invalid_fractions(self):
        with pytest.raises(ValueError, match="building fractions"):
            EnvelopeSettings(min_building_fraction=0.9, max_building_fraction=0.5)

    def test_spanning_defaults(self):
        settings = SpanningWallSettings()
        assert settings.density_threshold == 0.4
        assert settings.span_threshold == 0.7
        assert settings.num_samples == 5

    def test_invalid_density(self):
        with pytest.raises(ValueError, match="density_threshold"):
            SpanningWallSettings(density_threshold=1.5)


class TestDetectionConfig:
    """Tests for DetectionConfig serialization."""

    def test_round_trip_dict(self):
        config = DetectionConfig.default()
        restored = DetectionConfig.from_dict(config.to_dict())
        assert restored.to_dict() == config.to_dict()

    def test_partial_dict_uses_defaults(self):
        config = DetectionConfig.from_dict({"rules": {"max_wall_thickness": 40}})
        assert config.rules.max_wall_thickness == 40
        assert config.rules.min_wall_thickness == 5.0
        assert config.room.close_radii == (20, 40, 66)

    def test_nested_dicts_converted(self):
        config = DetectionConfig(room={"simplify_epsilon": 2})
        assert isinstance(config.room, RoomDetectionSettings)
        assert config.room.simplify_epsilon == 2

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({
            "detection": {
                "room": {"threshold_sweep": [150, 200]},
                "spanning": {"min_span_length": 150},
            }
        }))
        config = DetectionConfig.from_yaml(str(path))

        assert config.room.threshold_sweep == (150, 200)
        assert config.spanning.min_span_length == 150

    def test_from_yaml_without_section(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("envelope:\n  close_radius: 60\n")
        assert DetectionConfig.from_yaml(str(path)).envelope.close_radius == 60
