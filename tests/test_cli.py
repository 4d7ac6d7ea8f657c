"""
Tests for the floorplan_geometry command-line interface.
"""

import json
import os
import subprocess
import sys

import cv2
import pytest

from tests.fixtures.plan_fixtures import create_building, create_room_with_door

PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))


def run_cli(*args):
    return subprocess.run(
        [sys.executable, "-m", "floorplan_geometry", *args],
        capture_output=True,
        text=True,
        cwd=PROJECT_ROOT,
    )


class TestRoomCommand:
    """Tests for the room command."""

    @pytest.fixture
    def room_image_path(self, tmp_path):
        image_path = tmp_path / "room.png"
        cv2.imwrite(str(image_path), create_room_with_door().to_bgr())
        yield str(image_path)

    def test_room_produces_json_output(self, room_image_path):
        result = run_cli(
            "room", room_image_path, "--x", "40", "--y", "40",
            "--ppu", "0.1", "--max-area", "1000000",
        )

        assert result.returncode == 0
        output = json.loads(result.stdout)
        assert output["found"] is True
        assert output["vertex_count"] == 4
        assert len(output["door_gaps"]) == 1
        assert output["method"] == "threshold-180"

    def test_room_not_found_exit_code(self, room_image_path):
        """Test that a seed on a wall prints found=false and exits 2."""
        result = run_cli(
            "room", room_image_path, "--x", "5", "--y", "5",
            "--ppu", "0.1", "--max-area", "1000000",
        )

        assert result.returncode == 2
        assert json.loads(result.stdout) == {"found": False}

    def test_room_visual_output(self, room_image_path, tmp_path):
        output_path = str(tmp_path / "overlay.png")
        result = run_cli(
            "room", room_image_path, "--x", "40", "--y", "40",
            "--ppu", "0.1", "--max-area", "1000000",
            "-o", "visual", "--output-path", output_path,
        )

        assert result.returncode == 0
        assert os.path.exists(output_path)
        assert cv2.imread(output_path).shape == (80, 80, 3)

    def test_room_with_cleanup(self, room_image_path):
        result = run_cli(
            "room", room_image_path, "--x", "40", "--y", "40",
            "--ppu", "0.1", "--max-area", "1000000", "--cleanup",
        )

        assert result.returncode == 0
        assert json.loads(result.stdout)["vertex_count"] == 4

    def test_missing_seed_is_usage_error(self, room_image_path):
        result = run_cli("room", room_image_path)
        assert result.returncode != 0

    def test_invalid_path_returns_error(self):
        result = run_cli("room", "nonexistent.png", "--x", "1", "--y", "1")

        assert result.returncode == 1
        assert "Error" in result.stderr

    def test_non_positive_ppu_returns_error(self, room_image_path):
        result = run_cli("room", room_image_path, "--x", "40", "--y", "40", "--ppu", "0")

        assert result.returncode == 1
        assert "--ppu" in result.stderr

    def test_invalid_config_returns_error(self, room_image_path, tmp_path):
        config_path = tmp_path / "bad.yaml"
        config_path.write_text("rules:\n  min_wall_thickness: -1\n")
        result = run_cli(
            "room", room_image_path, "--x", "40", "--y", "40", "--config", str(config_path)
        )

        assert result.returncode == 1
        assert "Invalid config" in result.stderr


class TestEnvelopeCommand:
    """Tests for the envelope command."""

    @pytest.fixture
    def building_image_path(self, tmp_path):
        image_path = tmp_path / "building.png"
        cv2.imwrite(str(image_path), create_building().to_bgr())
        yield str(image_path)

    def test_envelope_produces_json_output(self, building_image_path):
        result = run_cli("envelope", building_image_path, "--ppu", "0.1", "--spanning")

        assert result.returncode == 0
        output = json.loads(result.stdout)
        assert output["found"] is True
        assert output["vertex_count"] == 4
        assert output["spanning_walls"] == []
        assert output["building_pixels"] == 121 * 121

    def test_help(self):
        result = run_cli("--help")
        assert result.returncode == 0
        assert "room" in result.stdout
        assert "envelope" in result.stdout
