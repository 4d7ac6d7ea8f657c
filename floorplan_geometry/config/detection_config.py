"""
Detection configuration.

Every tuned constant of the room, envelope and spanning-wall detectors is
a dataclass field here. Lengths are in real-world units (e.g. cm) unless
the field name ends in _px; detectors convert them with pixels_per_unit.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List, Tuple

from ..geometry import round_half_up as _round_half_up


@dataclass
class FloorPlanRules:
    """
    Drawing conventions supplied by the caller.

    Attributes:
        standard_angles_deg: Directions edges may snap to
        angle_tolerance_deg: Largest deviation that still snaps
        min_wall_thickness: Thinnest plausible wall
        max_wall_thickness: Thickest plausible wall
    """
    standard_angles_deg: Tuple[float, ...] = (0, 45, 90, 135, 180, 225, 270, 315)
    angle_tolerance_deg: float = 5.0
    min_wall_thickness: float = 5.0
    max_wall_thickness: float = 50.0

    def __post_init__(self):
        """Validate rules."""
        self.standard_angles_deg = tuple(float(a) for a in self.standard_angles_deg)
        if not self.standard_angles_deg:
            raise ValueError("standard_angles_deg must not be empty")
        if not (0.0 < self.angle_tolerance_deg <= 45.0):
            raise ValueError(
                f"angle_tolerance_deg must be in (0, 45], got {self.angle_tolerance_deg}"
            )
        if self.min_wall_thickness <= 0:
            raise ValueError(f"min_wall_thickness must be > 0, got {self.min_wall_thickness}")
        if self.max_wall_thickness <= self.min_wall_thickness:
            raise ValueError(
                f"max_wall_thickness must be > min_wall_thickness, got {self.max_wall_thickness}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "standard_angles_deg": list(self.standard_angles_deg),
            "angle_tolerance_deg": self.angle_tolerance_deg,
            "min_wall_thickness": self.min_wall_thickness,
            "max_wall_thickness": self.max_wall_thickness,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FloorPlanRules":
        defaults = cls()
        return cls(
            standard_angles_deg=tuple(data.get("standard_angles_deg", defaults.standard_angles_deg)),
            angle_tolerance_deg=data.get("angle_tolerance_deg", defaults.angle_tolerance_deg),
            min_wall_thickness=data.get("min_wall_thickness", defaults.min_wall_thickness),
            max_wall_thickness=data.get("max_wall_thickness", defaults.max_wall_thickness),
        )


@dataclass
class RoomDetectionSettings:
    """
    Settings for single-room detection from a seed pixel.

    Attributes:
        close_radii: Close radii tried in order, smallest first
        open_radius: Noise-removal open radius for the gray-range mask
        min_component_side: Side of the smallest wall component kept
        simplify_epsilon: Douglas-Peucker tolerance
        threshold_sweep: Fallback luminance thresholds
        max_area: Default largest room area (square units)
        min_gap: Narrowest door gap reported
        max_gap: Widest door gap reported
        search_depth: Distance probed on each side of an edge for wall
        max_dash: Longest wall dash merged across inside one opening
    """
    close_radii: Tuple[float, ...] = (20, 40, 66)
    open_radius: float = 4
    min_component_side: float = 8
    simplify_epsilon: float = 4
    threshold_sweep: Tuple[int, ...] = (180, 200, 220, 240)
    max_area: float = 100000
    min_gap: float = 45
    max_gap: float = 250
    search_depth: float = 15
    max_dash: float = 10

    def __post_init__(self):
        """Validate room settings."""
        self.close_radii = tuple(self.close_radii)
        self.threshold_sweep = tuple(int(t) for t in self.threshold_sweep)
        if not self.close_radii:
            raise ValueError("close_radii must not be empty")
        if any(r <= 0 for r in self.close_radii):
            raise ValueError(f"close_radii must all be > 0, got {self.close_radii}")
        if self.open_radius < 0:
            raise ValueError(f"open_radius must be >= 0, got {self.open_radius}")
        if self.min_component_side < 0:
            raise ValueError(f"min_component_side must be >= 0, got {self.min_component_side}")
        if self.simplify_epsilon <= 0:
            raise ValueError(f"simplify_epsilon must be > 0, got {self.simplify_epsilon}")
        if any(not (0 < t <= 256) for t in self.threshold_sweep):
            raise ValueError(f"threshold_sweep values must be in (0, 256], got {self.threshold_sweep}")
        if self.max_area <= 0:
            raise ValueError(f"max_area must be > 0, got {self.max_area}")
        if self.min_gap <= 0 or self.max_gap < self.min_gap:
            raise ValueError(f"gap bounds must satisfy 0 < min_gap <= max_gap, got {self.min_gap}, {self.max_gap}")

    def close_radii_px(self, pixels_per_unit: float) -> List[int]:
        """Close radii in pixels, each clamped to [3, 300]."""
        return [max(3, min(300, _round_half_up(r * pixels_per_unit))) for r in self.close_radii]

    def open_radius_px(self, pixels_per_unit: float) -> int:
        return max(0, min(5, _round_half_up(self.open_radius * pixels_per_unit)))

    def min_component_area_px(self, pixels_per_unit: float) -> int:
        side = _round_half_up(self.min_component_side * pixels_per_unit)
        return max(16, side * side)

    def simplify_epsilon_px(self, pixels_per_unit: float) -> int:
        return max(1, _round_half_up(self.simplify_epsilon * pixels_per_unit))

    def door_gap_params_px(self, pixels_per_unit: float) -> Dict[str, int]:
        """Door-gap scan parameters in pixels."""
        return {
            "min_gap_px": max(2, _round_half_up(self.min_gap * pixels_per_unit)),
            "max_gap_px": max(2, _round_half_up(self.max_gap * pixels_per_unit)),
            "search_depth_px": max(3, _round_half_up(self.search_depth * pixels_per_unit)),
            "max_dash_px": max(1, _round_half_up(self.max_dash * pixels_per_unit)),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "close_radii": list(self.close_radii),
            "open_radius": self.open_radius,
            "min_component_side": self.min_component_side,
            "simplify_epsilon": self.simplify_epsilon,
            "threshold_sweep": list(self.threshold_sweep),
            "max_area": self.max_area,
            "min_gap": self.min_gap,
            "max_gap": self.max_gap,
            "search_depth": self.search_depth,
            "max_dash": self.max_dash,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoomDetectionSettings":
        defaults = cls()
        return cls(**{k: data.get(k, v) for k, v in defaults.__dict__.items()})


@dataclass
class EnvelopeSettings:
    """
    Settings for whole-building envelope detection.

    Attributes:
        close_radius: Close radius sealing the widest exterior opening
        strict_open_radius: Extra open applied when a rough envelope is known
        min_wall_fraction: Lowest wall share of a threshold-sweep mask
        max_wall_fraction: Highest wall share of a threshold-sweep mask
        min_building_fraction: Smallest plausible building share of the image
        max_building_fraction: Largest plausible building share of the image
    """
    close_radius: float = 80
    strict_open_radius: float = 6
    min_wall_fraction: float = 0.005
    max_wall_fraction: float = 0.5
    min_building_fraction: float = 0.01
    max_building_fraction: float = 0.99

    def __post_init__(self):
        """Validate envelope settings."""
        if self.close_radius <= 0:
            raise ValueError(f"close_radius must be > 0, got {self.close_radius}")
        if self.strict_open_radius < 0:
            raise ValueError(f"strict_open_radius must be >= 0, got {self.strict_open_radius}")
        if not (0.0 <= self.min_wall_fraction < self.max_wall_fraction <= 1.0):
            raise ValueError(
                f"wall fractions must satisfy 0 <= min < max <= 1, got "
                f"{self.min_wall_fraction}, {self.max_wall_fraction}"
            )
        if not (0.0 <= self.min_building_fraction < self.max_building_fraction <= 1.0):
            raise ValueError(
                f"building fractions must satisfy 0 <= min < max <= 1, got "
                f"{self.min_building_fraction}, {self.max_building_fraction}"
            )

    def close_radius_px(self, pixels_per_unit: float) -> int:
        return max(3, min(300, _round_half_up(self.close_radius * pixels_per_unit)))

    def strict_open_radius_px(self, pixels_per_unit: float) -> int:
        return max(3, _round_half_up(self.strict_open_radius * pixels_per_unit))

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EnvelopeSettings":
        defaults = cls()
        return cls(**{k: data.get(k, v) for k, v in defaults.__dict__.items()})


@dataclass
class SpanningWallSettings:
    """
    Settings for structural spanning-wall detection.

    Attributes:
        density_threshold: Minimum wall-pixel share of a scan line
        span_threshold: Minimum first-to-last wall extent share of a scan line
        min_building_width_px: Scan lines narrower than this are ignored
        min_building_width: Minimum average building width at a band
        min_span_length: Minimum wall extent along the band
        gap_merge: Largest gap between bands that are merged
        num_samples: Perpendicular thickness probes per band
        consistency_ratio: Share of probes that must agree
        continuity_fraction: Largest along-band gap as a share of building width
        probe_margin_px: Probe length beyond the band height
    """
    density_threshold: float = 0.4
    span_threshold: float = 0.7
    min_building_width_px: int = 50
    min_building_width: float = 100
    min_span_length: float = 200
    gap_merge: float = 2
    num_samples: int = 5
    consistency_ratio: float = 0.8
    continuity_fraction: float = 0.25
    probe_margin_px: int = 10

    def __post_init__(self):
        """Validate spanning-wall settings."""
        for name in ("density_threshold", "span_threshold", "consistency_ratio", "continuity_fraction"):
            value = getattr(self, name)
            if not (0.0 < value <= 1.0):
                raise ValueError(f"{name} must be in (0, 1], got {value}")
        if self.num_samples < 1:
            raise ValueError(f"num_samples must be >= 1, got {self.num_samples}")
        if self.min_building_width_px < 1:
            raise ValueError(f"min_building_width_px must be >= 1, got {self.min_building_width_px}")
        if self.gap_merge < 0:
            raise ValueError(f"gap_merge must be >= 0, got {self.gap_merge}")
        if self.probe_margin_px < 0:
            raise ValueError(f"probe_margin_px must be >= 0, got {self.probe_margin_px}")

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SpanningWallSettings":
        defaults = cls()
        return cls(**{k: data.get(k, v) for k, v in defaults.__dict__.items()})


@dataclass
class DetectionConfig:
    """
    Top-level configuration bundling rules and detector settings.
    """
    rules: FloorPlanRules = field(default_factory=FloorPlanRules)
    room: RoomDetectionSettings = field(default_factory=RoomDetectionSettings)
    envelope: EnvelopeSettings = field(default_factory=EnvelopeSettings)
    spanning: SpanningWallSettings = field(default_factory=SpanningWallSettings)

    def __post_init__(self):
        """Convert nested dicts (e.g. from YAML) to settings objects."""
        if isinstance(self.rules, dict):
            self.rules = FloorPlanRules.from_dict(self.rules)
        if isinstance(self.room, dict):
            self.room = RoomDetectionSettings.from_dict(self.room)
        if isinstance(self.envelope, dict):
            self.envelope = EnvelopeSettings.from_dict(self.envelope)
        if isinstance(self.spanning, dict):
            self.spanning = SpanningWallSettings.from_dict(self.spanning)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "rules": self.rules.to_dict(),
            "room": self.room.to_dict(),
            "envelope": self.envelope.to_dict(),
            "spanning": self.spanning.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DetectionConfig":
        """Create from dictionary (e.g., from YAML config)."""
        return cls(
            rules=FloorPlanRules.from_dict(data.get("rules", {}) or {}),
            room=RoomDetectionSettings.from_dict(data.get("room", {}) or {}),
            envelope=EnvelopeSettings.from_dict(data.get("envelope", {}) or {}),
            spanning=SpanningWallSettings.from_dict(data.get("spanning", {}) or {}),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "DetectionConfig":
        """Load configuration from YAML file."""
        import yaml

        with open(yaml_path, "r") as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data.get("detection", data))

    @classmethod
    def default(cls) -> "DetectionConfig":
        """Create default configuration."""
        return cls()
