"""
Command-line interface for floor plan geometry extraction.

Usage:
    python -m floorplan_geometry room <image_path> --x 120 --y 80 [--ppu 0.5] [--output json|visual]
    python -m floorplan_geometry envelope <image_path> [--ppu 0.5] [--spanning] [--output json|visual]
    python -m floorplan_geometry --help
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml

from floorplan_geometry.config.detection_config import DetectionConfig
from floorplan_geometry.raster.models import RasterBuffer

# Exit code when the image was read but no geometry was found
EXIT_NOT_FOUND = 2


def setup_argparse() -> argparse.ArgumentParser:
    """Set up argument parser."""
    parser = argparse.ArgumentParser(
        prog="floorplan_geometry",
        description="Extract room and building geometry from raster floor plans",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_common(sub):
        sub.add_argument(
            "image_path",
            type=str,
            help="Path to the input image",
        )
        sub.add_argument(
            "--ppu",
            type=float,
            default=1.0,
            help="Pixels per length unit, e.g. pixels per cm (default: 1.0)",
        )
        sub.add_argument(
            "--config",
            type=str,
            help="YAML configuration file",
        )
        sub.add_argument(
            "--output",
            "-o",
            choices=["json", "visual"],
            default="json",
            help="Output format (default: json)",
        )
        sub.add_argument(
            "--output-path",
            type=str,
            help="Output file path (for visual mode)",
        )

    room_parser = subparsers.add_parser(
        "room",
        help="Detect the room containing a seed pixel",
    )
    add_common(room_parser)
    room_parser.add_argument("--x", type=int, required=True, help="Seed column")
    room_parser.add_argument("--y", type=int, required=True, help="Seed row")
    room_parser.add_argument(
        "--max-area",
        type=float,
        help="Largest room area in square units (default: from config)",
    )
    room_parser.add_argument(
        "--cleanup",
        action="store_true",
        help="Remove micro-bumps and stacked walls from the polygon",
    )
    room_parser.add_argument(
        "--preprocess",
        action="store_true",
        help="Strip colored annotations before detection",
    )

    envelope_parser = subparsers.add_parser(
        "envelope",
        help="Detect the building envelope",
    )
    add_common(envelope_parser)
    envelope_parser.add_argument(
        "--spanning",
        action="store_true",
        help="Also detect structural spanning walls",
    )

    return parser


def _load(args):
    """Load image and config, or print an error and return None."""
    if args.ppu <= 0:
        print(f"Error: --ppu must be > 0, got {args.ppu}", file=sys.stderr)
        return None

    image_path = Path(args.image_path)
    if not image_path.exists():
        print(f"Error: Image not found: {image_path}", file=sys.stderr)
        return None

    try:
        buffer = RasterBuffer.load(str(image_path))
    except ValueError:
        print(f"Error: Could not load image: {image_path}", file=sys.stderr)
        return None

    try:
        config = DetectionConfig.from_yaml(args.config) if args.config else DetectionConfig.default()
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: Invalid config: {e}", file=sys.stderr)
        return None

    return image_path, buffer, config


def cmd_room(args) -> int:
    """Handle room command."""
    from floorplan_geometry.contour.cleanup import remove_micro_bumps, remove_stacked_walls
    from floorplan_geometry.detection.room_detector import RoomDetector
    from floorplan_geometry.raster.preprocessing import preprocess_for_room_detection
    from floorplan_geometry.visualization import draw_detection_overlay, save_overlay

    loaded = _load(args)
    if loaded is None:
        return 1
    image_path, buffer, config = loaded

    work = buffer
    if args.preprocess:
        work = buffer.copy()
        preprocess_for_room_detection(work, args.ppu, config.rules)

    detector = RoomDetector(config)
    result = detector.detect(work, args.x, args.y, args.ppu, args.max_area)
    if result is None:
        print(json.dumps({"found": False}))
        return EXIT_NOT_FOUND

    if args.cleanup:
        max_px = config.rules.max_wall_thickness * args.ppu
        cleaned = remove_micro_bumps(result.polygon, max_px)
        result.polygon = remove_stacked_walls(cleaned, max_px, config.rules.angle_tolerance_deg)

    if args.output == "json":
        print(json.dumps(result.to_dict(), indent=2))

    elif args.output == "visual":
        vis = draw_detection_overlay(buffer, result, seed=(args.x, args.y))
        output_path = args.output_path
        if output_path is None:
            output_path = str(image_path.stem) + "_room.png"
        save_overlay(vis, output_path)
        print(f"Visualization saved to: {output_path}")

    return 0


def cmd_envelope(args) -> int:
    """Handle envelope command."""
    from floorplan_geometry.detection.envelope_detector import EnvelopeDetector
    from floorplan_geometry.visualization import draw_envelope_overlay, save_overlay

    loaded = _load(args)
    if loaded is None:
        return 1
    image_path, buffer, config = loaded

    result = EnvelopeDetector(config).detect(buffer, args.ppu, detect_spanning=args.spanning)
    if result is None:
        print(json.dumps({"found": False}))
        return EXIT_NOT_FOUND

    if args.output == "json":
        print(json.dumps(result.to_dict(), indent=2))

    elif args.output == "visual":
        vis = draw_envelope_overlay(buffer, result)
        output_path = args.output_path
        if output_path is None:
            output_path = str(image_path.stem) + "_envelope.png"
        save_overlay(vis, output_path)
        print(f"Visualization saved to: {output_path}")

    return 0


def main(argv=None) -> int:
    """Main entry point."""
    parser = setup_argparse()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "room":
        return cmd_room(args)

    if args.command == "envelope":
        return cmd_envelope(args)

    return 0


if __name__ == "__main__":
    sys.exit(main())
