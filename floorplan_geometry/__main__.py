"""
Main entry point for the floorplan_geometry package.

Allows running: python -m floorplan_geometry <command>
"""

import sys
from floorplan_geometry.cli import main

if __name__ == "__main__":
    sys.exit(main())
