# knot_grid/__init__.py
"""
knot_grid package.

Purpose:
  Turn an image into a rug knot chart: a cols x rows grid of colour cells,
  optionally snapped to a palette, hand-editable, rendered with gridlines.
  See cli.py for the command line.

Public API:
  Session        : owns source, config, grid store and paint tools.
  GridConfig     : frozen grid settings.
  Palette        : ordered palette with presets and edit helpers.
  Colour, Grid   : knot value types.
  build_grid     : source pixels + config -> Grid (pure).
  render_grid    : Grid -> Pillow image with overlays.
  ProjectSnapshot: JSON save/restore of an edited grid.

Quick start:
  from knot_grid import Session
  s = Session()
  s.load_source("photo.jpg"); s.wait_for_source()
  s.render().save("chart.png")
"""

__version__ = "0.1.0"

# Re-export namespaces for convenience.
from . import colour_math
from . import core_types
from . import palette_data
from . import utils

from .config import GridConfig
from .core_types import BLACK, WHITE, Colour, Grid
from .grid_store import GridStore
from .image_io import ImageDecodeError, SourceImage, load_image_rgb
from .paint import PaintEngine, Tool, ToolState
from .palette_data import PRESET_PALETTES, Palette
from .pipeline import build_grid
from .project import ProjectSnapshot
from .quantize import EmptySampleError, extract_palette, median_cut
from .render import render_grid
from .session import Session

__all__ = [
    "__version__",
    "colour_math",
    "core_types",
    "palette_data",
    "utils",
    "GridConfig",
    "Colour",
    "Grid",
    "WHITE",
    "BLACK",
    "GridStore",
    "ImageDecodeError",
    "SourceImage",
    "load_image_rgb",
    "PaintEngine",
    "Tool",
    "ToolState",
    "PRESET_PALETTES",
    "Palette",
    "build_grid",
    "ProjectSnapshot",
    "EmptySampleError",
    "extract_palette",
    "median_cut",
    "render_grid",
    "Session",
]
