from __future__ import annotations

"""
Source image -> Grid: rasterize, then optionally snap to the palette.
Pure functions; every call returns a brand-new Grid.
"""

from typing import Union

from PIL import Image

from .config import GridConfig
from .core_types import Grid, U8Image, grid_from_array
from .mapper import map_to_palette
from .rasterize import rasterize


def build_grid_array(
    rgb: U8Image,
    config: GridConfig,
    resample: Union[str, Image.Resampling] = "box",
) -> U8Image:
    """uint8 [rows, cols, 3] knot colours for a source image under a config."""
    raw = rasterize(rgb, config.cols, config.rows, config.contrast, resample)
    if config.use_palette:
        return map_to_palette(raw, config.palette.colours)
    return raw


def build_grid(
    rgb: U8Image,
    config: GridConfig,
    resample: Union[str, Image.Resampling] = "box",
) -> Grid:
    """Grid of knots for a source image under a config."""
    return grid_from_array(build_grid_array(rgb, config, resample))


__all__ = ["build_grid_array", "build_grid"]
