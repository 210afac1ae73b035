from __future__ import annotations

"""
Palette mapper.

Functions:
  map_colour(colour, palette) -> Colour
  map_to_palette(raw_rgb, palette) -> U8Image

Each sampled colour is replaced by the palette entry at the smallest redmean
distance. Equal distances resolve to the earliest palette entry. An empty
palette leaves colours unchanged.
"""

from typing import Sequence

import numpy as np

from .colour_math import distance, nearest_palette_indices
from .core_types import Colour, U8Image, assert_u8_image_rgb


def map_colour(colour: Colour, palette: Sequence[Colour]) -> Colour:
    """Nearest palette entry for one colour (strict < keeps the first tie)."""
    if not palette:
        return colour
    best = palette[0]
    best_dist = float("inf")
    for entry in palette:
        d = distance(colour, entry)
        if d < best_dist:
            best_dist = d
            best = entry
    return best


def palette_to_array(palette: Sequence[Colour]) -> U8Image:
    """(P,3) uint8 rows in palette order."""
    return np.array([c.rgb for c in palette], dtype=np.uint8).reshape(-1, 3)


def map_to_palette(raw_rgb: U8Image, palette: Sequence[Colour]) -> U8Image:
    """
    Snap every cell of a raw sampled grid to its nearest palette entry.

    Args:
      raw_rgb : uint8 [rows, cols, 3]
      palette : ordered palette; order decides ties
    Returns:
      uint8 [rows, cols, 3], a new array
    """
    raw_rgb = assert_u8_image_rgb(raw_rgb)[..., :3]
    if len(palette) == 0:
        return raw_rgb.copy()

    pal_rgb = palette_to_array(palette)
    flat = raw_rgb.reshape(-1, 3)
    # Distances only depend on the colour, so work on uniques.
    uniques, inverse = np.unique(flat, axis=0, return_inverse=True)
    nearest = nearest_palette_indices(uniques, pal_rgb)
    mapped = pal_rgb[nearest][np.asarray(inverse).reshape(-1)]
    return mapped.reshape(raw_rgb.shape).astype(np.uint8, copy=False)


__all__ = ["map_colour", "palette_to_array", "map_to_palette"]
