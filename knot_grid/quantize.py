from __future__ import annotations

"""
Median-cut palette extraction.

Exports:
  median_cut(sample, depth) -> list[Colour]
  extract_palette(rgb, depth=QUANTIZE_DEPTH, max_dim=QUANTIZE_MAX_DIM) -> list[Colour]
  sample_pixels(rgb, max_dim) -> (N,3) uint8
"""

from typing import List

import numpy as np
from PIL import Image

from .core_types import Colour, U8Image, assert_u8_image_rgb, round_half_up
from .utils import debug_log, key_value_pairs_to_string

QUANTIZE_DEPTH = 4  # up to 2**4 colours before dedup
QUANTIZE_MAX_DIM = 200  # longest side of the sampled image


class EmptySampleError(ValueError):
    """Median cut was asked to summarise zero pixels."""


def _widest_channel(sample: np.ndarray) -> int:
    """Channel index with the largest max-min range; ties prefer r, then g."""
    ranges = sample.max(axis=0).astype(np.int32) - sample.min(axis=0).astype(np.int32)
    return int(np.argmax(ranges))


def _mean_colour(sample: np.ndarray) -> Colour:
    means = sample.astype(np.float64).mean(axis=0)
    return Colour(*(round_half_up(float(m)) for m in means))


def _cut(sample: np.ndarray, depth: int, out: List[Colour]) -> None:
    n = sample.shape[0]
    if n == 0:
        # A one-pixel bucket splits into [] and [pixel]; the empty half adds nothing.
        return
    if depth <= 0:
        out.append(_mean_colour(sample))
        return

    channel = _widest_channel(sample)
    ordered = sample[np.argsort(sample[:, channel], kind="stable")]
    mid = n // 2
    _cut(ordered[:mid], depth - 1, out)
    _cut(ordered[mid:], depth - 1, out)


def median_cut(sample: np.ndarray, depth: int = QUANTIZE_DEPTH) -> List[Colour]:
    """
    Recursively split the sample along its widest channel and return one mean
    colour per leaf bucket, in bucket order (not deduplicated).

    Raises:
      EmptySampleError: the sample holds no pixels.
    """
    arr = np.asarray(sample, dtype=np.uint8).reshape(-1, 3)
    if arr.shape[0] == 0:
        raise EmptySampleError("cannot quantize an empty pixel sample")
    if depth < 0:
        raise ValueError("depth must be >= 0")
    out: List[Colour] = []
    _cut(arr, int(depth), out)
    return out


def dedupe_by_hex(colours: List[Colour]) -> List[Colour]:
    """Drop repeated colours by hex, keeping first occurrence order."""
    seen = set()
    unique: List[Colour] = []
    for c in colours:
        if c.hex in seen:
            continue
        seen.add(c.hex)
        unique.append(c)
    return unique


def sample_pixels(rgb: U8Image, max_dim: int = QUANTIZE_MAX_DIM) -> np.ndarray:
    """Downscale so the longest side is <= max_dim, then flatten to (N,3)."""
    rgb = assert_u8_image_rgb(rgb)[..., :3]
    height, width = rgb.shape[0], rgb.shape[1]
    scale = min(1.0, max_dim / float(max(width, height, 1)))
    if scale < 1.0:
        new_w = max(1, int(width * scale))
        new_h = max(1, int(height * scale))
        small = Image.fromarray(np.ascontiguousarray(rgb)).resize(
            (new_w, new_h), Image.Resampling.BOX
        )
        rgb = np.array(small, dtype=np.uint8)
    return rgb.reshape(-1, 3)


def extract_palette(
    rgb: U8Image,
    depth: int = QUANTIZE_DEPTH,
    max_dim: int = QUANTIZE_MAX_DIM,
    debug: bool = False,
) -> List[Colour]:
    """Representative palette for an image: sample, median cut, dedupe by hex."""
    sample = sample_pixels(rgb, max_dim)
    leaves = median_cut(sample, depth)
    palette = dedupe_by_hex(leaves)
    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Sample", int(sample.shape[0])),
                    ("Depth", int(depth)),
                    ("Leaves", len(leaves)),
                    ("Palette", len(palette)),
                ]
            )
        )
    return palette


__all__ = [
    "QUANTIZE_DEPTH",
    "QUANTIZE_MAX_DIM",
    "EmptySampleError",
    "median_cut",
    "dedupe_by_hex",
    "sample_pixels",
    "extract_palette",
]
