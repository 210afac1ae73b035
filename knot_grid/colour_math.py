from __future__ import annotations

"""
Colour metrics and blending.

Exports:
  distance(c1, c2)                 redmean weighted RGB distance
  distance_vec(src_rgb, pal_rgb)   same metric, (N,3) x (P,3) -> (N,P)
  nearest_palette_indices(src_rgb, pal_rgb)
  blend(background, foreground, alpha)
"""

import math

import numpy as np

from .core_types import Colour, U8Image, clamp_value, round_half_up


def distance(c1: Colour, c2: Colour) -> float:
    """
    Redmean distance: weighted Euclidean RGB where the red/blue weights follow
    the mean red level of the pair.
    """
    rmean = (c1.r + c2.r) / 2.0
    dr = c1.r - c2.r
    dg = c1.g - c2.g
    db = c1.b - c2.b
    w_r = (512.0 + rmean) / 256.0
    w_b = (767.0 - rmean) / 256.0
    return math.sqrt(w_r * (dr * dr) + 4.0 * (dg * dg) + w_b * (db * db))


def distance_vec(src_rgb: np.ndarray, pal_rgb: np.ndarray) -> np.ndarray:
    """
    Vectorised redmean distance between every source row and every palette row.

    Args:
      src_rgb: (N,3) channel values 0..255
      pal_rgb: (P,3) channel values 0..255
    Returns:
      float64 (N,P)
    """
    src = np.asarray(src_rgb, dtype=np.float64).reshape(-1, 3)
    pal = np.asarray(pal_rgb, dtype=np.float64).reshape(-1, 3)
    rmean = (src[:, None, 0] + pal[None, :, 0]) / 2.0
    diff = src[:, None, :] - pal[None, :, :]
    dr2 = diff[..., 0] * diff[..., 0]
    dg2 = diff[..., 1] * diff[..., 1]
    db2 = diff[..., 2] * diff[..., 2]
    w_r = (512.0 + rmean) / 256.0
    w_b = (767.0 - rmean) / 256.0
    return np.sqrt(w_r * dr2 + 4.0 * dg2 + w_b * db2)


def nearest_palette_indices(src_rgb: np.ndarray, pal_rgb: U8Image) -> np.ndarray:
    """
    For each source row, index of the palette row with the smallest distance.
    np.argmin returns the first minimum, so ties go to the earlier palette entry.
    """
    return np.argmin(distance_vec(src_rgb, pal_rgb), axis=1).astype(np.int32)


def blend(background: Colour, foreground: Colour, alpha: float) -> Colour:
    """Alpha-blend foreground over background; alpha >= 1 returns foreground as-is."""
    if alpha >= 1.0:
        return foreground
    inv = 1.0 - alpha
    channels = [
        int(clamp_value(round_half_up(bg * inv + fg * alpha), 0, 255))
        for bg, fg in zip(background.rgb, foreground.rgb)
    ]
    return Colour(*channels)


__all__ = ["distance", "distance_vec", "nearest_palette_indices", "blend"]
