from __future__ import annotations

"""
Rasterizer: source image -> cols x rows knot samples.

Contrast is applied at full resolution in float, then each channel is resized
as a Pillow "F" plane so the box filter averages unrounded values.
"""

from typing import Union

import numpy as np
from PIL import Image

from .core_types import F32Image, U8Image, assert_u8_image_rgb
from .utils import pillow_resample_from_name


def apply_contrast(rgb: U8Image, contrast: float) -> F32Image:
    """(in - 128) * contrast + 128, clamped to [0, 255]. Returns float32."""
    arr = assert_u8_image_rgb(rgb)[..., :3].astype(np.float32)
    out = (arr - 128.0) * np.float32(contrast) + 128.0
    return np.clip(out, 0.0, 255.0).astype(np.float32, copy=False)


def resample_planes(
    rgb_f: F32Image,
    cols: int,
    rows: int,
    resample: Union[str, Image.Resampling] = "box",
) -> F32Image:
    """Resize a float (H,W,3) image to (rows, cols, 3), channel by channel."""
    if cols < 1 or rows < 1:
        raise ValueError(f"grid must be at least 1x1, got {cols}x{rows}")
    res_enum = (
        pillow_resample_from_name(resample) if isinstance(resample, str) else resample
    )
    planes = []
    for ch in range(3):
        plane = Image.fromarray(np.ascontiguousarray(rgb_f[..., ch], dtype=np.float32))
        planes.append(np.asarray(plane.resize((cols, rows), res_enum), dtype=np.float32))
    return np.stack(planes, axis=-1)


def quantize_channels(rgb_f: F32Image) -> U8Image:
    """Round half up and clamp float channels to uint8."""
    return np.clip(np.floor(rgb_f + 0.5), 0, 255).astype(np.uint8)


def rasterize(
    rgb: U8Image,
    cols: int,
    rows: int,
    contrast: float = 1.0,
    resample: Union[str, Image.Resampling] = "box",
) -> U8Image:
    """
    Raw sampled grid for a source image.

    Args:
      rgb      : uint8 [H,W,3] source pixels
      cols     : grid width in knots
      rows     : grid height in knots
      contrast : contrast factor applied before downsampling
      resample : "box" (area average, default) or another Pillow filter name
    Returns:
      uint8 [rows, cols, 3]
    """
    adjusted = apply_contrast(rgb, contrast)
    return quantize_channels(resample_planes(adjusted, cols, rows, resample))


__all__ = ["apply_contrast", "resample_planes", "quantize_channels", "rasterize"]
