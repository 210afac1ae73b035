# knot_grid/image_io.py
from __future__ import annotations

import io
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .core_types import U8Image

"""
Image I/O helpers: decode any Pillow-readable file to sRGB RGB pixels
(alpha flattened over white), asynchronous decode, and PNG saving.
"""

try:
    from PIL import ImageCms  # ICC conversion if profile present
except ImportError:  # pragma: no cover
    ImageCms = None  # type: ignore[assignment]

PathLike = Union[str, Path]

_decode_pool: Optional[ThreadPoolExecutor] = None


class ImageDecodeError(OSError):
    """The source could not be opened or decoded."""


@dataclass(frozen=True)
class SourceImage:
    """Decoded source raster plus the reference it was loaded from."""

    pixels: U8Image  # (H, W, 3)
    ref: str = ""

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])


def _convert_to_srgb_rgba(im: Image.Image) -> Image.Image:
    im = ImageOps.exif_transpose(im)
    icc_bytes = im.info.get("icc_profile")

    if icc_bytes and ImageCms is not None:
        try:
            src_prof = ImageCms.ImageCmsProfile(io.BytesIO(icc_bytes))
            dst_prof = ImageCms.createProfile("sRGB")
            im2 = ImageCms.profileToProfile(
                im,
                src_prof,
                dst_prof,
                renderingIntent=ImageCms.Intent.PERCEPTUAL,
                outputMode="RGBA",
            )
            if im2 is None:
                return im.convert("RGBA")
            return im2
        except (ImageCms.PyCMSError, OSError, ValueError):
            return im.convert("RGBA")

    return im.convert("RGBA")


def flatten_over_white(rgba: Image.Image) -> Image.Image:
    """Composite an RGBA image onto white and drop alpha."""
    background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
    return Image.alpha_composite(background, rgba).convert("RGB")


def image_to_rgb_array(im: Image.Image) -> U8Image:
    """Any Pillow image -> uint8 (H,W,3) sRGB, transparency over white."""
    return np.array(flatten_over_white(_convert_to_srgb_rgba(im)), dtype=np.uint8)


def load_image_rgb(path: PathLike) -> SourceImage:
    """
    Decode an image file.

    Raises:
      ImageDecodeError: missing file or unreadable image data.
    """
    path = Path(path)
    try:
        with Image.open(path) as im0:
            pixels = image_to_rgb_array(im0)
    except (UnidentifiedImageError, OSError) as e:
        raise ImageDecodeError(f"cannot decode {path}: {e}") from e
    if pixels.shape[0] == 0 or pixels.shape[1] == 0:
        raise ImageDecodeError(f"{path} has no pixels")
    return SourceImage(pixels=pixels, ref=str(path))


def _default_pool() -> ThreadPoolExecutor:
    global _decode_pool
    if _decode_pool is None:
        _decode_pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix="decode")
    return _decode_pool


def decode_image_async(
    path: PathLike, executor: Optional[Executor] = None
) -> "Future[SourceImage]":
    """Start decoding in the background; the future resolves to a SourceImage."""
    pool = executor if executor is not None else _default_pool()
    return pool.submit(load_image_rgb, path)


def save_png(path: PathLike, image: Image.Image) -> Path:
    """Save a rendered image as PNG (suffix forced to .png)."""
    path = Path(path)
    if path.suffix.lower() != ".png":
        path = path.with_suffix(".png")
    path.parent.mkdir(parents=True, exist_ok=True)
    image.save(path, format="PNG")
    return path


__all__ = [
    "ImageDecodeError",
    "SourceImage",
    "flatten_over_white",
    "image_to_rgb_array",
    "load_image_rgb",
    "decode_image_async",
    "save_png",
]
