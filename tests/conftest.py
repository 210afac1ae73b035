"""Test configuration for knot_grid."""

from pathlib import Path
from typing import Tuple

import numpy as np
import pytest
from PIL import Image

from knot_grid.core_types import BLACK, Grid
from knot_grid.image_io import SourceImage


def solid_rgb(width: int, height: int, rgb: Tuple[int, int, int]) -> np.ndarray:
    img = np.empty((height, width, 3), dtype=np.uint8)
    img[...] = rgb
    return img


@pytest.fixture
def red_source() -> SourceImage:
    """Solid red 40x40 source."""
    return SourceImage(pixels=solid_rgb(40, 40, (255, 0, 0)), ref="red.png")


@pytest.fixture
def black_grid() -> Grid:
    return Grid.filled(3, 3, BLACK)


@pytest.fixture
def image_file(tmp_path: Path) -> Path:
    """A 20x10 PNG: left half black, right half white."""
    arr = solid_rgb(20, 10, (0, 0, 0))
    arr[:, 10:] = 255
    path = tmp_path / "halves.png"
    Image.fromarray(arr).save(path)
    return path
