"""Nearest palette colour mapping."""

import numpy as np

from knot_grid.core_types import Colour
from knot_grid.mapper import map_colour, map_to_palette
from knot_grid.palette_data import Palette

BLACK_ISH = [Colour(0, 0, 0), Colour(0, 0, 2)]


def test_equidistant_colour_maps_to_first_entry():
    sample = Colour(0, 0, 1)
    assert map_colour(sample, BLACK_ISH) == Colour(0, 0, 0)
    assert map_colour(sample, BLACK_ISH[::-1]) == Colour(0, 0, 2)


def test_array_mapper_agrees_on_ties():
    raw = np.array([[[0, 0, 1]]], dtype=np.uint8)
    assert map_to_palette(raw, BLACK_ISH).tolist() == [[[0, 0, 0]]]
    assert map_to_palette(raw, BLACK_ISH[::-1]).tolist() == [[[0, 0, 2]]]


def test_exact_palette_colours_map_to_themselves():
    palette = Palette.from_preset("modern")
    raw = np.array([[c.rgb for c in palette]], dtype=np.uint8)
    assert (map_to_palette(raw, palette.colours) == raw).all()


def test_every_output_cell_is_a_palette_entry():
    palette = Palette.from_preset("traditional")
    rng = np.random.default_rng(11)
    raw = rng.integers(0, 256, size=(9, 13, 3), dtype=np.uint8)
    out = map_to_palette(raw, palette.colours)
    allowed = {c.rgb for c in palette}
    assert out.shape == raw.shape
    assert {tuple(px) for px in out.reshape(-1, 3).tolist()} <= allowed
    for y in range(raw.shape[0]):
        for x in range(raw.shape[1]):
            expected = map_colour(Colour.from_rgb(raw[y, x]), palette.colours)
            assert tuple(out[y, x]) == expected.rgb


def test_redmean_picks_nearest_entry():
    palette = [Colour(0, 128, 0), Colour(128, 0, 0)]
    assert map_colour(Colour(100, 60, 0), palette) == Colour(128, 0, 0)


def test_empty_palette_passes_through():
    raw = np.array([[[1, 2, 3], [4, 5, 6]]], dtype=np.uint8)
    out = map_to_palette(raw, [])
    assert out is not raw
    assert (out == raw).all()
    assert map_colour(Colour(1, 2, 3), []) == Colour(1, 2, 3)
