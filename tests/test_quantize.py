"""Median-cut palette extraction."""

import numpy as np
import pytest

from knot_grid.core_types import Colour
from knot_grid.quantize import (
    EmptySampleError,
    dedupe_by_hex,
    extract_palette,
    median_cut,
    sample_pixels,
)

from conftest import solid_rgb


@pytest.mark.parametrize("n", [1, 2, 7, 64])
@pytest.mark.parametrize("depth", [0, 1, 4, 6])
def test_uniform_sample_gives_single_colour(n, depth):
    sample = np.tile(np.array([[12, 34, 56]], dtype=np.uint8), (n, 1))
    assert dedupe_by_hex(median_cut(sample, depth)) == [Colour(12, 34, 56)]


def test_separated_clusters_are_kept_apart():
    sample = np.array([[0, 0, 0]] * 50 + [[255, 255, 255]] * 50, dtype=np.uint8)
    leaves = median_cut(sample, 1)
    assert leaves == [Colour(0, 0, 0), Colour(255, 255, 255)]
    assert Colour(128, 128, 128) not in leaves


def test_deeper_cut_on_clusters_dedupes_to_two():
    sample = np.array([[255, 255, 255]] * 50 + [[0, 0, 0]] * 50, dtype=np.uint8)
    assert dedupe_by_hex(median_cut(sample, 4)) == [Colour(0, 0, 0), Colour(255, 255, 255)]


def test_depth_zero_is_rounded_mean():
    sample = np.array([[0, 0, 0], [1, 2, 3]], dtype=np.uint8)
    # means 0.5, 1.0, 1.5 round half up
    assert median_cut(sample, 0) == [Colour(1, 1, 2)]


def test_split_axis_prefers_red_then_green_on_ties():
    # r and g both span 100; split on r puts (0, 100, 0) with (0, 0, 0)
    sample = np.array([[0, 0, 0], [100, 0, 0], [0, 100, 0], [100, 100, 0]], dtype=np.uint8)
    assert median_cut(sample, 1) == [Colour(0, 50, 0), Colour(100, 50, 0)]
    # only g and b tie: split on g
    sample = np.array([[0, 0, 0], [0, 0, 100], [0, 100, 0], [0, 100, 100]], dtype=np.uint8)
    assert median_cut(sample, 1) == [Colour(0, 0, 50), Colour(0, 100, 50)]


def test_odd_bucket_splits_at_floor_half():
    sample = np.array([[0, 0, 0], [10, 0, 0], [20, 0, 0]], dtype=np.uint8)
    assert median_cut(sample, 1) == [Colour(0, 0, 0), Colour(15, 0, 0)]


def test_at_most_two_to_the_depth_leaves():
    rng = np.random.default_rng(7)
    sample = rng.integers(0, 256, size=(500, 3), dtype=np.uint8)
    for depth in range(5):
        assert 1 <= len(median_cut(sample, depth)) <= 2 ** depth


def test_empty_sample_is_an_error():
    with pytest.raises(EmptySampleError):
        median_cut(np.zeros((0, 3), dtype=np.uint8), 4)


def test_negative_depth_rejected():
    with pytest.raises(ValueError):
        median_cut(np.zeros((1, 3), dtype=np.uint8), -1)


def test_dedupe_keeps_first_occurrence_order():
    a, b = Colour(1, 1, 1), Colour(2, 2, 2)
    assert dedupe_by_hex([b, a, b, a]) == [b, a]


def test_sample_pixels_caps_longest_side():
    img = solid_rgb(400, 100, (5, 6, 7))
    sample = sample_pixels(img, max_dim=200)
    assert sample.shape == (200 * 50, 3)
    assert (sample == [5, 6, 7]).all()


def test_sample_pixels_leaves_small_images_alone():
    img = solid_rgb(30, 20, (1, 2, 3))
    assert sample_pixels(img, max_dim=200).shape == (600, 3)


def test_extract_palette_from_two_tone_image():
    img = solid_rgb(40, 40, (200, 10, 10))
    img[:, 20:] = (10, 10, 200)
    palette = extract_palette(img, depth=4)
    assert set(c.hex for c in palette) == {"#c80a0a", "#0a0ac8"}
