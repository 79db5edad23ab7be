"""Tests for recoloring blobs."""

import numpy as np

from blobpaint.core import WHITE, Color, ColorGenerator, find_blobs, recolor_blobs

from conftest import RED


def two_red_blobs(make_image):
    return make_image([[RED, RED, WHITE, RED], [WHITE, WHITE, WHITE, RED]])


def colors_at(pixels, indices):
    return {Color(*pixels[index].tolist()) for index in indices}


def test_contiguous_mode_colors_each_blob(make_image):
    """Test two disconnected red blobs get two different colors."""
    pixels, width, height = two_red_blobs(make_image)
    blobs = find_blobs(pixels, width, height)
    out = recolor_blobs(pixels, blobs, contiguous=True, generator=ColorGenerator(seed=3))
    first = colors_at(out, blobs[0].indices)
    second = colors_at(out, blobs[1].indices)
    assert len(first) == 1 and len(second) == 1
    assert first != second
    assert RED not in first | second


def test_grouped_mode_shares_color(make_image):
    pixels, width, height = two_red_blobs(make_image)
    blobs = find_blobs(pixels, width, height)
    out = recolor_blobs(pixels, blobs, contiguous=False, generator=ColorGenerator(seed=3))
    all_red = np.concatenate([blob.indices for blob in blobs])
    painted = colors_at(out, all_red)
    assert len(painted) == 1
    assert RED not in painted


def test_edge_pixels_are_kept(make_image):
    pixels, width, height = two_red_blobs(make_image)
    out = recolor_blobs(pixels, find_blobs(pixels, width, height), generator=ColorGenerator(seed=0))
    for index in (2, 4, 5, 6):
        assert Color(*out[index].tolist()) == WHITE
    # input untouched
    assert Color(*pixels[0].tolist()) == RED


def test_recolor_is_deterministic_with_seed(make_image):
    pixels, width, height = two_red_blobs(make_image)
    blobs = find_blobs(pixels, width, height)
    first = recolor_blobs(pixels, blobs, generator=ColorGenerator(seed=9))
    second = recolor_blobs(pixels, blobs, generator=ColorGenerator(seed=9))
    assert np.array_equal(first, second)


def test_recolor_without_blobs_copies(make_image):
    pixels, width, height = make_image([[WHITE, WHITE]])
    out = recolor_blobs(pixels, [])
    assert np.array_equal(out, pixels)
    assert out is not pixels
