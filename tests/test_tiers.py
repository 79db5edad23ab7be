"""Tests for rarity tiers."""

import numpy as np
import pytest

from blobpaint.core import (
    BLACK,
    CUMULATIVE_CAPACITIES,
    TIER_CAPACITIES,
    TIER_COLORS,
    WHITE,
    Color,
    assign_tiers,
    tier_for_rank,
)


def distinct_colors(count):
    return [Color(20 + i % 200, 20 + i // 200, 50) for i in range(count)]


def row_image(colors):
    pixels = np.array(colors, dtype=np.uint8).reshape(-1, 4)
    return pixels, len(colors), 1


def count_color(out, color):
    return int(np.all(out == np.array(color, dtype=np.uint8), axis=1).sum())


def test_ladder_constants():
    assert TIER_CAPACITIES == (2187, 729, 243, 81, 27, 9, 3, 1)
    assert CUMULATIVE_CAPACITIES == (2187, 2916, 3159, 3240, 3267, 3276, 3279, 3280)
    assert [color.r for color in TIER_COLORS] == [111, 122, 133, 144, 155, 166, 177, 188]


@pytest.mark.parametrize(
    "rank, tier",
    [(0, 0), (2186, 0), (2187, 1), (2915, 1), (2916, 2), (3278, 6), (3279, 7), (3280, 8), (5000, 8)],
)
def test_tier_for_rank(rank, tier):
    assert tier_for_rank(rank) == tier


def test_2200_colors_fill_first_two_tiers():
    """Test 2200 equally common colors plus an edge pixel."""
    pixels, width, height = row_image(distinct_colors(2200) + [BLACK])
    out, tier_by_color = assign_tiers(pixels, width, height, rng=0)
    assert count_color(out, TIER_COLORS[0]) == 2187
    assert count_color(out, TIER_COLORS[1]) == 13
    assert count_color(out, WHITE) == 1
    assert len(tier_by_color) == 2200
    assert Color(*out[-1].tolist()) == WHITE


def test_overflow_tier_is_black():
    pixels, width, height = row_image(distinct_colors(3281))
    out, tier_by_color = assign_tiers(pixels, width, height, rng=1)
    assert count_color(out, BLACK) == 1
    assert sorted(tier_by_color.values()).count(8) == 1


def test_cumulative_capacity_is_never_exceeded():
    pixels, width, height = row_image(distinct_colors(3300))
    _, tier_by_color = assign_tiers(pixels, width, height, rng=2)
    tiers = list(tier_by_color.values())
    for tier, capacity in enumerate(CUMULATIVE_CAPACITIES):
        assert sum(1 for t in tiers if t <= tier) <= capacity


def test_rarest_color_falls_past_the_first_tier():
    colors = distinct_colors(2188)
    rare = colors[0]
    pixels, width, height = row_image([rare] + [c for c in colors[1:] for _ in range(2)])
    _, tier_by_color = assign_tiers(pixels, width, height, rng=3)
    assert tier_by_color[rare] == 1
    assert all(tier == 0 for color, tier in tier_by_color.items() if color != rare)


def test_same_seed_same_tiers():
    pixels, width, height = row_image(distinct_colors(2500))
    first, _ = assign_tiers(pixels, width, height, rng=5)
    second, _ = assign_tiers(pixels, width, height, rng=5)
    assert np.array_equal(first, second)


def test_only_edge_pixels():
    pixels, width, height = row_image([WHITE, BLACK, Color(3, 3, 3, 0)])
    out, tier_by_color = assign_tiers(pixels, width, height)
    assert tier_by_color == {}
    assert all(Color(*pixel) == WHITE for pixel in out.tolist())
