"""Bucket colors into a fixed ladder of gray tiers by how common they are.

The ladder holds 3**7, 3**6, ... 3**0 colors per tier. Colors are walked from
the most frequent to the rarest, so the bulk of an image's colors lands in
the wide early tiers and the rarest few are isolated in the narrow last ones.
Colors with equal counts are ordered by a uniform shuffle.
"""

import bisect
import itertools
import logging

import numpy as np

from .colors import BLACK, WHITE, Color, edge_keys_mask
from .pixel_codec import check_pixels, pack_pixels

logger = logging.getLogger(__name__)

TIER_CAPACITIES = tuple(3 ** power for power in range(7, -1, -1))
CUMULATIVE_CAPACITIES = tuple(itertools.accumulate(TIER_CAPACITIES))
TIER_COLORS = tuple(Color(level, level, level) for level in range(111, 189, 11))
OVERFLOW_TIER = len(TIER_CAPACITIES)
OVERFLOW_COLOR = BLACK
EDGE_TIER_COLOR = WHITE


def tier_for_rank(rank):
    """Smallest tier whose cumulative capacity exceeds ``rank``, else the overflow tier."""
    if rank < 0:
        raise ValueError(f"Rank must be non-negative, got {rank}")
    return bisect.bisect_right(CUMULATIVE_CAPACITIES, rank)


def tier_color(tier):
    if tier == OVERFLOW_TIER:
        return OVERFLOW_COLOR
    return TIER_COLORS[tier]


def rank_colors(keys, counts, rng=None):
    """Order distinct color keys most frequent first, shuffling ties."""
    rng = np.random.default_rng(rng)
    order = rng.permutation(len(keys))
    # Stable sort keeps the shuffled order among equal counts.
    order = order[np.argsort(-np.asarray(counts)[order], kind="stable")]
    return np.asarray(keys)[order]


def assign_tiers(pixels, width, height, rng=None):
    """Recolor an image by color tier.

    Returns ``(out, tier_by_color)``: edge pixels become white, every other
    pixel the gray of its color's tier (black past the last tier).
    """
    pixels = check_pixels(pixels, width, height)
    keys = pack_pixels(pixels)
    edges = edge_keys_mask(keys)
    distinct, counts = np.unique(keys[~edges], return_counts=True)
    ranked = rank_colors(distinct, counts, rng)

    # Tier per distinct key, aligned with the sorted ``distinct`` array.
    tiers = np.empty(len(distinct), dtype=np.intp)
    tiers[np.searchsorted(distinct, ranked)] = np.searchsorted(
        CUMULATIVE_CAPACITIES, np.arange(len(ranked)), side="right"
    )
    palette = np.array([tier_color(tier) for tier in range(OVERFLOW_TIER + 1)], dtype=np.uint8)

    out = np.empty_like(pixels)
    out[edges] = EDGE_TIER_COLOR
    out[~edges] = palette[tiers[np.searchsorted(distinct, keys[~edges])]]
    logger.debug("Assigned %d colors to tiers", len(distinct))
    tier_by_color = {
        Color.from_key(key): tier for key, tier in zip(distinct.tolist(), tiers.tolist())
    }
    return out, tier_by_color
