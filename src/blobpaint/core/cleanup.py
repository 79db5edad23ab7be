"""Blob size checks and cleanup passes: merge, split, colony and edge contact."""

import logging

import numpy as np
from scipy import ndimage

from .blobs import (
    color_counts,
    find_blobs,
    isolated_colors,
    merge_blob_groups,
    neighbors_by_color,
)
from .colors import GREEN, RED, YELLOW, Color, ColorGenerator, edge_keys_mask, is_edge
from .pixel_codec import check_pixels, pack_pixels, unpack_keys

logger = logging.getLogger(__name__)


def remap_colors(pixels, mapping):
    """Replace colors according to ``mapping`` (Color -> Color)."""
    if not mapping:
        return pixels.copy()
    keys = pack_pixels(pixels)
    source = np.array([color.key for color in mapping], dtype=np.uint32)
    target = np.array([color.key for color in mapping.values()], dtype=np.uint32)
    order = np.argsort(source)
    source = source[order]
    target = target[order]
    position = np.clip(np.searchsorted(source, keys), 0, len(source) - 1)
    hit = source[position] == keys
    keys[hit] = target[position[hit]]
    return unpack_keys(keys)


def check_sizes(pixels, width, height, min_blob_size, max_blob_size, isle_blob_size):
    """Flag colors with too few (yellow) or too many (red) pixels.

    Isolated colors, which only touch edge colors, are held to
    ``isle_blob_size`` instead of ``min_blob_size``.
    """
    pixels = check_pixels(pixels, width, height)
    counts = color_counts(pixels)
    isles = isolated_colors(neighbors_by_color(pixels, width, height))
    mapping = {}
    for color, count in counts.items():
        if is_edge(color):
            continue
        minimum = isle_blob_size if color in isles else min_blob_size
        if count < minimum:
            mapping[color] = YELLOW
        elif count > max_blob_size:
            mapping[color] = RED
    logger.debug("%d of %d colors outside size limits", len(mapping), len(counts))
    return remap_colors(pixels, mapping)


def mark_edge_contact(pixels, width, height, contiguous=False):
    """Paint yellow what touches an edge color and green what does not.

    In grouped mode the decision is made per color over the whole image, in
    contiguous mode per blob.
    """
    pixels = check_pixels(pixels, width, height)
    out = pixels.copy()
    if not contiguous:
        mapping = {}
        for color, touching in neighbors_by_color(pixels, width, height).items():
            if not is_edge(color):
                mapping[color] = YELLOW if any(is_edge(other) for other in touching) else GREEN
        return remap_colors(pixels, mapping)

    edges = edge_keys_mask(pack_pixels(pixels)).reshape(height, width)
    near_edge = np.zeros_like(edges)
    near_edge[:, 1:] |= edges[:, :-1]
    near_edge[:, :-1] |= edges[:, 1:]
    near_edge[1:, :] |= edges[:-1, :]
    near_edge[:-1, :] |= edges[1:, :]
    near_edge = near_edge.reshape(-1)
    for blob in find_blobs(pixels, width, height):
        out[blob.indices] = YELLOW if near_edge[blob.indices].any() else GREEN
    return out


def merge_colors(pixels, width, height, min_blob_size, max_blob_size, isle_blob_size):
    """Fold undersized colors into a neighboring color.

    Every color below its minimum is paired with its smallest non-edge
    neighbor not yet paired, skipping neighbors of ``max_blob_size`` or more
    unless every neighbor is that large. The larger of the pair is repainted with
    the color of the smaller one.
    """
    pixels = check_pixels(pixels, width, height)
    sizes = {
        blob.color: blob.size for blob in merge_blob_groups(find_blobs(pixels, width, height))
    }
    neighbors = neighbors_by_color(pixels, width, height)
    isles = set()
    if isle_blob_size != min_blob_size:
        isles = {color for color in isolated_colors(neighbors) if sizes[color] < isle_blob_size}

    used = set()
    mapping = {}
    for color, size in sizes.items():
        if size >= (isle_blob_size if color in isles else min_blob_size):
            continue
        candidates = {other: sizes[other] for other in neighbors[color] if not is_edge(other)}
        only_big = all(other_size >= max_blob_size for other_size in candidates.values())
        eligible = [
            (other_size, other)
            for other, other_size in candidates.items()
            if other not in used and (other_size < max_blob_size or only_big)
        ]
        if not eligible:
            continue
        other_size, other = min(eligible, key=lambda pair: (pair[0], pair[1].key))
        if other_size < size:
            mapping[color] = other
        else:
            mapping[other] = color
        used.add(other)
        used.add(color)
    logger.debug("Merged %d color pairs", len(mapping))
    return remap_colors(pixels, mapping)


def split_blobs(pixels, width, height, min_blob_size, max_blob_size, contiguous=True, seed=None):
    """Carve blobs larger than ``max_blob_size`` into chunks of ``min_blob_size``.

    Each chunk grows from a random remaining pixel in random order over its
    4-connected neighbors within the blob and gets a fresh color distinct from
    every color already in the image.
    """
    pixels = check_pixels(pixels, width, height)
    if min_blob_size < 1:
        raise ValueError(f"min_blob_size must be positive, got {min_blob_size}")
    rng = np.random.default_rng(seed)
    generator = ColorGenerator(rng, reserved=color_counts(pixels))
    out = pixels.copy()
    blobs = find_blobs(pixels, width, height)
    if not contiguous:
        blobs = merge_blob_groups(blobs)

    chunks = 0
    for blob in blobs:
        if blob.size <= max_blob_size:
            continue
        order = rng.permutation(blob.indices).tolist()
        remaining = set(order)
        for start in order:
            if start not in remaining:
                continue
            color = generator.next_color()
            chunks += 1
            painted = 0
            frontier = [start]
            while frontier and painted < min_blob_size:
                pick = int(rng.integers(len(frontier)))
                frontier[pick], frontier[-1] = frontier[-1], frontier[pick]
                index = frontier.pop()
                if index not in remaining:
                    continue
                remaining.discard(index)
                out[index] = color
                painted += 1
                y, x = divmod(index, width)
                if x > 0:
                    frontier.append(index - 1)
                if x < width - 1:
                    frontier.append(index + 1)
                if y > 0:
                    frontier.append(index - width)
                if y < height - 1:
                    frontier.append(index + width)
    logger.debug("Split oversized blobs into %d chunks", chunks)
    return out


def colonize(pixels, width, height, isle_blob_size):
    """Repaint small isolated colors with the color of the nearest mainland pixel.

    A colony color touches only edge colors and has fewer than
    ``isle_blob_size`` pixels. The mainland is every non-edge pixel that is
    not a colony; distance is taxicab from the colony color's first pixel.
    """
    pixels = check_pixels(pixels, width, height)
    counts = color_counts(pixels)
    colonies = {
        color
        for color in isolated_colors(neighbors_by_color(pixels, width, height))
        if counts[color] < isle_blob_size
    }
    if not colonies:
        return pixels.copy()

    keys = pack_pixels(pixels)
    colony_keys = np.array(sorted(color.key for color in colonies), dtype=np.uint32)
    in_colony = np.isin(keys, colony_keys)
    mainland = ~edge_keys_mask(keys) & ~in_colony
    if not mainland.any():
        logger.info("No mainland pixels, leaving %d colonies untouched", len(colonies))
        return pixels.copy()

    nearest = ndimage.distance_transform_cdt(
        ~mainland.reshape(height, width),
        metric="taxicab",
        return_distances=False,
        return_indices=True,
    )
    nearest_flat = (nearest[0] * width + nearest[1]).reshape(-1)
    mapping = {}
    for key in colony_keys.tolist():
        first = int(np.argmax(keys == key))
        target = int(nearest_flat[first])
        mapping[Color.from_key(key)] = Color.from_key(int(keys[target]))
    logger.debug("Joined %d colonies to the mainland", len(mapping))
    return remap_colors(pixels, mapping)
