"""Partition an image into 4-connected blobs of like color."""

from dataclasses import dataclass

import numpy as np

from .colors import Color, edge_keys_mask, is_edge
from .pixel_codec import check_pixels, pack_pixels


@dataclass(frozen=True, eq=False)
class Blob:
    """A maximal 4-connected set of same-colored, non-edge pixels."""

    color: Color
    indices: np.ndarray

    @property
    def size(self):
        return len(self.indices)

    def points(self, width):
        """Member coordinates as ``(x, y)`` tuples in discovery order."""
        return [(index % width, index // width) for index in self.indices.tolist()]


def find_blobs(pixels, width, height, same=None):
    """Flood fill every non-edge pixel into exactly one blob.

    Pixels are scanned in row-major order; each unvisited non-edge pixel seeds
    a new blob grown with an explicit stack, so large regions never hit the
    recursion limit. ``same(neighbor, seed_color)`` decides whether a neighbor
    joins the blob and defaults to exact color equality.
    """
    keys = pack_pixels(check_pixels(pixels, width, height))
    values = keys.tolist()
    # Edge pixels start out visited so no predicate can pull them into a blob.
    visited = bytearray(edge_keys_mask(keys).tobytes())
    last_x = width - 1
    last_y = height - 1
    blobs = []
    for seed, seed_value in enumerate(values):
        if visited[seed]:
            continue
        seed_color = Color.from_key(seed_value)
        if same is None:
            matches = seed_value.__eq__
        else:
            def matches(value, seed_color=seed_color):
                return same(Color.from_key(value), seed_color)

        stack = [seed]
        members = []
        while stack:
            index = stack.pop()
            if visited[index]:
                continue
            visited[index] = 1
            members.append(index)
            y, x = divmod(index, width)
            left = index - 1
            right = index + 1
            up = index - width
            down = index + width
            if x > 0 and not visited[left] and matches(values[left]):
                stack.append(left)
            if x < last_x and not visited[right] and matches(values[right]):
                stack.append(right)
            if y > 0 and not visited[up] and matches(values[up]):
                stack.append(up)
            if y < last_y and not visited[down] and matches(values[down]):
                stack.append(down)
        blobs.append(Blob(seed_color, np.array(members, dtype=np.intp)))
    return blobs


def group_blobs_by_color(blobs):
    """Map original color to its blobs, ordered by first discovery."""
    groups = {}
    for blob in blobs:
        groups.setdefault(blob.color, []).append(blob)
    return groups


def merge_blob_groups(blobs):
    """One blob per distinct color holding the indices of all its blobs."""
    return [
        Blob(color, np.concatenate([blob.indices for blob in group]))
        for color, group in group_blobs_by_color(blobs).items()
    ]


def neighbors_by_color(pixels, width, height):
    """Map every color to the set of different colors it touches 4-connectedly."""
    keys = pack_pixels(check_pixels(pixels, width, height))
    if keys.size == 0:
        return {}
    grid = keys.reshape(height, width)
    pairs = []
    for a, b in ((grid[:, :-1], grid[:, 1:]), (grid[:-1, :], grid[1:, :])):
        differ = a != b
        first = a[differ]
        second = b[differ]
        pairs.append(np.stack([first, second], axis=1))
        pairs.append(np.stack([second, first], axis=1))
    pairs = np.concatenate(pairs)
    if len(pairs):
        pairs = np.unique(pairs, axis=0)
    neighbors = {Color.from_key(key): set() for key in np.unique(keys).tolist()}
    for own, other in pairs.tolist():
        neighbors[Color.from_key(own)].add(Color.from_key(other))
    return neighbors


def isolated_colors(neighbors):
    """Non-edge colors whose every differing neighbor is an edge color."""
    return {
        color
        for color, touching in neighbors.items()
        if not is_edge(color) and all(is_edge(other) for other in touching)
    }


def color_counts(pixels):
    """Pixel count per color, for every color in the image."""
    keys, counts = np.unique(pack_pixels(pixels), return_counts=True)
    return {Color.from_key(key): count for key, count in zip(keys.tolist(), counts.tolist())}
