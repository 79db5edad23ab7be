"""Text dump of every non-edge color and where it occurs."""

import numpy as np

from .colors import Color, edge_keys_mask
from .pixel_codec import check_pixels, pack_pixels


def points_by_color(pixels, width, height):
    """Map each non-edge color to its ``(x, y)`` points in row-major discovery order."""
    keys = pack_pixels(check_pixels(pixels, width, height))
    indices = np.flatnonzero(~edge_keys_mask(keys))
    by_key = {}
    for index, key in zip(indices.tolist(), keys[indices].tolist()):
        by_key.setdefault(key, []).append((index % width, index // width))
    return {Color.from_key(key): points for key, points in by_key.items()}


def format_log(points):
    """One line per color, least frequent first; ties keep discovery order."""
    lines = []
    for color, color_points in sorted(points.items(), key=lambda item: len(item[1])):
        coordinates = ",".join(f"({x},{y})" for x, y in color_points)
        lines.append(
            f"Color: {color.r},{color.g},{color.b}, Count: {len(color_points)}, Points: {coordinates}\n"
        )
    return "".join(lines)
