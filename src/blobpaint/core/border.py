"""Mark pixels that sit on the boundary between two colors."""

import numpy as np

from .colors import Color, edge_keys_mask
from .pixel_codec import check_pixels, pack_pixels


def border_mask(pixels, width, height):
    """Non-edge pixels with at least one in-bounds 4-neighbor of another color."""
    keys = pack_pixels(check_pixels(pixels, width, height))
    if keys.size == 0:
        return np.zeros(0, dtype=bool)
    grid = keys.reshape(height, width)
    differs = np.zeros(grid.shape, dtype=bool)
    horizontal = grid[:, 1:] != grid[:, :-1]
    vertical = grid[1:, :] != grid[:-1, :]
    differs[:, 1:] |= horizontal
    differs[:, :-1] |= horizontal
    differs[1:, :] |= vertical
    differs[:-1, :] |= vertical
    return differs.reshape(-1) & ~edge_keys_mask(keys)


def overlay(border_color, pixels, opacity):
    """Blend ``border_color`` over ``pixels`` at ``opacity``; the result is opaque."""
    border = np.asarray(Color(*border_color)[:3], dtype=np.float64)
    rgb = np.asarray(pixels, dtype=np.float64).reshape(-1, 4)[:, :3]
    blended = np.ceil(border * opacity) + np.ceil(rgb * (1 - opacity))
    out = np.empty((len(rgb), 4), dtype=np.uint8)
    out[:, :3] = np.clip(blended, 0, 255).astype(np.uint8)
    out[:, 3] = 255
    return out


def trace_border(pixels, width, height, border_color, opacity=None):
    """Paint every border pixel with ``border_color``.

    Edge pixels and pixels whose in-bounds neighbors all share their color are
    copied unchanged; the image boundary alone never makes a border. With an
    ``opacity`` the border color is overlaid on the original color instead.
    """
    pixels = check_pixels(pixels, width, height)
    out = pixels.copy()
    mask = border_mask(pixels, width, height)
    if opacity is None:
        out[mask] = Color(*border_color)
    else:
        if not 0 < opacity <= 1:
            raise ValueError(f"Opacity must be in (0, 1], got {opacity}")
        out[mask] = overlay(border_color, pixels[mask], opacity)
    return out
