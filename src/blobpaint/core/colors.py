"""Color values, edge color classification and fresh color generation."""

from typing import NamedTuple

import numpy as np


class Color(NamedTuple):
    """One RGBA pixel value. Equality is exact per channel."""

    r: int
    g: int
    b: int
    a: int = 255

    @property
    def key(self):
        """Pack the channels into the little-endian uint32 used for pixel keys."""
        return self.r | (self.g << 8) | (self.b << 16) | (self.a << 24)

    @classmethod
    def from_key(cls, key):
        key = int(key)
        return cls(key & 0xFF, (key >> 8) & 0xFF, (key >> 16) & 0xFF, (key >> 24) & 0xFF)


WHITE = Color(255, 255, 255)
BLACK = Color(0, 0, 0)
TRANSPARENT = Color(0, 0, 0, 0)
YELLOW = Color(255, 255, 0)
RED = Color(255, 0, 0)
GREEN = Color(0, 128, 0)

# Fully transparent pixels are edge pixels whatever their RGB.
_ALPHA_MASK = 0xFF000000


def is_edge(color):
    """True for opaque white, opaque black and any fully transparent color."""
    color = Color(*color)
    return color.a == 0 or color == WHITE or color == BLACK


def edge_keys_mask(keys):
    """Vectorized `is_edge` over packed uint32 keys."""
    keys = np.asarray(keys, dtype=np.uint32)
    return (
        ((keys & _ALPHA_MASK) == 0)
        | (keys == WHITE.key)
        | (keys == BLACK.key)
    )


def edge_mask(pixels):
    """Boolean mask of edge pixels for an ``(n, 4)`` uint8 pixel array."""
    pixels = np.asarray(pixels, dtype=np.uint8).reshape(-1, 4)
    rgb = pixels[:, :3]
    white = np.all(rgb == 255, axis=1)
    black = np.all(rgb == 0, axis=1)
    opaque = pixels[:, 3] == 255
    return (pixels[:, 3] == 0) | (opaque & (white | black))


class ColorGenerator:
    """Seedable source of opaque colors with every RGB channel in [low, high].

    The generator never hands out the same color twice and never returns one
    of the ``reserved`` colors, so generated colors stay distinct from each
    other and from whatever is already in the image.
    """

    def __init__(self, seed=None, reserved=(), low=100, high=240):
        if not 0 <= low <= high <= 255:
            raise ValueError(f"Invalid channel range [{low}, {high}]")
        self._rng = np.random.default_rng(seed)
        self._low = low
        self._high = high
        self._used = set()
        self._free = (high - low + 1) ** 3
        for color in reserved:
            self.reserve(color)

    def reserve(self, color):
        """Mark ``color`` as unavailable."""
        color = Color(*color)
        if color.key in self._used:
            return
        self._used.add(color.key)
        if color.a == 255 and all(self._low <= c <= self._high for c in color[:3]):
            self._free -= 1

    def next_color(self):
        if self._free <= 0:
            raise ValueError("Color palette exhausted")
        while True:
            r, g, b = self._rng.integers(self._low, self._high + 1, size=3).tolist()
            color = Color(r, g, b)
            if color.key not in self._used:
                self.reserve(color)
                return color
