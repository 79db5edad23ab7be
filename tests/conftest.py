"""Shared fixtures for building small synthetic images."""

import numpy as np
import pytest
from PIL import Image

from blobpaint.core import Color

RED = Color(255, 0, 0)
GREEN = Color(0, 255, 0)
BLUE = Color(0, 0, 255)
TEAL = Color(0, 128, 128)


def pixels_from_rows(rows):
    """Turn a list of rows of colors into ``(pixels, width, height)``."""
    height = len(rows)
    width = len(rows[0]) if rows else 0
    pixels = np.array([color for row in rows for color in row], dtype=np.uint8).reshape(-1, 4)
    return pixels, width, height


@pytest.fixture
def make_image():
    return pixels_from_rows


@pytest.fixture
def write_png(tmp_path):
    """Save rows of colors as a PNG and return its path."""

    def _write(rows, name="image.png"):
        pixels, width, height = pixels_from_rows(rows)
        path = tmp_path / name
        Image.fromarray(pixels.reshape(height, width, 4)).save(path)
        return path

    return _write
