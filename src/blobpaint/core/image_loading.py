"""Load images into pixel arrays and build encoded images from them."""

import io
import os

from PIL import Image

from .pixel_codec import check_pixels, decode, encode


def load_image(source):
    """Load a path or encoded image bytes, return ``(pixels, width, height)``."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        source = io.BytesIO(bytes(source))
    elif isinstance(source, (str, os.PathLike)):
        source = os.fspath(source)
    with Image.open(source) as img:
        img = img.convert("RGBA")
        width, height = img.size
        pixels = decode(img.tobytes(), width, height)
    return pixels, width, height


def to_pil_image(pixels, width, height):
    """Wrap a pixel array in an RGBA PIL image."""
    pixels = check_pixels(pixels, width, height)
    return Image.frombytes("RGBA", (width, height), encode(pixels, width, height))


def build_image(pixels, width, height, format="PNG"):
    """Encode a pixel array to lossless image bytes."""
    buffer = io.BytesIO()
    to_pil_image(pixels, width, height).save(buffer, format=format)
    return buffer.getvalue()

