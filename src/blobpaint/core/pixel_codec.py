"""Convert raw interleaved 4-byte pixel buffers to and from pixel arrays."""

import numpy as np

BYTES_PER_PIXEL = 4

# Index of R, G, B, A inside one stored pixel for each supported layout.
CHANNEL_ORDERS = {
    "RGBA": (0, 1, 2, 3),
    "BGRA": (2, 1, 0, 3),
}


class PixelFormatError(ValueError):
    """Raised when a buffer does not match the declared image geometry."""


def _row_stride(width, height, stride):
    if width < 0 or height < 0:
        raise PixelFormatError(f"Invalid image size {width}x{height}")
    row_bytes = width * BYTES_PER_PIXEL
    if stride is None:
        return row_bytes
    if stride < row_bytes:
        raise PixelFormatError(f"Stride {stride} is narrower than a row of {row_bytes} bytes")
    if stride % BYTES_PER_PIXEL:
        raise PixelFormatError(f"Stride {stride} is not a multiple of {BYTES_PER_PIXEL}")
    return stride


def _channel_order(channel_order):
    try:
        return CHANNEL_ORDERS[channel_order]
    except KeyError:
        raise PixelFormatError(f"Unsupported channel order: {channel_order}") from None


def decode(data, width, height, stride=None, channel_order="RGBA"):
    """Interpret ``data`` as ``height`` rows of 4-byte pixels.

    Returns a ``(width * height, 4)`` uint8 array with channels R, G, B, A in
    row-major order. Row padding beyond ``width * 4`` bytes is dropped.
    """
    order = _channel_order(channel_order)
    stride = _row_stride(width, height, stride)
    if len(data) % BYTES_PER_PIXEL:
        raise PixelFormatError(f"Buffer length {len(data)} is not a multiple of {BYTES_PER_PIXEL}")
    if len(data) != stride * height:
        raise PixelFormatError(
            f"Buffer length {len(data)} does not match {width}x{height} "
            f"with stride {stride} ({stride * height} bytes)"
        )
    if width == 0 or height == 0:
        return np.zeros((0, BYTES_PER_PIXEL), dtype=np.uint8)
    rows = np.frombuffer(data, dtype=np.uint8).reshape(height, stride)
    stored = rows[:, : width * BYTES_PER_PIXEL].reshape(height * width, BYTES_PER_PIXEL)
    return np.ascontiguousarray(stored[:, order])


def encode(pixels, width, height, stride=None, channel_order="RGBA"):
    """Write a pixel array back to a raw byte buffer.

    Each row lands at its own ``y * stride`` offset with exactly ``width * 4``
    pixel bytes; padding bytes are zero.
    """
    order = _channel_order(channel_order)
    stride = _row_stride(width, height, stride)
    pixels = check_pixels(pixels, width, height)
    out = np.zeros((height, stride), dtype=np.uint8)
    if width and height:
        stored = np.empty_like(pixels)
        stored[:, order] = pixels
        out[:, : width * BYTES_PER_PIXEL] = stored.reshape(height, width * BYTES_PER_PIXEL)
    return out.tobytes()


def check_pixels(pixels, width, height):
    """Return ``pixels`` as a ``(width * height, 4)`` uint8 array or raise."""
    pixels = np.asarray(pixels)
    if pixels.dtype != np.uint8:
        raise PixelFormatError(f"Pixels must be uint8, got {pixels.dtype}")
    if width < 0 or height < 0:
        raise PixelFormatError(f"Invalid image size {width}x{height}")
    if pixels.size != width * height * BYTES_PER_PIXEL or (
        pixels.ndim > 1 and pixels.shape[-1] != BYTES_PER_PIXEL
    ):
        raise PixelFormatError(
            f"Pixel array of shape {pixels.shape} does not match {width}x{height}"
        )
    return pixels.reshape(width * height, BYTES_PER_PIXEL)


def pack_pixels(pixels):
    """Pack an ``(n, 4)`` pixel array into little-endian uint32 color keys."""
    pixels = np.ascontiguousarray(pixels, dtype=np.uint8).reshape(-1, BYTES_PER_PIXEL)
    return pixels.view("<u4").reshape(-1).astype(np.uint32)


def unpack_keys(keys):
    """Inverse of `pack_pixels`."""
    keys = np.ascontiguousarray(keys, dtype="<u4").reshape(-1)
    return keys.view(np.uint8).reshape(-1, BYTES_PER_PIXEL).copy()
