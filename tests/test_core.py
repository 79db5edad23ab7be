"""Tests for the pixel codec and color helpers."""

import numpy as np
import pytest

from blobpaint.core import (
    BLACK,
    TRANSPARENT,
    WHITE,
    Color,
    ColorGenerator,
    PixelFormatError,
    decode,
    edge_mask,
    encode,
    is_edge,
    pack_pixels,
    unpack_keys,
)


def test_decode_rgba():
    """Test decoding interleaved RGBA bytes."""
    data = bytes([1, 2, 3, 4, 5, 6, 7, 8])
    pixels = decode(data, 2, 1)
    assert pixels.shape == (2, 4)
    assert pixels.dtype == np.uint8
    assert pixels.tolist() == [[1, 2, 3, 4], [5, 6, 7, 8]]


def test_decode_bgra():
    """Test that BGRA buffers come out as RGBA channels."""
    pixels = decode(bytes([3, 2, 1, 4]), 1, 1, channel_order="BGRA")
    assert pixels.tolist() == [[1, 2, 3, 4]]
    assert encode(pixels, 1, 1, channel_order="BGRA") == bytes([3, 2, 1, 4])


@pytest.mark.parametrize("length", [7, 9, 10])
def test_decode_length_not_multiple_of_four(length):
    with pytest.raises(PixelFormatError):
        decode(bytes(length), 1, 2)


def test_decode_length_mismatch():
    with pytest.raises(PixelFormatError):
        decode(bytes(12), 2, 2)
    with pytest.raises(PixelFormatError):
        decode(bytes(20), 2, 2)


def test_format_error_is_not_an_io_error():
    assert issubclass(PixelFormatError, ValueError)
    assert not issubclass(PixelFormatError, OSError)


def test_encode_writes_rows_at_padded_stride():
    """Test that each row lands at its own offset when stride exceeds the row width."""
    pixels = np.arange(3 * 2 * 4, dtype=np.uint8).reshape(-1, 4)
    data = encode(pixels, 3, 2, stride=16)
    assert len(data) == 32
    assert data[0:12] == pixels[:3].tobytes()
    assert data[12:16] == bytes(4)
    assert data[16:28] == pixels[3:].tobytes()
    assert data[28:32] == bytes(4)
    assert np.array_equal(decode(data, 3, 2, stride=16), pixels)


def test_encode_rejects_narrow_stride():
    pixels = np.zeros((4, 4), dtype=np.uint8)
    with pytest.raises(PixelFormatError):
        encode(pixels, 2, 2, stride=4)


def test_encode_rejects_wrong_pixel_count():
    with pytest.raises(PixelFormatError):
        encode(np.zeros((3, 4), dtype=np.uint8), 2, 2)


def test_round_trip():
    rng = np.random.default_rng(0)
    pixels = rng.integers(0, 256, size=(7 * 5, 4), dtype=np.uint8)
    assert np.array_equal(decode(encode(pixels, 7, 5), 7, 5), pixels)


def test_zero_size_image():
    pixels = decode(b"", 0, 0)
    assert pixels.shape == (0, 4)
    assert encode(pixels, 0, 0) == b""


def test_pack_and_unpack_keys():
    pixels = np.array([[1, 2, 3, 4], [255, 255, 255, 255]], dtype=np.uint8)
    keys = pack_pixels(pixels)
    assert keys.tolist() == [Color(1, 2, 3, 4).key, WHITE.key]
    assert np.array_equal(unpack_keys(keys), pixels)
    assert Color.from_key(Color(9, 8, 7, 6).key) == Color(9, 8, 7, 6)


def test_is_edge():
    """Test the edge color classification."""
    assert is_edge(WHITE)
    assert is_edge(BLACK)
    assert is_edge(TRANSPARENT)
    assert is_edge(Color(255, 255, 255, 0))
    assert is_edge(Color(12, 34, 56, 0))
    assert not is_edge(Color(255, 255, 255, 254))
    assert not is_edge(Color(0, 0, 1))
    assert not is_edge(Color(255, 0, 0))


def test_edge_mask_matches_is_edge():
    rng = np.random.default_rng(1)
    pixels = rng.choice([0, 1, 255], size=(200, 4)).astype(np.uint8)
    expected = [is_edge(Color(*pixel)) for pixel in pixels.tolist()]
    assert edge_mask(pixels).tolist() == expected


def test_color_generator_range_and_uniqueness():
    generator = ColorGenerator(seed=42)
    colors = [generator.next_color() for _ in range(500)]
    assert len(set(colors)) == 500
    for color in colors:
        assert color.a == 255
        assert all(100 <= channel <= 240 for channel in color[:3])
        assert not is_edge(color)


def test_color_generator_is_seedable():
    first = [ColorGenerator(seed=7).next_color() for _ in range(3)]
    second = [ColorGenerator(seed=7).next_color() for _ in range(3)]
    assert first == second


def test_color_generator_skips_reserved_and_exhausts():
    generator = ColorGenerator(seed=0, low=100, high=101)
    reserved = [Color(r, g, b) for r in (100, 101) for g in (100, 101) for b in (100, 101)]
    for color in reserved[:-1]:
        generator.reserve(color)
    assert generator.next_color() == reserved[-1]
    with pytest.raises(ValueError):
        generator.next_color()
