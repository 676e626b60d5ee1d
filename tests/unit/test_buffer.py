"""Tests for PixelBuffer."""

from __future__ import annotations

import numpy as np
import pytest

from imgdiff.buffer import BYTES_PER_PIXEL, CHANNELS, PixelBuffer
from imgdiff.errors import CompareError, ErrorKind


def test_layout_constants() -> None:
    assert CHANNELS == ("red", "green", "blue", "alpha")
    assert BYTES_PER_PIXEL == 4


def test_pixel_offsets() -> None:
    buf = PixelBuffer(bytes(range(16)), 2, 2)
    assert buf.pixel(0) == (0, 1, 2, 3)
    assert buf.pixel(3) == (12, 13, 14, 15)
    assert buf.size == (2, 2)
    assert buf.pixel_count == 4


def test_pixel_out_of_range() -> None:
    buf = PixelBuffer(bytes(8), 2, 1)
    with pytest.raises(IndexError):
        buf.pixel(2)
    with pytest.raises(IndexError):
        buf.pixel(-1)


@pytest.mark.parametrize("length", [0, 15, 17])
def test_length_invariant(length: int) -> None:
    with pytest.raises(CompareError) as excinfo:
        PixelBuffer(bytes(length), 2, 2, which="target")
    assert excinfo.value.kind is ErrorKind.BUFFER_EXTRACTION
    assert excinfo.value.which == "target"


def test_negative_size() -> None:
    with pytest.raises(CompareError):
        PixelBuffer(b"", -1, 0)


def test_bytearray_is_copied() -> None:
    raw = bytearray(4)
    buf = PixelBuffer(raw, 1, 1)
    raw[0] = 99
    assert isinstance(buf.data, bytes)
    assert buf.pixel(0) == (0, 0, 0, 0)


def test_as_array_row_major() -> None:
    buf = PixelBuffer(bytes(range(24)), 3, 2)
    arr = buf.as_array()
    assert arr.shape == (2, 3, 4)
    assert arr.dtype == np.uint8
    assert tuple(arr[1, 0]) == buf.pixel(3)
    assert not arr.flags.writeable


def test_from_array_round_trip() -> None:
    arr = np.arange(2 * 5 * 4, dtype=np.uint8).reshape(2, 5, 4)
    buf = PixelBuffer.from_array(arr)
    assert buf.size == (5, 2)
    assert np.array_equal(buf.as_array(), arr)


def test_from_array_rejects_rgb() -> None:
    with pytest.raises(CompareError):
        PixelBuffer.from_array(np.zeros((2, 2, 3), dtype=np.uint8))


def test_immutable() -> None:
    buf = PixelBuffer(bytes(4), 1, 1)
    with pytest.raises(AttributeError):
        buf.width = 2  # type: ignore[misc]


def test_label_ignored_in_equality() -> None:
    a = PixelBuffer(bytes(4), 1, 1, which="source")
    b = PixelBuffer(bytes(4), 1, 1, which="target")
    assert a == b
    assert a != PixelBuffer(bytes([1, 0, 0, 0]), 1, 1, which="source")
