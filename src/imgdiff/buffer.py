"""Canonical RGBA8 pixel buffer."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from imgdiff.errors import CompareError

CHANNELS = ("red", "green", "blue", "alpha")
BYTES_PER_PIXEL = len(CHANNELS)
CHANNEL_MAX = 255.0


@dataclass(frozen=True)
class PixelBuffer:
    """Row-major, top-to-bottom RGBA pixels, one byte per channel.

    ``data`` always holds exactly ``width * height * 4`` bytes. Samples are
    taken as-is; premultiplied colour is never reversed.
    """

    data: bytes
    width: int
    height: int
    which: str = field(default="source", compare=False)

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise CompareError.buffer_extraction(
                self.which, f"negative size {self.width}x{self.height}"
            )
        object.__setattr__(self, "data", bytes(self.data))
        expected = self.width * self.height * BYTES_PER_PIXEL
        if len(self.data) != expected:
            raise CompareError.buffer_extraction(
                self.which,
                f"got {len(self.data)} bytes, expected {expected} "
                f"for {self.width}x{self.height} RGBA",
            )

    @classmethod
    def from_array(cls, arr: np.ndarray, which: str = "source") -> PixelBuffer:
        """Build a buffer from a (height, width, 4) uint8 array."""
        if arr.ndim != 3 or arr.shape[2] != BYTES_PER_PIXEL or arr.dtype != np.uint8:
            raise CompareError.buffer_extraction(
                which, f"expected (h, w, 4) uint8 array, got {arr.shape} {arr.dtype}"
            )
        height, width = int(arr.shape[0]), int(arr.shape[1])
        return cls(np.ascontiguousarray(arr).tobytes(), width, height, which)

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def pixel(self, index: int) -> tuple[int, int, int, int]:
        """Return the (r, g, b, a) samples of the pixel at *index*."""
        if not 0 <= index < self.pixel_count:
            raise IndexError(f"pixel index {index} out of range")
        off = index * BYTES_PER_PIXEL
        r, g, b, a = self.data[off : off + BYTES_PER_PIXEL]
        return r, g, b, a

    def as_array(self) -> np.ndarray:
        """Read-only (height, width, 4) uint8 view of the pixel data."""
        arr = np.frombuffer(self.data, dtype=np.uint8)
        return arr.reshape(self.height, self.width, BYTES_PER_PIXEL)
