"""Shared helpers for unit tests."""

from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image

from imgdiff.buffer import PixelBuffer


def solid_png(
    tmp_path: Path,
    name: str,
    color: tuple[int, ...] | int,
    size: tuple[int, int] = (4, 4),
    mode: str = "RGBA",
) -> Path:
    """Create a solid-color image and return its path."""
    p = tmp_path / name
    Image.new(mode, size, color).save(p)
    return p


def solid_buffer(
    color: tuple[int, int, int, int],
    size: tuple[int, int] = (4, 4),
    which: str = "source",
) -> PixelBuffer:
    """Build an in-memory PixelBuffer filled with one RGBA color."""
    w, h = size
    arr = np.empty((h, w, 4), dtype=np.uint8)
    arr[:, :] = color
    return PixelBuffer.from_array(arr, which)
