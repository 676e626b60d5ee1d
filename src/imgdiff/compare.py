"""Maximum per-channel pixel difference between two images."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np

from imgdiff.buffer import BYTES_PER_PIXEL, CHANNEL_MAX, PixelBuffer
from imgdiff.errors import SOURCE, TARGET, CompareError
from imgdiff.loader import ImageDecoder, load

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Comparison:
    """Outcome of comparing two image files."""

    max_difference: float
    width: int
    height: int
    source: Path
    target: Path

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_difference": self.max_difference,
            "width": self.width,
            "height": self.height,
            "source": str(self.source),
            "target": str(self.target),
        }


def _check_sizes(source: PixelBuffer, target: PixelBuffer) -> None:
    if source.size != target.size:
        raise CompareError.dimension_mismatch(source.size, target.size)


def _band_peak(rows_a: np.ndarray, rows_b: np.ndarray) -> int:
    """Largest absolute channel difference within a band of rows."""
    if rows_a.size == 0:
        return 0
    diff = np.abs(rows_a.astype(np.int16) - rows_b.astype(np.int16))
    return int(diff.max())


def _scan_band(rows_a: np.ndarray, rows_b: np.ndarray, out: list[int], idx: int) -> None:
    out[idx] = _band_peak(rows_a, rows_b)


def _threaded_peak(rows_a: np.ndarray, rows_b: np.ndarray, workers: int) -> int:
    """Split rows into contiguous bands, scan each on its own thread, fold with max."""
    bands = min(workers, rows_a.shape[0])
    parts_a = np.array_split(rows_a, bands)
    parts_b = np.array_split(rows_b, bands)
    out = [0] * bands
    threads = [
        threading.Thread(target=_scan_band, args=(pa, pb, out, i), daemon=True)
        for i, (pa, pb) in enumerate(zip(parts_a, parts_b))
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return max(out)


def max_pixel_difference(
    source: PixelBuffer,
    target: PixelBuffer,
    *,
    workers: int = 1,
) -> float:
    """Return the largest per-channel difference between two buffers.

    Every channel of every pixel (alpha included) is visited; the result is
    ``max |a - b| / 255`` over all of them, in [0.0, 1.0].

    Args:
        source: Baseline pixels.
        target: Candidate pixels.
        workers: Number of threads scanning row bands. The result does not
            depend on it.

    Raises:
        CompareError: DIMENSION_MISMATCH if the buffers differ in size.
        ValueError: If *workers* is less than 1.
    """
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")
    _check_sizes(source, target)

    # One row per line, BYTES_PER_PIXEL samples per pixel.
    rows_a = source.as_array().reshape(source.height, source.width * BYTES_PER_PIXEL)
    rows_b = target.as_array().reshape(target.height, target.width * BYTES_PER_PIXEL)

    if workers > 1 and source.height > 1:
        peak = _threaded_peak(rows_a, rows_b, workers)
    else:
        peak = _band_peak(rows_a, rows_b)

    result = peak / CHANNEL_MAX
    log.debug("max pixel difference %s over %dx%d", result, source.width, source.height)
    return result


def compare_reference(source: PixelBuffer, target: PixelBuffer) -> float:
    """Pure-Python pixel walk with the same result as ``max_pixel_difference``."""
    _check_sizes(source, target)
    peak = 0.0
    for i in range(source.pixel_count):
        a = source.pixel(i)
        b = target.pixel(i)
        pixel_peak = max(abs(a[c] - b[c]) / CHANNEL_MAX for c in range(BYTES_PER_PIXEL))
        peak = max(peak, pixel_peak)
    return peak


def compare_images(
    source_path: Path,
    target_path: Path,
    *,
    alpha: str = "premultiplied",
    workers: int = 1,
    decoder: ImageDecoder | None = None,
) -> Comparison:
    """Load two images and return their maximum pixel difference.

    The source is decoded first; if it fails the target is never read.

    Raises:
        CompareError: On decode, rasterization, color space or size failures.
    """
    buf_a = load(source_path, SOURCE, alpha=alpha, decoder=decoder)
    buf_b = load(target_path, TARGET, alpha=alpha, decoder=decoder)
    diff = max_pixel_difference(buf_a, buf_b, workers=workers)
    return Comparison(
        max_difference=diff,
        width=buf_a.width,
        height=buf_a.height,
        source=Path(source_path),
        target=Path(target_path),
    )
