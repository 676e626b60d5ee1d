"""Decode image files into canonical sRGB RGBA8 pixel buffers."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Protocol

import numpy as np
from PIL import Image

from imgdiff.buffer import PixelBuffer
from imgdiff.errors import SOURCE, CompareError

log = logging.getLogger(__name__)

ALPHA_MODES = ("premultiplied", "straight")

# Pillow mode for each alpha handling; "RGBa" is premultiplied RGBA.
_RASTER_MODES = {"premultiplied": "RGBa", "straight": "RGBA"}

_DECODE_ERRORS = (OSError, SyntaxError, ValueError, Image.DecompressionBombError)

# 16-bit sample modes; Image.convert() clamps them to 0..255 rather than scaling.
_WIDE_INT_MODES = ("I", "I;16", "I;16L", "I;16B", "I;16N")


def _to_8bit(im: Image.Image) -> Image.Image:
    """Scale 16-bit integer and 0..1 float samples down to an 8-bit "L" image."""
    if im.mode in _WIDE_INT_MODES:
        wide = np.clip(np.asarray(im).astype(np.int64), 0, 0xFFFF)
        arr = (wide >> 8).astype(np.uint8)
    elif im.mode == "F":
        unit = np.clip(np.nan_to_num(np.asarray(im), nan=0.0), 0.0, 1.0)
        arr = np.round(unit * 255.0).astype(np.uint8)
    else:
        return im
    out = Image.fromarray(arr)
    out.info = dict(im.info)
    return out


class ImageDecoder(Protocol):
    """Anything able to turn a file path into a canonical pixel buffer."""

    def decode(self, path: Path, which: str) -> PixelBuffer: ...


def _srgb_profile() -> object:
    """Build the sRGB output profile or raise COLOR_SPACE_UNAVAILABLE."""
    try:
        from PIL import ImageCms
    except ImportError as exc:
        log.debug("ImageCms unavailable: %s", exc)
        raise CompareError.color_space_unavailable("sRGB") from exc
    try:
        return ImageCms.createProfile("sRGB")
    except (ImageCms.PyCMSError, OSError, ValueError) as exc:
        log.debug("createProfile(sRGB) failed: %s", exc)
        raise CompareError.color_space_unavailable("sRGB") from exc


def _to_srgb(im: Image.Image, which: str) -> Image.Image:
    """Convert *im* to sRGB using its embedded ICC profile, if it has one."""
    icc = im.info.get("icc_profile")
    if not icc:
        return im

    srgb = _srgb_profile()
    from PIL import ImageCms

    try:
        embedded = ImageCms.ImageCmsProfile(io.BytesIO(icc))
    except (ImageCms.PyCMSError, OSError) as exc:
        raise CompareError.buffer_extraction(which, f"invalid ICC profile: {exc}") from exc

    space = embedded.profile.xcolor_space.strip()
    if space == "RGB":
        out_mode = "RGBA" if "A" in im.getbands() or "transparency" in im.info else "RGB"
    elif space == "CMYK" and im.mode == "CMYK":
        out_mode = "RGB"
    else:
        log.debug("skipping ICC conversion for %s profile on %s image", space, im.mode)
        return im

    try:
        src = im if space == "CMYK" else im.convert(out_mode)
        converted = ImageCms.profileToProfile(
            src, embedded, srgb, outputMode=out_mode  # type: ignore[arg-type]
        )
    except (ImageCms.PyCMSError, OSError, ValueError) as exc:
        raise CompareError.buffer_extraction(which, f"sRGB conversion failed: {exc}") from exc
    if converted is None:
        raise CompareError.buffer_extraction(which, "sRGB conversion produced no image")
    log.debug("%s: converted %s ICC profile to sRGB", which, space)
    return converted


class PillowDecoder:
    """Default ``ImageDecoder`` backed by Pillow."""

    def __init__(self, alpha: str = "premultiplied") -> None:
        if alpha not in ALPHA_MODES:
            raise ValueError(f"alpha must be one of {ALPHA_MODES}, got {alpha!r}")
        self.alpha = alpha

    def decode(self, path: Path, which: str) -> PixelBuffer:
        try:
            im = Image.open(path)
        except _DECODE_ERRORS as exc:
            raise CompareError.decode_failure(which, str(exc) or type(exc).__name__) from exc

        with im:
            try:
                im.load()
            except _DECODE_ERRORS as exc:
                raise CompareError.decode_failure(which, str(exc) or type(exc).__name__) from exc
            log.debug("%s: decoded %s (%s, %dx%d)", which, path, im.mode, *im.size)
            try:
                narrow = _to_8bit(im)
            except (ValueError, MemoryError) as exc:
                raise CompareError.buffer_extraction(which, str(exc)) from exc
            srgb = _to_srgb(narrow, which)
            try:
                # Straight RGBA first so every source mode reaches RGBa the same way.
                rgba = srgb.convert("RGBA")
                raster = rgba.convert(_RASTER_MODES[self.alpha])
                data = raster.tobytes()
            except (OSError, ValueError, MemoryError) as exc:
                raise CompareError.buffer_extraction(which, str(exc)) from exc

        width, height = raster.size
        return PixelBuffer(data, width, height, which)


def load(
    path: str | Path,
    which: str = SOURCE,
    *,
    alpha: str = "premultiplied",
    decoder: ImageDecoder | None = None,
) -> PixelBuffer:
    """Decode *path* into a canonical sRGB RGBA8 ``PixelBuffer``.

    Args:
        path: Image file to read.
        which: "source" or "target"; used in error messages.
        alpha: "premultiplied" scales colour by alpha before comparison,
            "straight" keeps the stored samples. Ignored when *decoder* is given.
        decoder: Alternative decoder implementation.

    Raises:
        CompareError: DECODE_FAILURE when the file can't be opened or parsed,
            BUFFER_EXTRACTION when it can't be rasterized to RGBA8,
            COLOR_SPACE_UNAVAILABLE when sRGB can't be constructed.
    """
    dec = decoder if decoder is not None else PillowDecoder(alpha)
    return dec.decode(Path(path), which)
