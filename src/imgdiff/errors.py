"""Comparison failure taxonomy.

Every failure the tool can report is a ``CompareError`` tagged with an
``ErrorKind``. The kind decides the message; ``details`` carries the
diagnostic data (which image, sizes, color space name).
"""

from __future__ import annotations

from enum import Enum
from typing import Any

SOURCE = "source"
TARGET = "target"

_ARGUMENT_NAMES = {SOURCE: "one", TARGET: "two"}


class ErrorKind(str, Enum):
    """Closed set of comparison failure kinds."""

    MISSING_ARGUMENT = "missing_argument"
    DECODE_FAILURE = "decode_failure"
    BUFFER_EXTRACTION = "buffer_extraction"
    COLOR_SPACE_UNAVAILABLE = "color_space_unavailable"
    DIMENSION_MISMATCH = "dimension_mismatch"


def _fmt_size(size: tuple[int, int]) -> str:
    return f"{size[0]}x{size[1]}"


def _message(kind: ErrorKind, details: dict[str, Any]) -> str:
    if kind is ErrorKind.MISSING_ARGUMENT:
        arg = _ARGUMENT_NAMES.get(details["which"], details["which"])
        return f"Need to pass an image path as argument {arg}."
    if kind is ErrorKind.DECODE_FAILURE:
        return f"Can't create an image from the {details['which']} image: {details['reason']}"
    if kind is ErrorKind.BUFFER_EXTRACTION:
        return f"Can't rasterize the {details['which']} image: {details['reason']}"
    if kind is ErrorKind.COLOR_SPACE_UNAVAILABLE:
        return f"Can't create {details['name']} color space."
    return (
        "Images have different size: "
        f"{_fmt_size(details['size_a'])} and {_fmt_size(details['size_b'])}."
    )


class CompareError(Exception):
    """A reported, non-retryable comparison failure."""

    def __init__(self, kind: ErrorKind, **details: Any) -> None:
        self.kind = kind
        self.details = details
        super().__init__(_message(kind, details))

    @property
    def message(self) -> str:
        return str(self)

    @property
    def which(self) -> str | None:
        """Image the failure belongs to ("source"/"target"), if any."""
        return self.details.get("which")

    @classmethod
    def missing_argument(cls, which: str) -> CompareError:
        return cls(ErrorKind.MISSING_ARGUMENT, which=which)

    @classmethod
    def decode_failure(cls, which: str, reason: str) -> CompareError:
        return cls(ErrorKind.DECODE_FAILURE, which=which, reason=reason)

    @classmethod
    def buffer_extraction(cls, which: str, reason: str) -> CompareError:
        return cls(ErrorKind.BUFFER_EXTRACTION, which=which, reason=reason)

    @classmethod
    def color_space_unavailable(cls, name: str) -> CompareError:
        return cls(ErrorKind.COLOR_SPACE_UNAVAILABLE, name=name)

    @classmethod
    def dimension_mismatch(
        cls, size_a: tuple[int, int], size_b: tuple[int, int]
    ) -> CompareError:
        return cls(ErrorKind.DIMENSION_MISMATCH, size_a=size_a, size_b=size_b)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable description of the failure."""
        data: dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        for key, value in self.details.items():
            data[key] = list(value) if isinstance(value, tuple) else value
        return data
