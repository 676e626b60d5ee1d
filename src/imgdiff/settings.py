from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from imgdiff.loader import ALPHA_MODES

log = logging.getLogger(__name__)

DEFAULT_ALPHA = "premultiplied"
DEFAULT_WORKERS = 1


@dataclass(frozen=True)
class Settings:
    alpha: str = DEFAULT_ALPHA
    workers: int = DEFAULT_WORKERS


def _alpha(env: Mapping[str, str]) -> str:
    value = (env.get("IMGDIFF_ALPHA") or DEFAULT_ALPHA).strip().lower()
    if value not in ALPHA_MODES:
        log.warning("ignoring IMGDIFF_ALPHA=%r, using %s", value, DEFAULT_ALPHA)
        return DEFAULT_ALPHA
    return value


def _workers(env: Mapping[str, str]) -> int:
    raw = env.get("IMGDIFF_WORKERS")
    if not raw:
        return DEFAULT_WORKERS
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value < 1:
        log.warning("ignoring IMGDIFF_WORKERS=%r, using %d", raw, DEFAULT_WORKERS)
        return DEFAULT_WORKERS
    return value


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Read defaults from IMGDIFF_ALPHA and IMGDIFF_WORKERS."""
    src = os.environ if env is None else env
    return Settings(alpha=_alpha(src), workers=_workers(src))
