from __future__ import annotations

from typing import Any

from imgdiff.settings import Settings, load_settings


def test_defaults() -> None:
    assert load_settings({}) == Settings(alpha="premultiplied", workers=1)


def test_env_values() -> None:
    env = {"IMGDIFF_ALPHA": " Straight ", "IMGDIFF_WORKERS": "4"}
    assert load_settings(env) == Settings(alpha="straight", workers=4)


def test_invalid_alpha_falls_back() -> None:
    assert load_settings({"IMGDIFF_ALPHA": "linear"}).alpha == "premultiplied"


def test_invalid_workers_fall_back() -> None:
    assert load_settings({"IMGDIFF_WORKERS": "many"}).workers == 1
    assert load_settings({"IMGDIFF_WORKERS": "0"}).workers == 1
    assert load_settings({"IMGDIFF_WORKERS": "-3"}).workers == 1


def test_reads_process_environment(monkeypatch: Any) -> None:
    monkeypatch.setenv("IMGDIFF_WORKERS", "2")
    monkeypatch.delenv("IMGDIFF_ALPHA", raising=False)
    assert load_settings() == Settings(alpha="premultiplied", workers=2)
