"""Shared pytest fixtures for readmark tests."""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

from readmark.config import HighlightConfig, Settings, get_settings


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Remove READMARK_* variables and reset the cached settings."""
    for key in list(os.environ):
        if key.startswith("READMARK_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(clean_env: None) -> Settings:
    """Settings built from defaults only (no .env, no environment)."""
    return Settings(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def highlight_config() -> HighlightConfig:
    """Default markup settings: ``==`` highlights, ``#`` tags."""
    return HighlightConfig()
