"""Centralised configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.

The anchoring core takes no configuration at all; only the rewrite step,
storage and the CLI read these values, and they receive them explicitly.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# src/readmark/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

_CSS_COLOR = re.compile(r"^(#[0-9a-fA-F]{3,8}|[a-zA-Z]+|(rgb|hsl)a?\([^)]*\))$")


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class PaletteColor(BaseModel):
    """A named highlight colour offered by the host toolbar."""

    name: str
    color: str

    @field_validator("color")
    @classmethod
    def _valid_css_color(cls, value: str) -> str:
        value = value.strip()
        if not _CSS_COLOR.match(value):
            msg = f"not a CSS colour: {value!r}"
            raise ValueError(msg)
        return value


def _default_palette() -> list[PaletteColor]:
    return [
        PaletteColor(name="Yellow", color="#fff3a3"),
        PaletteColor(name="Green", color="#bbfabb"),
        PaletteColor(name="Blue", color="#abd7ff"),
        PaletteColor(name="Pink", color="#ffb8eb"),
        PaletteColor(name="Orange", color="#ffcb8a"),
    ]


class HighlightConfig(BaseModel):
    """How highlight, tag and annotation markup is written into the source."""

    style: Literal["markdown", "html"] = "markdown"
    tag_prefix: str = "#"
    palette: list[PaletteColor] = _default_palette()
    footnote_prefix: str = ""

    @model_validator(mode="after")
    def _tag_prefix_has_no_whitespace(self) -> HighlightConfig:
        if any(ch.isspace() for ch in self.tag_prefix):
            msg = "HIGHLIGHT__TAG_PREFIX must not contain whitespace"
            raise ValueError(msg)
        return self


class StorageConfig(BaseModel):
    """Where documents live on disk."""

    root: Path = Path()
    encoding: str = "utf-8"


class TagConfig(BaseModel):
    """Tag suggestion behaviour."""

    recent_tags: list[str] = []
    smart_suggestions: bool = True
    max_suggestions: int = 8
    max_matches: int = 50


class AppConfig(BaseModel):
    """Application runtime configuration."""

    log_dir: Path | None = None
    log_level: str = "INFO"


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Settings with automatic .env loading and type validation.

    Environment variables carry a ``READMARK_`` prefix and use a
    double-underscore delimiter for nesting: ``READMARK_HIGHLIGHT__STYLE``,
    ``READMARK_STORAGE__ROOT``, ``READMARK_APP__LOG_DIR``, etc.
    """

    model_config = SettingsConfigDict(
        env_prefix="READMARK_",
        env_file=_PROJECT_ROOT / ".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    highlight: HighlightConfig = HighlightConfig()
    storage: StorageConfig = StorageConfig()
    tags: TagConfig = TagConfig()
    app: AppConfig = AppConfig()


# ---------------------------------------------------------------------------
# Singleton access
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    settings = Settings()

    env_file = settings.model_config.get("env_file")
    if env_file is not None and Path(str(env_file)).is_file():
        logger.info("Settings loaded .env from: %s", env_file)
    else:
        logger.debug("Settings: no .env file found, using env vars and defaults")

    return settings
