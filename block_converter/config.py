"""Converter settings and YAML settings files.

Example ``block-converter.yaml``::

    namespace: wp
    base_url: https://legacy.example.com/
    embeds: true
    oembed:
      maxwidth: 640
      discover: true
    media:
      directory: ./uploads
      base_url: https://cdn.example.com/uploads
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from block_converter.block import DEFAULT_NAMESPACE
from block_converter.exceptions import ConfigError
from block_converter.oembed import DEFAULT_MAXHEIGHT, DEFAULT_MAXWIDTH

logger = logging.getLogger(__name__)


class OEmbedSettings(BaseModel):
    enabled: bool = True
    maxwidth: int = Field(default=DEFAULT_MAXWIDTH, gt=0)
    maxheight: int = Field(default=DEFAULT_MAXHEIGHT, gt=0)
    timeout: float = Field(default=10, gt=0)
    user_agent: str | None = None
    discover: bool = False


class MediaSettings(BaseModel):
    directory: str | None = None
    base_url: str = ""
    timeout: float = Field(default=30, gt=0)


class ConverterSettings(BaseModel):
    """Everything needed to wire a converter and its collaborators."""

    namespace: str = DEFAULT_NAMESPACE
    base_url: str = ""
    embeds: bool = True
    oembed: OEmbedSettings = Field(default_factory=OEmbedSettings)
    media: MediaSettings = Field(default_factory=MediaSettings)

    model_config = {"extra": "forbid"}

    @field_validator("namespace", mode="before")
    @classmethod
    def check_namespace(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            if not v or " " in v or "--" in v:
                raise ValueError("namespace must be a non-empty word")
        return v


def load_settings(path: str | Path | None = None) -> ConverterSettings:
    """Load settings from the YAML file at *path* (defaults when None)."""
    if path is None:
        return ConverterSettings()

    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read settings file {path}: {exc}") from exc

    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping")

    try:
        settings = ConverterSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings in {path}: {exc}") from exc

    logger.debug("Loaded settings from %s", path)
    return settings
