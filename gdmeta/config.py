"""
Configuration models and loader.
"""

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from gdmeta.exceptions import ConfigError
from gdmeta.lookup_client import DEFAULT_URL_TEMPLATE, LOOKUP_TIMEOUT_SECONDS
from gdmeta.tag_store import CURRENT_ID3_VERSION

CONFIG_VERSION = "1.0"


class TaggerSettings(BaseModel):
    """Tagging configuration settings."""

    threads: int = Field(default=4, ge=1)  # Concurrent lookups
    extension: str = "mp3"
    url_template: str = DEFAULT_URL_TEMPLATE
    socket_timeout: int = Field(default=LOOKUP_TIMEOUT_SECONDS, ge=1)  # Seconds
    id3_version: Literal[3, 4] = CURRENT_ID3_VERSION
    log_level: str = "INFO"

    @field_validator("url_template")
    @classmethod
    def _require_id_placeholder(cls, value: str) -> str:
        if "{id}" not in value:
            raise ValueError("url_template must contain an {id} placeholder")
        return value

    @field_validator("extension")
    @classmethod
    def _strip_dot(cls, value: str) -> str:
        value = value.lstrip(".")
        if not value:
            raise ValueError("extension must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"unknown log level {value}")
        return value


class GDMetaConfig(BaseModel):
    """Main configuration model."""

    version: Literal["1.0"] = CONFIG_VERSION
    tagger: TaggerSettings = Field(default_factory=TaggerSettings)

    @classmethod
    def from_yaml(cls, path: str) -> "GDMetaConfig":
        """
        Load and validate configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            GDMetaConfig instance

        Raises:
            ConfigError: If file not found or invalid
        """
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Error parsing YAML file: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration must be a mapping, got {type(data).__name__}")

        # Validate version (handle both string and float from YAML)
        version = data.get("version", CONFIG_VERSION)
        if str(version) != CONFIG_VERSION:
            raise ConfigError(f"Invalid version: {version}. Expected {CONFIG_VERSION}")
        # Normalize to string for Pydantic
        data["version"] = CONFIG_VERSION

        if data.get("tagger") is None:
            data.pop("tagger", None)

        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


def load_config(config_path: str) -> GDMetaConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        GDMetaConfig instance
    """
    return GDMetaConfig.from_yaml(config_path)
