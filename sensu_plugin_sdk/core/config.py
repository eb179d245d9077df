"""Plugin identification and behavior configuration."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from sensu_plugin_sdk.core.errors import ConfigurationError


class PluginConfig(BaseModel):
    """Base plugin configuration.

    Attributes:
        name: Plugin name, used as the program name in help and errors.
        short: One line description shown in help output.
        timeout: Advisory timeout in seconds; the framework does not enforce it.
        keyspace: Annotation namespace consulted for configuration overrides.
            Overrides are disabled when empty.
    """

    name: str
    short: str = ""
    timeout: int = Field(default=0, ge=0)
    keyspace: str = ""

    model_config = {"extra": "forbid"}

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Plugin name must be non-empty."""
        if not v.strip():
            raise ValueError("plugin name cannot be empty")
        return v

    @field_validator("keyspace")
    @classmethod
    def strip_keyspace(cls, v: str) -> str:
        """Drop trailing separators so keys join cleanly."""
        return v.rstrip("/")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> PluginConfig:
        """Build a config from a plain mapping.

        Raises:
            ConfigurationError: If the mapping does not describe a valid config.
        """
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            raise ConfigurationError(f"Plugin configuration validation failed: {e}") from e
