"""Configuration models describing astroschema settings."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CONFIG_FILES = ("src/content.config.ts", "src/content/config.ts")
DEFAULT_CONTENT_DIRECTORY = "src/content"
DEFAULT_SCHEMA_DIRECTORY = ".astro/collections"


class AstroSchemaBaseModel(BaseModel):
    """Shared configuration for astroschema Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class ProjectSettings(AstroSchemaBaseModel):
    """Where collections and their generated schemas live inside a project.

    Attributes:
        content_directory: Content directory relative to the project root; the
            conventional `src/content` is used when unset.
        config_files: Candidate content config files, tried in order.
        schema_directory: Directory holding generated `<name>.schema.json` files.
    """

    content_directory: Optional[str] = None
    config_files: List[str] = Field(default_factory=lambda: list(DEFAULT_CONFIG_FILES))
    schema_directory: str = DEFAULT_SCHEMA_DIRECTORY


class LoggingSettings(AstroSchemaBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class CLIOptions(AstroSchemaBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        json_default: Whether commands emit JSON payloads by default.
    """

    quiet_default: bool = False
    json_default: bool = False


class AstroSchemaConfig(AstroSchemaBaseModel):
    """Top-level configuration struct for astroschema.

    Attributes:
        project: Project layout settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    project: ProjectSettings = Field(default_factory=ProjectSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "AstroSchemaBaseModel",
    "ProjectSettings",
    "LoggingSettings",
    "CLIOptions",
    "AstroSchemaConfig",
    "DEFAULT_CONFIG_FILES",
    "DEFAULT_CONTENT_DIRECTORY",
    "DEFAULT_SCHEMA_DIRECTORY",
]
