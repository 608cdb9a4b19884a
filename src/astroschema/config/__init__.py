"""Configuration management for astroschema."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping

import yaml

from .exceptions import ConfigError
from .models import AstroSchemaConfig, ProjectSettings
from .resolver import ENV_PREFIX, Layer, dotted_overrides, env_overrides, merge_settings, split_key

DEFAULT_CONFIG_PATH = Path("~/.astroschema/config.yaml")
_HEADER = "# astroschema configuration file\n# Manage with `astroschema config set`.\n"


class ConfigManager:
    """Read and write the astroschema settings file.

    Settings resolve as defaults < file < `ASTROSCHEMA__*` environment <
    command line overrides.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        """Return the resolved configuration path."""
        return self._config_path

    def load(
        self,
        overrides: Mapping[str, Any] | None = None,
        *,
        include_env: bool = True,
    ) -> AstroSchemaConfig:
        """Resolve settings from every layer.

        Args:
            overrides: Dotted `section.setting` values from the command line;
                ``None`` values are skipped.
            include_env: Whether `ASTROSCHEMA__*` environment variables apply.

        Returns:
            AstroSchemaConfig: Validated settings.

        Raises:
            ConfigError: If the file is unreadable or a value fails validation.
        """
        layers: List[Layer] = [(str(self._config_path), self.stored())]
        if include_env:
            layers.append(("environment", env_overrides(self._env)))
        if overrides:
            layers.append(("command line", dotted_overrides(overrides)))
        return merge_settings(layers)

    def stored(self) -> Dict[str, Any]:
        """Return the settings mapping saved on disk, or an empty one."""
        if not self._config_path.exists():
            return {}

        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return raw

    def set_value(self, key: str, value: Any) -> AstroSchemaConfig:
        """Store one `section.setting` value after validating the result.

        Raises:
            ConfigError: If the key is unknown or the new value is invalid.
        """
        section, setting = split_key(key)
        data = self.stored()
        current = data.get(section)
        if current is None:
            current = data[section] = {}
        elif not isinstance(current, dict):
            raise ConfigError(f"Section '{section}' in the configuration file is not a mapping.")
        current[setting] = value

        config = merge_settings([(str(self._config_path), data)])
        self.save(data)
        return config

    def save(self, data: AstroSchemaConfig | Mapping[str, Any]) -> None:
        """Write settings to disk below the header and a timestamp line."""
        if isinstance(data, AstroSchemaConfig):
            data = data.model_dump(mode="python")
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        body = yaml.safe_dump(dict(data), sort_keys=False)
        self._config_path.write_text(
            f"{_HEADER}# Last updated: {stamp}\n{body}", encoding="utf-8"
        )

    def ensure_exists(self) -> Path:
        """Write a default settings file when none exists yet."""
        if not self._config_path.exists():
            self.save(AstroSchemaConfig())
        return self._config_path

    def read_text(self) -> str:
        """Return the current file contents, or an empty string."""
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")


__all__ = [
    "AstroSchemaConfig",
    "ConfigError",
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "ProjectSettings",
    "merge_settings",
]
