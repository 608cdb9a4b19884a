"""Layering of astroschema settings from file, environment, and command line."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Tuple

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import AstroSchemaConfig

ENV_PREFIX = "ASTROSCHEMA__"

SECTIONS = tuple(AstroSchemaConfig.model_fields)

Layer = Tuple[str, Mapping[str, Any]]


def split_key(key: str) -> Tuple[str, str]:
    """Split a `section.setting` key, rejecting anything deeper or unknown.

    Raises:
        ConfigError: If ``key`` does not name a setting inside a known section.
    """
    parts = [part.strip() for part in key.split(".")]
    if len(parts) != 2 or not all(parts):
        raise ConfigError(f"Expected a key of the form 'section.setting', got '{key}'.")

    section, setting = parts
    if section not in SECTIONS:
        raise ConfigError(f"Unknown configuration section '{section}'.")
    return section, setting


def dotted_overrides(values: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Turn `{"project.content_directory": "docs"}` into a section mapping.

    ``None`` values are ignored so unset command line options leave lower
    layers untouched.
    """
    layer: Dict[str, Dict[str, Any]] = {}
    for key, value in values.items():
        if value is None:
            continue
        section, setting = split_key(key)
        layer.setdefault(section, {})[setting] = value
    return layer


def env_overrides(env: Mapping[str, str]) -> Dict[str, Dict[str, Any]]:
    """Collect `ASTROSCHEMA__SECTION__SETTING` variables into a section mapping.

    Values are parsed as YAML so booleans and lists can be expressed.

    Raises:
        ConfigError: If a variable does not name a setting in a known section.
    """
    layer: Dict[str, Dict[str, Any]] = {}
    for name, raw in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        section, setting = split_key(name[len(ENV_PREFIX) :].lower().replace("__", "."))
        try:
            value: Any = yaml.safe_load(raw)
        except yaml.YAMLError:
            value = raw
        layer.setdefault(section, {})[setting] = value
    return layer


def merge_settings(layers: Iterable[Layer]) -> AstroSchemaConfig:
    """Apply layers over the defaults, later layers winning per setting.

    Args:
        layers: `(origin, mapping)` pairs in increasing precedence; the origin
            only appears in error messages.

    Returns:
        AstroSchemaConfig: Validated settings.

    Raises:
        ConfigError: If a layer is malformed or the result fails validation.
    """
    merged: Dict[str, Dict[str, Any]] = {
        section: dict(values)
        for section, values in AstroSchemaConfig().model_dump(mode="python").items()
    }
    for origin, layer in layers:
        for section, values in layer.items():
            if section not in merged:
                raise ConfigError(f"Unknown configuration section '{section}' in {origin}.")
            if not isinstance(values, Mapping):
                raise ConfigError(f"Section '{section}' in {origin} must be a mapping.")
            merged[section].update(values)

    try:
        return AstroSchemaConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


__all__ = [
    "ENV_PREFIX",
    "SECTIONS",
    "dotted_overrides",
    "env_overrides",
    "merge_settings",
    "split_key",
]
