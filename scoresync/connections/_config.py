"""Configuration loader utilities shared by the endpoint, retry, and schema settings."""

import json
import os
from pathlib import Path
from typing import Any

import yaml

from ..errors import ConfigError
from ._logging import get_logger, redact_config

LOGGER = get_logger("config")


def _read_prefixed_env(prefix: str, exclude: tuple[str, ...] = ()) -> dict[str, Any]:
    """Read environment keys matching <PREFIX>_* and normalize key names, skipping excluded keys."""
    prefix_token = f"{prefix.upper()}_"
    values: dict[str, Any] = {}

    for key, value in os.environ.items():
        if key.startswith(prefix_token):
            normalized_key = key.removeprefix(prefix_token).lower()
            if normalized_key in exclude:
                continue
            values[normalized_key] = value

    LOGGER.debug("Loaded %s config keys from environment prefix %s", len(values), prefix_token)
    return values


def _validate_mapping_root(data: Any, source: str) -> dict[str, Any]:
    """Ensure configuration files deserialize to a dictionary root."""
    if isinstance(data, dict):
        return data
    raise ConfigError(f"Config file {source} must contain a key-value object at the root")


def _read_config_file(file_path: str | Path | None) -> dict[str, Any]:
    """Read a JSON or YAML config file when provided, otherwise return an empty mapping."""
    if not file_path:
        return {}

    path = Path(file_path)
    if not path.exists():
        LOGGER.error("Config file not found: %s", file_path)
        raise ConfigError(f"Config file not found: {file_path}")

    suffix = path.suffix.lower()
    content = path.read_text(encoding="utf-8")

    try:
        if suffix == ".json":
            raw_data = json.loads(content)
        elif suffix in {".yaml", ".yml"}:
            raw_data = yaml.safe_load(content)
        else:
            raise ConfigError("Unsupported config format. Use JSON (.json) or YAML (.yaml/.yml).")
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Could not parse config file {file_path}: {exc}") from exc

    LOGGER.info("Loaded config from %s", file_path)
    return _validate_mapping_root(raw_data, str(file_path))


def _not_none_values(values: dict[str, Any] | None) -> dict[str, Any]:
    """Drop keys with None values to avoid overriding previous layers."""
    if not values:
        return {}
    return {key: value for key, value in values.items() if value is not None}


def _merge_config_layers(layers: list[dict[str, Any]]) -> dict[str, Any]:
    """Merge config dictionaries in order where last layer wins."""
    merged: dict[str, Any] = {}
    for layer in layers:
        merged.update(layer)
    return merged


def _ensure_required_keys(config: dict[str, Any], required: tuple[str, ...]) -> None:
    """Validate required keys and raise a clear error when missing."""
    missing = [key for key in required if config.get(key) in (None, "")]
    if missing:
        joined = ", ".join(missing)
        LOGGER.error("Required config keys missing: %s", joined)
        raise ConfigError(f"Missing required sync config keys: {joined}")


def load_connection_config(
    config: dict[str, Any] | None = None,
    *,
    file_path: str | Path | None = None,
    env_prefix: str | None = None,
    required: tuple[str, ...] = (),
    defaults: dict[str, Any] | None = None,
    overrides: dict[str, Any] | None = None,
    env_exclude: tuple[str, ...] = (),
) -> dict[str, Any]:
    """Resolve final sync config from defaults, file, env, config, and overrides."""
    LOGGER.info(
        "Loading sync config with env_prefix=%s, file_path=%s",
        env_prefix,
        file_path,
    )
    env_config = _read_prefixed_env(env_prefix, env_exclude) if env_prefix else {}
    merged = _merge_config_layers(
        [
            defaults or {},
            _read_config_file(file_path),
            env_config,
            config or {},
            _not_none_values(overrides),
        ]
    )

    _ensure_required_keys(merged, required)
    LOGGER.info("Sync config resolved: %s", redact_config(merged))
    return merged


def load_sync_config(config: dict[str, Any] | str | Path) -> dict[str, Any]:
    """Load a sync config from a dict, JSON file, or YAML file."""
    if isinstance(config, dict):
        return config
    return _read_config_file(config)
