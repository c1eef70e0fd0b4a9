# === NAVMAP v1 ===
# {
#   "module": "CrptClient.config.loader",
#   "purpose": "Configuration Loading with File/Env/CLI Precedence.",
#   "sections": [
#     {
#       "id": "read-file",
#       "name": "_read_file",
#       "anchor": "function-read-file",
#       "kind": "function"
#     },
#     {
#       "id": "merge-env-overrides",
#       "name": "_merge_env_overrides",
#       "anchor": "function-merge-env-overrides",
#       "kind": "function"
#     },
#     {
#       "id": "load-config",
#       "name": "load_config",
#       "anchor": "function-load-config",
#       "kind": "function"
#     },
#     {
#       "id": "export-config-schema",
#       "name": "export_config_schema",
#       "anchor": "function-export-config-schema",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""
Configuration Loading with File/Env/CLI Precedence

Implements three-level config composition:
1. **File level** (YAML/JSON): base configuration
2. **Environment level**: CRPT_* prefixed variables override file
3. **CLI level**: programmatic overrides win

Environment variables use double-underscore notation:
  CRPT_RATE_LIMIT__PERMITS=5  →  rate_limit.permits=5
  CRPT_PRODUCT_GROUP=milk     →  product_group="milk"

JSON values are automatically parsed; strings are type-coerced when possible.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from CrptClient.errors import InvalidConfiguration

from .models import ClientConfig

_LOGGER = logging.getLogger(__name__)

# ============================================================================
# Helpers
# ============================================================================


def _read_file(path: str) -> dict[str, Any]:
    """
    Read YAML or JSON config file.

    Args:
        path: File path (suffix determines format: .yaml/.yml or .json)

    Returns:
        Parsed config dictionary

    Raises:
        InvalidConfiguration: If file cannot be read or parsed
    """
    p = Path(path)
    if not p.exists():
        raise InvalidConfiguration(f"Config file not found: {path}")

    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise InvalidConfiguration(f"Cannot read config file {path}: {e}") from e

    suffix = p.suffix.lower()

    if suffix in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise InvalidConfiguration(f"Invalid YAML in {path}: {e}") from e
    elif suffix == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidConfiguration(f"Invalid JSON in {path}: {e}") from e
    else:
        raise InvalidConfiguration(f"Unsupported file format: {suffix}. Use .yaml or .json")

    if not isinstance(data, dict):
        raise InvalidConfiguration(f"Config file {path} must contain a mapping")
    return data


def _assign_nested(data: dict[str, Any], dotted_key: str, value: Any) -> None:
    """Assign value to nested dict using dot notation (``"http.user_agent"``)."""
    keys = dotted_key.split(".")
    current = data

    for key in keys[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]

    current[keys[-1]] = value


def _coerce_env_value(value: str) -> Any:
    """
    Attempt to coerce environment variable string to appropriate type.

    JSON objects, arrays, booleans and null are parsed. Numbers stay strings
    so string fields keep values like ``123``; Pydantic coerces numeric
    strings for int/float fields.
    """
    try:
        parsed = json.loads(value)
    except (json.JSONDecodeError, ValueError):
        parsed = value

    if parsed is None or isinstance(parsed, (dict, list, bool)):
        return parsed

    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    return value


def _merge_env_overrides(
    data: dict[str, Any], env_prefix: str, environ: Mapping[str, str]
) -> dict[str, Any]:
    """
    Overlay environment variables onto config dict.

    Args:
        data: Base config dict (will be modified)
        env_prefix: Environment variable prefix
        environ: Environment mapping to read

    Returns:
        Modified data dict
    """
    for env_key, env_value in environ.items():
        if not env_key.startswith(env_prefix):
            continue

        relative_key = env_key[len(env_prefix) :].lower()
        dotted_key = relative_key.replace("__", ".")
        # CRPT_CONFIG, CRPT_SIGNER_CMD etc. belong to the CLI, not the model
        if dotted_key.split(".", 1)[0] not in ClientConfig.model_fields:
            continue
        coerced_value = _coerce_env_value(env_value)

        _assign_nested(data, dotted_key, coerced_value)
        _LOGGER.debug("Environment override: %s -> %s", env_key, dotted_key)

    return data


def _merge_cli_overrides(
    data: dict[str, Any], cli_overrides: Mapping[str, Any] | None
) -> dict[str, Any]:
    """Recursively merge CLI overrides into base config dict; later values win."""
    if not cli_overrides:
        return data

    for key, value in cli_overrides.items():
        if isinstance(value, Mapping) and isinstance(data.get(key), dict):
            data[key] = _merge_cli_overrides(data[key], value)
        else:
            data[key] = dict(value) if isinstance(value, Mapping) else value
        _LOGGER.debug("CLI override: %s = %r", key, value)

    return data


# ============================================================================
# Public API
# ============================================================================


def load_config(
    path: str | None = None,
    env_prefix: str = "CRPT_",
    cli_overrides: Mapping[str, Any] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> ClientConfig:
    """
    Load ClientConfig from file, environment, and CLI with proper precedence.

    **Precedence:** file < environment < CLI

    Args:
        path: Path to YAML/JSON config file (optional)
        env_prefix: Environment variable prefix (default: CRPT_)
        cli_overrides: CLI overrides dict (optional)
        environ: Environment mapping (default: ``os.environ``)

    Returns:
        Validated ClientConfig instance

    Raises:
        InvalidConfiguration: If the file cannot be read or the merged config is invalid
    """
    data: dict[str, Any] = {}

    if path:
        data = _read_file(path)
        _LOGGER.info("Loaded config from %s", path)

    data = _merge_env_overrides(data, env_prefix, os.environ if environ is None else environ)
    data = _merge_cli_overrides(data, cli_overrides)

    try:
        config = ClientConfig.model_validate(data)
    except ValidationError as e:
        _LOGGER.error("Configuration validation failed: %s", e)
        raise InvalidConfiguration(
            f"Configuration validation failed: {e.error_count()} error(s)",
            details={"errors": e.errors(include_url=False)},
        ) from e

    _LOGGER.info("Configuration validated. Config hash: %s...", config.config_hash()[:8])
    return config


def validate_config_file(path: str) -> bool:
    """
    Validate a config file without building a client.

    Useful for the `validate-config` CLI command.

    Raises:
        InvalidConfiguration: If invalid
    """
    load_config(path=path, environ={})
    return True


def export_config_schema() -> dict[str, Any]:
    """Export JSON Schema for ClientConfig (Pydantic v2 format)."""
    return ClientConfig.model_json_schema()
