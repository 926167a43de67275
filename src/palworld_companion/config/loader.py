"""Configuration loading from the JSON config file."""

from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from palworld_companion.config.settings import CompanionSettings, resolve_config_path


class ConfigurationError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""

    pass


def load_json_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Read and parse the JSON configuration file.

    Args:
        config_path: Path to JSON config file. If None, uses CONFIG_PATH or ./config.json.

    Returns:
        Dict of configuration values from the file.

    Raises:
        ConfigurationError: If the file is missing, unreadable or not a JSON object.
    """
    path = config_path or resolve_config_path()

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigurationError(
            f"Configuration file not found: {path}\n"
            "Create config.json in the working directory or point CONFIG_PATH at it."
        )
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in configuration file {path}: {e}")
    except PermissionError:
        raise ConfigurationError(f"Cannot read configuration file {path}: permission denied")

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Invalid configuration file {path}: expected a JSON object, got {type(data).__name__}"
        )
    return data


def format_validation_errors(errors: List[Dict[str, Any]]) -> List[str]:
    """Format Pydantic validation errors into user-friendly messages."""
    messages: List[str] = []
    for error in errors:
        loc = ".".join(str(part) for part in error.get("loc", []))
        msg = error.get("msg", "Invalid value")
        input_val = error.get("input")

        if error.get("type") == "missing":
            messages.append(f"'{loc}' is required. Add '\"{loc}\": ...' to the config file.")
        elif input_val is not None and not isinstance(input_val, (dict, list)):
            messages.append(f"'{loc}' {msg}, got: {input_val}")
        else:
            messages.append(f"'{loc}' {msg}")

    return messages


def load_config(config_path: Optional[str] = None) -> CompanionSettings:
    """Load and validate configuration.

    Args:
        config_path: Optional path to the JSON config file (sets CONFIG_PATH env).

    Returns:
        Validated, frozen CompanionSettings instance.

    Raises:
        ConfigurationError: If the file cannot be read or fails validation.
    """
    if config_path:
        os.environ["CONFIG_PATH"] = config_path

    # Validate the file exists and parses (gives better errors);
    # the actual loading happens in the pydantic settings source
    _ = load_json_config()

    try:
        return CompanionSettings()
    except ValidationError as e:
        error_messages = format_validation_errors(e.errors())
        raise ConfigurationError(
            "Invalid configuration:\n" + "\n".join(f"  {msg}" for msg in error_messages)
        ) from e
