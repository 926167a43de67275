"""Pydantic settings models for Palworld Companion configuration."""

from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Literal, Tuple, Type

from pydantic import Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from palworld_companion.restart.schedule import (
    DEFAULT_WARNING_SCHEDULE,
    WarningCheckpoint,
    validate_schedule,
)

DEFAULT_CONFIG_PATH = "config.json"


def resolve_config_path() -> str:
    """Path of the JSON config file: CONFIG_PATH if set, else ./config.json."""
    return os.environ.get("CONFIG_PATH") or DEFAULT_CONFIG_PATH


class JsonFileSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads values from a JSON file.

    The JSON file path is determined by the CONFIG_PATH environment variable,
    falling back to config.json in the working directory.
    """

    def get_field_value(
        self, field: Any, field_name: str
    ) -> Tuple[Any, str, bool]:
        """Get field value from JSON config."""
        json_config = self._load_json_config()
        field_value = json_config.get(field.alias or field_name)
        return field_value, field_name, False

    def _load_json_config(self) -> Dict[str, Any]:
        """Load JSON configuration file."""
        try:
            with open(resolve_config_path(), encoding="utf-8") as f:
                data = json.load(f)
                return data if isinstance(data, dict) else {}
        except (FileNotFoundError, json.JSONDecodeError, PermissionError):
            # Errors will be handled by loader.py
            return {}

    def __call__(self) -> Dict[str, Any]:
        """Return the JSON config values."""
        return self._load_json_config()


class CompanionSettings(BaseSettings):
    """Palworld Companion configuration settings.

    Keys in the JSON file are camelCase (``checkIntervalMinutes``); the
    attributes are the snake_case equivalents. Settings are frozen once
    loaded.
    """

    model_config = SettingsConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    # Monitoring
    check_interval_minutes: float = Field(
        default=5.0,
        description="Minutes between memory usage checks (fractions allowed)",
        gt=0,
    )
    max_memory_percentage: float = Field(
        default=50.0,
        description="Memory usage percentage above which the server is restarted",
        ge=0,
        le=100,
    )
    process_name: str = Field(
        default="PalServer-Linux-Test",
        description="Process name passed to pidof to find the server",
    )

    # Required connection settings
    server_host: str = Field(
        ...,
        description="Hostname or IP address of the Palworld server",
    )
    rcon_port: int = Field(
        ...,
        description="RCON port of the Palworld server",
        ge=1,
        le=65535,
    )
    rcon_password: str = Field(
        ...,
        description="RCON admin password",
    )
    restart_command: str = Field(
        ...,
        description="Command that restarts the server, split on whitespace",
    )

    # Restart countdown
    warning_schedule: List[WarningCheckpoint] = Field(
        default_factory=lambda: list(DEFAULT_WARNING_SCHEDULE),
        description="Countdown checkpoints, strictly decreasing",
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log output format: text (terminal) or json (log shippers)",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Only constructor arguments and the JSON file are used.

        Order (first = highest priority):
        1. init_settings (constructor arguments - tests and embedding)
        2. json_settings (CONFIG_PATH or ./config.json)
        """
        return (
            init_settings,
            JsonFileSettingsSource(settings_cls),
        )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "WARN", "ERROR", "CRITICAL"}
        normalized = v.upper()
        if normalized == "WARN":
            normalized = "WARNING"
        if normalized not in valid_levels:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: DEBUG, INFO, WARNING, ERROR"
            )
        return normalized

    @field_validator("server_host")
    @classmethod
    def validate_server_host(cls, v: str) -> str:
        """Validate host is not empty."""
        if not v or not v.strip():
            raise ValueError("Server host cannot be empty")
        return v.strip()

    @field_validator("restart_command")
    @classmethod
    def validate_restart_command(cls, v: str) -> str:
        """Validate the restart command contains something to execute."""
        if not v.split():
            raise ValueError("Restart command cannot be empty")
        return v

    @field_validator("warning_schedule")
    @classmethod
    def validate_warning_schedule(
        cls, v: List[WarningCheckpoint]
    ) -> List[WarningCheckpoint]:
        """Validate the countdown is non-empty and strictly decreasing."""
        validate_schedule(v)
        return v

    @property
    def check_interval_seconds(self) -> float:
        """Check interval converted to seconds."""
        return self.check_interval_minutes * 60

    def get_restart_args(self) -> List[str]:
        """Split restart_command on whitespace into an argument vector."""
        return self.restart_command.split()
