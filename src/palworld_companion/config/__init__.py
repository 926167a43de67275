"""Configuration management for Palworld Companion."""

from palworld_companion.config.loader import ConfigurationError, load_config
from palworld_companion.config.settings import CompanionSettings

__all__ = [
    "CompanionSettings",
    "ConfigurationError",
    "load_config",
]
