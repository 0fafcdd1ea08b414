"""Configuration management for the Lacework API client."""

from lacework_client.config.loader import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_PROFILE,
    ConfigLoadError,
    load_config,
)
from lacework_client.config.settings import ClientSettings

__all__ = [
    "ClientSettings",
    "ConfigLoadError",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_PROFILE",
    "load_config",
]
