"""Configuration file loading with profile support.

The configuration file is YAML. It either holds the settings at the top
level, or a ``profiles`` mapping of named settings blocks::

    profiles:
      default:
        account: acme
        api_key: ACME_1234
        api_secret: ${ACME_SECRET}
      staging:
        account: acme-staging
        api_key: ACME_5678
        api_secret: ${STAGING_SECRET:changeme}

``${VAR}`` and ``${VAR:default}`` references are replaced with environment
values.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from lacework_client.config.settings import ClientSettings
from lacework_client.errors import ConfigurationError, ErrorCode, LaceworkError

DEFAULT_CONFIG_PATH = Path("~/.lacework.yaml")
DEFAULT_PROFILE = "default"

ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")


class ConfigLoadError(LaceworkError):
    """Raised when the configuration file cannot be loaded."""

    error_code = ErrorCode.CONFIG_LOAD_FAILED
    default_message = "Unable to load configuration"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.details = details or {}
        super().__init__(message, **self.details)


def _load_file(path: Path) -> dict[str, Any]:
    try:
        with open(path) as f:
            config = yaml.safe_load(f)
    except OSError as e:
        raise ConfigLoadError(
            f"Unable to read configuration file {path}: {e}", {"path": str(path)}
        ) from e
    except yaml.YAMLError as e:
        raise ConfigLoadError(
            f"Failed to parse YAML configuration: {e}",
            {"path": str(path), "yaml_error": str(e)},
        ) from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigLoadError(
            f"Configuration must be a YAML object, got {type(config).__name__}",
            {"path": str(path)},
        )
    return config


def _interpolate(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _interpolate(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate(v) for v in value]
    if isinstance(value, str):
        return ENV_VAR_PATTERN.sub(
            lambda m: os.environ.get(m.group(1), m.group(2) or ""), value
        )
    return value


def _select_profile(config: dict[str, Any], profile: str, explicit: bool) -> dict[str, Any]:
    profiles = config.get("profiles")
    if profiles is None:
        return config
    if not isinstance(profiles, dict):
        raise ConfigLoadError("'profiles' must be a mapping of profile names to settings")

    selected = profiles.get(profile)
    if selected is None:
        if explicit:
            raise ConfigLoadError(
                f"Profile {profile!r} not found",
                {"profile": profile, "available": sorted(profiles)},
            )
        return {}
    return selected


def load_config(
    config_path: str | Path | None = None,
    profile: str | None = None,
) -> ClientSettings:
    """Load client settings from a config file and the environment.

    Priority: environment variables > selected profile > defaults.

    Args:
        config_path: YAML file. Defaults to ``~/.lacework.yaml`` when it
            exists. An explicit path that does not exist is an error.
        profile: Profile name. Defaults to ``LW_PROFILE`` or ``default``.

    Raises:
        ConfigLoadError: If the file or the requested profile is unusable.
        ConfigurationError: If the resulting settings are invalid.
    """
    explicit_profile = profile is not None or "LW_PROFILE" in os.environ
    profile = profile or os.environ.get("LW_PROFILE") or DEFAULT_PROFILE

    config_data: dict[str, Any] = {}
    if config_path is not None:
        path = Path(config_path).expanduser()
        if not path.exists():
            raise ConfigLoadError(
                f"Configuration file not found: {path}", {"path": str(path)}
            )
        config_data = _load_file(path)
    else:
        path = DEFAULT_CONFIG_PATH.expanduser()
        if path.exists():
            config_data = _load_file(path)

    values = _interpolate(_select_profile(config_data, profile, explicit_profile))

    try:
        return ClientSettings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}", cause=e) from e
