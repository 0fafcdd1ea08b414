"""Client settings."""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from lacework_client.http.auth import DEFAULT_TOKEN_EXPIRY


class ClientSettings(BaseSettings):
    """Settings for the Lacework API client.

    Every field can be set through an ``LW_`` prefixed environment variable
    (``LW_ACCOUNT``, ``LW_API_KEY``, ``LW_LOG``...). Environment variables
    take precedence over values passed in, which normally come from the
    configuration file.
    """

    model_config = SettingsConfigDict(
        env_prefix="LW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    account: str = ""
    subaccount: str = ""
    api_key: str = ""
    api_secret: str = ""
    api_token: str = ""
    base_url: str | None = None
    timeout: float | None = None
    token_expiry: int = DEFAULT_TOKEN_EXPIRY
    log: str = ""
    log_format: str = "CONSOLE"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @field_validator("log", mode="before")
    @classmethod
    def validate_log(cls, v: str | None) -> str:
        v = (v or "").strip().lower()
        if v not in ("", "info", "debug"):
            raise ValueError(f"Invalid log level: {v!r}. Valid: 'info', 'debug'")
        return v

    @field_validator("log_format", mode="before")
    @classmethod
    def validate_log_format(cls, v: str | None) -> str:
        v = (v or "CONSOLE").strip().upper()
        if v not in ("CONSOLE", "JSON"):
            raise ValueError(f"Invalid log format: {v!r}. Valid: 'CONSOLE', 'JSON'")
        return v

    @field_validator("token_expiry")
    @classmethod
    def validate_token_expiry(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("token_expiry must be positive")
        return v

    @property
    def json_logs(self) -> bool:
        return self.log_format == "JSON"
