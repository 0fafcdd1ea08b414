"""Client error hierarchy."""

from lacework_client.errors.base import (
    APIError,
    ConfigurationError,
    ErrorCode,
    ErrorContext,
    LaceworkError,
    RequestConstructionError,
    TokenGenerationError,
)

__all__ = [
    "APIError",
    "ConfigurationError",
    "ErrorCode",
    "ErrorContext",
    "LaceworkError",
    "RequestConstructionError",
    "TokenGenerationError",
]
