"""Lacework API client.

A synchronous client for the Lacework v2 REST API: request building with
automatic access-token management, structured request/response logging and
JSON decoding into pydantic models.

Example:
    >>> from lacework_client import Client
    >>> client = Client("acme", api_key="ACME_1234", api_secret="_secret")
    >>> for rule in client.v2.alert_rules.list():
    ...     print(rule.filters.name)
"""

from lacework_client._version import __version__
from lacework_client.api import (
    AlertChannel,
    AlertRule,
    AlertRuleFilter,
    AlertRuleSeverity,
    ResourceGroup,
    V2Services,
)
from lacework_client.config import ClientSettings, ConfigLoadError, load_config
from lacework_client.errors import (
    APIError,
    ConfigurationError,
    ErrorCode,
    LaceworkError,
    RequestConstructionError,
    TokenGenerationError,
)
from lacework_client.http import AuthState, Callbacks, Client, sniff_body

__all__ = [
    "__version__",
    "APIError",
    "AlertChannel",
    "AlertRule",
    "AlertRuleFilter",
    "AlertRuleSeverity",
    "AuthState",
    "Callbacks",
    "Client",
    "ClientSettings",
    "ConfigLoadError",
    "ConfigurationError",
    "ErrorCode",
    "LaceworkError",
    "RequestConstructionError",
    "ResourceGroup",
    "TokenGenerationError",
    "V2Services",
    "load_config",
    "sniff_body",
]
