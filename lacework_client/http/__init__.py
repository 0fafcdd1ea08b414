"""HTTP pipeline: request building, token lifecycle, transport and decoding."""

from lacework_client.http.auth import (
    DEFAULT_TOKEN_EXPIRY,
    SECRET_HEADER,
    TOKENS_PATH,
    AuthState,
    TokenManager,
    TokenResponse,
)
from lacework_client.http.client import (
    API_VERSION,
    DEFAULT_USER_AGENT,
    SUPPRESSED,
    Callbacks,
    Client,
    api_path,
    check_error_in_response,
    json_body,
)
from lacework_client.http.sniffer import sniff_body

__all__ = [
    "API_VERSION",
    "DEFAULT_TOKEN_EXPIRY",
    "DEFAULT_USER_AGENT",
    "SECRET_HEADER",
    "SUPPRESSED",
    "TOKENS_PATH",
    "AuthState",
    "Callbacks",
    "Client",
    "TokenManager",
    "TokenResponse",
    "api_path",
    "check_error_in_response",
    "json_body",
    "sniff_body",
]
