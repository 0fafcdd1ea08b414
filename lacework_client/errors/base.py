"""Exception hierarchy for the Lacework API client.

Every client error inherits from LaceworkError and carries:
- error_code: an ErrorCode enum for programmatic handling
- context: ErrorContext with request/response details
- suggestions: actionable steps to resolve the issue

Transport failures (connection errors, timeouts) are not wrapped; they
surface as the ``httpx.TransportError`` raised by the HTTP engine.

Example:
    try:
        client.v2.alert_rules.get("LW_123")
    except APIError as e:
        print(e.status_code, e.message)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes.

    - E1xx: Request errors
    - E2xx: Configuration errors
    - E9xx: Unknown/internal errors
    """

    # Request errors (E1xx)
    REQUEST_CONSTRUCTION_FAILED = "E101"
    TOKEN_GENERATION_FAILED = "E102"
    API_ERROR = "E103"

    # Configuration errors (E2xx)
    INVALID_CONFIG = "E201"
    CONFIG_LOAD_FAILED = "E202"

    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if code_num < 200:
            return "request"
        elif code_num < 300:
            return "configuration"
        return "unknown"


@dataclass
class ErrorContext:
    """Structured context attached to an error.

    Attributes:
        request: HTTP request details (method, url)
        response: HTTP response details (status, body)
        extra: Additional context-specific information
        timestamp: When the error occurred
    """

    request: dict[str, Any] | None = None
    response: dict[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "request": self.request,
            "response": self.response,
            "extra": self.extra,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}


class LaceworkError(Exception):
    """Base exception for all client errors.

    Attributes:
        error_code: Unique ErrorCode for this error type
        message: Human-readable error description
        context: ErrorContext with request details
        suggestions: List of actionable steps to resolve the issue
        cause: The underlying exception (if any)
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self._suggestions = suggestions

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    @property
    def suggestions(self) -> list[str]:
        """Get actionable suggestions for resolving this error."""
        if self._suggestions is not None:
            return self._suggestions
        return self.default_suggestions.copy()

    def __str__(self) -> str:
        return f"[{self.error_code.value}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class ConfigurationError(LaceworkError):
    """The client was configured with missing or invalid settings."""

    error_code = ErrorCode.INVALID_CONFIG
    default_message = "Invalid client configuration"
    default_suggestions = [
        "Set LW_ACCOUNT, LW_API_KEY and LW_API_SECRET",
        "Check the active profile in ~/.lacework.yaml",
    ]

    def __init__(
        self,
        message: str | None = None,
        field_name: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ) -> None:
        self.field_name = field_name
        self.value = value
        super().__init__(message=message, **kwargs)


class RequestConstructionError(LaceworkError):
    """An outbound request could not be built.

    Raised before any network call for malformed paths, requests the HTTP
    engine refuses to allocate, and failed token regeneration.
    """

    error_code = ErrorCode.REQUEST_CONSTRUCTION_FAILED
    default_message = "Unable to build request"


class TokenGenerationError(RequestConstructionError):
    """A new access token could not be obtained."""

    error_code = ErrorCode.TOKEN_GENERATION_FAILED
    default_message = "Unable to generate access token"
    default_suggestions = [
        "Verify the api key and secret belong to this account",
        "Check that the account name resolves (https://<account>.lacework.net)",
    ]


class APIError(LaceworkError):
    """The API answered with an error status or a vendor error envelope.

    The rendered message mirrors the request line and the server's answer::

        [POST] https://acme.lacework.net/api/v2/AlertRules
          [400] Invalid filter
    """

    error_code = ErrorCode.API_ERROR
    default_message = "API request failed"

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        method: str | None = None,
        url: str | None = None,
        response: Any = None,
        **kwargs: Any,
    ) -> None:
        self.status_code = status_code
        self.method = method
        self.url = url
        self.response = response
        if status_code:
            kwargs.setdefault("suggestions", self._suggestions_for_status(status_code))
        kwargs.setdefault(
            "context",
            ErrorContext(
                request={"method": method, "url": url},
                response={"status": status_code},
            ),
        )
        super().__init__(message=message, **kwargs)

    def _suggestions_for_status(self, status_code: int) -> list[str]:
        if status_code == 401:
            return [
                "Verify the access token is valid and not expired",
                "Regenerate the api key if it was rotated",
            ]
        elif status_code == 403:
            return ["Check the api key has permissions on this account or sub-account"]
        elif status_code == 404:
            return ["Verify the resource GUID exists in this account"]
        elif status_code == 429:
            return ["Reduce request frequency; the API is rate limiting this key"]
        elif 500 <= status_code < 600:
            return ["This is a server-side error, retry later or contact support"]
        return []

    def __str__(self) -> str:
        return f"\n  [{self.method}] {self.url}\n  [{self.status_code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["status_code"] = self.status_code
        return result
