"""Logging for the Lacework API client."""

from lacework_client.observability.logging import (
    HumanReadableFormatter,
    StructuredFormatter,
    StructuredLogger,
    get_logger,
    parse_level,
)

__all__ = [
    "HumanReadableFormatter",
    "StructuredFormatter",
    "StructuredLogger",
    "get_logger",
    "parse_level",
]
