"""Structured logging for the Lacework API client.

Entries carry key-value fields next to the message. They are written as one
JSON object per line (``LW_LOG_FORMAT=JSON``) or as a console line with the
fields appended (``LW_LOG_FORMAT=CONSOLE``, the default).

``LW_LOG`` picks the level: ``info`` (the default) logs one entry per
response; ``debug`` additionally logs every request and shows headers and
bodies in full.

Example::

    from lacework_client.observability.logging import get_logger

    logger = get_logger()
    logger.info("response", code=200, proto="HTTP/1.1")
"""

from __future__ import annotations

import json
import logging
import os
import sys
import threading
from datetime import datetime, timezone
from typing import Any, TextIO


class StructuredFormatter(logging.Formatter):
    """Render a record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "message": record.getMessage(),
            "logger": record.name,
        }
        fields = getattr(record, "fields", None)
        if fields:
            entry["data"] = dict(fields)
        return json.dumps(entry, default=str, ensure_ascii=False)


class HumanReadableFormatter(logging.Formatter):
    """Render a record as a console line, colored when stderr is a terminal."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:8}"
        if self.use_colors and record.levelname in self.COLORS:
            level = f"{self.COLORS[record.levelname]}{level}{self.RESET}"

        stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        line = f"{stamp} {level} [{record.name}] {record.getMessage()}"

        fields = getattr(record, "fields", None)
        if fields:
            line += f" | data={json.dumps(fields, default=str)}"
        return line


class StructuredLogger:
    """Logger whose calls take key-value fields.

    Example:
        >>> logger = StructuredLogger("lacework_client", level=logging.DEBUG)
        >>> logger.debug("request", method="GET", endpoint="/api/v2/AlertRules")
    """

    def __init__(
        self,
        name: str,
        level: int = logging.INFO,
        json_format: bool = False,
        stream: TextIO | None = None,
    ) -> None:
        """Set up the underlying stdlib logger with a single stream handler.

        Args:
            name: Logger name.
            level: Minimum level written.
            json_format: JSON lines (True) or console lines (False).
            stream: Output stream, stderr by default.
        """
        self.name = name
        self.json_format = json_format
        self._logger = logging.getLogger(name)
        self._logger.handlers.clear()
        self._logger.propagate = False

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter() if json_format else HumanReadableFormatter())
        self._logger.addHandler(handler)
        self.set_level(level)

    def _log(self, level: int, message: str, fields: dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        record = self._logger.makeRecord(self.name, level, "", 0, message, (), None)
        record.fields = fields  # type: ignore[attr-defined]
        self._logger.handle(record)

    def debug(self, message: str, **fields: Any) -> None:
        self._log(logging.DEBUG, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log(logging.INFO, message, fields)

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    def set_level(self, level: int | str | None) -> None:
        self._logger.setLevel(parse_level(level))


def parse_level(level: int | str | None) -> int:
    """Translate an ``LW_LOG`` style value into a logging level.

    An empty or unknown value means INFO.
    """
    if isinstance(level, int):
        return level
    if not level:
        return logging.INFO
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


_loggers: dict[str, StructuredLogger] = {}
_loggers_lock = threading.Lock()


def get_logger(
    name: str = "lacework_client",
    level: int | str | None = None,
    json_format: bool | None = None,
) -> StructuredLogger:
    """Return the cached logger for ``name``, creating it on first use.

    Args:
        name: Logger name.
        level: Minimum level. Defaults to ``LW_LOG``. Passing a level
            re-levels an already cached logger.
        json_format: JSON output. Defaults to ``LW_LOG_FORMAT == "JSON"``.
    """
    if json_format is None:
        json_format = os.environ.get("LW_LOG_FORMAT", "CONSOLE").upper() == "JSON"

    with _loggers_lock:
        logger = _loggers.get(name)
        if logger is None:
            logger = StructuredLogger(
                name,
                level=parse_level(os.environ.get("LW_LOG") if level is None else level),
                json_format=json_format,
            )
            _loggers[name] = logger
        elif level is not None:
            logger.set_level(level)
        return logger
