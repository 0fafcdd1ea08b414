"""Tests for structured logging."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from lacework_client.observability import logging as lw_logging
from lacework_client.observability.logging import (
    HumanReadableFormatter,
    StructuredLogger,
    get_logger,
    parse_level,
)


@pytest.fixture
def stream() -> StringIO:
    return StringIO()


def entries(stream: StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


class TestStructuredLogger:
    """Tests for StructuredLogger."""

    def test_json_entry(self, stream: StringIO) -> None:
        logger = StructuredLogger("lw.test.json", json_format=True, stream=stream)

        logger.info("response", code=201, proto="HTTP/1.1")

        (entry,) = entries(stream)
        assert entry["level"] == "info"
        assert entry["message"] == "response"
        assert entry["logger"] == "lw.test.json"
        assert entry["data"] == {"code": 201, "proto": "HTTP/1.1"}
        assert "timestamp" in entry

    def test_entry_without_fields_has_no_data(self, stream: StringIO) -> None:
        logger = StructuredLogger("lw.test.nofields", json_format=True, stream=stream)

        logger.info("response")

        assert "data" not in entries(stream)[0]

    def test_level_filtering(self, stream: StringIO) -> None:
        logger = StructuredLogger("lw.test.level", level=logging.INFO, json_format=True, stream=stream)

        logger.debug("request", method="GET")
        logger.info("response")

        assert [e["message"] for e in entries(stream)] == ["response"]
        assert not logger.is_enabled_for(logging.DEBUG)

    def test_set_level(self, stream: StringIO) -> None:
        logger = StructuredLogger("lw.test.setlevel", json_format=True, stream=stream)

        logger.set_level("debug")
        logger.debug("request")

        assert logger.is_enabled_for(logging.DEBUG)
        assert entries(stream)[0]["level"] == "debug"

    def test_non_json_values_are_stringified(self, stream: StringIO) -> None:
        logger = StructuredLogger("lw.test.default", json_format=True, stream=stream)

        logger.info("request callback failure", error=ValueError("bad"))

        assert entries(stream)[0]["data"] == {"error": "bad"}

    def test_human_readable(self, stream: StringIO) -> None:
        logger = StructuredLogger("lw.test.human", stream=stream)

        logger.info("response", code=200)

        line = stream.getvalue()
        assert "INFO" in line
        assert "[lw.test.human] response" in line
        assert 'data={"code": 200}' in line


class TestHumanReadableFormatter:
    """Tests for HumanReadableFormatter."""

    def test_plain_output(self) -> None:
        formatter = HumanReadableFormatter(use_colors=False)
        record = logging.LogRecord("lw", logging.DEBUG, "", 0, "request", (), None)

        output = formatter.format(record)

        assert "\033[" not in output
        assert output.endswith("[lw] request")


class TestParseLevel:
    """Tests for parse_level."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, logging.INFO),
            ("", logging.INFO),
            ("info", logging.INFO),
            ("debug", logging.DEBUG),
            ("DEBUG", logging.DEBUG),
            ("nonsense", logging.INFO),
            (logging.WARNING, logging.WARNING),
        ],
    )
    def test_values(self, value, expected: int) -> None:
        assert parse_level(value) == expected


class TestGetLogger:
    """Tests for get_logger."""

    @pytest.fixture(autouse=True)
    def reset_cache(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(lw_logging, "_loggers", {})
        monkeypatch.delenv("LW_LOG", raising=False)
        monkeypatch.delenv("LW_LOG_FORMAT", raising=False)

    def test_cached_by_name(self) -> None:
        assert get_logger("lw.test.cache") is get_logger("lw.test.cache")

    def test_default_level_is_info(self) -> None:
        logger = get_logger("lw.test.default_level")

        assert logger.is_enabled_for(logging.INFO)
        assert not logger.is_enabled_for(logging.DEBUG)

    def test_level_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LW_LOG", "debug")

        assert get_logger("lw.test.env_level").is_enabled_for(logging.DEBUG)

    def test_explicit_level_relevels_cached_logger(self) -> None:
        logger = get_logger("lw.test.relevel")

        get_logger("lw.test.relevel", level="debug")

        assert logger.is_enabled_for(logging.DEBUG)

    def test_json_format_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LW_LOG_FORMAT", "json")

        assert get_logger("lw.test.json_env").json_format is True
