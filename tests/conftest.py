"""Pytest fixtures for lacework_client tests."""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable, Iterator
from datetime import datetime, timedelta, timezone
from io import StringIO
from typing import Any

import httpx
import pytest

from lacework_client.http.auth import TOKENS_PATH
from lacework_client.http.client import Callbacks, Client
from lacework_client.observability.logging import StructuredLogger

Handler = Callable[[httpx.Request], httpx.Response]


def iso(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%dT%H:%M:%S.000Z")


class FakeLaceworkAPI:
    """In-memory stand-in for the Lacework API, served via httpx.MockTransport."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], Handler] = {}
        self.token_count = 0
        self.token_status = 201
        self.token_lifetime = timedelta(hours=1)

    @property
    def token_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == TOKENS_PATH]

    @property
    def api_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path != TOKENS_PATH]

    def route(
        self,
        method: str,
        path: str,
        status: int = 200,
        json_data: Any = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if content is not None:
                return httpx.Response(status, content=content, headers=headers)
            if json_data is None:
                return httpx.Response(status, headers=headers)
            return httpx.Response(status, json=json_data, headers=headers)

        self.routes[(method.upper(), path)] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == TOKENS_PATH:
            return self._issue_token(request)

        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": f"no route for {request.url.path}"})
        return handler(request)

    def _issue_token(self, request: httpx.Request) -> httpx.Response:
        if self.token_status != 201:
            return httpx.Response(self.token_status, json={"message": "Invalid credentials"})
        self.token_count += 1
        body = json.loads(request.content)
        expires_at = datetime.now(timezone.utc) + self.token_lifetime
        return httpx.Response(
            201,
            json={
                "token": f"_token-{self.token_count}-{body['keyId']}",
                "expiresAt": iso(expires_at),
            },
        )

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


def make_logger(level: int = logging.INFO) -> tuple[StructuredLogger, StringIO]:
    stream = StringIO()
    name = f"lacework_client.tests.{level}.{id(stream)}"
    return StructuredLogger(name, level=level, json_format=True, stream=stream), stream


def log_entries(stream: StringIO) -> list[dict[str, Any]]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


def call_with_timeout(fn: Callable[[], Any], timeout: float = 5.0) -> Any:
    """Run ``fn`` in a thread and fail instead of hanging the test run."""
    outcome: dict[str, Any] = {}

    def target() -> None:
        try:
            outcome["value"] = fn()
        except Exception as exc:
            outcome["error"] = exc

    thread = threading.Thread(target=target, daemon=True)
    thread.start()
    thread.join(timeout)
    assert not thread.is_alive(), "call did not return"
    if "error" in outcome:
        raise outcome["error"]
    return outcome["value"]


@pytest.fixture
def fake_api() -> FakeLaceworkAPI:
    return FakeLaceworkAPI()


@pytest.fixture
def make_client(fake_api: FakeLaceworkAPI) -> Iterator[Callable[..., Client]]:
    """Factory for clients wired to the fake API."""

    created: list[Client] = []

    def factory(
        level: int = logging.INFO,
        callbacks: Callbacks | None = None,
        **kwargs: Any,
    ) -> Client:
        logger, stream = make_logger(level)
        kwargs.setdefault("api_key", "ACME_KEY")
        kwargs.setdefault("api_secret", "_secret")
        client = Client(
            "acme",
            transport=fake_api.transport(),
            logger=logger,
            callbacks=callbacks,
            **kwargs,
        )
        client.log_stream = stream  # type: ignore[attr-defined]
        created.append(client)
        return client

    yield factory

    for client in created:
        client.close()


@pytest.fixture
def client(make_client: Callable[..., Client]) -> Client:
    return make_client()


@pytest.fixture
def debug_client(make_client: Callable[..., Client]) -> Client:
    return make_client(level=logging.DEBUG)
