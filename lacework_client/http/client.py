"""HTTP client for the Lacework API.

This module implements the request/response pipeline every API call goes
through:

- ``new_request`` builds an ``httpx.Request`` with auth and default headers,
  regenerating the access token first when needed.
- ``do`` sends it, logs the outcome and runs the request callback.
- ``do_decoder`` / ``do_copy`` check the answer for API errors and decode
  the JSON body into a model, or copy the raw bytes into a writer.
- ``request_decoder`` / ``request_encoder_decoder`` chain all of the above.

Example:
    >>> from lacework_client import Client
    >>> with Client("acme", api_key="KEY", api_secret="SECRET") as client:
    ...     rules = client.v2.alert_rules.list()
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

import httpx
from pydantic import BaseModel, TypeAdapter

from lacework_client._version import __version__
from lacework_client.errors import APIError, ConfigurationError, RequestConstructionError
from lacework_client.http.auth import (
    DEFAULT_TOKEN_EXPIRY,
    SECRET_HEADER,
    TOKENS_PATH,
    AuthState,
    TokenManager,
    TokenResponse,
)
from lacework_client.http.sniffer import sniff_body
from lacework_client.observability.logging import StructuredLogger, get_logger

if TYPE_CHECKING:
    from lacework_client.api import V2Services
    from lacework_client.config.settings import ClientSettings

API_VERSION = "v2"
DEFAULT_USER_AGENT = f"Python Client/{__version__}"
SUPPRESSED = "suppressed"


class Writer(Protocol):
    def write(self, data: bytes, /) -> Any: ...


@dataclass
class Callbacks:
    """Optional hooks run by the client.

    Attributes:
        token_expired: Called before a token is regenerated because the held
            one is empty or expired.
        request: Called after every completed HTTP call with the status code
            and the response headers.

    Exceptions raised by either hook are logged and otherwise ignored.
    """

    token_expired: Callable[[], Any] | None = None
    request: Callable[[int, httpx.Headers], Any] | None = None


def _validate_base_url(base_url: str) -> str:
    """Validate and normalize a base URL.

    Raises:
        ConfigurationError: If URL is invalid.
    """
    base_url = (base_url or "").strip()
    if not base_url:
        raise ConfigurationError(
            "Base URL cannot be empty",
            field_name="base_url",
            value=base_url,
        )

    if not base_url.startswith(("http://", "https://")):
        raise ConfigurationError(
            "Base URL must start with http:// or https://",
            field_name="base_url",
            value=base_url,
        )

    return base_url.rstrip("/")


def api_path(path: str) -> str:
    """Expand a resource path into an absolute API path.

    >>> api_path("AlertRules")
    '/api/v2/AlertRules'
    >>> api_path("/api/v2/AlertRules/LW_1")
    '/api/v2/AlertRules/LW_1'
    """
    if path.startswith(("/api/", "api/")):
        return "/" + path.lstrip("/")
    return f"/api/{API_VERSION}/{path.lstrip('/')}"


def json_body(data: Any) -> bytes:
    """Encode a payload as a JSON request body."""
    if isinstance(data, BaseModel):
        return data.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
    return json.dumps(data).encode("utf-8")


def _error_message(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    if isinstance(payload.get("message"), str):
        return payload["message"]
    data = payload.get("data")
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        return data["message"]
    errors = payload.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        message = errors[0].get("message")
        if isinstance(message, str):
            return message
    return None


def check_error_in_response(response: httpx.Response) -> None:
    """Raise APIError if the response carries an error.

    A response is an error when its status is not 2xx, or when a 2xx body is
    the vendor error envelope (a JSON object with ``"ok": false``). The body
    is read into memory and stays available on the response.

    Raises:
        APIError: With the status, request line and extracted message.
    """
    response.read()
    status = response.status_code

    try:
        payload = response.json() if response.content else None
    except ValueError:
        payload = None

    if 200 <= status <= 299:
        if not (isinstance(payload, dict) and payload.get("ok") is False):
            return

    message = _error_message(payload)
    if message is None:
        message = response.text.strip() or response.reason_phrase

    request = response.request
    raise APIError(
        message=message,
        status_code=status,
        method=request.method,
        url=str(request.url),
        response=response,
    )


def _has_body(headers: httpx.Headers) -> bool:
    length = headers.get("Content-Length")
    if length is not None:
        return length.strip() != "0"
    return "Transfer-Encoding" in headers


class Client:
    """Client for the Lacework v2 REST API.

    Attributes:
        account: Account name, used to derive the base URL.
        subaccount: Optional sub-account, sent as ``Account-Name``.
        base_url: URL every API path is resolved against.
        headers: Global headers added to every request. They never
            override the headers the client computes itself.
        callbacks: Token-expired and request hooks.
        log: Structured logger. Headers and bodies are only logged in full
            when it is enabled for DEBUG.
    """

    def __init__(
        self,
        account: str = "",
        *,
        api_key: str = "",
        api_secret: str = "",
        subaccount: str = "",
        token: str | None = None,
        token_expires_at: datetime | None = None,
        token_expiry: int = DEFAULT_TOKEN_EXPIRY,
        base_url: str | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
        logger: StructuredLogger | None = None,
        callbacks: Callbacks | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            account: Account name (``<account>.lacework.net``).
            api_key: Api key id used to mint access tokens.
            api_secret: Api secret used to mint access tokens.
            subaccount: Optional sub-account name.
            token: Pre-issued access token.
            token_expires_at: Expiry of ``token``, None if unknown.
            token_expiry: Lifetime in seconds requested for new tokens.
            base_url: Overrides the URL derived from ``account``.
            headers: Extra global headers.
            timeout: Request timeout in seconds. The httpx default otherwise.
            transport: Custom httpx transport.
            logger: Structured logger (default: ``get_logger()``).
            callbacks: Token-expired and request hooks.

        Raises:
            ConfigurationError: If neither account nor base_url is usable.
        """
        if not account and not base_url:
            raise ConfigurationError(
                "account cannot be empty",
                field_name="account",
                value=account,
            )
        if token_expiry <= 0:
            raise ConfigurationError(
                "token_expiry must be positive",
                field_name="token_expiry",
                value=token_expiry,
            )

        self.account = account
        self.subaccount = subaccount
        self.base_url = httpx.URL(_validate_base_url(base_url or f"https://{account}.lacework.net"))
        self.headers: dict[str, str] = {"User-Agent": DEFAULT_USER_AGENT}
        if subaccount:
            self.headers["Account-Name"] = subaccount
        if headers:
            self.headers.update(headers)
        self.callbacks = callbacks or Callbacks()
        self.log = logger or get_logger()

        self._auth = TokenManager(
            api_key=api_key,
            api_secret=api_secret,
            expiry=token_expiry,
            issuer=self._issue_token,
        )
        if token:
            self._auth.set_token(token, token_expires_at)

        client_kwargs: dict[str, Any] = {}
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        if transport is not None:
            client_kwargs["transport"] = transport
        self._http = httpx.Client(**client_kwargs)

    @classmethod
    def from_settings(cls, settings: ClientSettings, **kwargs: Any) -> Client:
        """Build a client from loaded settings.

        Keyword arguments override the values taken from ``settings``.
        """
        options: dict[str, Any] = {
            "api_key": settings.api_key,
            "api_secret": settings.api_secret,
            "subaccount": settings.subaccount,
            "token": settings.api_token or None,
            "token_expiry": settings.token_expiry,
            "base_url": settings.base_url,
            "timeout": settings.timeout,
            "logger": get_logger(level=settings.log, json_format=settings.json_logs),
        }
        options.update(kwargs)
        return cls(settings.account, **options)

    @property
    def v2(self) -> V2Services:
        """Typed access to the v2 resources."""
        from lacework_client.api import V2Services

        return V2Services(self)

    @property
    def auth(self) -> AuthState:
        """Snapshot of the current token and expiry."""
        return self._auth.state

    def token_expired(self) -> bool:
        return self._auth.expired()

    def set_token(self, token: str, expires_at: datetime | None = None) -> None:
        """Use a token issued elsewhere for subsequent requests."""
        self._auth.set_token(token, expires_at)

    def generate_token(self) -> AuthState:
        """Mint a new access token and keep it for subsequent requests.

        Raises:
            TokenGenerationError: If the token could not be obtained.
        """
        self.log.debug("generating access token", expiry=self._auth.expiry)
        return self._auth.generate()

    def _issue_token(self, payload: dict[str, Any]) -> TokenResponse:
        return self.request_encoder_decoder("POST", TOKENS_PATH, payload, TokenResponse)

    def _debug_mode(self) -> bool:
        return self.log.is_enabled_for(logging.DEBUG)

    def new_request(self, method: str, path: str, body: Any = None) -> httpx.Request:
        """Build a request for an API path.

        Args:
            method: HTTP verb.
            path: Resource path, e.g. ``AlertRules`` or ``/api/v2/AlertRules``.
            body: Optional request body (bytes, str or a byte iterator).

        Returns:
            A request ready for ``do``.

        Raises:
            RequestConstructionError: If the path is not a valid URL
                reference or httpx refuses the request.
            TokenGenerationError: If the access token had to be regenerated
                and that failed.
        """
        try:
            endpoint = httpx.URL(api_path(path))
        except (httpx.InvalidURL, TypeError, ValueError) as exc:
            raise RequestConstructionError(
                f"invalid api path {path!r}: {exc}", cause=exc, path=path
            ) from exc

        url = self.base_url.join(endpoint)
        # re-encode the query string, dropping it when empty
        url = url.copy_with(params=url.params)

        headers = httpx.Headers(self.headers)
        computed = {
            "Method": method.upper(),
            "Accept": "application/json",
        }
        if endpoint.path == TOKENS_PATH:
            headers.pop("Authorization", None)
            computed[SECRET_HEADER] = self._auth.secret
        else:
            computed["Authorization"] = self._auth.ensure_valid(self._run_token_expired_callback)

        if body is not None:
            computed["Content-Type"] = "application/json"

        for key, value in computed.items():
            headers[key] = value

        try:
            request = httpx.Request(method, url, headers=headers, content=body)
        except (httpx.InvalidURL, TypeError, ValueError) as exc:
            raise RequestConstructionError(
                f"unable to create {method} request: {exc}", cause=exc, path=path
            ) from exc

        self.log.debug(
            "request",
            method=request.method,
            url=str(self.base_url),
            endpoint=str(endpoint),
            headers=self._headers_sniffer(request.headers),
            body=self._request_body_sniffer(request),
        )
        return request

    def do(self, request: httpx.Request) -> httpx.Response:
        """Send a request.

        The response body is not read; close the response when done with it.
        Transport errors (``httpx.TransportError``) propagate unchanged and
        are never retried.
        """
        response = self._http.send(request, stream=True)
        self.log.info(
            "response",
            from_req_url=str(request.url),
            code=response.status_code,
            proto=response.http_version,
            headers=self._headers_sniffer(response.headers),
            body=self._response_body_sniffer(response),
        )
        self._run_request_callback(response)
        return response

    def do_decoder(self, request: httpx.Request, model: Any = None) -> tuple[httpx.Response, Any]:
        """Send a request and decode its JSON answer.

        Args:
            request: Request built by ``new_request``.
            model: Type to validate the JSON body against, e.g. a pydantic
                model or ``list[dict]``. None skips decoding.

        Returns:
            The response and the decoded value. The value is None for 204
            answers and when no model is given.

        Raises:
            APIError: On a non-2xx status or a vendor error envelope.
            pydantic.ValidationError: If the body does not match ``model``.
        """
        response = self.do(request)
        try:
            if response.status_code == httpx.codes.NO_CONTENT:
                return response, None

            check_error_in_response(response)

            if model is None:
                return response, None
            return response, TypeAdapter(model).validate_json(response.content)
        except Exception:
            response.close()
            raise

    def do_copy(self, request: httpx.Request, writer: Writer) -> httpx.Response:
        """Send a request and copy the raw answer body into ``writer``.

        Raises:
            APIError: On a non-2xx status or a vendor error envelope. Nothing
                is written in that case.
        """
        response = self.do(request)
        try:
            if response.status_code == httpx.codes.NO_CONTENT:
                return response

            check_error_in_response(response)
            writer.write(response.content)
            return response
        except Exception:
            response.close()
            raise

    def request_decoder(
        self,
        method: str,
        path: str,
        body: Any = None,
        model: Any = None,
    ) -> Any:
        """Build, send and decode a request in one call.

        Returns:
            The decoded body, or None (see ``do_decoder``).
        """
        request = self.new_request(method, path, body)
        response, data = self.do_decoder(request, model)
        response.close()
        return data

    def request_encoder_decoder(
        self,
        method: str,
        path: str,
        data: Any,
        model: Any = None,
    ) -> Any:
        """Like ``request_decoder``, JSON-encoding ``data`` as the body first.

        Raises:
            RequestConstructionError: If ``data`` is not JSON serializable.
        """
        try:
            body = json_body(data)
        except (TypeError, ValueError) as exc:
            raise RequestConstructionError(
                f"unable to encode request body: {exc}", cause=exc, path=path
            ) from exc
        return self.request_decoder(method, path, body, model)

    def _run_token_expired_callback(self) -> None:
        call = self.callbacks.token_expired
        if call is None:
            return
        try:
            call()
        except Exception as exc:
            self.log.info("token expired callback failure", error=str(exc))

    def _run_request_callback(self, response: httpx.Response) -> None:
        call = self.callbacks.request
        if call is None:
            return
        try:
            call(response.status_code, response.headers)
        except Exception as exc:
            self.log.info("request callback failure", error=str(exc))

    def _headers_sniffer(self, headers: httpx.Headers) -> Any:
        if not self._debug_mode():
            return SUPPRESSED
        return dict(headers)

    def _request_body_sniffer(self, request: httpx.Request) -> str:
        if not self._debug_mode():
            return SUPPRESSED
        if not _has_body(request.headers):
            return ""

        request.stream, text = sniff_body(request.stream)
        return text

    def _response_body_sniffer(self, response: httpx.Response) -> str:
        if not self._debug_mode():
            return SUPPRESSED
        if response.status_code == httpx.codes.NO_CONTENT or response.headers.get("Content-Length") == "0":
            return ""

        response.stream, text = sniff_body(response.stream)
        if response.headers.get("Content-Encoding"):
            # the stream holds the encoded transfer bytes
            try:
                return httpx.Response(
                    response.status_code,
                    headers=response.headers,
                    content=b"".join(response.stream),
                ).text
            except httpx.DecodingError:
                return text
        return text

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._http.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
