"""Access token lifecycle.

The API authenticates every call with a short-lived access token. Tokens are
minted by POSTing the api key id to the token endpoint while presenting the
api secret in the ``X-LW-UAKS`` header.

Classes:
    TokenResponse: Decoded token endpoint answer.
    AuthState: Immutable (token, expiry) snapshot.
    TokenManager: Holds the current snapshot and regenerates it.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from lacework_client.errors import LaceworkError, TokenGenerationError

TOKENS_PATH = "/api/v2/access/tokens"
SECRET_HEADER = "X-LW-UAKS"
DEFAULT_TOKEN_EXPIRY = 3600


class TokenResponse(BaseModel):
    """Body returned by the token endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    token: str
    expires_at: datetime | None = Field(default=None, alias="expiresAt")


@dataclass(frozen=True)
class AuthState:
    """A token and the instant it stops being accepted.

    ``expires_at`` of None means the expiry is unknown, which is the case for
    tokens handed to the client by the caller.
    """

    token: str = ""
    expires_at: datetime | None = None

    def expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at <= (now or datetime.now(timezone.utc))

    @property
    def valid(self) -> bool:
        return bool(self.token) and not self.expired()


class TokenManager:
    """Tracks the access token and regenerates it on demand.

    The lock only guards swapping the state and the in-flight marker. The
    token endpoint call and the ``on_expired`` hook run with the lock
    released, so hooks and request callbacks may call back into the
    manager. Concurrent callers that find the token unusable wait for a
    single regeneration instead of starting their own.

    Args:
        api_key: The api key id sent as ``keyId``.
        api_secret: The api secret sent in the ``X-LW-UAKS`` header.
        expiry: Requested token lifetime in seconds.
        issuer: Callable performing the token endpoint call. It receives the
            JSON payload and returns a TokenResponse.
    """

    def __init__(
        self,
        api_key: str = "",
        api_secret: str = "",
        expiry: int = DEFAULT_TOKEN_EXPIRY,
        issuer: Callable[[dict[str, Any]], TokenResponse] | None = None,
    ) -> None:
        self._api_key = api_key
        self._api_secret = api_secret
        self.expiry = expiry
        self._issuer = issuer
        self._state = AuthState()
        self._lock = threading.Lock()
        self._refreshed = threading.Condition(self._lock)
        self._refresher: int | None = None

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def secret(self) -> str:
        return self._api_secret

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def token(self) -> str:
        return self._state.token

    def expired(self) -> bool:
        """Check whether the held token is past its expiry."""
        return self._state.expired()

    def set_token(self, token: str, expires_at: datetime | None = None) -> None:
        """Seed a token obtained elsewhere."""
        with self._lock:
            self._state = AuthState(token=token, expires_at=expires_at)

    def generate(self) -> AuthState:
        """Mint a new token and replace the held one.

        Returns:
            The new AuthState.

        Raises:
            TokenGenerationError: If credentials are missing, the token
                endpoint call fails, or the calling thread is already
                generating a token. The previous state is kept.
        """
        return self._refresh(only_if_unusable=False)

    def ensure_valid(self, on_expired: Callable[[], None] | None = None) -> str:
        """Return a usable token, regenerating it when empty or expired.

        Args:
            on_expired: Called once per regeneration, before the token
                endpoint is contacted. It must not raise.

        Returns:
            The token to send in the Authorization header.
        """
        state = self._state
        if state.valid:
            return state.token
        return self._refresh(only_if_unusable=True, on_expired=on_expired).token

    def _refresh(
        self,
        only_if_unusable: bool,
        on_expired: Callable[[], None] | None = None,
    ) -> AuthState:
        me = threading.get_ident()
        with self._refreshed:
            if self._refresher == me:
                raise TokenGenerationError("access token generation already in progress")
            while self._refresher is not None:
                self._refreshed.wait()
            # another thread may have refreshed while we waited
            if only_if_unusable and self._state.valid:
                return self._state
            self._refresher = me

        try:
            if on_expired is not None:
                on_expired()
            issued = self._issue()
            with self._lock:
                self._state = AuthState(token=issued.token, expires_at=issued.expires_at)
                return self._state
        finally:
            with self._refreshed:
                self._refresher = None
                self._refreshed.notify_all()

    def _issue(self) -> TokenResponse:
        if not self._api_key or not self._api_secret:
            raise TokenGenerationError(
                "api_key and api_secret are required to generate access tokens",
            )
        if self._issuer is None:
            raise TokenGenerationError("no token issuer configured")

        payload = {"keyId": self._api_key, "expiryTime": self.expiry}
        try:
            issued = self._issuer(payload)
        except TokenGenerationError:
            raise
        except LaceworkError as exc:
            raise TokenGenerationError(
                f"unable to generate access token: {exc.message}", cause=exc
            ) from exc
        except Exception as exc:
            raise TokenGenerationError(
                f"unable to generate access token: {exc}", cause=exc
            ) from exc

        if issued is None or not issued.token:
            raise TokenGenerationError("token endpoint returned an empty token")
        return issued
