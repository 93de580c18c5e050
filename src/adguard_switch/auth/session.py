"""Bearer-token session for the AdGuard DNS API.

This module provides :class:`SessionManager`, which implements the
password grant and the refresh grant against ``POST /oauth_token`` and
keeps the resulting token state in a :class:`Session`.

Callers only use :meth:`SessionManager.ensure_valid` (or
:meth:`SessionManager.authorization`, which wraps it). A token is treated as
expired 60 seconds before its reported expiry so it cannot lapse between the
check and the arrival of the dependent request at the server.

Renewal is single-flight: :meth:`~SessionManager.ensure_valid` holds an
:class:`asyncio.Lock` while it decides and renews, and a caller that waited
on the lock re-checks the token before doing anything. Concurrent reads and
writes of the switch therefore never issue duplicate token requests.

See Also:
    :mod:`adguard_switch.controller` for the calls this session guards.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Optional

from pydantic import ValidationError

from adguard_switch.auth.base import AuthResult
from adguard_switch.client import AsyncClient
from adguard_switch.exceptions import ApiError, AuthError, RefreshError
from adguard_switch.models import SwitchConfig, TokenResponse
from adguard_switch.output import OutputManager, get_output

TOKEN_PATH = "/oauth_token"
EXPIRY_MARGIN_SECONDS = 60.0

_FORM_HEADERS = {"Content-Type": "application/x-www-form-urlencoded"}


class Session:
    """Mutable token state owned by a :class:`SessionManager`.

    Attributes:
        access_token: Current bearer token, or ``None``.
        refresh_token: Token for the refresh grant, or ``None``.
        expires_at: Absolute expiry in epoch seconds. Always set when
            ``access_token`` is set.
    """

    def __init__(self) -> None:
        self.access_token: Optional[str] = None
        self.refresh_token: Optional[str] = None
        self.expires_at: Optional[float] = None

    def store(self, access_token: str, expires_at: float) -> None:
        """Replace the access token and its expiry together."""
        self.access_token = access_token
        self.expires_at = expires_at

    def is_valid(self, now: float, margin: float = EXPIRY_MARGIN_SECONDS) -> bool:
        """Whether the access token is present and outlives *now* + *margin*."""
        if not self.access_token or self.expires_at is None:
            return False
        return now + margin <= self.expires_at

    def __repr__(self) -> str:
        return (
            f"Session(access_token={'set' if self.access_token else None}, "
            f"refresh_token={'set' if self.refresh_token else None}, "
            f"expires_at={self.expires_at})"
        )


class SessionManager:
    """Acquire, cache and renew the bearer token for one account.

    Args:
        config: Validated switch config supplying username, password and
            the optional MFA token.
        client: HTTP client bound to the API base URL.
        output: Diagnostics sink. Defaults to the global
            :class:`~adguard_switch.output.OutputManager`.
        clock: Callable returning the current time in epoch seconds.

    Example::

        manager = SessionManager(config, client)
        token = await manager.ensure_valid()
    """

    def __init__(
        self,
        config: SwitchConfig,
        client: AsyncClient,
        output: Optional[OutputManager] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._client = client
        self._output = output
        self._clock = clock
        self._lock = asyncio.Lock()
        self.session = Session()

    @property
    def output(self) -> OutputManager:
        return self._output or get_output()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    async def ensure_valid(self) -> str:
        """Return an access token valid for at least the safety margin.

        Renews via :meth:`refresh` when a refresh token is held, otherwise
        via :meth:`authenticate`. Does nothing when the current token is
        still valid.

        Raises:
            AuthError: If the password grant fails.
            RefreshError: If the refresh grant fails.
        """
        async with self._lock:
            if not self.session.is_valid(self._clock()):
                self.output.debug(
                    "Access token is missing or about to expire, fetching new token..."
                )
                if self.session.refresh_token:
                    await self.refresh()
                else:
                    await self.authenticate()
            assert self.session.access_token is not None
            return self.session.access_token

    async def authorization(self) -> AuthResult:
        """Return bearer headers for a valid token. See :meth:`ensure_valid`."""
        return AuthResult.bearer(await self.ensure_valid())

    async def authenticate(self) -> None:
        """Run the password grant and store the new token pair.

        Sends ``username`` and ``password``, plus ``mfa_token`` when one is
        configured.

        Raises:
            AuthError: On rejection, network failure, or a malformed response.
        """
        self.output.debug("Authenticating with AdGuard DNS API...")
        form = {
            "username": self._config.username or "",
            "password": self._config.password or "",
        }
        if self._config.mfa_token:
            form["mfa_token"] = self._config.mfa_token

        try:
            token = await self._request_token(form)
        except (ApiError, ValidationError) as exc:
            self.output.error(f"Failed to authenticate using credentials: {exc}")
            raise AuthError(f"Authentication failed: {_describe(exc)}") from exc

        self.session.store(token.access_token, self._clock() + token.expires_in)
        self.session.refresh_token = token.refresh_token
        self.output.info("Got new access token and refresh token.")

    async def refresh(self) -> None:
        """Run the refresh grant and replace the access token.

        The held refresh token is kept unless the server sends a new one.
        When the server rejects it (HTTP 4xx) it is dropped, so the next
        :meth:`ensure_valid` falls back to :meth:`authenticate`.

        Raises:
            RefreshError: On rejection, network failure, a malformed
                response, or when no refresh token is held.
        """
        refresh_token = self.session.refresh_token
        if not refresh_token:
            raise RefreshError("No refresh token available")

        self.output.debug("Refreshing AdGuard DNS access token...")
        try:
            token = await self._request_token({"refresh_token": refresh_token})
        except (ApiError, ValidationError) as exc:
            if isinstance(exc, ApiError) and exc.is_client_error:
                self.session.refresh_token = None
            self.output.error(f"Failed to refresh access token: {exc}")
            raise RefreshError(f"Token refresh failed: {_describe(exc)}") from exc

        self.session.store(token.access_token, self._clock() + token.expires_in)
        if token.refresh_token:
            self.session.refresh_token = token.refresh_token
        self.output.info("Access token refreshed.")

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _request_token(self, form: dict[str, str]) -> TokenResponse:
        response = await self._client.post(TOKEN_PATH, headers=dict(_FORM_HEADERS), data=form)
        try:
            payload = response.json()
        except ValueError as exc:
            raise ApiError(
                "Token response is not JSON",
                status_code=response.status_code,
                body=response.text,
                method="POST",
                url=f"{self._client.base_url}{TOKEN_PATH}",
            ) from exc
        return TokenResponse.model_validate(payload)


def _describe(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        return "malformed token response"
    return str(exc)
