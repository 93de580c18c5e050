"""Asynchronous HTTP client for the AdGuard DNS API.

This module provides :class:`AsyncClient`, which wraps
:class:`httpx.AsyncClient` with the three things every call in this package
needs: base URL joining, debug tracing of request and response (with
secrets redacted), and mapping of transport failures and non-2xx statuses
to :class:`~adguard_switch.exceptions.ApiError`.

There is no retry loop: every failure is logged once with its
method, URL, status and body, and raised to the caller immediately.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx

from adguard_switch.client.response import extract_response_data, redact
from adguard_switch.exceptions import ApiError
from adguard_switch.output import OutputManager, get_output


class AsyncClient:
    """Asynchronous HTTP client for API calls.

    The underlying :class:`httpx.AsyncClient` is created on first use and
    reused for the lifetime of this object, so a long-running switch keeps
    one connection pool. Use it as an async context manager or call
    :meth:`aclose` when done.

    Args:
        base_url: API root, e.g. ``https://api.adguard-dns.io/oapi/v1``.
        timeout: Request timeout in seconds.
        output: Diagnostics sink. Defaults to the global
            :class:`~adguard_switch.output.OutputManager`.
        transport: Optional httpx transport, mainly for
            :class:`httpx.MockTransport` in tests.

    Example::

        async with AsyncClient(base_url) as client:
            response = await client.get("/dns_servers/abc")
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        output: Optional[OutputManager] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._output = output
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def output(self) -> OutputManager:
        return self._output or get_output()

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> AsyncClient:
        self._ensure_client()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying connection pool, if one was opened."""
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    async def request(
        self,
        method: str,
        path: str,
        headers: Optional[dict[str, str]] = None,
        json_body: Optional[Any] = None,
        data: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send a request and return the 2xx response.

        Args:
            method: HTTP method (GET, POST, PUT).
            path: URL path appended to ``base_url``.
            headers: Extra request headers.
            json_body: JSON-serialisable body.
            data: Form-encoded body (``application/x-www-form-urlencoded``).

        Returns:
            The :class:`httpx.Response` from the server.

        Raises:
            ApiError: On a non-2xx status (with ``status_code`` and ``body``)
                or on a transport failure (``status_code`` is ``None``).
        """
        client = self._ensure_client()
        method = method.upper()
        url = f"{self._base_url}{path}"
        output = self.output

        output.debug(f"[API] {method} {url}")
        payload = data if data is not None else json_body
        if payload is not None:
            output.debug(f"[API] Payload: {json.dumps(redact(payload), default=str)}")

        kwargs: dict[str, Any] = {"headers": headers or {}}
        if data is not None:
            kwargs["data"] = data
        elif json_body is not None:
            kwargs["json"] = json_body

        try:
            response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            output.error(f"[API] Network error on {method} {url}: {exc}")
            raise ApiError(
                f"{method} {url} failed: {exc}", method=method, url=url
            ) from exc

        body = extract_response_data(response)
        output.debug(f"[API] Response status: {response.status_code}")
        if body is not None:
            output.debug(f"[API] Response body: {json.dumps(redact(body), default=str)}")

        self._map_response_error(response, body, method, url)
        return response

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        """Send a GET request. See :meth:`request`."""
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        """Send a POST request. See :meth:`request`."""
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> httpx.Response:
        """Send a PUT request. See :meth:`request`."""
        return await self.request("PUT", path, **kwargs)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    def _map_response_error(
        self,
        response: httpx.Response,
        body: Any,
        method: str,
        url: str,
    ) -> None:
        """Raise :class:`ApiError` for any status outside 2xx."""
        status = response.status_code
        if 200 <= status < 300:
            return

        if isinstance(body, dict):
            msg = body.get("message") or body.get("error_description") or body.get("error") or ""
        elif body is not None:
            msg = str(body)[:200]
        else:
            msg = ""

        self.output.error(
            f"[API] Error {status} on {method} {url}: {json.dumps(redact(body), default=str)}"
        )
        full_msg = f"HTTP {status}: {msg}" if msg else f"HTTP {status}"
        raise ApiError(full_msg, status_code=status, body=body, method=method, url=url)
