"""HTTP client module for adguard_switch.

Provides :class:`AsyncClient`, a thin non-blocking wrapper around
:class:`httpx.AsyncClient` that joins paths to the AdGuard DNS API base URL,
traces every call at debug level with secrets redacted, and maps failures to
:class:`~adguard_switch.exceptions.ApiError`.

Example::

    from adguard_switch.client import AsyncClient

    async with AsyncClient("https://api.adguard-dns.io/oapi/v1") as client:
        resp = await client.get("/dns_servers/abc", headers=auth.headers)
"""

from adguard_switch.client.async_client import AsyncClient

__all__ = ["AsyncClient"]
