"""Token lifecycle for the AdGuard DNS API.

The main entry points are:

- :class:`SessionManager` -- acquires a bearer token with the OAuth2
  password grant, renews it with the refresh grant, and hands out a valid
  token through :meth:`~SessionManager.ensure_valid`.
- :class:`Session` -- the mutable token state the manager owns.
- :class:`AuthResult` -- headers to inject into an authenticated request.

Typical usage::

    from adguard_switch.auth import SessionManager

    manager = SessionManager(config, client)
    auth = await manager.authorization()
    await client.get("/dns_servers/abc", headers=auth.headers)
"""

from adguard_switch.auth.base import AuthResult
from adguard_switch.auth.session import (
    EXPIRY_MARGIN_SECONDS,
    Session,
    SessionManager,
)

__all__ = [
    "AuthResult",
    "EXPIRY_MARGIN_SECONDS",
    "Session",
    "SessionManager",
]
