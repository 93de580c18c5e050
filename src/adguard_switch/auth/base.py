"""Container for the authentication artifacts of one request."""

from __future__ import annotations


class AuthResult:
    """Headers to merge into an authenticated HTTP request.

    Args:
        headers: HTTP headers to add (e.g. ``{"Authorization": "Bearer ..."}``).

    Example::

        result = AuthResult.bearer("tok123")
        assert result.headers["Authorization"] == "Bearer tok123"
    """

    def __init__(self, headers: dict[str, str] | None = None):
        self.headers = headers or {}

    @classmethod
    def bearer(cls, token: str) -> AuthResult:
        return cls(headers={"Authorization": f"Bearer {token}"})
