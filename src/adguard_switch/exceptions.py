"""Exception hierarchy for adguard_switch.

All exceptions inherit from :class:`SwitchError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`adguard_switch.exit_codes`.
The top-level error handler in :func:`adguard_switch.app.main` catches
``SwitchError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    SwitchError (exit 1)
    +-- ConfigError         (exit 1)
    +-- AuthError           (exit 3)
    |   +-- RefreshError    (exit 3)
    +-- ApiError            (exit 5, or 6 without an HTTP status)
"""

from __future__ import annotations

from typing import Any, Optional

from adguard_switch.exit_codes import (
    EXIT_API_ERROR,
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
)


class SwitchError(Exception):
    """Base exception for all adguard_switch errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`adguard_switch.exit_codes`. The entry point
    catches this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(SwitchError):
    """Raised for configuration problems (missing fields, invalid JSON, bad secret sources)."""

    exit_code = EXIT_GENERIC_FAILURE


class AuthError(SwitchError):
    """Raised when the password grant is rejected or cannot be completed."""

    exit_code = EXIT_AUTH_FAILURE


class RefreshError(AuthError):
    """Raised when the refresh grant is rejected or cannot be completed."""

    exit_code = EXIT_AUTH_FAILURE


class ApiError(SwitchError):
    """Raised for a non-2xx response or a network failure on an API call.

    Args:
        message: Human-readable error description.
        status_code: HTTP status of the response, or ``None`` when no
            response was received (timeout, DNS failure, refused connection).
        body: Decoded response body when available.
        method: HTTP method of the failed request.
        url: Full URL of the failed request.
    """

    exit_code = EXIT_API_ERROR

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Any = None,
        method: Optional[str] = None,
        url: Optional[str] = None,
    ):
        super().__init__(
            message,
            exit_code=EXIT_CONNECTION_ERROR if status_code is None else None,
        )
        self.status_code = status_code
        self.body = body
        self.method = method
        self.url = url

    @property
    def is_client_error(self) -> bool:
        """Whether the server answered with a 4xx status."""
        return self.status_code is not None and 400 <= self.status_code < 500
