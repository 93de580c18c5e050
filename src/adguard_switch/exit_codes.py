"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~adguard_switch.exceptions.SwitchError` subclass.
Shell wrappers and home-automation scripts can inspect the exit code to
tell a bad password apart from an unreachable API without parsing stderr.

Example::

    $ adguard-switch status
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- credentials were rejected
"""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (including configuration errors)."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_AUTH_FAILURE = 3
"""Authentication or token refresh failed."""

EXIT_API_ERROR = 5
"""The AdGuard DNS API answered with a non-2xx status or a malformed body."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
