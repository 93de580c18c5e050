"""Response body helpers shared by the HTTP client and its callers."""

from __future__ import annotations

from typing import Any

import httpx

REDACTED = "***"
SENSITIVE_KEYS = frozenset(
    {"password", "mfa_token", "access_token", "refresh_token"}
)


def extract_response_data(response: httpx.Response) -> Any:
    """Extract the body from an HTTP response.

    Attempts to parse the body as JSON first.  If that fails (e.g. the
    response is HTML or plain text), returns the raw text.  Returns
    ``None`` for responses with no content.

    Args:
        response: The :class:`httpx.Response` to extract data from.

    Returns:
        A JSON-decoded object, a ``str`` of raw text, or ``None`` if the
        body is empty.
    """
    if not response.content:
        return None

    try:
        return response.json()
    except ValueError:
        return response.text


def redact(data: Any) -> Any:
    """Return a copy of *data* with token and password values masked.

    Only top-level keys of mappings are inspected; the token endpoint and
    the settings endpoint both use flat bodies.
    """
    if isinstance(data, dict):
        return {
            key: REDACTED if key in SENSITIVE_KEYS and value else value
            for key, value in data.items()
        }
    return data
