"""Canonical Pydantic models shared across adguard_switch.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`SwitchConfig`.

**API payload models** -- parsed from AdGuard DNS API responses:
    :class:`TokenResponse`, :class:`DnsServerSettings`, :class:`DnsServer`.

All models use Pydantic v2. Payload models use ``extra="ignore"`` because the
API returns many fields this package does not care about.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool

DEFAULT_API_BASE_URL = "https://api.adguard-dns.io/oapi/v1"
DEFAULT_NAME = "AdGuard DNS Protection"

REQUIRED_FIELDS = ("dns_server_id", "username", "password")
SECRET_FIELDS = ("password", "mfa_token")


# --- Configuration ---


class SwitchConfig(BaseModel):
    """Settings for one protection switch.

    Required fields are declared optional at the type level so that a
    partially filled config can be loaded, merged with environment variables
    and CLI flags, and then checked as a whole by
    :func:`~adguard_switch.config.validate_config`, which reports every
    missing field at once.

    Example::

        SwitchConfig(
            dns_server_id="a1b2c3",
            username="me@example.com",
            password="env:ADGUARD_PASSWORD",
        )
    """

    model_config = ConfigDict(extra="ignore")

    dns_server_id: Optional[str] = Field(
        default=None, description="Identifier of the AdGuard DNS server to control"
    )
    username: Optional[str] = Field(default=None, description="AdGuard account email")
    password: Optional[str] = Field(
        default=None,
        description="Account password, or a source: env:VAR, file:/path",
    )
    mfa_token: Optional[str] = Field(
        default=None, description="One-time MFA code sent with the password grant"
    )
    debug: bool = Field(default=False, description="Enable debug diagnostics")
    name: str = Field(default=DEFAULT_NAME, description="Display name of the switch")
    api_base_url: str = Field(default=DEFAULT_API_BASE_URL)
    timeout: float = Field(default=30.0, description="Request timeout in seconds")

    def missing_fields(self) -> list[str]:
        """Return the required fields that are unset or blank."""
        return [
            field
            for field in REQUIRED_FIELDS
            if not (getattr(self, field) or "").strip()
        ]

    def masked(self) -> dict[str, object]:
        """Return a JSON-ready dump with secrets replaced by ``***``."""
        data = self.model_dump(mode="json")
        for field in SECRET_FIELDS:
            if data.get(field):
                data[field] = "***"
        return data


# --- API payloads ---


class TokenResponse(BaseModel):
    """Body of a successful ``POST /oauth_token`` call.

    ``refresh_token`` is returned by the password grant; the refresh grant
    normally omits it.
    """

    model_config = ConfigDict(extra="ignore")

    access_token: str = Field(min_length=1)
    refresh_token: Optional[str] = None
    expires_in: float = Field(ge=0, description="Token lifetime in seconds")


class DnsServerSettings(BaseModel):
    """The ``settings`` object of a DNS server."""

    model_config = ConfigDict(extra="ignore")

    protection_enabled: StrictBool


class DnsServer(BaseModel):
    """Body of ``GET /dns_servers/{id}``."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    name: Optional[str] = None
    settings: DnsServerSettings
