"""Read and write the ``protection_enabled`` flag of a DNS server.

:class:`ProtectionController` holds no copy of the flag. Every
:meth:`~ProtectionController.get_state` and
:meth:`~ProtectionController.set_state` round-trips to the API, because the
flag can be changed from the AdGuard dashboard at any time.
"""

from __future__ import annotations

from typing import Optional

from pydantic import ValidationError

from adguard_switch.auth import SessionManager
from adguard_switch.client import AsyncClient
from adguard_switch.exceptions import ApiError
from adguard_switch.models import DnsServer
from adguard_switch.output import OutputManager, get_output


class ProtectionController:
    """Get and set DNS protection on one AdGuard DNS server.

    Args:
        dns_server_id: Identifier of the server to control.
        session: Token source; asked for a valid token before every call.
        client: HTTP client bound to the API base URL.
        output: Diagnostics sink. Defaults to the global
            :class:`~adguard_switch.output.OutputManager`.
    """

    def __init__(
        self,
        dns_server_id: str,
        session: SessionManager,
        client: AsyncClient,
        output: Optional[OutputManager] = None,
    ) -> None:
        self._dns_server_id = dns_server_id
        self._session = session
        self._client = client
        self._output = output

    @property
    def output(self) -> OutputManager:
        return self._output or get_output()

    @property
    def server_path(self) -> str:
        return f"/dns_servers/{self._dns_server_id}"

    async def get_state(self) -> bool:
        """Return the current ``settings.protection_enabled`` value.

        Raises:
            AuthError: If no token could be obtained.
            ApiError: On a non-2xx status, a network failure, or a body
                without a boolean ``settings.protection_enabled``.
        """
        self.output.debug("Getting current protection_enabled state...")
        auth = await self._session.authorization()
        response = await self._client.get(self.server_path, headers=auth.headers)

        try:
            server = DnsServer.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            self.output.error(f"Error getting protection_enabled: {exc}")
            raise ApiError(
                "Malformed DNS server response: missing boolean settings.protection_enabled",
                status_code=response.status_code,
                body=response.text,
                method="GET",
                url=f"{self._client.base_url}{self.server_path}",
            ) from exc

        enabled = server.settings.protection_enabled
        self.output.debug(f"Current protection_enabled value is {enabled}")
        return enabled

    async def set_state(self, desired: bool) -> None:
        """Set ``protection_enabled`` to *desired*.

        The response body is ignored and the new state is not read back.

        Raises:
            AuthError: If no token could be obtained.
            ApiError: On a non-2xx status or a network failure.
        """
        auth = await self._session.authorization()
        self.output.debug(f"Toggling protection_enabled: attempting to set to {desired}")
        await self._client.put(
            f"{self.server_path}/settings",
            headers=auth.headers,
            json_body={"protection_enabled": bool(desired)},
        )
        if desired:
            self.output.info("protection_enabled was ENABLED (switch ON)")
        else:
            self.output.info("protection_enabled was DISABLED (switch OFF)")
