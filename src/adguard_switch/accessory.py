"""Host-facing switch adapter.

:class:`ProtectionSwitch` wires a :class:`~adguard_switch.client.AsyncClient`,
a :class:`~adguard_switch.auth.SessionManager` and a
:class:`~adguard_switch.controller.ProtectionController` together from one
:class:`~adguard_switch.models.SwitchConfig`, and presents them in the two
shapes a home-automation host needs:

* :meth:`~ProtectionSwitch.read` / :meth:`~ProtectionSwitch.write` return a
  :class:`Result` instead of raising, so hosts with a promise or future
  convention can map it directly.
* :meth:`~ProtectionSwitch.handle_get` / :meth:`~ProtectionSwitch.handle_set`
  follow the ``callback(error, value)`` convention of callback-based hosts.

Example::

    async with ProtectionSwitch(config) as switch:
        await switch.start()
        result = await switch.read()
        if result.ok:
            print("on" if result.value else "off")
"""

from __future__ import annotations

import time
from typing import Any, Callable, Generic, Optional, TypeVar

import httpx

from adguard_switch.auth import SessionManager
from adguard_switch.client import AsyncClient
from adguard_switch.config import resolve_secrets, validate_config
from adguard_switch.controller import ProtectionController
from adguard_switch.exceptions import SwitchError
from adguard_switch.models import SwitchConfig
from adguard_switch.output import OutputManager, get_output

T = TypeVar("T")

Callback = Callable[..., None]


class Result(Generic[T]):
    """Outcome of a switch operation: a value or an error, never both."""

    def __init__(self, value: Optional[T] = None, error: Optional[SwitchError] = None):
        self.value = value
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Optional[T]:
        """Return the value, or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.value

    def __repr__(self) -> str:
        if self.ok:
            return f"Result(value={self.value!r})"
        return f"Result(error={self.error!r})"


class ProtectionSwitch:
    """One on/off switch bound to one AdGuard DNS server.

    Construction validates *config*, reads any ``env:`` or ``file:`` secret
    sources, and raises :class:`~adguard_switch.exceptions.ConfigError`
    before anything touches the network.

    Args:
        config: Switch configuration.
        output: Diagnostics sink. Defaults to the global
            :class:`~adguard_switch.output.OutputManager`. When
            ``config.debug`` is set, the switch logs through a verbose copy
            of it and leaves the given manager unchanged.
        transport: Optional httpx transport for the API client.
        clock: Epoch-seconds clock used for token expiry.
    """

    def __init__(
        self,
        config: SwitchConfig,
        output: Optional[OutputManager] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        config = validate_config(resolve_secrets(config))
        self.config = config
        output = output or get_output()
        if config.debug and not output.is_verbose:
            output = output.with_verbose()
        self.output = output

        self.client = AsyncClient(
            config.api_base_url,
            timeout=config.timeout,
            output=self.output,
            transport=transport,
        )
        self.session = SessionManager(config, self.client, output=self.output, clock=clock)
        assert config.dns_server_id is not None
        self.controller = ProtectionController(
            config.dns_server_id, self.session, self.client, output=self.output
        )

    @property
    def name(self) -> str:
        return self.config.name

    async def __aenter__(self) -> ProtectionSwitch:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def start(self) -> bool:
        """Authenticate ahead of the first request.

        A failure is logged and swallowed: the switch stays usable and the
        next read or write tries again.

        Returns:
            ``True`` if a valid token is now held.
        """
        try:
            await self.session.ensure_valid()
        except SwitchError as exc:
            self.output.error(f"Authentication error: {exc}")
            return False
        self.output.info("Authenticated with AdGuard DNS API.")
        return True

    # ------------------------------------------------------------------ #
    # Result interface
    # ------------------------------------------------------------------ #

    async def read(self) -> Result[bool]:
        """Fetch the protection flag as a :class:`Result`."""
        try:
            return Result(value=await self.controller.get_state())
        except SwitchError as exc:
            self.output.error(f"Error getting protection_enabled: {exc}")
            return Result(error=exc)

    async def write(self, value: bool) -> Result[None]:
        """Set the protection flag and report the outcome as a :class:`Result`."""
        try:
            await self.controller.set_state(value)
        except SwitchError as exc:
            self.output.error(f"Error setting protection_enabled: {exc}")
            return Result(error=exc)
        return Result()

    # ------------------------------------------------------------------ #
    # Callback interface
    # ------------------------------------------------------------------ #

    async def handle_get(self, callback: Callback) -> None:
        """Call ``callback(None, value)`` or ``callback(error)``."""
        result = await self.read()
        if result.ok:
            callback(None, result.value)
        else:
            callback(result.error)

    async def handle_set(self, value: Any, callback: Callback) -> None:
        """Set protection to ``bool(value)``, then ``callback(None)`` or ``callback(error)``."""
        result = await self.write(bool(value))
        callback(result.error)
