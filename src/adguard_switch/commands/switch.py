"""Switch commands -- read and change AdGuard DNS protection.

Each command resolves the switch config (CLI ``--config`` path, environment
variables, config file), opens a
:class:`~adguard_switch.accessory.ProtectionSwitch`, performs one operation
and exits with the code of the error class on failure.

Typical workflow::

    adguard-switch login     # check the credentials
    adguard-switch status    # "on" or "off"
    adguard-switch off
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

import typer

from adguard_switch.accessory import ProtectionSwitch
from adguard_switch.config import resolve_config
from adguard_switch.exceptions import SwitchError
from adguard_switch.output import OutputFormat, error, format_response, get_output, success

T = TypeVar("T")


def _run(ctx: typer.Context, operation: Callable[[ProtectionSwitch], Awaitable[T]]) -> T:
    """Build a switch from the resolved config and run *operation* on it."""
    obj = ctx.obj or {}
    try:
        config = resolve_config(obj.get("config_path"))
        switch = ProtectionSwitch(config, output=get_output())
    except SwitchError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    async def _main() -> T:
        async with switch:
            return await operation(switch)

    return asyncio.run(_main())


def _exit_on_error(exc: SwitchError | None) -> None:
    # ProtectionSwitch already reported the failure on stderr.
    if exc is not None:
        raise typer.Exit(code=exc.exit_code)


def status_command(ctx: typer.Context) -> None:
    """Print whether protection is on or off.

    Example::

        adguard-switch status
        adguard-switch --json status
    """
    result = _run(ctx, lambda switch: switch.read())
    _exit_on_error(result.error)
    enabled = bool(result.value)
    if get_output().format == OutputFormat.JSON:
        format_response({"protection_enabled": enabled})
    else:
        format_response("on" if enabled else "off")


def on_command(ctx: typer.Context) -> None:
    """Enable DNS protection."""
    result = _run(ctx, lambda switch: switch.write(True))
    _exit_on_error(result.error)
    success("Protection enabled.")


def off_command(ctx: typer.Context) -> None:
    """Disable DNS protection."""
    result = _run(ctx, lambda switch: switch.write(False))
    _exit_on_error(result.error)
    success("Protection disabled.")


def login_command(ctx: typer.Context) -> None:
    """Check the configured credentials by requesting a token."""

    async def _login(switch: ProtectionSwitch) -> None:
        await switch.session.ensure_valid()

    try:
        _run(ctx, _login)
    except SwitchError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    success("Credentials accepted.")
