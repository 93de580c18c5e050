"""Config commands -- create and inspect the switch configuration.

Provides the ``adguard-switch config`` sub-command group. The config file
holds the DNS server id and account credentials; the password is best
stored as an ``env:VAR`` or ``file:/path`` source rather than literally.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from adguard_switch.exceptions import ConfigError
from adguard_switch.exit_codes import EXIT_INVALID_USAGE
from adguard_switch.output import error, format_response, info, success, suggest, warning


config_app = typer.Typer(no_args_is_help=True)


def _config_path(ctx: typer.Context) -> Optional[Path]:
    obj = ctx.obj or {}
    return obj.get("config_path")


@config_app.command("init")
def config_init(
    ctx: typer.Context,
    dns_server_id: str = typer.Option(
        ..., "--dns-server-id", prompt="DNS server id", help="AdGuard DNS server id."
    ),
    username: str = typer.Option(
        ..., "--username", "-u", prompt="Username", help="AdGuard account email."
    ),
    password: str = typer.Option(
        ...,
        "--password",
        prompt="Password (or env:VAR / file:/path)",
        hide_input=True,
        help="Password, or a source: env:VAR, file:/path.",
    ),
    mfa_token: Optional[str] = typer.Option(
        None, "--mfa-token", help="One-time MFA code, if the account needs one."
    ),
    name: Optional[str] = typer.Option(
        None, "--name", help="Display name of the switch."
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Always print debug diagnostics."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing config file."
    ),
) -> None:
    """Write a config file.

    The values are validated before anything is written. An existing file
    is only replaced with ``--force``.

    Example::

        adguard-switch config init --dns-server-id a1b2 -u me@example.com \\
            --password env:ADGUARD_PASSWORD
    """
    from adguard_switch.config import default_config_path, save_config
    from adguard_switch.models import DEFAULT_NAME, SwitchConfig

    path = _config_path(ctx) or default_config_path()
    if path.is_file() and not force:
        error(f"Config already exists at {path}")
        suggest("Pass --force to overwrite it.")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    config = SwitchConfig(
        dns_server_id=dns_server_id,
        username=username,
        password=password,
        mfa_token=mfa_token,
        name=name or DEFAULT_NAME,
        debug=debug,
    )
    missing = config.missing_fields()
    if missing:
        error(f"{', '.join(missing)} cannot be blank")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    save_config(config, path)
    success(f"Config written to {path}")
    if not password.startswith(("env:", "file:")):
        warning(
            "The password is stored in plain text. "
            "Use env:VAR or file:/path to keep it out of the file."
        )
    suggest("Check it: adguard-switch login")


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective configuration with secrets masked.

    Applies the same precedence as the switch commands: environment
    variables override the config file.

    Example::

        adguard-switch config show
        adguard-switch --json config show
    """
    from adguard_switch.config import resolve_config

    try:
        config = resolve_config(_config_path(ctx))
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    format_response(config.masked())


@config_app.command("path")
def config_path(ctx: typer.Context) -> None:
    """Print the path of the config file in use."""
    from adguard_switch.config import default_config_path

    path = _config_path(ctx) or default_config_path()
    if not path.is_file():
        info("(file does not exist yet)")
    format_response(str(path))
