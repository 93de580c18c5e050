"""adguard_switch -- Control AdGuard DNS protection as a single on/off switch.

This package mirrors the ``protection_enabled`` setting of an AdGuard DNS
server. It authenticates with the AdGuard DNS API using the OAuth2 password
grant, keeps the bearer token fresh with the refresh grant, and exposes the
setting through a small async controller, a host-facing switch adapter, and a
Typer command line.

Typical workflow::

    adguard-switch config init      # write credentials and server id
    adguard-switch status           # print "on" or "off"
    adguard-switch off              # pause filtering

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models for configuration and API payloads.
    config: XDG-aware configuration loading and precedence resolution.
    controller: Read/write of the remote protection flag.
    accessory: Host adapter with result and callback conventions.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting and leveled diagnostics.
"""

__version__ = "0.3.0"
