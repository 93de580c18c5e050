"""Built-in CLI commands for adguard_switch.

Each module defines Typer commands or sub-apps that are registered on the
top-level application in :mod:`adguard_switch.app`:

- :mod:`~adguard_switch.commands.switch` -- ``status``, ``on``, ``off`` and
  ``login``.
- :mod:`~adguard_switch.commands.config` -- ``config init``, ``config show``
  and ``config path``.
"""
