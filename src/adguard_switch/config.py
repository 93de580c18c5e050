"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for adguard_switch:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.adguard-switch/`` on macOS and Windows. See :func:`get_config_dir`
  and :func:`get_data_dir`.
* **Switch config** -- A single :class:`~adguard_switch.models.SwitchConfig`
  JSON file holding the server id and account credentials. Managed via
  :func:`load_config_file` and :func:`save_config`.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  ``ADGUARD_SWITCH_*`` environment variables, and the config file into the
  effective configuration, then validates it with :func:`validate_config`.
* **Secret resolution** -- :func:`resolve_credential` reads secrets given as
  ``env:VAR`` or ``file:/path`` so the password need not sit in the file.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from adguard_switch.exceptions import ConfigError
from adguard_switch.models import SECRET_FIELDS, SwitchConfig

_APP_NAME = "adguard-switch"
_CONFIG_FILENAME = "config.json"
_ENV_PREFIX = "ADGUARD_SWITCH_"

_ENV_FIELDS = (
    "dns_server_id",
    "username",
    "password",
    "mfa_token",
    "debug",
    "name",
    "api_base_url",
    "timeout",
)


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/adguard-switch/`` (default
    ``~/.config/adguard-switch/``). On macOS/Windows: ``~/.adguard-switch/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/adguard-switch/`` (default
    ``~/.local/share/adguard-switch/``). On macOS/Windows:
    ``~/.adguard-switch/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def default_config_path() -> Path:
    """Path of the config file in the config directory."""
    return get_config_dir() / _CONFIG_FILENAME


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. The file holds a
    password, so it is created with ``0o600`` permissions before any content
    is written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        os.chmod(tmp_path, 0o600)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Config file ---


def load_config_file(path: Optional[Path] = None) -> dict[str, Any]:
    """Load the raw config mapping from disk.

    Args:
        path: Explicit config path. Defaults to :func:`default_config_path`.

    Returns:
        The parsed JSON object, or an empty dict when the default file does
        not exist.

    Raises:
        ConfigError: If an explicit *path* does not exist, or the file
            contains invalid JSON or a non-object top level.
    """
    explicit = path is not None
    path = path or default_config_path()
    if not path.is_file():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config at {path}: top level must be an object")
    return data


def save_config(config: SwitchConfig, path: Optional[Path] = None) -> Path:
    """Persist *config* atomically and return the path written.

    Secrets are saved as given, so callers that want indirection should
    store ``env:`` or ``file:`` sources rather than literal values.
    """
    path = path or default_config_path()
    data = config.model_dump(mode="json", exclude_defaults=True)
    _atomic_write(path, json.dumps(data, indent=2) + "\n")
    return path


# --- Precedence resolution ---


def _env_overrides() -> dict[str, Any]:
    """Collect ``ADGUARD_SWITCH_*`` variables that are set and non-empty."""
    overrides: dict[str, Any] = {}
    for field in _ENV_FIELDS:
        value = os.environ.get(f"{_ENV_PREFIX}{field.upper()}")
        if value:
            overrides[field] = value
    return overrides


def validate_config(config: SwitchConfig) -> SwitchConfig:
    """Fail fast when any required field is missing.

    Raises:
        ConfigError: Naming every missing field, before any network activity.
    """
    missing = config.missing_fields()
    if missing:
        raise ConfigError(
            f"{', '.join(missing)} {'is' if len(missing) == 1 else 'are'} "
            "required in config"
        )
    return config


def build_config(data: dict[str, Any]) -> SwitchConfig:
    """Validate a raw mapping into a :class:`SwitchConfig` with secrets resolved.

    Raises:
        ConfigError: If a field has the wrong type, a secret source cannot be
            resolved, or a required field is missing.
    """
    try:
        config = SwitchConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config: {exc}") from exc
    return validate_config(resolve_secrets(config))


def resolve_secrets(config: SwitchConfig) -> SwitchConfig:
    """Return a copy of *config* with ``env:`` / ``file:`` secret sources read.

    Raises:
        ConfigError: If a secret source cannot be resolved.
    """
    updates: dict[str, str] = {}
    for field in SECRET_FIELDS:
        value = getattr(config, field)
        if value:
            updates[field] = resolve_credential(value)
    if updates:
        config = config.model_copy(update=updates)
    return config


def resolve_config(
    config_path: Optional[Path] = None,
    overrides: Optional[dict[str, Any]] = None,
) -> SwitchConfig:
    """Resolve the effective switch config with full precedence chain.

    Precedence (high to low):
        1. *overrides* (CLI flags; ``None`` values are ignored)
        2. Environment variables (``ADGUARD_SWITCH_USERNAME`` etc.)
        3. Config file
        4. Model defaults

    Raises:
        ConfigError: See :func:`load_config_file` and :func:`build_config`.
    """
    data = load_config_file(config_path)
    data.update(_env_overrides())
    data.update({k: v for k, v in (overrides or {}).items() if v is not None})
    return build_config(data)


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a secret from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - anything else -- used literally

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    return source
