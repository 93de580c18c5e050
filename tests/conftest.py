"""Shared test fixtures for adguard_switch.

Provides a scripted fake of the AdGuard DNS API built on
:class:`httpx.MockTransport`, a controllable clock for token expiry, a
ready-made :class:`~adguard_switch.models.SwitchConfig`, and isolation of
the global output state and config directories. These fixtures are
automatically discovered by pytest and available to all test modules.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union
from urllib.parse import parse_qsl

import httpx
import pytest

from adguard_switch.models import SwitchConfig
from adguard_switch.output import OutputFormat, OutputManager, reset_output, set_output

API_BASE_URL = "https://api.test/oapi/v1"
START_TIME = 1_700_000_000.0

Scripted = Union[httpx.Response, Exception]


# ---------------------------------------------------------------------------
# Fake API
# ---------------------------------------------------------------------------


class FakeApi:
    """Scripted AdGuard DNS API.

    Each endpoint has a queue of responses (or exceptions to raise). Items
    are consumed in order; the last one is repeated once the queue is down
    to a single entry. Every request is recorded in :attr:`requests`.

    The response builders and body decoders are static methods so tests
    reach them through the ``fake_api`` fixture.
    """

    def __init__(self, base_url: str = API_BASE_URL) -> None:
        self.base_url = base_url
        self.requests: list[httpx.Request] = []
        self.token: list[Scripted] = [self.token_response()]
        self.server: list[Scripted] = [self.server_response(True)]
        self.settings: list[Scripted] = [httpx.Response(200)]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.endswith("/oauth_token"):
            queue = self.token
        elif path.endswith("/settings"):
            queue = self.settings
        else:
            queue = self.server
        assert queue, f"no scripted response for {request.method} {path}"
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        return httpx.Response(item.status_code, headers=item.headers, content=item.content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def token_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/oauth_token")]

    @property
    def resource_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if not r.url.path.endswith("/oauth_token")]

    @staticmethod
    def token_response(
        access_token: str = "A",
        refresh_token: str | None = "R",
        expires_in: float = 3600,
        status_code: int = 200,
    ) -> httpx.Response:
        """Build a token endpoint response."""
        data: dict[str, Any] = {"access_token": access_token, "expires_in": expires_in}
        if refresh_token is not None:
            data["refresh_token"] = refresh_token
        return httpx.Response(status_code, json=data)

    @staticmethod
    def server_response(protection_enabled: Any = True, status_code: int = 200) -> httpx.Response:
        """Build a ``GET /dns_servers/{id}`` response."""
        return httpx.Response(
            status_code,
            json={
                "id": "srv-1",
                "name": "Home",
                "settings": {"protection_enabled": protection_enabled, "ip_log_enabled": True},
            },
        )

    @staticmethod
    def form_of(request: httpx.Request) -> dict[str, str]:
        """Decode a form-encoded request body."""
        return dict(parse_qsl(request.content.decode()))

    @staticmethod
    def json_of(request: httpx.Request) -> Any:
        """Decode a JSON request body."""
        return json.loads(request.content)


class FakeClock:
    """Callable clock returning :attr:`now`; advance it with :meth:`advance`.

    :attr:`start` keeps the initial time so tests can express expiry
    relative to it.
    """

    def __init__(self, now: float = START_TIME) -> None:
        self.start = now
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time, which go stale once a CliRunner invocation ends.
    """
    yield
    reset_output()


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def switch_config(fake_api: FakeApi) -> SwitchConfig:
    return SwitchConfig(
        dns_server_id="srv-1",
        username="me@example.com",
        password="hunter2",
        api_base_url=fake_api.base_url,
    )


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, colourless OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def verbose_output() -> OutputManager:
    """Install a verbose, colourless OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME and XDG_DATA_HOME below tmp_path, forces the XDG
    layout, and clears every ``ADGUARD_SWITCH_*`` environment variable.

    Returns:
        The tmp_path root directory.
    """
    monkeypatch.setattr("adguard_switch.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for field in (
        "DNS_SERVER_ID",
        "USERNAME",
        "PASSWORD",
        "MFA_TOKEN",
        "DEBUG",
        "NAME",
        "API_BASE_URL",
        "TIMEOUT",
    ):
        monkeypatch.delenv(f"ADGUARD_SWITCH_{field}", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
