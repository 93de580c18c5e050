"""Tests for the protection controller."""

from __future__ import annotations

import httpx
import pytest

from adguard_switch.auth import SessionManager
from adguard_switch.client import AsyncClient
from adguard_switch.controller import ProtectionController
from adguard_switch.exceptions import ApiError, AuthError


@pytest.fixture
def controller(switch_config, fake_api, clock, quiet_output) -> ProtectionController:
    client = AsyncClient(fake_api.base_url, output=quiet_output, transport=fake_api.transport)
    session = SessionManager(switch_config, client, output=quiet_output, clock=clock)
    return ProtectionController("srv-1", session, client, output=quiet_output)


class TestGetState:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("enabled", [True, False])
    async def test_returns_remote_flag(self, controller, fake_api, enabled) -> None:
        fake_api.server = [fake_api.server_response(enabled)]

        assert await controller.get_state() is enabled

    @pytest.mark.asyncio
    async def test_sends_bearer_token(self, controller, fake_api) -> None:
        await controller.get_state()

        [request] = fake_api.resource_requests
        assert request.method == "GET"
        assert request.url == f"{fake_api.base_url}/dns_servers/srv-1"
        assert request.headers["authorization"] == "Bearer A"

    @pytest.mark.asyncio
    async def test_reads_every_time(self, controller, fake_api) -> None:
        fake_api.server = [fake_api.server_response(True), fake_api.server_response(False)]

        assert await controller.get_state() is True
        assert await controller.get_state() is False
        assert len(fake_api.resource_requests) == 2
        assert len(fake_api.token_requests) == 1

    @pytest.mark.asyncio
    async def test_http_error_raises_api_error(self, controller, fake_api) -> None:
        fake_api.server = [httpx.Response(404, json={"message": "server not found"})]

        with pytest.raises(ApiError) as exc_info:
            await controller.get_state()

        assert exc_info.value.status_code == 404
        assert exc_info.value.body == {"message": "server not found"}
        assert "server not found" in str(exc_info.value)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"id": "srv-1"},
            {"settings": {}},
            {"settings": {"protection_enabled": "yes"}},
            {"settings": {"protection_enabled": None}},
            ["not", "an", "object"],
        ],
    )
    async def test_malformed_body_raises_api_error(self, controller, fake_api, body) -> None:
        fake_api.server = [httpx.Response(200, json=body)]

        with pytest.raises(ApiError, match="protection_enabled"):
            await controller.get_state()

    @pytest.mark.asyncio
    async def test_auth_failure_skips_resource_call(self, controller, fake_api) -> None:
        fake_api.token = [httpx.Response(401, json={"error": "invalid_grant"})]

        with pytest.raises(AuthError):
            await controller.get_state()

        assert fake_api.resource_requests == []


class TestSetState:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("desired", [True, False])
    async def test_sends_desired_flag(self, controller, fake_api, desired) -> None:
        await controller.set_state(desired)

        [request] = fake_api.resource_requests
        assert request.method == "PUT"
        assert request.url == f"{fake_api.base_url}/dns_servers/srv-1/settings"
        assert request.headers["authorization"] == "Bearer A"
        assert fake_api.json_of(request) == {"protection_enabled": desired}

    @pytest.mark.asyncio
    async def test_ignores_response_body(self, controller, fake_api) -> None:
        fake_api.settings = [httpx.Response(204)]

        assert await controller.set_state(True) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 403, 500, 503])
    async def test_error_status_raises_api_error(self, controller, fake_api, status) -> None:
        fake_api.settings = [httpx.Response(status, json={"message": "nope"})]

        with pytest.raises(ApiError) as exc_info:
            await controller.set_state(False)

        assert exc_info.value.status_code == status

    @pytest.mark.asyncio
    async def test_does_not_read_back(self, controller, fake_api) -> None:
        await controller.set_state(True)

        assert [r.method for r in fake_api.resource_requests] == ["PUT"]

    @pytest.mark.asyncio
    async def test_logs_new_state(self, switch_config, fake_api, clock, verbose_output, capsys) -> None:
        client = AsyncClient(fake_api.base_url, output=verbose_output, transport=fake_api.transport)
        session = SessionManager(switch_config, client, output=verbose_output, clock=clock)
        controller = ProtectionController("srv-1", session, client, output=verbose_output)

        await controller.set_state(False)

        assert "protection_enabled was DISABLED (switch OFF)" in capsys.readouterr().err
