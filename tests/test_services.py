from unittest.mock import AsyncMock, patch

import pytest

from gateway_core.exceptions import JupyterError, ResponseError, ValidationError
from jupyter_gateway import services
from jupyter_gateway.server_settings import RequestInit, make_settings

from .conftest import KERNEL_SPECS, SESSION, make_response, make_websocket


@pytest.fixture
def settings():
    return make_settings(
        base_url="http://host:8888/",
        token="secret",
        init=RequestInit(cache="no-store"),
        timeout=5.0,
    )


class TestMakeRequest:
    """Tests for the REST request helper."""

    def test_builds_url_and_headers(self, settings):
        with patch("jupyter_gateway.services.requests.request", return_value=make_response(200, [])) as mock_request:
            services.make_request(settings, "GET", "kernels")
        mock_request.assert_called_once_with(
            "GET",
            "http://host:8888/api/kernels",
            headers={"Authorization": "token secret", "Cache-Control": "no-store"},
            verify=True,
            timeout=5.0,
        )

    def test_non_success_raises(self, settings):
        with patch("jupyter_gateway.services.requests.request", return_value=make_response(500, {"message": "err"})):
            with pytest.raises(ResponseError) as exc_info:
                services.make_request(settings, "GET", "kernels")
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_invalid_json(self, settings):
        response = make_response(200, {"x": 1})
        response.json.side_effect = ValueError("bad json")
        with patch("jupyter_gateway.services.requests.request", return_value=response):
            with pytest.raises(JupyterError):
                await services.list_running_kernels(settings)


class TestKernelCalls:
    """Tests for module-level kernel calls."""

    @pytest.mark.asyncio
    async def test_get_kernel_model_not_found(self, settings):
        with patch("jupyter_gateway.services.requests.request", return_value=make_response(404, {})):
            assert await services.get_kernel_model(settings, "k1") is None

    @pytest.mark.asyncio
    async def test_get_kernel_model_other_error(self, settings):
        with patch("jupyter_gateway.services.requests.request", return_value=make_response(503, {})):
            with pytest.raises(ResponseError):
                await services.get_kernel_model(settings, "k1")

    @pytest.mark.asyncio
    async def test_list_running_sessions(self, settings):
        with patch("jupyter_gateway.services.requests.request", return_value=make_response(200, [SESSION])):
            sessions = await services.list_running_sessions(settings)
        assert sessions[0].id == "session-1"
        assert sessions[0].kernel.id == "kernel-1"

    @pytest.mark.asyncio
    async def test_shutdown_kernel(self, settings):
        with patch("jupyter_gateway.services.requests.request", return_value=make_response(204)) as mock_request:
            await services.shutdown_kernel(settings, "k1")
        assert mock_request.call_args.args == ("DELETE", "http://host:8888/api/kernels/k1")

    @pytest.mark.asyncio
    async def test_invalid_kernel_payload(self, settings):
        with patch("jupyter_gateway.services.requests.request", return_value=make_response(200, [{"name": "python3"}])):
            with pytest.raises(ValidationError):
                await services.list_running_kernels(settings)


class TestGatewaySessionManager:
    """Tests for GatewaySessionManager."""

    @pytest.mark.asyncio
    async def test_refresh_specs(self, settings):
        manager = services.GatewaySessionManager(settings)
        with patch("jupyter_gateway.services.requests.request", return_value=make_response(200, KERNEL_SPECS)):
            specs = await manager.refresh_specs()
        assert manager.specs is specs
        assert specs.default == "python3"
        assert list(specs.kernelspecs) == ["python3", "r"]

    @pytest.mark.asyncio
    async def test_start_new_and_shutdown(self, settings):
        manager = services.GatewaySessionManager(settings)
        responses = [make_response(201, SESSION), make_response(204)]
        with patch("jupyter_gateway.services.requests.request", side_effect=responses) as mock_request:
            session = await manager.start_new("a.ipynb", kernel_name="python3")
            assert manager.running() == [session]
            await manager.shutdown(session.id)
        assert manager.running() == []
        assert mock_request.call_args_list[0].kwargs["json"] == {
            "path": "a.ipynb",
            "name": "a.ipynb",
            "type": "notebook",
            "kernel": {"name": "python3"},
        }

    @pytest.mark.asyncio
    async def test_refresh_running(self, settings):
        manager = services.GatewaySessionManager(settings)
        with patch("jupyter_gateway.services.requests.request", return_value=make_response(200, [SESSION])):
            running = await manager.refresh_running()
        assert [s.id for s in running] == ["session-1"]

    @pytest.mark.asyncio
    async def test_disposed_manager_rejects_calls(self, settings):
        manager = services.GatewaySessionManager(settings)
        manager.dispose()
        manager.dispose()
        assert manager.is_disposed
        with pytest.raises(JupyterError):
            await manager.refresh_specs()


class TestKernelConnection:
    """Tests for the kernel channel WebSocket."""

    @pytest.mark.asyncio
    async def test_open_and_close(self, settings):
        websocket = make_websocket()
        connection = services.KernelConnection(settings, "k1", "s1")
        with patch("jupyter_gateway.services.websockets.connect", new=AsyncMock(return_value=websocket)) as mock_connect:
            await connection.open()
        assert mock_connect.await_args.args[0] == "ws://host:8888/api/kernels/k1/channels?session_id=s1"
        assert "ssl" not in mock_connect.await_args.kwargs
        assert connection.is_open
        await connection.close()
        assert not connection.is_open
        websocket.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unverified_wss_gets_ssl_context(self):
        settings = make_settings(base_url="https://host:8888/", verify=False)
        connection = services.KernelConnection(settings, "k1", "s1")
        with patch("jupyter_gateway.services.websockets.connect", new=AsyncMock(return_value=make_websocket())) as mock_connect:
            await connection.open()
        context = mock_connect.await_args.kwargs["ssl"]
        assert context.check_hostname is False
