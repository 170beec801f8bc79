import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from websockets.protocol import State

from gateway_core.config import ConfigurationService, DataScienceSettings, GatewayConfig, Settings
from jupyter_gateway.connection import ConnectionInfo

ENV_VARS = [
    "JUPYTER_URL",
    "JUPYTER_TOKEN",
    "JUPYTER_REQUEST_TIMEOUT",
    "JG_LOG_LEVEL",
    "JG_LOG_DIR",
    "DS_JUPYTER_SERVER_ALLOW_KERNEL_SHUTDOWN",
    "DS_JUPYTER_SERVER_KERNEL_ID",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def make_response(status_code=200, json_data=None, cookies=None):
    """Stand-in for requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    body = json.dumps(json_data) if json_data is not None else ""
    response.content = body.encode()
    response.text = body
    response.json.return_value = json_data
    response.cookies = cookies if cookies is not None else {}
    return response


def make_websocket():
    websocket = MagicMock()
    websocket.state = State.OPEN

    async def close():
        websocket.state = State.CLOSED

    websocket.close = AsyncMock(side_effect=close)
    return websocket


@pytest.fixture
def connection():
    return ConnectionInfo(base_url="http://host:8888", token="secret")


@pytest.fixture
def make_config_service():
    def _make(allow_shutdown=False, kernel_id=None):
        return ConfigurationService(Settings(
            gateway=GatewayConfig(),
            datascience=DataScienceSettings(
                jupyter_server_allow_kernel_shutdown=allow_shutdown,
                jupyter_server_kernel_id=kernel_id,
            ),
        ))
    return _make


KERNEL_SPECS = {
    "default": "python3",
    "kernelspecs": {
        "python3": {
            "name": "python3",
            "spec": {
                "argv": ["python", "-m", "ipykernel_launcher", "-f", "{connection_file}"],
                "display_name": "Python 3",
                "language": "python",
                "env": {},
                "metadata": {"debugger": True},
            },
            "resources": {"logo-64x64": "/kernelspecs/python3/logo-64x64.png"},
        },
        "r": {
            "name": "r",
            "spec": {
                "argv": ["R", "--slave", "-e", "IRkernel::main()", "--args", "{connection_file}"],
                "display_name": "R",
                "language": "R",
            },
            "resources": {},
        },
    },
}

SESSION = {
    "id": "session-1",
    "path": "session.ipynb",
    "name": "session.ipynb",
    "type": "notebook",
    "kernel": {"id": "kernel-1", "name": "python3", "execution_state": "starting", "connections": 0},
}
