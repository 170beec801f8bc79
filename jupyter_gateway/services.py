"""
Kernel-services client for the Jupyter REST API and kernel channels.
Covers kernel enumeration, kernel spec listing, and session lifecycle.
"""

import asyncio
import ssl
from typing import Any, Dict, List, Optional

import requests
import websockets
from websockets.protocol import State

from gateway_core.exceptions import JupyterError, ResponseError
from gateway_core.logging import LoggerMixin, debug_log
from .models import KernelModel, KernelSpecs, SessionModel
from .server_settings import ServerSettings


def make_request(settings: ServerSettings, method: str, *parts: str, **kwargs) -> requests.Response:
    """Issue a blocking request against ``<base_url>/api/<parts>``."""
    url = settings.api_url(*parts)
    headers = settings.headers()
    headers.update(kwargs.pop('headers', None) or {})

    response = requests.request(
        method,
        url,
        headers=headers,
        verify=settings.verify,
        timeout=settings.timeout,
        **kwargs
    )
    if not 200 <= response.status_code < 300:
        raise ResponseError(
            f"{method} {url} failed: {response.status_code}",
            status_code=response.status_code,
            details={"response": response.text[:200]}
        )
    return response


async def _request_json(settings: ServerSettings, method: str, *parts: str, **kwargs) -> Any:
    response = await asyncio.to_thread(make_request, settings, method, *parts, **kwargs)
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        raise JupyterError(f"Invalid JSON from {method} {'/'.join(parts)}", {"error": str(e)}) from e


async def list_running_kernels(settings: ServerSettings) -> List[KernelModel]:
    """List kernels running on the server."""
    data = await _request_json(settings, 'GET', 'kernels')
    return [KernelModel.from_dict(item) for item in data or []]


async def get_kernel_model(settings: ServerSettings, kernel_id: str) -> Optional[KernelModel]:
    """Fetch one kernel; None when the server does not know it."""
    try:
        data = await _request_json(settings, 'GET', 'kernels', kernel_id)
    except ResponseError as e:
        if e.status_code == 404:
            return None
        raise
    return KernelModel.from_dict(data)


async def list_running_sessions(settings: ServerSettings) -> List[SessionModel]:
    data = await _request_json(settings, 'GET', 'sessions')
    return [SessionModel.from_dict(item) for item in data or []]


async def get_specs(settings: ServerSettings) -> KernelSpecs:
    data = await _request_json(settings, 'GET', 'kernelspecs')
    return KernelSpecs.from_dict(data)


async def shutdown_kernel(settings: ServerSettings, kernel_id: str) -> None:
    await _request_json(settings, 'DELETE', 'kernels', kernel_id)
    debug_log(f"🛑 [Services] Kernel shut down", {"kernel_id": kernel_id})


async def restart_kernel(settings: ServerSettings, kernel_id: str) -> KernelModel:
    data = await _request_json(settings, 'POST', 'kernels', kernel_id, 'restart')
    debug_log(f"🔄 [Services] Kernel restarted", {"kernel_id": kernel_id})
    return KernelModel.from_dict(data)


async def interrupt_kernel(settings: ServerSettings, kernel_id: str) -> None:
    await _request_json(settings, 'POST', 'kernels', kernel_id, 'interrupt')
    debug_log(f"⏸️ [Services] Kernel interrupted", {"kernel_id": kernel_id})


class GatewaySessionManager(LoggerMixin):
    """Session and kernel spec bookkeeping against one Jupyter server."""

    def __init__(self, server_settings: ServerSettings):
        super().__init__()
        self.server_settings = server_settings
        self.specs: Optional[KernelSpecs] = None
        self._running: List[SessionModel] = []
        self._disposed = False

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def _check_disposed(self):
        if self._disposed:
            raise JupyterError("Session manager has been disposed")

    async def refresh_specs(self) -> KernelSpecs:
        """Re-read the kernel spec list from the server."""
        self._check_disposed()
        self.specs = await get_specs(self.server_settings)
        self.log_debug(f"📋 [SessionManager] Kernel specs refreshed", {
            "default": self.specs.default,
            "count": len(self.specs.kernelspecs)
        })
        return self.specs

    async def refresh_running(self) -> List[SessionModel]:
        self._check_disposed()
        self._running = await list_running_sessions(self.server_settings)
        return list(self._running)

    def running(self) -> List[SessionModel]:
        return list(self._running)

    async def start_new(self, path: str, kernel_name: Optional[str] = None,
                        name: str = "", type: str = "notebook") -> SessionModel:
        """Create a session (and its kernel) on the server."""
        self._check_disposed()
        body: Dict[str, Any] = {
            'path': path,
            'name': name or path,
            'type': type,
            'kernel': {'name': kernel_name} if kernel_name else {},
        }
        data = await _request_json(self.server_settings, 'POST', 'sessions', json=body)
        session = SessionModel.from_dict(data)
        self._running.append(session)
        self.log_info(f"📝 [SessionManager] Session created", {
            "session_id": session.id,
            "kernel_id": session.kernel.id,
            "kernel_name": session.kernel.name
        })
        return session

    async def shutdown(self, session_id: str) -> None:
        """Delete a session; the server shuts its kernel down too."""
        self._check_disposed()
        await _request_json(self.server_settings, 'DELETE', 'sessions', session_id)
        self._running = [s for s in self._running if s.id != session_id]
        self.log_info(f"🗑️ [SessionManager] Session deleted", {"session_id": session_id})

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self.specs = None
        self._running = []
        self.log_debug(f"🧹 [SessionManager] Disposed")


class KernelConnection(LoggerMixin):
    """The kernel channel WebSocket for one kernel/session pair."""

    def __init__(self, settings: ServerSettings, kernel_id: str, session_id: str):
        super().__init__()
        self.settings = settings
        self.kernel_id = kernel_id
        self.session_id = session_id
        self.websocket = None

    @property
    def url(self) -> str:
        return self.settings.ws_api_url("kernels", self.kernel_id, "channels") + f"?session_id={self.session_id}"

    @property
    def is_open(self) -> bool:
        return self.websocket is not None and self.websocket.state is State.OPEN

    async def open(self) -> None:
        self.log_debug(f"🔌 [Kernel] Connecting to WebSocket", {
            "ws_url": self.url,
            "kernel_id": self.kernel_id,
            "session_id": self.session_id
        })
        kwargs = {}
        if self.url.startswith("wss") and not self.settings.verify:
            context = ssl.create_default_context()
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
            kwargs["ssl"] = context
        self.websocket = await websockets.connect(
            self.url,
            additional_headers=self.settings.headers(),
            ping_interval=30,
            ping_timeout=10,
            close_timeout=10,
            **kwargs
        )
        self.log_debug(f"🔌 [Kernel] WebSocket connected", {"kernel_id": self.kernel_id})

    async def close(self) -> None:
        websocket, self.websocket = self.websocket, None
        if websocket is not None:
            await websocket.close()

    def __repr__(self) -> str:
        return f"KernelConnection(kernel_id={self.kernel_id!r}, session_id={self.session_id!r})"
