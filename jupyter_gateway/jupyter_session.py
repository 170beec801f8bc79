"""
A connected kernel session on a remote Jupyter server.
"""

import asyncio
import uuid
from typing import Optional

from gateway_core.exceptions import AuthenticationError, ConnectionError, KernelError, SessionCancelledError
from gateway_core.logging import LoggerMixin
from . import services
from .cancellation import CancellationToken, run_cancellable
from .connection import ConnectionInfo
from .kernel_spec import JupyterKernelSpec
from .password_connect import JupyterPasswordConnect
from .server_settings import RequestInit, ServerSettings, derive_ws_url, make_settings


class JupyterSession(LoggerMixin):
    """Owns one session's server-side state and kernel channel until disposed."""

    def __init__(self, connection: ConnectionInfo, kernel_spec: Optional[JupyterKernelSpec],
                 password_connect: JupyterPasswordConnect, kernel_id: Optional[str] = None,
                 allow_shutdown: bool = False, timeout: float = 30.0):
        super().__init__()
        self.connection = connection
        self.kernel_spec = kernel_spec
        self.password_connect = password_connect
        self.fixed_kernel_id = kernel_id
        self.allow_shutdown = allow_shutdown
        # Seconds per REST call
        self.timeout = timeout

        self.server_settings: Optional[ServerSettings] = None
        self.session_manager: Optional[services.GatewaySessionManager] = None
        self.kernel_connection: Optional[services.KernelConnection] = None
        self.session_id: Optional[str] = None
        self.kernel_id: Optional[str] = None
        # True when this object created the server-side session
        self._owns_session = False
        self._connected = False
        self._disposed = False

    @property
    def is_connected(self) -> bool:
        return (self._connected and self.kernel_connection is not None
                and self.kernel_connection.is_open)

    async def connect(self, cancel_token: Optional[CancellationToken] = None) -> None:
        """Create or attach to a session and open its kernel channel."""
        if self._disposed:
            raise ConnectionError("Session has been disposed")
        try:
            self.server_settings = await run_cancellable(self._get_server_settings(), cancel_token)
            self.session_manager = services.GatewaySessionManager(self.server_settings)

            if self.fixed_kernel_id:
                await run_cancellable(self._attach_to_kernel(self.fixed_kernel_id), cancel_token)
            else:
                await self._start_session_shielded(cancel_token)

            self.kernel_connection = services.KernelConnection(
                self.server_settings, self.kernel_id, self.session_id
            )
            await run_cancellable(self.kernel_connection.open(), cancel_token)
            self._connected = True
        except ConnectionError:
            # Already meaningful: cancellation, authentication
            raise
        except Exception as e:
            self.log_error(f"❌ [Session] Failed to connect", {
                "base_url": self.connection.base_url,
                "error": str(e),
                "error_type": type(e).__name__
            })
            raise ConnectionError(f"Failed to connect to {self.connection.base_url}: {e}",
                                  {"error_type": type(e).__name__}) from e

        self.log_info(f"✅ [Session] Connected", {
            "session_id": self.session_id,
            "kernel_id": self.kernel_id
        })

    async def _get_server_settings(self) -> ServerSettings:
        request_headers = {}
        if not self.connection.token:
            info = await self.password_connect.get_password_connection_info(
                self.connection.base_url, self.connection.allow_unauthorized
            )
            if info is None:
                raise AuthenticationError(
                    f"Failed to connect to password protected server {self.connection.base_url}"
                )
            request_headers = info.request_headers()

        return make_settings(
            base_url=self.connection.base_url,
            ws_url=derive_ws_url(self.connection.base_url),
            token=self.connection.token,
            init=RequestInit(cache='no-store', credentials='same-origin'),
            request_headers=request_headers,
            verify=not self.connection.allow_unauthorized,
            timeout=self.timeout,
        )

    async def _attach_to_kernel(self, kernel_id: str) -> None:
        model = await services.get_kernel_model(self.server_settings, kernel_id)
        if model is None:
            raise KernelError(f"Kernel {kernel_id} not found on server", {"base_url": self.connection.base_url})
        self.kernel_id = model.id
        self.session_id = uuid.uuid4().hex
        self._owns_session = False

    async def _start_session_shielded(self, cancel_token: Optional[CancellationToken]) -> None:
        """Start a session; on cancellation wait for an in-flight create to land.

        The server keeps a session whose create request was already sent, so
        its id has to be recorded for dispose() to delete it.
        """
        if cancel_token is not None:
            cancel_token.raise_if_cancellation_requested()
        start = asyncio.ensure_future(self._start_session())
        try:
            await run_cancellable(asyncio.shield(start), cancel_token)
        except (SessionCancelledError, asyncio.CancelledError):
            try:
                await start
            except Exception as e:
                self.log_warning(f"⚠️ [Session] Session create failed after cancellation", {"error": str(e)})
            raise

    async def _start_session(self) -> None:
        path = f"session-{uuid.uuid4()}.ipynb"
        kernel_name = self.kernel_spec.name if self.kernel_spec else None
        session = await self.session_manager.start_new(path, kernel_name=kernel_name)
        self.session_id = session.id
        self.kernel_id = session.kernel.id
        self._owns_session = True

    def _require_connected(self, action: str):
        if not self.is_connected:
            raise KernelError(f"Cannot {action}: session is not connected")

    async def restart(self) -> None:
        self._require_connected("restart kernel")
        await services.restart_kernel(self.server_settings, self.kernel_id)

    async def interrupt(self) -> None:
        self._require_connected("interrupt kernel")
        await services.interrupt_kernel(self.server_settings, self.kernel_id)

    async def dispose(self) -> None:
        """Release everything this session holds. Safe to call twice."""
        if self._disposed:
            return
        self._disposed = True
        self._connected = False

        if self.kernel_connection is not None:
            try:
                await self.kernel_connection.close()
            except Exception as e:
                self.log_warning(f"⚠️ [Session] Error closing kernel channel", {"error": str(e)})
            self.kernel_connection = None

        if self.session_manager is not None:
            if self.allow_shutdown and self._owns_session and self.session_id:
                try:
                    await self.session_manager.shutdown(self.session_id)
                except Exception as e:
                    self.log_warning(f"⚠️ [Session] Error shutting down session", {
                        "session_id": self.session_id,
                        "error": str(e)
                    })
            self.session_manager.dispose()
            self.session_manager = None

        self.log_debug(f"🧹 [Session] Session disposed", {"session_id": self.session_id})

    async def __aenter__(self) -> "JupyterSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.dispose()
