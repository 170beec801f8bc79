"""
Session management against a remote Jupyter server.
Starts kernel sessions and enumerates running kernels and kernel specs.
"""

from typing import List, Optional

from gateway_core.config import ConfigurationService
from gateway_core.logging import LoggerMixin
from . import services
from .cancellation import CancellationToken
from .connection import ConnectionInfo
from .jupyter_session import JupyterSession
from .kernel_spec import JupyterKernelSpec
from .models import KernelModel
from .password_connect import JupyterPasswordConnect, PasswordProvider
from .server_settings import RequestInit, ServerSettings, derive_ws_url, make_settings


class JupyterSessionManager(LoggerMixin):
    """Creates sessions and lists kernels for a given connection."""

    def __init__(self, password_connect: JupyterPasswordConnect, configuration_service: ConfigurationService):
        super().__init__()
        self.password_connect = password_connect
        self.configuration_service = configuration_service

    @classmethod
    def from_configuration(cls, configuration_service: ConfigurationService,
                           password_provider: Optional[PasswordProvider] = None) -> "JupyterSessionManager":
        """Wire a manager whose password login shares the configured request timeout."""
        timeout = configuration_service.get_settings().gateway.request_timeout
        return cls(JupyterPasswordConnect(password_provider, timeout=timeout), configuration_service)

    async def start_new(self, connection: ConnectionInfo, kernel_spec: Optional[JupyterKernelSpec] = None,
                        cancel_token: Optional[CancellationToken] = None) -> JupyterSession:
        """Create a new session and connect to it.

        The returned session is connected. When connecting fails or is
        cancelled, the session is disposed before the error propagates.
        """
        settings = self.configuration_service.get_settings()
        allow_shutdown = settings.datascience.jupyter_server_allow_kernel_shutdown
        kernel_id = settings.datascience.jupyter_server_kernel_id
        session = JupyterSession(connection, kernel_spec, self.password_connect, kernel_id, allow_shutdown,
                                 timeout=settings.gateway.request_timeout)
        try:
            await session.connect(cancel_token)
        finally:
            if not session.is_connected:
                await session.dispose()
        return session

    async def get_active_kernels(self, connection: ConnectionInfo) -> List[KernelModel]:
        return await services.list_running_kernels(self._make_server_settings(connection))

    async def get_active_kernel_specs(self, connection: ConnectionInfo) -> List[JupyterKernelSpec]:
        """List kernel specs on the server; empty when they cannot be fetched."""
        session_manager = None
        try:
            session_manager = services.GatewaySessionManager(self._make_server_settings(connection))
            await session_manager.refresh_specs()

            kernelspecs = session_manager.specs.kernelspecs if session_manager.specs else {}
            return [JupyterKernelSpec(spec) for spec in kernelspecs.values()]
        except Exception as e:
            self.log_warning(f"⚠️ [SessionManager] Failed to list kernel specs", {
                "base_url": connection.base_url,
                "error": str(e),
                "error_type": type(e).__name__
            })
            return []
        finally:
            if session_manager is not None:
                session_manager.dispose()

    def _make_server_settings(self, connection: ConnectionInfo) -> ServerSettings:
        return make_settings(
            base_url=connection.base_url,
            token=connection.token,
            page_url='',
            ws_url=derive_ws_url(connection.base_url),
            init=RequestInit(cache='no-store', credentials='same-origin'),
            verify=not connection.allow_unauthorized,
            timeout=self.configuration_service.get_settings().gateway.request_timeout,
        )
