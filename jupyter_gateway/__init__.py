"""
Jupyter gateway session adapter.
Starts kernel sessions and lists kernels and kernel specs on a remote Jupyter server.
"""

from .cancellation import CancellationToken, CancellationTokenSource
from .connection import ConnectionInfo
from .jupyter_session import JupyterSession
from .kernel_spec import JupyterKernelSpec
from .models import KernelModel, KernelSpecModel, KernelSpecs, SessionModel
from .password_connect import JupyterPasswordConnect, PasswordConnectionInfo
from .server_settings import RequestInit, ServerSettings, make_settings
from .session_manager import JupyterSessionManager

__all__ = [
    'CancellationToken',
    'CancellationTokenSource',
    'ConnectionInfo',
    'JupyterSession',
    'JupyterKernelSpec',
    'KernelModel',
    'KernelSpecModel',
    'KernelSpecs',
    'SessionModel',
    'JupyterPasswordConnect',
    'PasswordConnectionInfo',
    'RequestInit',
    'ServerSettings',
    'make_settings',
    'JupyterSessionManager',
]
