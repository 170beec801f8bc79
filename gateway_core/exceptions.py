"""
Custom exception classes for the Jupyter gateway session adapter.
"""
from typing import Optional


class GatewayError(Exception):
    """Base exception for the gateway adapter."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{super().__str__()} - {self.details}"
        return super().__str__()


class ConnectionError(GatewayError):
    """Raised when a session connection cannot be established."""
    pass


class SessionCancelledError(ConnectionError):
    """Raised when a connect attempt is cancelled through its token."""
    pass


class AuthenticationError(ConnectionError):
    """Raised when credentials for a Jupyter server cannot be resolved."""
    pass


class KernelError(GatewayError):
    """Raised when there's a kernel-related error."""
    pass


class JupyterError(GatewayError):
    """Raised when the Jupyter server or client misbehaves."""
    pass


class ResponseError(JupyterError):
    """Raised when the Jupyter REST API answers with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: dict = None):
        super().__init__(message, details)
        self.status_code = status_code


class ValidationError(GatewayError):
    """Raised when data returned by the server has an unexpected shape."""
    pass


class ConfigurationError(GatewayError):
    """Raised when configuration values cannot be parsed."""
    pass
