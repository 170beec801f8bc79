"""
Core module for the Jupyter gateway session adapter.
Contains configuration, logging, and exceptions.
"""

from .config import ConfigurationService, DataScienceSettings, GatewayConfig, Settings
from .logging import setup_logging, debug_log, LoggerMixin
from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    GatewayError,
    JupyterError,
    KernelError,
    ResponseError,
    SessionCancelledError,
    ValidationError,
)

__all__ = [
    'ConfigurationService',
    'DataScienceSettings',
    'GatewayConfig',
    'Settings',
    'setup_logging',
    'debug_log',
    'LoggerMixin',
    'AuthenticationError',
    'ConfigurationError',
    'ConnectionError',
    'GatewayError',
    'JupyterError',
    'KernelError',
    'ResponseError',
    'SessionCancelledError',
    'ValidationError',
]
