"""
Configuration management for the Jupyter gateway session adapter.

Values are read from the environment when the dataclasses are created,
so a fresh instance always reflects the current process environment.
"""
import os
from dataclasses import dataclass, field
from typing import Optional

from .exceptions import ConfigurationError

_TRUE_VALUES = ('1', 'true', 'yes', 'on')
_FALSE_VALUES = ('0', 'false', 'no', 'off', '')


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}", {"value": raw})


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"Invalid number for {name}", {"value": raw}) from None


@dataclass
class GatewayConfig:
    """Process-level settings for reaching a Jupyter server."""

    # Jupyter configuration
    jupyter_url: str = "http://localhost:8888"
    jupyter_token: Optional[str] = None

    # Seconds before a REST call to the server gives up
    request_timeout: float = 30.0

    log_level: str = "INFO"

    def __post_init__(self):
        """Initialize configuration from environment variables."""
        self.jupyter_url = os.environ.get('JUPYTER_URL', self.jupyter_url)
        self.jupyter_token = os.environ.get('JUPYTER_TOKEN', self.jupyter_token) or None
        self.request_timeout = _env_float('JUPYTER_REQUEST_TIMEOUT', self.request_timeout)
        self.log_level = os.environ.get('JG_LOG_LEVEL', self.log_level).upper()

    def get_jupyter_headers(self) -> dict:
        """Get headers for Jupyter API requests."""
        if not self.jupyter_token:
            return {}
        return {'Authorization': f'token {self.jupyter_token}'}

    def __str__(self) -> str:
        return f"GatewayConfig(jupyter_url={self.jupyter_url}, has_token={bool(self.jupyter_token)}, request_timeout={self.request_timeout})"


@dataclass
class DataScienceSettings:
    """Settings under the ``datascience`` namespace."""

    # Whether disposing a session may shut its kernel down on the server
    jupyter_server_allow_kernel_shutdown: bool = False
    # Connect to this existing kernel instead of starting a new session
    jupyter_server_kernel_id: Optional[str] = None

    def __post_init__(self):
        self.jupyter_server_allow_kernel_shutdown = _env_bool(
            'DS_JUPYTER_SERVER_ALLOW_KERNEL_SHUTDOWN',
            self.jupyter_server_allow_kernel_shutdown
        )
        self.jupyter_server_kernel_id = os.environ.get(
            'DS_JUPYTER_SERVER_KERNEL_ID',
            self.jupyter_server_kernel_id
        ) or None


@dataclass
class Settings:
    """All settings exposed by the configuration service."""

    gateway: GatewayConfig = field(default_factory=GatewayConfig)
    datascience: DataScienceSettings = field(default_factory=DataScienceSettings)


class ConfigurationService:
    """Hands out the process-wide settings, loading them on first use."""

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings

    def get_settings(self) -> Settings:
        if self._settings is None:
            self._settings = Settings()
        return self._settings

    def reload(self) -> Settings:
        """Drop cached settings and re-read the environment."""
        self._settings = None
        return self.get_settings()
