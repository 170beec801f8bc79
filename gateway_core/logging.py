"""
Centralized logging setup for the Jupyter gateway session adapter.
"""
import json
import logging
import os
import sys
import tempfile
from typing import Any, Optional

LOGGER_NAME = "jupyter_gateway"

_logger = logging.getLogger(LOGGER_NAME)


def _resolve_log_dir() -> str:
    """Determine a writable log directory."""
    candidates = []

    env_dir = os.environ.get("JG_LOG_DIR")
    if env_dir:
        candidates.append(env_dir)

    candidates.append(os.path.join(tempfile.gettempdir(), "jupyter-gateway-logs"))

    for directory in candidates:
        try:
            os.makedirs(directory, exist_ok=True)
            if os.access(directory, os.W_OK):
                return directory
        except OSError:
            continue

    # Last resort: current working directory (may still fail later)
    return os.getcwd()


def setup_logging(level: str = "INFO", log_file: Optional[str] = "jupyter_gateway.log") -> logging.Logger:
    """Setup logging with console output and, when possible, a log file."""
    handlers = [logging.StreamHandler()]
    log_path = None

    if log_file:
        log_path = os.path.join(_resolve_log_dir(), log_file)
        try:
            handlers.append(logging.FileHandler(log_path, mode='a', encoding='utf-8'))
        except OSError as e:
            print(f"WARNING: Cannot write to log file {log_path}: {e}", file=sys.stderr)
            log_path = None

    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(message)s', datefmt='%H:%M:%S')
    for handler in handlers:
        handler.setFormatter(formatter)

    _logger.handlers.clear()
    for handler in handlers:
        _logger.addHandler(handler)
    _logger.setLevel(getattr(logging, level.upper()))

    _logger.info(f"Logging initialized - output will be written to: {log_path or 'console only'}")

    return _logger


def render(message: str, data: Optional[Any] = None) -> str:
    """Append ``data`` to ``message``; dicts become indented JSON."""
    if not data:
        return message
    if isinstance(data, dict):
        return f"{message}\nData: {json.dumps(data, indent=2, default=str)}"
    return f"{message} - {data}"


def debug_log(message: str, data: Optional[Any] = None, level: str = "INFO") -> None:
    """Log ``message`` with optional structured ``data`` on the package logger."""
    _logger.log(getattr(logging, level.upper()), render(message, data))


class LoggerMixin:
    """Gives a class its own logger named after its module and class."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    def log_debug(self, message: str, data: Optional[Any] = None):
        self.logger.debug(render(message, data))

    def log_info(self, message: str, data: Optional[Any] = None):
        self.logger.info(render(message, data))

    def log_warning(self, message: str, data: Optional[Any] = None):
        self.logger.warning(render(message, data))

    def log_error(self, message: str, data: Optional[Any] = None):
        self.logger.error(render(message, data))
