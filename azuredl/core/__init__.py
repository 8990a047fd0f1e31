"""Core module initialization."""

from .config_manager import ConfigManager, AzureDLConfig
from .exceptions import MalformedDateError
from .logging_config import setup_logging, get_logger
from .rfc1123 import format_rfc1123, parse_rfc1123, format_now

__all__ = [
    "ConfigManager",
    "AzureDLConfig",
    "MalformedDateError",
    "setup_logging",
    "get_logger",
    "format_rfc1123",
    "parse_rfc1123",
    "format_now",
]
