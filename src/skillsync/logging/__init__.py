"""
Logging system for skillsync.
"""

from .logger_config import setup_logging, close_logging, LoggerConfig, LoggingManager
from .log_formatter import ConsoleFormatter

__all__ = [
    "setup_logging",
    "close_logging",
    "LoggerConfig",
    "LoggingManager",
    "ConsoleFormatter"
]
