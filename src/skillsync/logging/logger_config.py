"""
Logger configuration and setup for skillsync.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import List, Optional
from dataclasses import dataclass

from ..config import LoggingConfig
from .log_formatter import ConsoleFormatter

# Libraries that are chatty at INFO/DEBUG; only their warnings get through.
QUIET_LOGGERS = ('urllib3', 'requests', 'git')

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL
}


@dataclass
class LoggerConfig:
    """Configuration for logging system."""
    level: str = "WARNING"
    file_path: Optional[str] = None
    file_format: str = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    max_file_size: int = 10  # MB
    backup_count: int = 5
    enable_console: bool = True
    enable_colors: bool = True

    @classmethod
    def from_app_config(cls, logging_config: LoggingConfig, level: Optional[str] = None) -> "LoggerConfig":
        """Build a logger config from the application's logging section; ``level`` wins if given."""
        return cls(
            level=level or logging_config.level,
            file_path=logging_config.file,
            file_format=logging_config.format,
            max_file_size=logging_config.max_file_size,
            backup_count=logging_config.backup_count
        )

    @property
    def numeric_level(self) -> int:
        return LEVELS.get(self.level.upper(), logging.WARNING)


class LoggingManager:
    """
    Owns the handlers skillsync installs on the root logger.

    Console output goes to stderr so stdout stays clean for command results
    (``status --format json``). The optional log file always records DEBUG.
    """

    def __init__(self):
        self._handlers: List[logging.Handler] = []
        self.config: Optional[LoggerConfig] = None

    @property
    def configured(self) -> bool:
        return self.config is not None

    def setup_logging(self, config: Optional[LoggerConfig] = None, force: bool = False) -> None:
        """
        Install handlers on the root logger.

        Args:
            config: Logging configuration (defaults are used when omitted)
            force: Replace handlers from an earlier call instead of keeping them
        """
        if self.configured:
            if not force:
                return
            self.close_handlers()

        config = config or LoggerConfig()

        root_level = config.numeric_level
        if config.enable_console:
            self._install(self._console_handler(config))
        if config.file_path:
            self._install(self._file_handler(config))
            root_level = logging.DEBUG

        logging.getLogger().setLevel(root_level)
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

        self.config = config
        logging.getLogger(__name__).debug(f"Logging configured at {config.level}")

    def _install(self, handler: logging.Handler) -> None:
        logging.getLogger().addHandler(handler)
        self._handlers.append(handler)

    def _console_handler(self, config: LoggerConfig) -> logging.Handler:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(config.numeric_level)
        handler.setFormatter(ConsoleFormatter(
            use_colors=config.enable_colors and sys.stderr.isatty(),
            show_logger=config.numeric_level <= logging.DEBUG
        ))
        return handler

    def _file_handler(self, config: LoggerConfig) -> logging.Handler:
        log_path = Path(config.file_path).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        handler = logging.handlers.RotatingFileHandler(
            filename=str(log_path),
            maxBytes=config.max_file_size * 1024 * 1024,
            backupCount=config.backup_count,
            encoding='utf-8'
        )
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(config.file_format))
        return handler

    def close_handlers(self) -> None:
        """Detach and close every handler this manager installed."""
        root_logger = logging.getLogger()
        for handler in self._handlers:
            root_logger.removeHandler(handler)
            handler.close()

        self._handlers = []
        self.config = None


# Global logging manager instance
_logging_manager = LoggingManager()


def setup_logging(config: Optional[LoggerConfig] = None, force: bool = False) -> None:
    """Set up the global logging system."""
    _logging_manager.setup_logging(config, force=force)


def close_logging() -> None:
    """Close logging system and clean up resources."""
    _logging_manager.close_handlers()
