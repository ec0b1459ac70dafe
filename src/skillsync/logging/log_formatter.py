"""
Console formatting for skillsync's progress output.
"""

import logging


class ConsoleFormatter(logging.Formatter):
    """
    Renders records the way an interactive installer talks to its user.

    INFO records are bare progress lines ("Cloning ..."); other levels are
    prefixed with the lowercase level name. With ``show_logger`` the short
    module name is included, which is what ``-vv`` turns on.
    """

    LEVEL_COLORS = {
        logging.DEBUG: '\033[2m',       # Dim
        logging.WARNING: '\033[33m',    # Yellow
        logging.ERROR: '\033[31m',      # Red
        logging.CRITICAL: '\033[1;31m'  # Bold red
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = False, show_logger: bool = False):
        super().__init__()
        self.use_colors = use_colors
        self.show_logger = show_logger

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()

        if record.levelno != logging.INFO:
            message = f"{record.levelname.lower()}: {message}"
        if self.show_logger:
            message = f"[{record.name.rsplit('.', 1)[-1]}] {message}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        color = self.LEVEL_COLORS.get(record.levelno) if self.use_colors else None
        if color:
            return f"{color}{message}{self.RESET}"
        return message
