"""
Leveled, colored console logging.

One logger instance lives for the whole process. Components accept a logger
argument and fall back to the process-wide one from get_logger().
"""

import os
import sys
import threading
from typing import Optional, Union

from colorama import init, Fore, Style

# Initialize colorama for cross-platform colored output
init(autoreset=True)

DEBUG = 0
INFO = 1
WARN = 2
ERROR = 3

LEVEL_NAMES = {
    "debug": DEBUG,
    "info": INFO,
    "warn": WARN,
    "warning": WARN,
    "error": ERROR,
}


def parse_level(value: Union[int, str, None], default: int = INFO) -> int:
    """Turn a level name or number ("debug", "2") into a level constant."""
    if value is None:
        return default
    if isinstance(value, int):
        return min(max(value, DEBUG), ERROR)
    text = str(value).strip().lower()
    if text in LEVEL_NAMES:
        return LEVEL_NAMES[text]
    if text.isdigit():
        return min(int(text), ERROR)
    return default


class Logger:
    """Console logger with DEBUG < INFO < WARN < ERROR thresholds."""

    def __init__(self, level: Union[int, str] = INFO):
        self.level = parse_level(level)
        self._lock = threading.Lock()

    def set_level(self, level: Union[int, str]) -> None:
        self.level = parse_level(level, self.level)

    def is_enabled_for(self, level: int) -> bool:
        return self.level <= level

    def _emit(self, level: int, tag: str, color: str, message: str, stream=None) -> None:
        if not self.is_enabled_for(level):
            return
        with self._lock:
            print(f"{color}[{tag}]{Style.RESET_ALL} {message}", file=stream or sys.stdout)

    def debug(self, message: str) -> None:
        """Log debug message (only if the threshold is DEBUG)."""
        self._emit(DEBUG, "DEBUG", Fore.CYAN, message)

    def info(self, message: str) -> None:
        """Log info message."""
        self._emit(INFO, "INFO", Fore.GREEN, message)

    def success(self, message: str) -> None:
        """Log a completed step at info level."""
        self._emit(INFO, "OK", Fore.GREEN, message)

    def warning(self, message: str) -> None:
        """Log warning message."""
        self._emit(WARN, "WARNING", Fore.YELLOW, message)

    def error(self, message: str, error: Optional[BaseException] = None) -> None:
        """Log error message, with the exception text when given."""
        if error is not None:
            message = f"{message} {error}"
        self._emit(ERROR, "ERROR", Fore.RED, message, stream=sys.stderr)


_logger: Optional[Logger] = None


def get_logger() -> Logger:
    """Return the process-wide logger, creating it from LOG_LEVEL on first use."""
    global _logger
    if _logger is None:
        _logger = Logger(parse_level(os.environ.get("LOG_LEVEL")))
    return _logger


def configure_logger(level: Union[int, str]) -> Logger:
    """Set the threshold of the process-wide logger."""
    logger = get_logger()
    logger.set_level(level)
    return logger
