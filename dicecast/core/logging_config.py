"""
Logging configuration for Dicecast.

Console output goes to stderr so that commands printing JSON on stdout stay
machine-readable. Levels are color-coded on the console and plain in files.
"""

import logging
import sys
from typing import Dict, Optional, TextIO
from colorama import Fore, Back, Style, init

init(autoreset=True)

DEFAULT_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'


class ColoredFormatter(logging.Formatter):
    """
    Formatter that colors the level name.

    Colors:
    - DEBUG: Cyan (geometry builds, body creation, dropped notation tokens)
    - INFO: Green (roll results)
    - WARNING: Yellow (skipped dice, box fallbacks, unsettled rolls)
    - ERROR: Red (failing listeners, invalid config)
    - CRITICAL: Red on white background
    """

    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.RED + Back.WHITE + Style.BRIGHT,
    }

    ICONS = {
        'DEBUG': '🔍',
        'INFO': '🎲',
        'WARNING': '⚠️ ',
        'ERROR': '❌',
        'CRITICAL': '🚨',
    }

    def format(self, record):
        levelname = record.levelname
        color = self.COLORS.get(levelname, '')
        icon = self.ICONS.get(levelname, '')
        record.levelname = f"{color}{icon} {levelname}{Style.RESET_ALL}"
        try:
            return super().format(record)
        finally:
            # Other handlers share the record
            record.levelname = levelname


def parse_level(level: str) -> int:
    """
    Convert a level name such as 'debug' or 'WARNING' to its number.

    Raises:
        ValueError: If the name is not a standard logging level
    """
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def setup_logging(
    level: str = 'INFO',
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
    use_colors: bool = True,
    stream: Optional[TextIO] = None,
    logger_levels: Optional[Dict[str, str]] = None
) -> logging.Logger:
    """
    Configure the root logger.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path; the file receives every level
        format_string: Optional custom format string
        use_colors: Whether to color console output (default: True)
        stream: Console stream (default: sys.stderr)
        logger_levels: Per-logger overrides, e.g. {'dicecast.physics': 'INFO'}
            to silence per-body debug lines while debugging a roll

    Returns:
        Configured root logger

    Example:
        setup_logging(level='DEBUG', logger_levels={'dicecast.geometry': 'INFO'})
    """
    numeric = parse_level(level)
    format_string = format_string or DEFAULT_FORMAT

    root = logging.getLogger()
    root.setLevel(numeric if not log_file else logging.DEBUG)

    # Remove existing handlers to avoid duplicates
    root.handlers.clear()

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setLevel(numeric)
    formatter_class = ColoredFormatter if use_colors else logging.Formatter
    console_handler.setFormatter(formatter_class(format_string))
    root.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(format_string))
        root.addHandler(file_handler)

    for name, name_level in (logger_levels or {}).items():
        logging.getLogger(name).setLevel(parse_level(name_level))

    return root


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module (usually __name__)."""
    return logging.getLogger(name)


logger = get_logger('dicecast')


__all__ = ['setup_logging', 'get_logger', 'parse_level', 'logger', 'ColoredFormatter']
