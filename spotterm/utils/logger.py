"""
Logging for spotterm

Two destinations:
- console: warnings, errors and messages logged through ``console_info``,
  colored with colorama; removed while the curses session owns the screen
- file: everything at the configured level, rotated by size
"""

import logging
import logging.handlers
import re
import sys
from pathlib import Path
from typing import Optional, TYPE_CHECKING

import colorama
from colorama import Back, Fore, Style

if TYPE_CHECKING:
    from ..config.settings import Settings


colorama.init()

FILE_LOG_FORMAT = '%(asctime)s | %(name)-28s | %(levelname)-8s | %(funcName)-22s | %(message)s'
FILE_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Record attribute that marks an INFO line as meant for the user
USER_FACING = 'user_facing'

# Libraries that log every request at DEBUG/INFO
NOISY_LOGGERS = ('spotipy', 'urllib3', 'requests', 'PIL')

SIZE_UNITS = {'B': 1, 'KB': 1024, 'MB': 1024 ** 2, 'GB': 1024 ** 3}


class UserFacingFilter(logging.Filter):
    """Let through problems and lines explicitly addressed to the user"""

    def filter(self, record):
        return record.levelno >= logging.WARNING or getattr(record, USER_FACING, False)


class ConsoleFormatter(logging.Formatter):
    """Plain message text, colored by level for warnings and worse"""

    LEVEL_COLORS = {
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.RED + Back.WHITE + Style.BRIGHT,
    }

    def __init__(self, use_colors: bool = True):
        super().__init__('%(message)s')
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        color = self.LEVEL_COLORS.get(record.levelno) if self.use_colors else None
        return f"{color}{text}{Style.RESET_ALL}" if color else text


def parse_size(size_str: str) -> int:
    """
    Convert a size such as "10MB" or "1.5 KB" to bytes

    Raises:
        ValueError: If the string is not a number followed by B, KB, MB or GB
    """
    match = re.fullmatch(r'(\d+(?:\.\d+)?)\s*([KMG]?B)', size_str.strip().upper())
    if match is None:
        raise ValueError(f"Invalid size format: {size_str}")
    return int(float(match.group(1)) * SIZE_UNITS[match.group(2)])


def _remove_handlers(root_logger: logging.Logger, keep=lambda handler: False) -> None:
    for handler in list(root_logger.handlers):
        if not keep(handler):
            handler.close()
            root_logger.removeHandler(handler)


def _console_handler(colored_output: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(UserFacingFilter())
    handler.setFormatter(ConsoleFormatter(use_colors=colored_output))
    return handler


def _file_handler(log_file: str, level: int, max_size: str, backup_count: int) -> logging.Handler:
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=parse_size(max_size), backupCount=backup_count, encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt=FILE_DATE_FORMAT))
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    console_output: bool = True,
    colored_output: bool = True,
    max_size: str = "10MB",
    backup_count: int = 3
) -> None:
    """
    Install the console and file handlers on the root logger

    Calling it again replaces the previous handlers.

    Args:
        level: Level for the file handler (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Log file path, None for no file
        console_output: Show user-facing messages on stdout
        colored_output: Color warnings and errors on the console
        max_size: Rotate the log file at this size
        backup_count: Rotated files to keep
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    _remove_handlers(root_logger)

    if console_output:
        root_logger.addHandler(_console_handler(colored_output))
    if log_file:
        file_level = getattr(logging, level.upper(), logging.INFO)
        root_logger.addHandler(_file_handler(log_file, file_level, max_size, backup_count))

    for name in NOISY_LOGGERS:
        noisy = logging.getLogger(name)
        noisy.setLevel(logging.CRITICAL)
        noisy.propagate = False

    logging.getLogger('spotterm').debug(f"Logging ready (level={level}, console={console_output}, file={log_file})")


def reconfigure_logging_for_session() -> None:
    """
    Stop writing to the terminal before the curses session starts

    Only file handlers survive. Without any handler left, a NullHandler is
    installed so logging.lastResort stays silent too.
    """
    root_logger = logging.getLogger()
    _remove_handlers(root_logger, keep=lambda handler: isinstance(handler, logging.FileHandler))

    if not root_logger.handlers:
        root_logger.addHandler(logging.NullHandler())

    logging.getLogger('spotterm').debug("Console logging disabled for interactive session")


def get_current_log_file() -> Optional[Path]:
    """Path of the active log file, None when logging only to the console"""
    for handler in logging.getLogger().handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)
    return None


def get_logger(name: str) -> logging.Logger:
    """
    Get the logger for a module

    The returned logger also has ``console_info(message)``, an INFO call that
    is shown on the console as well as written to the file.
    """
    logger = logging.getLogger(name)
    if not hasattr(logger, 'console_info'):
        logger.console_info = lambda message: logger.info(message, extra={USER_FACING: True})
    return logger


def configure_from_settings(settings: "Settings", verbose: bool = False) -> None:
    """
    Configure logging from the logging section of the settings

    A relative log file name is placed in the config directory. ``verbose``
    forces DEBUG for the file.
    """
    log_file = None
    if settings.logging.file:
        path = Path(settings.logging.file).expanduser()
        log_file = str(path if path.is_absolute() else settings.get_config_directory() / path)

    setup_logging(
        level="DEBUG" if verbose else settings.logging.level,
        log_file=log_file,
        console_output=settings.logging.console_output,
        colored_output=settings.logging.colored_output,
        max_size=settings.logging.max_size,
        backup_count=settings.logging.backup_count
    )
