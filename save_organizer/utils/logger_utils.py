# save_organizer/utils/logger_utils.py

import logging
import logging.handlers
import sys
from pathlib import Path
from datetime import datetime
from save_organizer.core.constants import LOG_DIR_NAME


# ANSI escape codes for colors
class LogColors:
    RESET = "\x1b[0m"
    GREY = "\x1b[38;21m"
    GREEN = "\x1b[32m"
    YELLOW = "\x1b[33m"
    RED = "\x1b[31m"
    BOLD_RED = "\x1b[31;1m"
    CYAN = "\x1b[36m"


class ColoredFormatter(logging.Formatter):
    """
    Console formatter: green timestamp, level-colored level and message,
    cyan clickable source location.
    """

    LOG_LEVEL_COLORS = {
        logging.DEBUG: LogColors.GREY,
        logging.INFO: LogColors.GREEN,
        logging.WARNING: LogColors.YELLOW,
        logging.ERROR: LogColors.RED,
        logging.CRITICAL: LogColors.BOLD_RED,
    }

    def __init__(self, datefmt="%B %d, %Y > %H:%M:%S"):
        # The format string is unused, format() builds the line itself
        super().__init__(fmt="%(message)s", datefmt=datefmt)

    def format(self, record):
        level_color = self.LOG_LEVEL_COLORS.get(record.levelno, LogColors.RESET)

        colored_time = f"{LogColors.GREEN}{self.formatTime(record, self.datefmt)}{LogColors.RESET}"
        colored_level = f"{level_color}{record.levelname:<8}{LogColors.RESET}"

        location = f'File "{record.pathname}", line {record.lineno} |  {record.name}:{record.funcName}'
        colored_location = f"{LogColors.CYAN}{location}{LogColors.RESET}"

        colored_message = f"{level_color}{record.getMessage()}{LogColors.RESET}"

        log_entry = f"{colored_time} | {colored_level} | {colored_location} - {colored_message}"

        if record.exc_info:
            if not record.exc_text:
                record.exc_text = self.formatException(record.exc_info)
            log_entry += f"\n{LogColors.RED}{record.exc_text}{LogColors.RESET}"

        return log_entry


LOGGER_NAME = "SaveOrganizer"
CONSOLE_DATE_FORMAT = "%B %d, %Y > %H:%M:%S"
FILE_FORMAT = "{asctime} | {levelname} | {name}:{funcName}:{lineno} - {message}"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 10

_logger_instance: logging.Logger | None = None
_log_dir: Path | None = None
_console_level = logging.INFO


def get_logger() -> logging.Logger:
    """The shared logger, created with its handlers on first use."""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = setup_logger(_log_dir, _console_level)
    return _logger_instance


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ColoredFormatter(datefmt=CONSOLE_DATE_FORMAT))
    return handler


def _file_handler(log_dir: Path) -> logging.Handler:
    timestamp = datetime.now().strftime("%Y%m%d_%H-%M-%S")
    handler = logging.handlers.RotatingFileHandler(
        log_dir / f"LOG_{LOGGER_NAME}_{timestamp}.log",
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    # Files always get everything, uncolored
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        logging.Formatter(fmt=FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S", style="{")
    )
    return handler


def setup_logger(log_dir=None, console_level: int = logging.INFO) -> logging.Logger:
    """Attaches a colored console handler and a rotating file handler."""
    if log_dir is None:
        log_dir = Path(__file__).resolve().parent.parent / LOG_DIR_NAME
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    # Replacing handlers on re-setup, so lines are never written twice
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    logger.addHandler(_console_handler(console_level))
    logger.addHandler(_file_handler(log_dir))
    return logger


def reconfigure_logger(log_dir, console_level: int = logging.INFO) -> logging.Logger:
    """
    Recreates the logger in a new log directory. Called by the composition
    root once the application folder is known, and by the tests.
    """
    global _logger_instance, _log_dir, _console_level
    _log_dir = Path(log_dir)
    _console_level = console_level
    _logger_instance = setup_logger(_log_dir, console_level)
    return _logger_instance


class LoggerProxy:
    """
    Forwards all logging calls to the actual logger instance, so importing
    `logger` never creates log files by itself.
    """

    def __getattr__(self, name):
        return getattr(get_logger(), name)


logger = LoggerProxy()
__all__ = ["logger", "get_logger", "reconfigure_logger"]
