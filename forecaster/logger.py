import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from . import settings

CONSOLE_FORMAT = "%(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3

# Library loggers kept at WARNING so pipeline progress stays readable.
QUIET_LOGGERS = ("urllib3", "openpyxl")


def resolve_level(log_level: int | str | None) -> int:
    """Accepts a level number or name; unknown names fall back to INFO."""
    if log_level is None:
        log_level = settings.LOG_LEVEL
    if isinstance(log_level, int):
        return log_level
    level = logging.getLevelName(str(log_level).strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logger(
    name: str | None = None,
    log_level: int | str | None = None,
    log_file: Path | None = None,
) -> logging.Logger:
    """
    Console output for run progress, plus a rotating run log on disk.

    The run log goes to `log_file`, or LOG_DIR/LOG_FILENAME when LOG_TO_FILE
    is on. Calling this again only updates the level.
    """
    level = resolve_level(log_level)
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for noisy in QUIET_LOGGERS:
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if log_file is None and settings.LOG_TO_FILE:
        log_file = settings.LOG_DIR / settings.LOG_FILENAME
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger
