"""Logging configuration."""

import sys
from pathlib import Path

from loguru import logger

from settings import LOG_DIR, LOG_FILE_LEVEL, LOG_FILE_NAME, LOG_LEVEL, LOG_RETENTION, LOG_TO_FILE

CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {name}:{function}:{line} | {message}"


def setup_logging(level: str | None = None, to_file: bool | None = None, log_dir: Path | None = None):
    """Console sink at `level`; with `to_file`, also a rotating file sink in `log_dir`.

    Unset arguments come from LINKIE_LOG_* settings.
    """
    logger.remove()

    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level or LOG_LEVEL, colorize=True)

    if LOG_TO_FILE if to_file is None else to_file:
        log_dir = log_dir or LOG_DIR
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_dir / LOG_FILE_NAME,
            format=FILE_FORMAT,
            level=LOG_FILE_LEVEL,
            rotation="00:00",
            retention=LOG_RETENTION,
            compression="gz",
        )
        logger.info("Logging to {}", log_dir)

    return logger
