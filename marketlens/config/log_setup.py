"""
Logging setup for MarketLens
Console output plus a size-rotated log file, both driven by settings
"""

from logging.handlers import RotatingFileHandler
from pathlib import Path
import logging

from .settings import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def setup_logging(level: str = None, log_file: str = None) -> logging.Logger:
    """
    Configure the root logger once per process

    Args:
        level: Log level name. Defaults to settings.LOG_LEVEL
        log_file: Log file path. Defaults to settings.LOG_FILE

    Returns:
        The configured root logger
    """
    global _configured

    root = logging.getLogger()
    if _configured:
        return root

    level = level or settings.LOG_LEVEL.value
    log_file = log_file or settings.LOG_FILE

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding="utf-8"
    )
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    root.setLevel(getattr(logging, level))
    _configured = True

    root.info(f"Logging configured at {level} (file: {log_file})")
    return root
