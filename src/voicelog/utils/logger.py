"""
Logging for VoiceLog.

Every module logs through a child of the ``voicelog`` logger. Its handlers are
built on first use under the platform config directory, and rebuilt by
``configure_logging`` when a caller (the CLI's ``--config-dir``) keeps its
config somewhere else, so the log file always sits next to the config it
describes.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER_NAME = "voicelog"
LOG_FILENAME = "app.log"

_logger_instance: Optional[logging.Logger] = None


def get_log_dir(config_dir: Optional[Union[str, os.PathLike]] = None) -> Path:
    if config_dir is None:
        from ..core.settings.config import get_config_dir

        config_dir = get_config_dir()

    log_dir = Path(config_dir) / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def _normalize_name(name: str) -> str:
    # Tests import the package as src.voicelog
    if name == f"src.{ROOT_LOGGER_NAME}" or name.startswith(f"src.{ROOT_LOGGER_NAME}."):
        return name[len("src.") :]
    return name


def configure_logging(
    config_dir: Optional[Union[str, os.PathLike]] = None,
    console: Optional[bool] = None,
) -> logging.Logger:
    """
    (Re)build the handlers of the ``voicelog`` logger.

    Args:
        config_dir: Directory whose ``logs/`` subdirectory receives app.log;
            the platform config directory if omitted
        console: Also log to stderr; LOG_TO_CONSOLE if omitted

    Returns:
        The configured ``voicelog`` logger.
    """
    global _logger_instance

    from ..core.settings.config import (
        LOG_BACKUP_COUNT,
        LOG_MAX_BYTES,
        LOG_TO_CONSOLE,
        get_log_level,
    )

    shutdown_logging()

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    level = get_log_level()
    root_logger.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = RotatingFileHandler(
        get_log_dir(config_dir) / LOG_FILENAME,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    if LOG_TO_CONSOLE if console is None else console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    root_logger.propagate = False

    _logger_instance = root_logger
    return root_logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    name = _normalize_name(name)

    if _logger_instance is None:
        configure_logging()

    if name == ROOT_LOGGER_NAME:
        return _logger_instance

    return logging.getLogger(name)


def shutdown_logging() -> None:
    """Shutdown logging and close all file handlers to release file locks."""
    global _logger_instance
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)
    _logger_instance = None
