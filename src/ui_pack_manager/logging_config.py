"""Logging configuration for UI Pack Manager.

Provides centralized logging setup with file and console handlers.
Log files are stored in the application's config directory.
"""

import logging
import sys
from pathlib import Path
from typing import Optional


def setup_logging(debug: bool = False, log_file: Optional[Path] = None) -> logging.Logger:
    """Configure application-wide logging.

    Sets up logging to both file and console (if debug mode).
    Log file is stored in %APPDATA%/UIPackManager/ui_pack_manager.log

    Args:
        debug: If True, also log to console at DEBUG level
        log_file: Optional override for the log file location

    Returns:
        The root logger for the application
    """
    # Imported here: the config package logs through get_logger() below
    from .config.paths import AppPaths

    if log_file is None:
        AppPaths.ensure_config_dir()
        log_file = AppPaths.LOG_FILE
    else:
        log_file.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("ui_pack_manager")
    logger.setLevel(logging.DEBUG)

    # Clear any existing handlers
    logger.handlers.clear()

    # File handler - always logs DEBUG and above
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    file_handler.setFormatter(file_formatter)
    logger.addHandler(file_handler)

    # Console handler - only in debug mode
    if debug:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.DEBUG)
        console_formatter = logging.Formatter(
            "%(levelname)s - %(name)s - %(message)s"
        )
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a child logger for a specific module.

    Args:
        name: Module name (e.g., 'exporter', 'importer')

    Returns:
        A logger instance for the module
    """
    return logging.getLogger(f"ui_pack_manager.{name}")
