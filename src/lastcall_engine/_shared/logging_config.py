# Area: Shared
"""
lastcall_engine._shared.logging_config — Structured logging setup
=================================================================

Configures dual logging: terminal (colored) + file (JSON).
The engine never calls this itself; hosts opt in.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from .logging_formatters import JSONFormatter, TerminalFormatter

PACKAGE_LOGGER = "lastcall_engine"

logger = logging.getLogger(PACKAGE_LOGGER)


def setup_logging(
    log_file_path: Optional[str] = "lastcall_engine.log",
    level: int = logging.INFO,
) -> logging.Logger:
    """
    Configure logging for the package.

    Parameters
    ----------
    log_file_path : str or None
        Path to the JSON log file. ``None`` disables file logging.
    level : int
        Logging level. Defaults to INFO.

    Returns
    -------
    logging.Logger
        The configured package logger.
    """
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    pkg_logger.setLevel(level)

    # Remove existing handlers
    for handler in list(pkg_logger.handlers):
        pkg_logger.removeHandler(handler)
        handler.close()

    # Terminal handler with colors
    terminal_handler = logging.StreamHandler(sys.stdout)
    terminal_handler.setLevel(level)
    terminal_handler.setFormatter(TerminalFormatter(
        fmt="%(asctime)s │ %(levelname)s │ %(name)s │ %(message)s",
        datefmt="%H:%M:%S",
    ))
    pkg_logger.addHandler(terminal_handler)

    # File handler with JSON
    if log_file_path:
        try:
            log_path = Path(log_file_path)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setLevel(level)
            file_handler.setFormatter(JSONFormatter())
            pkg_logger.addHandler(file_handler)
        except OSError as e:
            pkg_logger.warning(f"Could not create log file: {e}")

    # Prevent propagation to root logger
    pkg_logger.propagate = False
    return pkg_logger
