"""Logging setup for the legacy-ping tool.

Configures:
- A StreamHandler on stderr (stdout is reserved for query output).
- An optional RotatingFileHandler when a log file is configured.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .config import LoggingConfig

LOG_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Handlers added by the previous setup_logging() call.
_installed: list[logging.Handler] = []


def setup_logging(cfg: LoggingConfig) -> None:
    """Configure the root logger based on the application config.

    Safe to call more than once: handlers from an earlier call are
    replaced, handlers installed by anyone else are left alone.

    Parameters
    ----------
    cfg:
        Logging configuration (level, file path, rotation settings).
    """
    level = getattr(logging, cfg.level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)
    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # -- stderr handler -------------------------------------------------------
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(level)
    stderr_handler.setFormatter(formatter)
    root.addHandler(stderr_handler)
    _installed.append(stderr_handler)

    # -- File handler (rotated, optional) -------------------------------------
    if not cfg.file:
        return

    log_dir = Path(cfg.file).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        filename=cfg.file,
        maxBytes=cfg.max_bytes,
        backupCount=cfg.backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)
    _installed.append(file_handler)
