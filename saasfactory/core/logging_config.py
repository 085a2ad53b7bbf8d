"""Centralized logging configuration for the CLI process."""

import logging
import logging.handlers
from pathlib import Path
from typing import Any


def _file_handler(home: Path, cfg: dict[str, Any], level: int) -> logging.Handler:
    log_path = home / cfg.get("file", "logs/saasfactory.log")
    log_path.parent.mkdir(parents=True, exist_ok=True)
    h = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=int(cfg.get("max_bytes", 10 * 1024 * 1024)),
        backupCount=int(cfg.get("backup_count", 3)),
        encoding="utf-8",
    )
    h.setLevel(level)
    return h


def setup_logging(home: Path, settings: dict[str, Any], *, verbose: bool = False) -> None:
    """Configure the root logger.

    Logs go to a rotating file under the config directory so the wizard's
    terminal output stays clean. ``verbose`` (or ``logging.log_to_console``)
    adds a stderr handler at DEBUG/configured level.
    """
    cfg = settings.get("logging", {})
    level_name = "DEBUG" if verbose else cfg.get("level", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    root = logging.getLogger()
    root.setLevel(level)
    for h in root.handlers[:]:
        root.removeHandler(h)
    try:
        file_handler = _file_handler(home, cfg, level)
    except OSError:
        # Read-only home: fall through to console-only logging
        file_handler = None
    if file_handler is not None:
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
    if verbose or cfg.get("log_to_console", False):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
