# osrs_prices/core/logging_setup.py
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


def setup_logging(debug: bool = False, log_file: Optional[Path] = None) -> None:
    """
    Configure logging for command-line use.

    Library modules only create loggers; this is called by entrypoints.

    - Logs to console (stderr)
    - Also logs to log_file when given (rotating, max ~1 MB, 3 backups)
    """
    level = logging.DEBUG if debug else logging.WARNING

    # Root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers (useful if re-running in dev/REPL)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    # Console handler (simple readable format)
    console_handler = logging.StreamHandler()
    console_fmt = logging.Formatter("[%(levelname)s] %(name)s - %(message)s")
    console_handler.setFormatter(console_fmt)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        # File handler with rotation
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=1_000_000,  # ~1 MB
            backupCount=3,
            encoding="utf-8",
        )
        file_fmt = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
        )
        file_handler.setFormatter(file_fmt)
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)
        root_logger.info(f"Log file: {log_file}")

    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.INFO if debug else logging.WARNING)
