"""Logging configuration for flimfit."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from rich.logging import RichHandler

from flimfit.ui.console import VERSION, console

if TYPE_CHECKING:
    from flimfit.core.domain.config import LogFormat

# Module-level logger (configured by setup_logging)
_logger: logging.Logger | None = None


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record)


def setup_logging(
    log_file: Path | None = None,
    verbose: bool = False,
    level: int = logging.INFO,
    log_format: LogFormat | None = None,
) -> logging.Logger | None:
    """Configure the ``flimfit`` logger.

    Records go to ``log_file`` and, when ``verbose``, to the console through
    rich. ``log_format`` selects JSON lines or text for the file; when it is
    None the suffix decides (``.json`` or text). Nothing is configured when
    neither a file nor ``verbose`` is requested.
    """
    global _logger

    if log_file is None and not verbose:
        _logger = None
        return None

    _logger = logging.getLogger("flimfit")
    _logger.setLevel(level)
    _logger.handlers.clear()

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setLevel(level)
        use_json = log_format == "json" if log_format is not None else log_file.suffix == ".json"
        if use_json:
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s | %(levelname)-5s | %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
        _logger.addHandler(file_handler)

    if verbose:
        console_handler = RichHandler(console=console, show_time=False, show_path=False)
        console_handler.setLevel(level)
        _logger.addHandler(console_handler)

    _logger.info(f"flimfit v{VERSION} - session started")
    _logger.info(f"Command: {' '.join(sys.argv)}")
    _logger.info(f"Python: {sys.version.split()[0]} | Platform: {sys.platform}")
    return _logger


def log(message: str, level: str = "info") -> None:
    """Log a message (if logging is enabled)."""
    if _logger is None:
        return
    _logger.log(logging.getLevelNamesMapping().get(level.upper(), logging.INFO), message)


def log_section(title: str) -> None:
    """Log a section header."""
    if _logger is None:
        return
    _logger.info(f"=== {title.upper()} ===")


def log_dict(data: dict[str, object], indent: str = "  ") -> None:
    """Log a dictionary as key-value pairs."""
    if _logger is None:
        return
    for key, value in data.items():
        _logger.info(f"{indent}- {key}: {value}")


def close_logging() -> None:
    """Close all handlers of the ``flimfit`` logger."""
    global _logger

    if _logger is None:
        return
    _logger.info("flimfit session completed")
    for handler in _logger.handlers[:]:
        handler.close()
        _logger.removeHandler(handler)
    _logger = None


__all__ = ["JSONFormatter", "close_logging", "log", "log_dict", "log_section", "setup_logging"]
