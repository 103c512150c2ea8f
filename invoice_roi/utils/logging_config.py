"""
Logging configuration for the ROI simulator.

Provides consistent logging setup across all modules with:
- Structured log format with timestamps
- File and console handlers
- Log level configuration via ROI_LOG_LEVEL
- Context-aware logging (scenario ID, mail recipient, request path)

Usage:
    from invoice_roi.utils.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Scenario saved", extra={"scenario_id": "123"})
"""

import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union


DEFAULT_LOG_LEVEL = os.environ.get("ROI_LOG_LEVEL", "INFO").upper()

LOG_DIR = Path(os.environ.get("ROI_LOG_DIR", "logs"))

CONTEXT_KEYS = ("scenario_id", "recipient", "request_path")


class ROIFormatter(logging.Formatter):
    """Console formatter with color support and context extras."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        self.use_colors = use_colors and sys.stdout.isatty()
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        extras = [
            f"{key}={getattr(record, key)}"
            for key in CONTEXT_KEYS
            if hasattr(record, key)
        ]
        if extras:
            formatted = f"{formatted} [{', '.join(extras)}]"

        if self.use_colors:
            color = self.COLORS.get(record.levelname, "")
            return f"{color}{formatted}{self.RESET}"
        return formatted


class FileFormatter(logging.Formatter):
    """JSON-like formatter for file output."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in CONTEXT_KEYS + ("error_type",):
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return str(log_data)


def setup_logging(
    level: str = DEFAULT_LOG_LEVEL,
    log_to_file: bool = False,
    log_file: Optional[Union[str, Path]] = None,
    log_dir: Optional[Path] = None,
) -> None:
    """
    Configure logging for the entire application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Whether to also log to a file
        log_file: Custom log file path (default: <log_dir>/invoice_roi_YYYYMMDD.log)
        log_dir: Directory for the default log file
    """
    level = level.upper()
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level, logging.INFO))

    # Replace only handlers installed by a previous call
    for handler in list(root_logger.handlers):
        if getattr(handler, "_invoice_roi", False):
            root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ROIFormatter(use_colors=True))
    console_handler.setLevel(getattr(logging, level, logging.INFO))
    console_handler._invoice_roi = True
    root_logger.addHandler(console_handler)

    if log_to_file:
        directory = log_dir or LOG_DIR
        if log_file is None:
            directory.mkdir(parents=True, exist_ok=True)
            log_file = directory / f"invoice_roi_{datetime.now().strftime('%Y%m%d')}.log"
        else:
            log_file = Path(log_file)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(FileFormatter())
        file_handler.setLevel(logging.DEBUG)  # Always log everything to file
        file_handler._invoice_roi = True
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("hpack").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


_initialized = False


def ensure_logging(level: Optional[str] = None, **kwargs) -> None:
    """Ensure logging is set up (call once at application start)."""
    global _initialized
    if not _initialized:
        setup_logging(level or DEFAULT_LOG_LEVEL, **kwargs)
        _initialized = True
